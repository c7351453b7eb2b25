"""Pokemon name normalization for analytics grouping."""
from typing import Optional

# Forme suffixes that do not change what was brought to the team: in-battle
# transformations and purely cosmetic patterns. Competitive formes such as
# -Rapid-Strike, -Hearthflame, -Therian or regional formes are kept.
_COSMETIC_SUFFIXES = (
    # team preview wildcard
    "-*",
    # terastallization
    "-Tera",
    "-Teal-Tera",
    "-Terastal",
    "-Stellar",
    # mega / primal / dynamax
    "-Mega",
    "-Mega-X",
    "-Mega-Y",
    "-Primal",
    "-Gmax",
    # ability and weather driven
    "-Hero",
    "-Zen",
    "-Hangry",
    "-Pirouette",
    "-Sunshine",
    "-Sunny",
    "-Rainy",
    "-Snowy",
    "-Complete",
    "-Busted",
    "-School",
    "-Blade",
    "-Noice",
    "-Gulping",
    "-Gorging",
    # cosmetic
    "-Four",
    "-Three-Segment",
    "-Droopy",
    "-Stretchy",
    "-Masterpiece",
    "-Artisan",
    "-Antique",
    "-Fancy",
    "-Pokeball",
    "-East",
)

# Longest first so compound suffixes win over their tails
COSMETIC_SUFFIXES = tuple(sorted(_COSMETIC_SUFFIXES, key=len, reverse=True))


def normalize_pokemon_name(name: Optional[str]) -> Optional[str]:
    """Normalize a species name for grouping.

    Examples:
        "Urshifu-*, L50, F" -> "Urshifu"
        "Ogerpon-Hearthflame-Tera" -> "Ogerpon-Hearthflame"
        "Terapagos-Stellar, L50" -> "Terapagos"
        "Calyrex-Shadow, L50" -> "Calyrex-Shadow"
    """
    if not name:
        return name

    # Level, gender and shininess follow the first comma
    name = name.split(",", 1)[0].strip()

    stripped = True
    while stripped:
        stripped = False
        for suffix in COSMETIC_SUFFIXES:
            if name.endswith(suffix) and len(name) > len(suffix):
                name = name[: -len(suffix)].strip()
                stripped = True
                break

    return name
