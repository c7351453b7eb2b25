"""Parser for Pokemon Showdown battle logs."""
import json
import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

from .models import BattleFacts, RatingChange, SideFacts

logger = logging.getLogger(__name__)

MAX_TEAM_SIZE = 6
MAX_PICKS = 4
MAX_LEADS = 2

# Regex patterns for log parsing
PATTERNS = {
    "player": re.compile(r"\|player\|(p[12])\|([^|]+)"),
    "tier": re.compile(r"\|tier\|(.+)"),
    "poke": re.compile(r"\|poke\|(p[12])\|([^|]+)"),
    "showteam": re.compile(r"\|showteam\|(p[12])\|(.*)"),
    "switch": re.compile(r"\|(?:switch|drag)\|(p[12])[a-d]?: ([^|]+)\|([^|]+)"),
    "move": re.compile(r"\|move\|(p[12])[a-d]?: ([^|]+)\|([^|]+)"),
    "tera": re.compile(r"\|-terastallize\|(p[12])[a-d]?: ([^|]+)\|([^|]+)"),
    "turn": re.compile(r"\|turn\|(\d+)"),
    "win": re.compile(r"\|win\|(.+)"),
    "rating": re.compile(r"\|raw\|(.+?)'s rating: (\d+) &rarr; <strong>(\d+)</strong>"),
}


@dataclass
class SideState:
    """Per-side bookkeeping carried across log lines."""
    facts: SideFacts = field(default_factory=SideFacts)
    nicknames: Dict[str, str] = field(default_factory=dict)
    picked: Set[str] = field(default_factory=set)
    lead_count: int = 0
    has_team_preview: bool = False


@dataclass
class ParserState:
    """State threaded through a single pass over the log."""
    players: Dict[str, str]
    sides: Dict[str, SideState] = field(
        default_factory=lambda: {"p1": SideState(), "p2": SideState()}
    )
    turn_count: int = 0
    winner: Optional[str] = None
    tier: Optional[str] = None


def _species_from_details(details: str) -> str:
    """Strip level and gender from switch/preview details."""
    return details.split(",", 1)[0].strip()


def _patch_wildcard(team: list, name: str) -> bool:
    """Replace a wildcard entry (e.g. "Urshifu-*") with the revealed forme."""
    if name.endswith("-*"):
        return False
    for i, entry in enumerate(team):
        if entry.endswith("-*") and name.startswith(entry[:-2]):
            team[i] = name
            return True
    return False


def _match_team_entry(team: list, name: str) -> Optional[str]:
    """Find the team sheet entry a battle name refers to.

    Species Clause guarantees at most one entry per species, so a prefix or
    containment match on the base name is unambiguous.
    """
    if not name:
        return None

    if name in team:
        return name

    # In-battle forme suffix, e.g. "Ogerpon-Hearthflame-Tera"
    for entry in team:
        if name.startswith(entry + "-"):
            return entry

    base = name.split("-", 1)[0]
    for entry in team:
        if entry.startswith(base):
            return entry
    for entry in team:
        if base in entry:
            return entry

    return None


def _resolve_species(side: SideState, name: str) -> Optional[str]:
    """Resolve a switch-in species name to its team sheet entry."""
    team = side.facts.team

    if not side.has_team_preview:
        # No preview: switch-ins reveal the roster
        for entry in team:
            if name == entry or name.startswith(entry + "-"):
                return entry
        if len(team) < MAX_TEAM_SIZE:
            team.append(name)
            return name
        return None

    if name in team or any(name.startswith(entry + "-") for entry in team):
        return _match_team_entry(team, name)
    if _patch_wildcard(team, name):
        return name
    return _match_team_entry(team, name)


def _attribute(side: SideState, nickname: str) -> Optional[str]:
    """Find the team sheet species behind a nickname, if any."""
    species = side.nicknames.get(nickname, nickname)
    if species not in side.facts.team:
        return None
    return species


class BattleLogParser:
    """Parser for Pokemon Showdown battle logs.

    Holds no per-battle state; every call to parse() starts a fresh
    ParserState, so one instance can be shared freely.
    """

    def parse(self, raw: str) -> BattleFacts:
        """Parse raw replay JSON into battle facts.

        Args:
            raw: Replay JSON with a "players" array and a "log" string

        Returns:
            BattleFacts, empty when the input cannot be parsed
        """
        try:
            root = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Failed to parse battle log JSON: {e}")
            return BattleFacts()

        if not isinstance(root, dict):
            logger.warning("Battle log JSON is not an object")
            return BattleFacts()

        players = root.get("players")
        if (
            not isinstance(players, list)
            or len(players) < 2
            or not all(isinstance(p, str) for p in players[:2])
        ):
            logger.warning("Battle log has no players")
            return BattleFacts()

        log = root.get("log")
        if not isinstance(log, str) or not log.strip():
            logger.warning("Battle log is empty")
            return BattleFacts()

        state = ParserState(players={"p1": players[0], "p2": players[1]})

        try:
            for line in log.split("\n"):
                self._process_line(state, line.strip())
        except Exception as e:
            logger.warning(f"Failed to parse battle log: {e}")
            return BattleFacts()

        return BattleFacts(
            player1=players[0],
            player2=players[1],
            p1=state.sides["p1"].facts,
            p2=state.sides["p2"].facts,
            winner=state.winner,
            turn_count=state.turn_count,
            tier=state.tier,
        )

    def _process_line(self, state: ParserState, line: str) -> None:
        """Process a single log line."""
        # Team preview
        if match := PATTERNS["poke"].match(line):
            self._on_poke(state, match.group(1), _species_from_details(match.group(2)))

        # Open team sheet
        elif match := PATTERNS["showteam"].match(line):
            self._on_showteam(state, match.group(1), match.group(2))

        # Switch
        elif match := PATTERNS["switch"].match(line):
            self._on_switch(
                state, match.group(1), match.group(2).strip(),
                _species_from_details(match.group(3)),
            )

        # Move
        elif match := PATTERNS["move"].match(line):
            self._on_move(state, match.group(1), match.group(2).strip(), match.group(3).strip())

        # Terastallization
        elif match := PATTERNS["tera"].match(line):
            self._on_tera(state, match.group(1), match.group(2).strip(), match.group(3).strip())

        # Turn marker
        elif match := PATTERNS["turn"].match(line):
            state.turn_count = max(state.turn_count, int(match.group(1)))

        # Winner
        elif match := PATTERNS["win"].match(line):
            if state.winner is None:
                state.winner = match.group(1).strip()

        elif match := PATTERNS["tier"].match(line):
            state.tier = match.group(1).strip()

        elif match := PATTERNS["player"].match(line):
            state.players[match.group(1)] = match.group(2).strip()

        # Ladder rating update
        elif match := PATTERNS["rating"].match(line):
            self._on_rating(state, match.group(1).strip(), int(match.group(2)), int(match.group(3)))

    def _on_poke(self, state: ParserState, player: str, species: str) -> None:
        """Handle a team preview entry."""
        side = state.sides[player]
        side.has_team_preview = True
        team = side.facts.team
        if species and species not in team and len(team) < MAX_TEAM_SIZE:
            team.append(species)

    def _on_showteam(self, state: ParserState, player: str, packed: str) -> None:
        """Resolve wildcard formes from an open team sheet.

        Packed entries are "]"-separated; each is "Nickname|Species|Item|...",
        with Species left empty when it matches the nickname.
        """
        team = state.sides[player].facts.team
        for entry in packed.split("]"):
            fields = entry.split("|")
            species = (fields[1] if len(fields) > 1 and fields[1] else fields[0]).strip()
            if species:
                _patch_wildcard(team, species)

    def _on_switch(self, state: ParserState, player: str, nickname: str, name: str) -> None:
        """Handle a Pokemon switching in."""
        side = state.sides[player]
        species = _resolve_species(side, name)
        side.nicknames[nickname] = species or name

        if species is None:
            logger.debug(f"{player}: {name} is not on the team sheet, not counted as a pick")
            return

        if species in side.picked:
            return

        if len(side.facts.picks) >= MAX_PICKS:
            logger.debug(f"{player}: ignoring extra pick {species}")
            return

        side.picked.add(species)
        side.facts.picks.append(species)

        # First 2 picks are leads
        if side.lead_count < MAX_LEADS:
            side.facts.leads.append(species)
            side.lead_count += 1

    def _on_move(self, state: ParserState, player: str, nickname: str, move: str) -> None:
        """Handle move usage."""
        side = state.sides[player]
        species = _attribute(side, nickname)
        if species is None:
            logger.debug(f"{player}: dropping {move} from unresolved {nickname}")
            return

        counts = side.facts.move_usage.setdefault(species, {})
        counts[move] = counts.get(move, 0) + 1

    def _on_tera(self, state: ParserState, player: str, nickname: str, tera_type: str) -> None:
        """Handle Terastallization (once per side per battle)."""
        side = state.sides[player]
        species = _attribute(side, nickname)
        if species is None:
            logger.debug(f"{player}: dropping tera from unresolved {nickname}")
            return

        if side.facts.terastallized is not None:
            logger.debug(f"{player}: ignoring second tera by {species}")
            return

        side.facts.terastallized = species
        side.facts.tera_type = tera_type.lower()

    def _on_rating(self, state: ParserState, username: str, before: int, after: int) -> None:
        """Attach a ladder rating change to the matching side."""
        for player, name in state.players.items():
            if name.casefold() == username.casefold():
                state.sides[player].facts.rating = RatingChange(
                    before=before, after=after, change=after - before,
                )
                return
        logger.debug(f"Rating line for unknown player {username}")


_default_parser = BattleLogParser()


def parse_battle_log(raw: str) -> BattleFacts:
    """Parse raw replay JSON with a shared parser."""
    return _default_parser.parse(raw)
