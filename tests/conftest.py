"""Pytest configuration and shared fixtures."""
import json

import pytest

from vsrecorder.data.models import BattleFacts, SideFacts

SAMPLE_LOG = """
|j|Alice
|j|Bob
|player|p1|Alice|1|
|player|p2|Bob|2|
|tier|[Gen 9] VGC 2026 Reg F
|clearpoke
|poke|p1|Urshifu-*, L50, F|
|poke|p1|Incineroar, L50, M|
|poke|p1|Rillaboom, L50, M|
|poke|p1|Ogerpon-Hearthflame, L50, F|
|poke|p1|Flutter Mane, L50|
|poke|p1|Landorus, L50, M|
|poke|p2|Calyrex-Shadow, L50|
|poke|p2|Grimmsnarl, L50, M|
|poke|p2|Raging Bolt, L50|
|poke|p2|Amoonguss, L50, F|
|poke|p2|Tornadus, L50, M|
|poke|p2|Chien-Pao, L50|
|teampreview|4
|start
|switch|p1a: Fish|Urshifu-Rapid-Strike, L50, F|100/100
|switch|p1b: Cat|Incineroar, L50, M|100/100
|switch|p2a: Horse|Calyrex-Shadow, L50|100/100
|switch|p2b: Grimmsnarl|Grimmsnarl, L50, M|100/100
|turn|1
|move|p2a: Horse|Protect||[still]
|move|p1b: Cat|Fake Out|p2a: Horse
|-terastallize|p1a: Fish|Water
|move|p1a: Fish|Surging Strikes|p2b: Grimmsnarl
|turn|2
|move|p1a: Fish|Surging Strikes|p2b: Grimmsnarl
|switch|p1b: Mask|Ogerpon-Hearthflame, L50, F|100/100
|switch|p2b: Bolt|Raging Bolt, L50|100/100
|turn|3
|switch|p1b: Mask|Ogerpon-Hearthflame-Tera, L50, F|100/100
|move|p1b: Mask|Ivy Cudgel|p2a: Horse
|move|p2a: Horse|Astral Barrage|p1a: Fish
|switch|p2a: Bulb|Amoonguss, L50, F|100/100
|switch|p1a: Leaf|Rillaboom, L50, M|100/100
|switch|p1a: Cat|Incineroar, L50, M|100/100
|turn|4
|move|p1a: Cat|Parting Shot|p2a: Bulb
|raw|Alice's rating: 1279 &rarr; <strong>1294</strong><br />(+15 for winning)
|raw|Bob's rating: 1301 &rarr; <strong>1286</strong><br />(-15 for losing)
|win|Alice
"""


def make_replay(log: str, players=("Alice", "Bob"), **extra) -> str:
    """Build raw replay JSON the way Showdown serves it."""
    return json.dumps({"players": list(players), "log": log, **extra})


def bo3_log(game_number: int, match_id: str = "gen9vgc2026regfbo3-2493790532-owbra3llb90b5mu5sg8dkkq3yx8s6uqpw") -> str:
    return (
        "|tier|[Gen 9] VGC 2026 Reg F (Bo3)\n"
        f'|uhtml|bestof|<h2><strong>Game {game_number}</strong> of '
        f'<a href="/game-bestof3-{match_id}">a best-of-3</a></h2>\n'
    )


@pytest.fixture
def sample_replay():
    """Raw replay JSON for a full VGC battle."""
    return make_replay(SAMPLE_LOG)


@pytest.fixture
def replay_builder():
    return make_replay


@pytest.fixture
def bo3_builder():
    return bo3_log


@pytest.fixture
def facts_factory():
    """Build BattleFacts for "Me" (p1) against "Them" (p2)."""
    def build(
        picks=(),
        leads=None,
        tera=None,
        moves=None,
        opp_team=(),
        opp_picks=(),
        team=None,
    ) -> BattleFacts:
        picks = list(picks)
        own = SideFacts(
            team=list(team) if team is not None else list(picks),
            picks=picks,
            leads=list(leads) if leads is not None else picks[:2],
            move_usage=moves or {},
            terastallized=tera,
        )
        opponent = SideFacts(team=list(opp_team), picks=list(opp_picks))
        return BattleFacts(player1="Me", player2="Them", p1=own, p2=opponent, turn_count=5)
    return build
