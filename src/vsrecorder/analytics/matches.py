"""Group Bo3 games into match sets and summarize them."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from ..data.models import MatchInfo, Outcome

logger = logging.getLogger(__name__)


@dataclass
class MatchGame:
    """One game of a match set."""
    replay_id: str
    game_number: Optional[int]
    outcome: Outcome


@dataclass
class MatchSet:
    """Games sharing a Bo3 match ID."""
    match_id: str
    games: List[MatchGame] = field(default_factory=list)

    @property
    def wins(self) -> int:
        return sum(1 for g in self.games if g.outcome == Outcome.WIN)

    @property
    def losses(self) -> int:
        return sum(1 for g in self.games if g.outcome == Outcome.LOSS)

    @property
    def is_complete(self) -> bool:
        return 2 <= len(self.games) <= 3

    @property
    def result(self) -> str:
        """Match result: win, loss or incomplete."""
        if not self.is_complete:
            return "incomplete"
        return "win" if self.wins >= 2 else "loss"


@dataclass
class TeamMatchStats:
    total_matches: int
    complete_matches: int
    incomplete_matches: int
    match_wins: int
    match_losses: int
    match_win_rate: float


def group_match_sets(entries: Iterable[Tuple[str, MatchInfo, Outcome]]) -> List[MatchSet]:
    """Group (replay_id, match info, outcome) entries into match sets.

    Single games are skipped. Sets keep first-seen order; games inside a set
    are ordered by game number, so import order does not matter.
    """
    sets: Dict[str, MatchSet] = {}
    for replay_id, info, outcome in entries:
        if not info.is_bo3 or info.match_id is None:
            continue
        match_set = sets.setdefault(info.match_id, MatchSet(match_id=info.match_id))
        match_set.games.append(MatchGame(replay_id, info.game_number, outcome))

    for match_set in sets.values():
        match_set.games.sort(key=lambda g: (g.game_number is None, g.game_number or 0))
        if len(match_set.games) > 3:
            logger.warning(f"Match {match_set.match_id} has {len(match_set.games)} games")

    return list(sets.values())


def team_match_stats(match_sets: List[MatchSet]) -> TeamMatchStats:
    """Match-level record for a team."""
    complete = [m for m in match_sets if m.is_complete]
    wins = sum(1 for m in complete if m.result == "win")
    losses = sum(1 for m in complete if m.result == "loss")

    return TeamMatchStats(
        total_matches=len(match_sets),
        complete_matches=len(complete),
        incomplete_matches=len(match_sets) - len(complete),
        match_wins=wins,
        match_losses=losses,
        match_win_rate=wins / len(complete) * 100 if complete else 0.0,
    )
