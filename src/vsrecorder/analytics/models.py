"""Statistics records produced by team analytics."""
from dataclasses import asdict, dataclass, field
from typing import List, Optional

from ..data.models import BattleFacts, Outcome


@dataclass
class ReplayRecord:
    """One replay of a team: parsed facts, result and the owner's names."""
    facts: BattleFacts
    outcome: Outcome
    own_names: List[str] = field(default_factory=list)
    replay_id: Optional[str] = None

    @property
    def is_win(self) -> bool:
        return self.outcome == Outcome.WIN


class _Record:
    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PokemonUsageStats(_Record):
    pokemon: str
    usage: int  # Times brought
    usage_rate: int  # % of total games
    overall_win_rate: int
    lead_usage: int
    lead_win_rate: Optional[int]  # None if never led
    tera_usage: int
    tera_win_rate: Optional[int]  # None if never terastallized


@dataclass
class LeadPairStats(_Record):
    pair: str  # "Incineroar + Rillaboom"
    pokemon1: str
    pokemon2: str
    usage: int
    usage_rate: int
    wins: int
    win_rate: int


@dataclass
class UsageStatsResponse(_Record):
    pokemon_stats: List[PokemonUsageStats]
    lead_pair_stats: List[LeadPairStats]
    average_win_rate: int
    total_games: int


@dataclass
class MatchupStats(_Record):
    pokemon: str
    games_against: int  # Games where the opponent had it on their sheet
    wins_against: int
    win_rate: int
    times_on_team: int
    times_brought: int
    attendance_rate: Optional[int]  # None if never on a sheet


@dataclass
class MatchupStatsResponse(_Record):
    best_matchups: List[MatchupStats]
    worst_matchups: List[MatchupStats]
    highest_attendance: List[MatchupStats]
    lowest_attendance: List[MatchupStats]


@dataclass
class CustomPokemonAnalysis(_Record):
    pokemon: str
    games_against: int
    wins_against: int
    win_rate: int


@dataclass
class CustomMatchupResponse(_Record):
    pokemon_analysis: List[CustomPokemonAnalysis]
    team_win_rate: int  # Games where the opponent had any of the requested Pokemon
    total_encounters: int  # Games where the opponent had all of them
    average_win_rate: int  # Mean of the individual win rates


@dataclass
class MoveStats(_Record):
    move: str
    times_used: int
    usage_rate: int  # % of all moves used by this Pokemon
    games_used: int
    win_rate: int  # Wins with the move over games the Pokemon was brought


@dataclass
class PokemonMoveStats(_Record):
    pokemon: str
    games_brought: int
    total_moves_used: int
    moves: List[MoveStats]


@dataclass
class MoveUsageResponse(_Record):
    pokemon_moves: List[PokemonMoveStats]
