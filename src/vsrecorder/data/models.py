"""Data models for parsed battle data."""
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class Outcome(str, Enum):
    WIN = "win"
    LOSS = "loss"


class RatingChange(BaseModel):
    """Ladder rating before and after a battle."""
    before: int
    after: int
    change: int


class SideFacts(BaseModel):
    """Everything observed about one side of a battle."""
    team: List[str] = Field(default_factory=list)  # Team preview, up to 6
    picks: List[str] = Field(default_factory=list)  # Brought to battle, up to 4
    leads: List[str] = Field(default_factory=list)  # First 2 picks
    move_usage: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    terastallized: Optional[str] = None
    tera_type: Optional[str] = None
    rating: Optional[RatingChange] = None

    def moves_for(self, species: str) -> Dict[str, int]:
        return self.move_usage.get(species, {})


class BattleFacts(BaseModel):
    """Structured facts extracted from a single battle log."""
    player1: Optional[str] = None
    player2: Optional[str] = None
    p1: SideFacts = Field(default_factory=SideFacts)
    p2: SideFacts = Field(default_factory=SideFacts)
    winner: Optional[str] = None
    turn_count: int = 0
    tier: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """True when the log could not be parsed into usable facts."""
        return self.player1 is None or self.player2 is None

    def side(self, key: str) -> SideFacts:
        """Get side facts by key ("p1" or "p2")."""
        return self.p1 if key == "p1" else self.p2

    def side_of(self, player_name: str) -> Optional[str]:
        """Get the side key for a player name, compared case-insensitively."""
        if self.player1 and player_name.casefold() == self.player1.casefold():
            return "p1"
        if self.player2 and player_name.casefold() == self.player2.casefold():
            return "p2"
        return None


class MatchInfo(BaseModel):
    """Best-of-3 correlation key for a single battle."""
    is_bo3: bool = False
    match_id: Optional[str] = None
    game_number: Optional[int] = None

    @classmethod
    def single_game(cls) -> "MatchInfo":
        return cls()


class ReplayData(BaseModel):
    """Replay fetched from Showdown with the user's side resolved."""
    battle_log: str  # Full replay JSON as fetched
    opponent: str
    result: Optional[Outcome] = None  # None when the log declares no winner
    date: datetime
    format: str
    player1: str
    player2: str
