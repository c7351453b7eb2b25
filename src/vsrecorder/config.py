"""Global configuration for the vsrecorder project."""

import os
from dataclasses import dataclass, field
from typing import List


def _usernames_from_env() -> List[str]:
    raw = os.getenv("SHOWDOWN_USERNAMES", "")
    return [name.strip() for name in raw.split(",") if name.strip()]


@dataclass
class AnalyticsConfig:
    """Configuration for team analytics."""

    min_matchup_games: int = 3  # Minimum encounters before a matchup is ranked
    matchup_list_limit: int = 5
    lead_pair_limit: int = 6
    lead_pair_separator: str = " + "


@dataclass
class FetchConfig:
    """Configuration for fetching replays from Showdown."""

    replay_base_url: str = "https://replay.pokemonshowdown.com"
    requests_per_second: float = 1.0
    timeout: float = 10.0


@dataclass
class Config:
    """Global configuration container."""

    analytics: AnalyticsConfig = field(default_factory=AnalyticsConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)

    # Environment variables
    showdown_usernames: List[str] = field(default_factory=_usernames_from_env)


# Global config instance
config = Config()
