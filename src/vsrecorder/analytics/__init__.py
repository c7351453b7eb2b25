"""Team analytics over parsed battles."""
from .aggregator import TeamAnalytics, identify_side, lead_pair_key
from .matches import MatchSet, group_match_sets, team_match_stats
from .models import ReplayRecord

__all__ = [
    "TeamAnalytics",
    "identify_side",
    "lead_pair_key",
    "MatchSet",
    "group_match_sets",
    "team_match_stats",
    "ReplayRecord",
]
