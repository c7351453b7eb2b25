"""Best-of-3 detection and matching for Showdown battle logs.

Bo3 logs carry two markers:
- Tier line: |tier|[Gen 9] VGC 2026 Reg F (Bo3)
- Best-of line: |uhtml|bestof|<h2><strong>Game 1</strong> of <a href="/game-bestof3-<match id>">

The match ID in the href is shared by every game of the set, so games can be
grouped no matter which one is imported first.
"""
import json
import re
import logging
from typing import Optional

from .models import MatchInfo

logger = logging.getLogger(__name__)

BO3_TIER_PATTERN = re.compile(r"\|tier\|.*?\(Bo3\)")
BESTOF_PATTERN = re.compile(
    r"\|uhtml\|bestof\|.*?<strong>Game (\d+)</strong>.*?href=\"/game-bestof3-([^\"]+)\""
)


def _extract_log(raw: Optional[str]) -> str:
    if not raw:
        return ""
    try:
        root = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning(f"Failed to read battle log JSON: {e}")
        return ""
    if not isinstance(root, dict):
        return ""
    log = root.get("log")
    return log if isinstance(log, str) else ""


def parse_match_info(raw: Optional[str]) -> MatchInfo:
    """Detect whether a replay is one game of a Bo3 set.

    Args:
        raw: Replay JSON with a "log" string

    Returns:
        MatchInfo with the shared match ID and game number, or a single-game
        MatchInfo when the replay is not part of a Bo3
    """
    log = _extract_log(raw)
    if not log:
        logger.debug("No battle log, treating as single game")
        return MatchInfo.single_game()

    if not BO3_TIER_PATTERN.search(log):
        logger.debug("Tier is not Bo3, treating as single game")
        return MatchInfo.single_game()

    match = BESTOF_PATTERN.search(log)
    if match is None:
        logger.warning("Tier indicates Bo3 but no bestof line found, treating as single game")
        return MatchInfo.single_game()

    game_number = int(match.group(1))
    match_id = match.group(2)
    logger.debug(f"Detected Bo3 - game {game_number}, match {match_id}")
    return MatchInfo(is_bo3=True, match_id=match_id, game_number=game_number)


def is_bo3_replay(raw: Optional[str]) -> bool:
    return parse_match_info(raw).is_bo3


def get_game_number(raw: Optional[str]) -> Optional[int]:
    return parse_match_info(raw).game_number


def get_match_id(raw: Optional[str]) -> Optional[str]:
    return parse_match_info(raw).match_id


def are_same_match(raw1: Optional[str], raw2: Optional[str]) -> bool:
    """True when both replays carry the same Bo3 match ID."""
    id1 = get_match_id(raw1)
    id2 = get_match_id(raw2)
    return id1 is not None and id2 is not None and id1 == id2
