"""Fetcher for Pokemon Showdown replays."""
import json
import re
import time
import logging
from datetime import datetime, timezone
from typing import List, Optional

import requests

from ..config import FetchConfig
from .models import Outcome, ReplayData

logger = logging.getLogger(__name__)

REPLAY_URL_PATTERN = re.compile(r"https://replay\.pokemonshowdown\.com/([^/?#]+)")
WIN_PATTERN = re.compile(r"\|win\|([^\n]+)")


def is_valid_replay_url(url: str) -> bool:
    """Check that a URL points at a Showdown replay."""
    return REPLAY_URL_PATTERN.fullmatch(url.strip()) is not None


def determine_result(user_player: str, winner: Optional[str]) -> Optional[Outcome]:
    """Win or loss from the user's point of view, None without a winner."""
    if winner is None:
        return None
    return Outcome.WIN if user_player.casefold() == winner.casefold() else Outcome.LOSS


class ReplayFetcher:
    """Fetch replay JSON from Pokemon Showdown."""

    def __init__(self, config: Optional[FetchConfig] = None):
        self.config = config or FetchConfig()
        self.session = requests.Session()
        self.last_request_time = 0.0

    def _rate_limit(self) -> None:
        """Enforce rate limiting between requests."""
        elapsed = time.time() - self.last_request_time
        sleep_time = (1.0 / self.config.requests_per_second) - elapsed
        if sleep_time > 0:
            time.sleep(sleep_time)
        self.last_request_time = time.time()

    def get_replay(self, replay_url: str) -> str:
        """Fetch the raw replay JSON for a replay page URL.

        Args:
            replay_url: e.g. "https://replay.pokemonshowdown.com/gen9vgc2026regf-12345"

        Returns:
            Replay JSON text including the battle log

        Raises:
            ValueError: If the URL is not a Showdown replay URL
        """
        match = REPLAY_URL_PATTERN.match(replay_url.strip())
        if not match:
            raise ValueError(f"Invalid Pokemon Showdown replay URL: {replay_url}")

        battle_id = match.group(1)
        json_url = f"{self.config.replay_base_url}/{battle_id}.json"

        self._rate_limit()

        start = time.time()
        response = self.session.get(json_url, timeout=self.config.timeout)
        response.raise_for_status()
        logger.info(f"Fetched {battle_id} in {(time.time() - start) * 1000:.0f}ms")

        if not response.text:
            raise ValueError(f"Empty replay data for {replay_url}")
        return response.text

    def fetch_replay_data(self, replay_url: str, user_names: List[str]) -> ReplayData:
        """Fetch a replay and resolve the user's side, opponent and result."""
        raw = self.get_replay(replay_url)

        try:
            root = json.loads(raw)
            player1, player2 = root["players"][0], root["players"][1]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Malformed replay data for {replay_url}: {e}") from e

        log_text = root.get("log", "")
        match = WIN_PATTERN.search(log_text)
        winner = match.group(1).strip() if match else None

        user_player, opponent = None, None
        for name in user_names:
            if player1.casefold() == name.casefold():
                user_player, opponent = player1, player2
                break
            if player2.casefold() == name.casefold():
                user_player, opponent = player2, player1
                break

        # Default to player1 when the user can't be identified
        if user_player is None:
            logger.warning(f"Could not identify user in {replay_url}, defaulting to player1")
            user_player, opponent = player1, player2

        result = determine_result(user_player, winner)
        logger.info(f"Fetched replay: {user_player} vs {opponent} ({result.value if result else 'unknown'})")

        return ReplayData(
            battle_log=raw,
            opponent=opponent,
            result=result,
            date=self._extract_timestamp(root),
            format=root.get("format", ""),
            player1=player1,
            player2=player2,
        )

    def _extract_timestamp(self, root: dict) -> datetime:
        """Upload time of the replay, or now if absent."""
        upload_time = root.get("uploadtime")
        if upload_time is not None:
            try:
                return datetime.fromtimestamp(int(upload_time), tz=timezone.utc)
            except (TypeError, ValueError, OverflowError, OSError) as e:
                logger.warning(f"Failed to read upload time, using now: {e}")
        return datetime.now(timezone.utc)
