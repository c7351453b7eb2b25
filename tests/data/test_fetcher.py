"""Tests for replay fetcher."""
import json
from datetime import datetime, timezone

import pytest
import requests
from unittest.mock import Mock, patch

from vsrecorder.config import FetchConfig
from vsrecorder.data.fetcher import ReplayFetcher, determine_result, is_valid_replay_url
from vsrecorder.data.models import Outcome

REPLAY_URL = "https://replay.pokemonshowdown.com/gen9vgc2026regf-2400000000"

def _replay_json(**overrides):
    replay = {
        "id": "gen9vgc2026regf-2400000000",
        "format": "[Gen 9] VGC 2026 Reg F",
        "players": ["Alice", "Bob"],
        "log": "|player|p1|Alice|1|\n|player|p2|Bob|2|\n|turn|1\n|win|Bob\n",
        "uploadtime": 1700000000,
    }
    replay.update(overrides)
    return json.dumps(replay)

def test_config_defaults():
    config = FetchConfig()
    assert config.replay_base_url == "https://replay.pokemonshowdown.com"
    assert config.requests_per_second == 1.0

@pytest.mark.parametrize("url,valid", [
    (REPLAY_URL, True),
    ("https://replay.pokemonshowdown.com/gen9vgc2026regfbo3-2493790532-owbra3llb90b5mu5sg8dkkq3yx8s6uqpw", True),
    ("https://replay.pokemonshowdown.com/", False),
    ("https://example.com/gen9vgc2026regf-1", False),
    ("not a url", False),
])
def test_is_valid_replay_url(url, valid):
    assert is_valid_replay_url(url) is valid

def test_determine_result():
    assert determine_result("Alice", "alice") == Outcome.WIN
    assert determine_result("Alice", "Bob") == Outcome.LOSS
    assert determine_result("Alice", None) is None

@patch("vsrecorder.data.fetcher.requests.Session")
def test_get_replay(mock_session):
    mock_response = Mock()
    mock_response.text = _replay_json()
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    raw = fetcher.get_replay(REPLAY_URL)

    assert json.loads(raw)["players"] == ["Alice", "Bob"]
    called_url = mock_session.return_value.get.call_args[0][0]
    assert called_url == "https://replay.pokemonshowdown.com/gen9vgc2026regf-2400000000.json"

def test_get_replay_rejects_bad_url():
    fetcher = ReplayFetcher()
    with pytest.raises(ValueError):
        fetcher.get_replay("https://example.com/replay")

@patch("vsrecorder.data.fetcher.requests.Session")
def test_get_replay_http_error(mock_session):
    mock_response = Mock()
    mock_response.raise_for_status.side_effect = requests.HTTPError("404")
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    with pytest.raises(requests.HTTPError):
        fetcher.get_replay(REPLAY_URL)

@patch("vsrecorder.data.fetcher.requests.Session")
def test_get_replay_empty_body(mock_session):
    mock_response = Mock()
    mock_response.text = ""
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    with pytest.raises(ValueError):
        fetcher.get_replay(REPLAY_URL)

@patch("vsrecorder.data.fetcher.requests.Session")
def test_fetch_replay_data(mock_session):
    mock_response = Mock()
    mock_response.text = _replay_json()
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    data = fetcher.fetch_replay_data(REPLAY_URL, ["bob"])

    assert data.opponent == "Alice"
    assert data.result == Outcome.WIN
    assert data.format == "[Gen 9] VGC 2026 Reg F"
    assert data.date == datetime.fromtimestamp(1700000000, tz=timezone.utc)
    assert data.battle_log == mock_response.text

@patch("vsrecorder.data.fetcher.requests.Session")
def test_fetch_replay_data_unknown_user(mock_session, caplog):
    mock_response = Mock()
    mock_response.text = _replay_json()
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    data = fetcher.fetch_replay_data(REPLAY_URL, ["Carol"])

    # Falls back to player1
    assert data.opponent == "Bob"
    assert data.result == Outcome.LOSS
    assert "defaulting to player1" in caplog.text

@patch("vsrecorder.data.fetcher.requests.Session")
def test_fetch_replay_data_no_winner(mock_session):
    mock_response = Mock()
    mock_response.text = _replay_json(log="|player|p1|Alice|1|\n|turn|1\n")
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    data = fetcher.fetch_replay_data(REPLAY_URL, ["Alice"])

    assert data.result is None

@patch("vsrecorder.data.fetcher.requests.Session")
def test_fetch_replay_data_malformed(mock_session):
    mock_response = Mock()
    mock_response.text = json.dumps({"log": "|win|Alice"})
    mock_session.return_value.get.return_value = mock_response

    fetcher = ReplayFetcher(FetchConfig(requests_per_second=1000.0))
    with pytest.raises(ValueError):
        fetcher.fetch_replay_data(REPLAY_URL, ["Alice"])

def test_rate_limiting():
    """Verify rate limiting doesn't exceed configured rate."""
    import time
    fetcher = ReplayFetcher(FetchConfig(requests_per_second=10.0))

    start = time.time()
    for _ in range(5):
        fetcher._rate_limit()
    elapsed = time.time() - start

    # 4 gaps at 0.1s each
    assert elapsed >= 0.35
