"""Tests for battle facts validation."""
import logging

from vsrecorder.data.models import BattleFacts, SideFacts
from vsrecorder.data.parser import parse_battle_log
from vsrecorder.data.validation import FactsValidator

def test_valid_battle(sample_replay):
    validator = FactsValidator()
    result = validator.validate(parse_battle_log(sample_replay), battle_id="sample")

    assert result.valid
    assert result.battle_id == "sample"
    assert result.errors == []
    assert result.warnings == []

def test_unparseable_battle():
    result = FactsValidator().validate(BattleFacts())

    assert not result.valid
    assert "unparseable" in result.errors

def test_structural_errors():
    side = SideFacts(
        team=["A", "B"],
        picks=["A", "B", "C", "D", "E"],
        leads=["A", "B", "C"],
        move_usage={"Z": {"Protect": 1}},
        terastallized="Y",
    )
    facts = BattleFacts(player1="Alice", player2="Bob", p1=side, p2=SideFacts(team=["X"]), winner="Alice", turn_count=3)

    result = FactsValidator().validate(facts)

    assert not result.valid
    assert "picks_exceeded_p1" in result.errors
    assert "leads_exceeded_p1" in result.errors
    assert "pick_not_on_team_p1" in result.errors
    assert "moves_not_on_team_p1" in result.errors
    assert "tera_not_on_team_p1" in result.errors
    assert not any(e.endswith("_p2") for e in result.errors)

def test_warnings():
    facts = BattleFacts(
        player1="Alice",
        player2="Bob",
        p1=SideFacts(team=["Urshifu-*"]),
        p2=SideFacts(),
    )

    result = FactsValidator().validate(facts)

    assert result.valid
    assert "unresolved_forme_p1" in result.warnings
    assert "no_team_preview_p2" in result.warnings
    assert "no_winner" in result.warnings
    assert "too_few_turns" in result.warnings

def test_invalid_battle_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="vsrecorder.data.validation"):
        FactsValidator().validate(BattleFacts(), battle_id="broken")

    assert "broken failed validation: unparseable" in caplog.text
