"""Validation of parsed battle facts."""
import logging
from dataclasses import dataclass
from typing import List

from .models import BattleFacts
from .parser import MAX_LEADS, MAX_PICKS, MAX_TEAM_SIZE

logger = logging.getLogger(__name__)

@dataclass
class ValidationResult:
    """Result of validating a single battle."""
    battle_id: str
    valid: bool
    errors: List[str]
    warnings: List[str]

class FactsValidator:
    """Validator for parsed battle facts."""

    def __init__(self, min_turns: int = 1):
        self.min_turns = min_turns

    def validate(self, facts: BattleFacts, battle_id: str = "unknown") -> ValidationResult:
        """Validate the facts of a single battle."""
        errors = []
        warnings = []

        if facts.is_empty:
            errors.append("unparseable")

        for key in ("p1", "p2"):
            side = facts.side(key)

            if len(side.team) > MAX_TEAM_SIZE:
                errors.append(f"team_size_exceeded_{key}")
            if len(side.picks) > MAX_PICKS:
                errors.append(f"picks_exceeded_{key}")
            if len(side.leads) > MAX_LEADS:
                errors.append(f"leads_exceeded_{key}")

            if any(p not in side.team for p in side.picks):
                errors.append(f"pick_not_on_team_{key}")
            if any(s not in side.team for s in side.move_usage):
                errors.append(f"moves_not_on_team_{key}")
            if side.terastallized is not None and side.terastallized not in side.team:
                errors.append(f"tera_not_on_team_{key}")

            if any(entry.endswith("-*") for entry in side.team):
                warnings.append(f"unresolved_forme_{key}")
            if not side.team:
                warnings.append(f"no_team_preview_{key}")

        if not facts.is_empty:
            if facts.winner is None:
                warnings.append("no_winner")
            if facts.turn_count < self.min_turns:
                warnings.append("too_few_turns")

        if errors:
            logger.debug(f"Battle {battle_id} failed validation: {', '.join(errors)}")

        return ValidationResult(
            battle_id=battle_id,
            valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
        )
