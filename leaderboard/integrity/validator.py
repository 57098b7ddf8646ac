from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..models.score import ScoreSubmission

COMPLETION_REQUIRED = "Game must be completed (100% progress)"
BUGS_REMAINING = "Game cannot end with bugs"
SCORE_TOO_HIGH = "Score too high for number of rounds"
TOO_QUICK = "Game completed too quickly"
TOO_FEW_CARDS = "Not enough cards played for number of rounds"


@dataclass(frozen=True)
class PlausibilityRules:
    """Game-design thresholds a finished game has to respect"""
    required_progress: int = 100
    max_final_bugs: int = 0
    base_score: int = 1000
    max_rounds: int = 100
    per_round_bonus: int = 10
    min_seconds_per_round: int = 10

    def score_ceiling(self, rounds: int) -> int:
        return self.base_score + (self.max_rounds - rounds) * self.per_round_bonus

    def min_duration(self, rounds: int) -> int:
        return rounds * self.min_seconds_per_round


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: Optional[str] = None


VALID = ValidationResult(valid=True)

Check = Tuple[Callable[[ScoreSubmission, PlausibilityRules], bool], str]

# Evaluated in order; the first failing check decides the reason.
CHECKS: List[Check] = [
    (lambda s, r: s.final_progress == r.required_progress, COMPLETION_REQUIRED),
    (lambda s, r: s.final_bugs <= r.max_final_bugs, BUGS_REMAINING),
    (lambda s, r: s.score <= r.score_ceiling(s.rounds), SCORE_TOO_HIGH),
    (lambda s, r: s.game_duration_seconds >= r.min_duration(s.rounds), TOO_QUICK),
    (lambda s, r: len(s.cards_played) >= s.rounds, TOO_FEW_CARDS),
]


class PlausibilityValidator:
    """Cross-field checks over a submission whose individual fields are already in range."""

    def __init__(self, rules: Optional[PlausibilityRules] = None):
        self.rules = rules or PlausibilityRules()

    def validate(self, submission: ScoreSubmission) -> ValidationResult:
        for check, reason in CHECKS:
            if not check(submission, self.rules):
                return ValidationResult(valid=False, reason=reason)
        return VALID
