"""Score accumulation, pass/fail classification and feedback bands."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import get_default_pass_ratio
from .path_recorder import PathEntry

OUTCOME_PERFECT = "perfect"
OUTCOME_GOOD = "good"
OUTCOME_NEEDS_IMPROVEMENT = "needs_improvement"

# Per-decision feedback bands: (lower bound inclusive, label), highest first
SCORE_BANDS = [
    (20, "excellent"),
    (10, "good"),
    (0, "neutral"),
]
PENALTY_BAND = "penalty"


@dataclass(frozen=True)
class ScenarioResult:
    passed: bool
    total_score: int
    perfect_score: int
    pass_ratio: float
    effectiveness_pct: int
    outcome: str

    def as_callback_args(self) -> tuple:
        """(passed, total_score, perfect_score) as handed to on_complete."""
        return self.passed, self.total_score, self.perfect_score

    def to_dict(self) -> dict:
        return {
            "passed": self.passed,
            "total_score": self.total_score,
            "perfect_score": self.perfect_score,
            "pass_ratio": self.pass_ratio,
            "effectiveness_pct": self.effectiveness_pct,
            "outcome": self.outcome,
        }


def accumulate_score(path: Iterable[PathEntry]) -> int:
    """Sum of scores over the confirmed decisions."""
    return sum(entry.score for entry in path)


def is_passing(total_score: int, perfect_score: int, pass_ratio: float) -> bool:
    # No clamping: totals above perfect or below zero compare as-is
    return total_score >= perfect_score * pass_ratio


def effectiveness_pct(total_score: int, perfect_score: int) -> int:
    if perfect_score == 0:
        return 0
    # Halves round up, so 12.5% reads as 13%
    return math.floor(total_score / perfect_score * 100 + 0.5)


def classify_result(
    total_score: int,
    perfect_score: int,
    pass_ratio: Optional[float] = None,
) -> ScenarioResult:
    """Classify a final score against the author-declared perfect score."""
    ratio = get_default_pass_ratio() if pass_ratio is None else pass_ratio
    passed = is_passing(total_score, perfect_score, ratio)
    if total_score == perfect_score:
        outcome = OUTCOME_PERFECT
    elif passed:
        outcome = OUTCOME_GOOD
    else:
        outcome = OUTCOME_NEEDS_IMPROVEMENT
    return ScenarioResult(
        passed=passed,
        total_score=total_score,
        perfect_score=perfect_score,
        pass_ratio=ratio,
        effectiveness_pct=effectiveness_pct(total_score, perfect_score),
        outcome=outcome,
    )


def score_band(score: int) -> str:
    """Return the feedback band label for a single decision's score."""
    for low, label in SCORE_BANDS:
        if score >= low:
            return label
    return PENALTY_BAND
