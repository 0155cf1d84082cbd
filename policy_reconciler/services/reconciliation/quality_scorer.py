"""Extraction quality scoring."""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from policy_reconciler.config import ReconciliationConfig
from policy_reconciler.models.policy import SourceReliability

MAX_SCORE = 100


class Penalty(str, Enum):
    """Occurrences that lower the extraction quality score."""

    REQUIRED_MISSING = "required_missing"
    VALIDATION_FAILURE = "validation_failure"
    DIVERGENCE = "divergence"
    RETAINED_NOT_FOUND = "retained_not_found"


@dataclass(frozen=True)
class QualityScore:
    score: int
    reliability: SourceReliability


class QualityScorer:
    """Aggregate penalties into a 0-100 score and a reliability tier.

    The score is advisory: it never decides whether a result is valid.
    """

    def __init__(self, config: Optional[ReconciliationConfig] = None):
        self.config = config or ReconciliationConfig()

    def penalty_for(self, penalty: Penalty) -> int:
        return {
            Penalty.REQUIRED_MISSING: self.config.penalty_required_missing,
            Penalty.VALIDATION_FAILURE: self.config.penalty_validation_failure,
            Penalty.DIVERGENCE: self.config.penalty_divergence,
            Penalty.RETAINED_NOT_FOUND: self.config.penalty_retained_not_found,
        }[penalty]

    def tier(self, score: int) -> SourceReliability:
        if score >= self.config.high_reliability_threshold:
            return SourceReliability.HIGH
        if score >= self.config.medium_reliability_threshold:
            return SourceReliability.MEDIUM
        return SourceReliability.LOW

    def score(self, penalties: Iterable[Penalty]) -> QualityScore:
        """Score a pass from the penalties it accumulated.

        Args:
            penalties: One entry per occurrence

        Returns:
            QualityScore: Score clamped at 0 and its tier
        """
        counts = Counter(penalties)
        deducted = sum(self.penalty_for(penalty) * count for penalty, count in counts.items())
        score = max(0, MAX_SCORE - deducted)
        return QualityScore(score=score, reliability=self.tier(score))
