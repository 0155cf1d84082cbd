"""Unit tests for QualityScorer."""

import pytest

from policy_reconciler.config import ReconciliationConfig
from policy_reconciler.models.policy import SourceReliability
from policy_reconciler.services.reconciliation.quality_scorer import Penalty, QualityScorer


class TestQualityScorer:

    def test_no_penalties(self):
        score = QualityScorer().score([])
        assert score.score == 100
        assert score.reliability == SourceReliability.HIGH

    def test_penalties_are_deducted_per_occurrence(self):
        penalties = [Penalty.DIVERGENCE, Penalty.DIVERGENCE, Penalty.RETAINED_NOT_FOUND]
        assert QualityScorer().score(penalties).score == 65

    def test_score_is_clamped_at_zero(self):
        assert QualityScorer().score([Penalty.REQUIRED_MISSING] * 6).score == 0

    @pytest.mark.parametrize(
        "score, tier",
        [
            (100, SourceReliability.HIGH),
            (80, SourceReliability.HIGH),
            (79, SourceReliability.MEDIUM),
            (60, SourceReliability.MEDIUM),
            (59, SourceReliability.LOW),
            (0, SourceReliability.LOW),
        ],
    )
    def test_tiers(self, score, tier):
        assert QualityScorer().tier(score) == tier

    def test_thresholds_are_configurable(self):
        scorer = QualityScorer(ReconciliationConfig(high_reliability_threshold=95))
        assert scorer.score([Penalty.VALIDATION_FAILURE]).reliability == SourceReliability.MEDIUM
