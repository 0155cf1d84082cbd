"""Policy reconciliation engine."""

from policy_reconciler.services.reconciliation.cross_field_validator import CrossFieldValidator
from policy_reconciler.services.reconciliation.field_rules import DEFAULT_RULES, FieldRule
from policy_reconciler.services.reconciliation.quality_scorer import Penalty, QualityScorer
from policy_reconciler.services.reconciliation.reconciliation_engine import (
    ReconciliationEngine,
    reconcile,
)

__all__ = [
    "CrossFieldValidator",
    "DEFAULT_RULES",
    "FieldRule",
    "Penalty",
    "QualityScorer",
    "ReconciliationEngine",
    "reconcile",
]
