"""Domain models."""

from policy_reconciler.models.policy import (
    ConfirmedField,
    DecisionAction,
    FieldDecision,
    LogicalField,
    PolicyRecord,
    ReconciliationOutcome,
    ResultMetadata,
    SourceReliability,
    ValidationResult,
    ValueSource,
)

__all__ = [
    "ConfirmedField",
    "DecisionAction",
    "FieldDecision",
    "LogicalField",
    "PolicyRecord",
    "ReconciliationOutcome",
    "ResultMetadata",
    "SourceReliability",
    "ValidationResult",
    "ValueSource",
]
