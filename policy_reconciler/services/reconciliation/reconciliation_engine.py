"""Reconciliation of raw policy extractions with stored and confirmed data.

The engine merges a raw candidate into an existing record under three rules:
- never fabricate: a field nobody supplied stays unset
- never silently drop: a known value survives a missing or differing extraction
- never override a confirmation: confirmed values win unconditionally

Every divergence is surfaced in the result for a human to review. The engine
is pure and stateless; reading and persisting records is the caller's job.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from policy_reconciler.config import ReconciliationConfig
from policy_reconciler.core.exceptions import InvalidCandidateError
from policy_reconciler.models.policy import (
    ConfirmedField,
    DecisionAction,
    FieldDecision,
    PolicyRecord,
    ResultMetadata,
    ValidationResult,
    ValueSource,
)
from policy_reconciler.services.normalization.field_extractor import FieldExtractor
from policy_reconciler.services.reconciliation.cross_field_validator import CrossFieldValidator
from policy_reconciler.services.reconciliation.field_rules import DEFAULT_RULES, FieldRule
from policy_reconciler.services.reconciliation.quality_scorer import Penalty, QualityScorer


@dataclass(frozen=True)
class _Confirmation:
    value: Any
    confirmed_by: Optional[str] = None
    confirmed_at: Optional[datetime] = None


@dataclass
class _PassState:
    """Running lists for one reconciliation pass."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    pending_review: List[str] = field(default_factory=list)
    found: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    normalized: List[str] = field(default_factory=list)
    confirmed: List[str] = field(default_factory=list)
    unparsable: List[str] = field(default_factory=list)
    penalties: List[Penalty] = field(default_factory=list)
    decisions: List[FieldDecision] = field(default_factory=list)
    canonical: Dict[str, Any] = field(default_factory=dict)  # merged values in canonical form


def _display(value: Any) -> str:
    return f'"{value}"'


class ReconciliationEngine:
    """Merge a raw candidate into a policy record.

    Attributes:
        config: Heuristic thresholds and penalties
        rules: Per-field normalization and validation rules
        extractor: Locates raw values by logical field
        cross_field_validator: Checks relationships on the merged record
        scorer: Turns accumulated penalties into a quality score
    """

    def __init__(
        self,
        config: Optional[ReconciliationConfig] = None,
        rules: Optional[Sequence[FieldRule]] = None,
        extractor: Optional[FieldExtractor] = None,
    ):
        self.config = config or ReconciliationConfig()
        self.rules = tuple(rules or DEFAULT_RULES)
        self.extractor = extractor or FieldExtractor()
        self.cross_field_validator = CrossFieldValidator(self.config)
        self.scorer = QualityScorer(self.config)

    def reconcile(
        self,
        raw: Mapping[str, Any],
        existing: Optional[Any] = None,
        confirmed_fields: Optional[Any] = None,
    ) -> ValidationResult:
        """Reconcile a raw candidate against the stored record and confirmations.

        Args:
            raw: Raw candidate payload as produced by extraction
            existing: Stored record (mapping or PolicyRecord), None on first creation
            confirmed_fields: {field_name: ConfirmedField} or an iterable of ConfirmedField

        Returns:
            ValidationResult: Merged record plus errors, warnings and review items

        Raises:
            InvalidCandidateError: If an argument does not have the expected shape
        """
        if not isinstance(raw, Mapping):
            raise InvalidCandidateError(
                f"Raw candidate must be a mapping, got {type(raw).__name__}"
            )

        existing_fields = self._existing_fields(existing)
        confirmations = self._confirmations(confirmed_fields)

        # Start from what is already known; fields are only gained or kept
        merged: Dict[str, Any] = dict(existing_fields)
        state = _PassState()

        for rule in self.rules:
            self._reconcile_field(
                rule,
                raw,
                existing_fields,
                confirmations.get(rule.field.value),
                merged,
                state,
            )

        findings = self.cross_field_validator.validate(state.canonical)
        state.errors.extend(findings.errors)
        state.warnings.extend(findings.warnings)
        state.pending_review.extend(findings.pending_review)

        quality = self.scorer.score(state.penalties)

        return ValidationResult(
            is_valid=not state.errors,
            errors=state.errors,
            warnings=state.warnings,
            pending_review=state.pending_review,
            normalized_data=merged,
            metadata=ResultMetadata(
                source_reliability=quality.reliability,
                extraction_quality=quality.score,
                fields_found=state.found,
                fields_missing=state.missing,
                fields_normalized=state.normalized,
                fields_confirmed=state.confirmed,
                fields_unparsable=state.unparsable,
            ),
            decisions=state.decisions,
        )

    def _reconcile_field(
        self,
        rule: FieldRule,
        raw: Mapping[str, Any],
        existing_fields: Mapping[str, Any],
        confirmation: Optional[_Confirmation],
        merged: Dict[str, Any],
        state: _PassState,
    ) -> None:
        name = rule.field.value

        raw_value = self.extractor.extract(raw, rule.field)
        new_value = rule.normalize(raw_value) if raw_value is not None else None
        existing_value, existing_canonical = self._known_value(rule, existing_fields.get(name))
        confirmed_value, confirmed_canonical = self._known_value(
            rule, confirmation.value if confirmation else None
        )

        if new_value is not None:
            state.found.append(name)
        else:
            state.missing.append(name)
            if raw_value is not None:
                state.unparsable.append(name)

        def settle(action, source, value, canonical, message=None):
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = value
                state.canonical[name] = canonical
            state.decisions.append(
                FieldDecision(
                    field=name,
                    action=action,
                    source=source,
                    incoming_value=new_value,
                    merged_value=value,
                    message=message,
                )
            )

        if confirmed_value is not None:
            state.confirmed.append(name)
            if new_value is not None and new_value != confirmed_canonical:
                message = (
                    f"{name}: field confirmed{self._provenance(confirmation)}; incoming extraction "
                    f"{_display(new_value)} differs from confirmed value {_display(confirmed_value)} and was ignored"
                )
                state.pending_review.append(message)
                state.penalties.append(Penalty.DIVERGENCE)
                settle(DecisionAction.FLAG, ValueSource.CONFIRMED, confirmed_value, confirmed_canonical, message)
            else:
                settle(DecisionAction.RETAIN, ValueSource.CONFIRMED, confirmed_value, confirmed_canonical)
            return

        if new_value is not None:
            warning = rule.check(new_value)
            if warning:
                state.warnings.append(warning)
                state.penalties.append(Penalty.VALIDATION_FAILURE)

            if existing_value is not None and existing_canonical != new_value:
                message = (
                    f"{name}: divergence between stored value {_display(existing_value)} and "
                    f"extracted value {_display(new_value)}; stored value retained"
                )
                state.pending_review.append(message)
                state.penalties.append(Penalty.DIVERGENCE)
                settle(DecisionAction.FLAG, ValueSource.EXISTING, existing_value, existing_canonical, message)
                return

            if not (type(raw_value) is type(new_value) and raw_value == new_value):
                state.normalized.append(name)
            settle(DecisionAction.ADOPT, ValueSource.EXTRACTION, new_value, new_value, warning)
            return

        if existing_value is not None:
            if rule.allow_empty:
                settle(DecisionAction.RETAIN, ValueSource.EXISTING, existing_value, existing_canonical)
                return

            message = f"{name}: not found in new extraction; prior value {_display(existing_value)} retained"
            state.pending_review.append(message)
            state.penalties.append(Penalty.RETAINED_NOT_FOUND)
            settle(DecisionAction.FLAG, ValueSource.EXISTING, existing_value, existing_canonical, message)
            return

        # Never guess a value nobody supplied
        message = None
        if rule.required:
            message = f"Required field missing: {name}"
            state.errors.append(message)
            state.penalties.append(Penalty.REQUIRED_MISSING)
        settle(DecisionAction.UNSET, ValueSource.NONE, None, None, message)

    @staticmethod
    def _known_value(rule: FieldRule, value: Any) -> Tuple[Any, Any]:
        """Split a stored or confirmed value into (value to keep, canonical form).

        The stored form is kept unless normalizing changes its type, as with
        amounts persisted as text or floats. Values that do not normalize are
        compared and kept as they are.
        """
        value = FieldExtractor.unwrap(value)
        if value is None:
            return None, None
        canonical = rule.normalize(value)
        if canonical is None:
            return value, value
        if type(canonical) is not type(value):
            return canonical, canonical
        return value, canonical

    @staticmethod
    def _provenance(confirmation: _Confirmation) -> str:
        parts = []
        if confirmation.confirmed_by:
            parts.append(f" by {confirmation.confirmed_by}")
        if confirmation.confirmed_at:
            parts.append(f" on {confirmation.confirmed_at.date().isoformat()}")
        return "".join(parts)

    @staticmethod
    def _existing_fields(existing: Any) -> Dict[str, Any]:
        if existing is None:
            return {}
        if isinstance(existing, PolicyRecord):
            return existing.to_fields()
        if isinstance(existing, Mapping):
            return dict(existing)
        raise InvalidCandidateError(
            f"Existing record must be a mapping or PolicyRecord, got {type(existing).__name__}"
        )

    @staticmethod
    def _confirmations(confirmed_fields: Any) -> Dict[str, _Confirmation]:
        if confirmed_fields is None:
            return {}

        if isinstance(confirmed_fields, Mapping):
            entries = confirmed_fields.items()
        elif isinstance(confirmed_fields, Iterable) and not isinstance(confirmed_fields, (str, bytes)):
            entries = []
            for entry in confirmed_fields:
                if not isinstance(entry, ConfirmedField):
                    raise InvalidCandidateError(
                        f"Confirmed fields must be ConfirmedField instances, got {type(entry).__name__}"
                    )
                entries.append((entry.field_name, entry))
        else:
            raise InvalidCandidateError(
                f"Confirmed fields must be a mapping or iterable, got {type(confirmed_fields).__name__}"
            )

        confirmations = {}
        for field_name, entry in entries:
            key = getattr(field_name, "value", field_name)
            if isinstance(entry, ConfirmedField):
                confirmations[key] = _Confirmation(
                    value=entry.value,
                    confirmed_by=entry.confirmed_by,
                    confirmed_at=entry.confirmed_at,
                )
            else:
                # Bare value: confirmation without provenance
                confirmations[key] = _Confirmation(value=entry)
        return confirmations


def reconcile(
    raw: Mapping[str, Any],
    existing: Optional[Any] = None,
    confirmed_fields: Optional[Any] = None,
    config: Optional[ReconciliationConfig] = None,
) -> ValidationResult:
    """Reconcile with a default-configured engine."""
    return ReconciliationEngine(config=config).reconcile(raw, existing, confirmed_fields)
