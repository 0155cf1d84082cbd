"""Per-field reconciliation rules."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Optional, Tuple

from policy_reconciler.models.policy import LogicalField
from policy_reconciler.services.normalization.field_normalizer import FieldNormalizer


@dataclass(frozen=True)
class FieldRule:
    """How one logical field is normalized and validated.

    Attributes:
        field: Logical field the rule applies to
        required: Unresolved after merge is a blocking error
        normalize: Raw value -> canonical value or None
        validate: Canonical value -> True when acceptable
        message: Warning text used when validate fails
        allow_empty: Field may legitimately vanish from a new extraction
    """

    field: LogicalField
    required: bool
    normalize: Callable[[Any], Any]
    validate: Callable[[Any], bool]
    message: str
    allow_empty: bool = False

    def check(self, value: Any) -> Optional[str]:
        """Return a warning for a failing value, or None when it passes."""
        if self.validate(value):
            return None
        return f"{self.field.value}: {self.message}"


def _min_length(length: int) -> Callable[[Any], bool]:
    return lambda value: isinstance(value, str) and len(value) >= length


def _positive(value: Any) -> bool:
    return isinstance(value, Decimal) and value > 0


def _non_negative(value: Any) -> bool:
    return isinstance(value, Decimal) and value >= 0


def build_default_rules(normalizer: Optional[FieldNormalizer] = None) -> Tuple[FieldRule, ...]:
    """Rules for every logical field, in reconciliation order."""
    normalizer = normalizer or FieldNormalizer()

    return (
        FieldRule(
            field=LogicalField.INSURER,
            required=True,
            normalize=normalizer.normalize_string,
            validate=_min_length(3),
            message="insurer must have at least 3 characters",
        ),
        FieldRule(
            field=LogicalField.POLICY_NUMBER,
            required=True,
            normalize=normalizer.normalize_policy_number,
            validate=_min_length(5),
            message="policy number must have at least 5 characters",
        ),
        FieldRule(
            field=LogicalField.INSURED_NAME,
            required=True,
            normalize=normalizer.normalize_person_name,
            validate=_min_length(3),
            message="insured name must have at least 3 characters",
        ),
        FieldRule(
            field=LogicalField.PREMIUM,
            required=True,
            normalize=normalizer.normalize_monetary,
            validate=_positive,
            message="premium must be a positive amount",
        ),
        FieldRule(
            field=LogicalField.MONTHLY_AMOUNT,
            required=False,
            normalize=normalizer.normalize_monetary,
            validate=_positive,
            message="monthly amount must be positive when present",
        ),
        FieldRule(
            field=LogicalField.START_DATE,
            required=True,
            normalize=normalizer.normalize_date,
            validate=normalizer.is_valid_date,
            message="start date must be a valid date",
        ),
        FieldRule(
            field=LogicalField.END_DATE,
            required=True,
            normalize=normalizer.normalize_date,
            validate=normalizer.is_valid_date,
            message="end date must be a valid date",
        ),
        FieldRule(
            field=LogicalField.DEDUCTIBLE,
            required=False,
            normalize=lambda value: normalizer.normalize_monetary(value, allow_zero=True),
            validate=_non_negative,
            message="deductible must be zero or positive",
            allow_empty=True,
        ),
    )


DEFAULT_RULES = build_default_rules()
