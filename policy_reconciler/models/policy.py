"""Domain models for policy reconciliation.

These models describe the reconciled policy record, human confirmations and the
result returned by a reconciliation pass.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class LogicalField(str, Enum):
    """Semantic attributes of a policy record, independent of source key names."""

    INSURER = "insurer"
    POLICY_NUMBER = "policyNumber"
    INSURED_NAME = "insuredName"
    PREMIUM = "premium"
    MONTHLY_AMOUNT = "monthlyAmount"
    START_DATE = "startDate"
    END_DATE = "endDate"
    DEDUCTIBLE = "deductible"

    @classmethod
    def parse(cls, name: Any) -> Optional["LogicalField"]:
        """Return the member for a field name, or None when unknown."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


class SourceReliability(str, Enum):
    """Coarse reliability tier derived from the extraction quality score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DecisionAction(str, Enum):
    """What the reconciliation pass did with a field."""

    ADOPT = "adopt"    # incoming extraction became the merged value
    RETAIN = "retain"  # a previously known value was kept
    FLAG = "flag"      # a known value was kept but the field needs human review
    UNSET = "unset"    # nothing known, nothing found


class ValueSource(str, Enum):
    """Where the merged value of a field came from."""

    EXTRACTION = "extraction"
    EXISTING = "existing"
    CONFIRMED = "confirmed"
    NONE = "none"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PolicyRecord(_CamelModel):
    """Typed view of a reconciled policy record.

    Dates are carried as ISO strings in reconciliation output; this model is the
    typed representation used at the persistence boundary.
    """

    insurer: Optional[str] = None
    policy_number: Optional[str] = None
    insured_name: Optional[str] = None
    premium: Optional[Decimal] = Field(None, gt=0)
    monthly_amount: Optional[Decimal] = Field(None, gt=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    deductible: Optional[Decimal] = Field(None, ge=0)

    def to_fields(self) -> Dict[str, Any]:
        """Return the non-empty fields keyed by logical field name."""
        fields: Dict[str, Any] = {}
        for name, value in self.model_dump(by_alias=True).items():
            if value is None:
                continue
            fields[name] = value.isoformat() if isinstance(value, date) else value
        return fields


class ConfirmedField(_CamelModel):
    """A field value a human has locked against automated overwrite.

    Entries are never mutated: unconfirm followed by confirm creates a new one.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    record_id: UUID
    field_name: str
    value: Any
    confirmed_at: datetime
    confirmed_by: Optional[str] = None


class FieldDecision(_CamelModel):
    """Per-field line of the reconciliation report."""

    field: str
    action: DecisionAction
    source: ValueSource
    incoming_value: Any = None
    merged_value: Any = None
    message: Optional[str] = None


class ResultMetadata(_CamelModel):
    """Quality signals attached to a reconciliation result."""

    source_reliability: SourceReliability = SourceReliability.HIGH
    extraction_quality: int = Field(100, ge=0, le=100)
    fields_found: List[str] = Field(default_factory=list)
    fields_missing: List[str] = Field(default_factory=list)
    fields_normalized: List[str] = Field(default_factory=list)
    fields_confirmed: List[str] = Field(default_factory=list)
    fields_unparsable: List[str] = Field(default_factory=list)


class ValidationResult(_CamelModel):
    """Outcome of one reconciliation pass. Produced fresh per call, never persisted.

    Attributes:
        is_valid: False when any blocking error exists
        errors: Blocking problems (cannot save)
        warnings: Advisory, non-blocking notes
        pending_review: Divergences a human must look at before trusting the value
        normalized_data: Merged record keyed by logical field name
        metadata: Score, tier and per-field bookkeeping
        decisions: Structured per-field report
    """

    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    pending_review: List[str] = Field(default_factory=list)
    normalized_data: Dict[str, Any] = Field(default_factory=dict)
    metadata: ResultMetadata = Field(default_factory=ResultMetadata)
    decisions: List[FieldDecision] = Field(default_factory=list)

    def decision_for(self, field: Any) -> Optional[FieldDecision]:
        name = field.value if isinstance(field, LogicalField) else field
        return next((decision for decision in self.decisions if decision.field == name), None)


class ReconciliationOutcome(_CamelModel):
    """What a caller-side reconciliation did with the store.

    Attributes:
        record_id: Record reconciled into (None when nothing was created)
        revision: Stored revision after the call
        persisted: True when a write happened
        created: True when the write created the record
        result: The engine's report
    """

    record_id: Optional[UUID] = None
    revision: Optional[int] = None
    persisted: bool = False
    created: bool = False
    result: ValidationResult
