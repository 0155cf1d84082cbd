"""Checks between fields of an already merged policy record."""

import calendar
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional

from policy_reconciler.config import ReconciliationConfig
from policy_reconciler.models.policy import LogicalField

DAYS_PER_YEAR = 365
MONTHS_PER_YEAR = 12


@dataclass
class CrossFieldFindings:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    pending_review: List[str] = field(default_factory=list)


class CrossFieldValidator:
    """Annotate relationships that cannot be checked one field at a time.

    Checks:
    - end date after start date (error)
    - coverage span above the configured years (warning)
    - monthly amount close to premium / 12 (review)
    - deductible not above the premium (warning)

    Values are only inspected, never corrected.
    """

    def __init__(self, config: Optional[ReconciliationConfig] = None):
        self.config = config or ReconciliationConfig()

    def validate(self, record: Mapping[str, Any]) -> CrossFieldFindings:
        findings = CrossFieldFindings()
        self._check_coverage_period(record, findings)
        self._check_monthly_amount(record, findings)
        self._check_deductible(record, findings)
        return findings

    def _check_coverage_period(self, record: Mapping[str, Any], findings: CrossFieldFindings) -> None:
        start = _as_date(record.get(LogicalField.START_DATE.value))
        end = _as_date(record.get(LogicalField.END_DATE.value))
        if start is None or end is None:
            return

        if end <= start:
            findings.errors.append(
                f"endDate ({end.isoformat()}) must be after startDate ({start.isoformat()})"
            )
            return

        limit = _shift_years(start, self.config.max_coverage_years)
        if limit is not None and end > limit:
            span_years = (end - start).days / DAYS_PER_YEAR
            findings.warnings.append(
                f"Unusually long validity period: {span_years:.1f} years "
                f"({start.isoformat()} to {end.isoformat()})"
            )

    def _check_monthly_amount(self, record: Mapping[str, Any], findings: CrossFieldFindings) -> None:
        premium = _as_decimal(record.get(LogicalField.PREMIUM.value))
        monthly = _as_decimal(record.get(LogicalField.MONTHLY_AMOUNT.value))
        if not premium or not monthly:
            return

        expected = premium / MONTHS_PER_YEAR
        tolerance = expected * Decimal(str(self.config.monthly_tolerance_ratio))
        if abs(monthly - expected) > tolerance:
            findings.pending_review.append(
                f"monthlyAmount: monthly amount ({monthly}) inconsistent with annual premium "
                f"({premium}); expected about {expected.quantize(Decimal('0.01'))}"
            )

    def _check_deductible(self, record: Mapping[str, Any], findings: CrossFieldFindings) -> None:
        premium = _as_decimal(record.get(LogicalField.PREMIUM.value))
        deductible = _as_decimal(record.get(LogicalField.DEDUCTIBLE.value))
        if deductible is None or premium is None:
            return

        if deductible > premium:
            findings.warnings.append(
                f"deductible: deductible ({deductible}) exceeds annual premium ({premium})"
            )


def _shift_years(start: date, years: float) -> Optional[date]:
    """Calendar date `years` after start; Feb 29 falls back to Feb 28.

    Whole years move the calendar year, a fractional remainder is added in days.
    Returns None past the last representable date.
    """
    whole = int(years)
    year = start.year + whole
    if year > date.max.year:
        return None
    day = 28 if (start.month, start.day) == (2, 29) and not calendar.isleap(year) else start.day
    try:
        return start.replace(year=year, day=day) + timedelta(days=round((years - whole) * DAYS_PER_YEAR))
    except OverflowError:
        return None


def _as_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def _as_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None
