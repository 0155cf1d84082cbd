"""Unit tests for CrossFieldValidator."""

from decimal import Decimal

import pytest

from policy_reconciler.config import ReconciliationConfig
from policy_reconciler.services.reconciliation.cross_field_validator import CrossFieldValidator


@pytest.fixture
def validator() -> CrossFieldValidator:
    return CrossFieldValidator()


class TestCoveragePeriod:

    def test_end_before_start_is_an_error(self, validator):
        findings = validator.validate({"startDate": "2024-06-01", "endDate": "2024-01-01"})
        assert findings.errors == ["endDate (2024-01-01) must be after startDate (2024-06-01)"]

    def test_same_day_is_an_error(self, validator):
        findings = validator.validate({"startDate": "2024-06-01", "endDate": "2024-06-01"})
        assert len(findings.errors) == 1

    def test_long_span_is_a_warning(self, validator):
        findings = validator.validate({"startDate": "2024-01-01", "endDate": "2027-01-01"})

        assert findings.errors == []
        assert len(findings.warnings) == 1
        assert findings.warnings[0].startswith("Unusually long validity period: 3.0 years")

    def test_one_year_is_clean(self, validator):
        findings = validator.validate({"startDate": "2024-01-01", "endDate": "2025-01-01"})
        assert findings.errors == findings.warnings == []

    @pytest.mark.parametrize(
        "start, end",
        [
            ("2024-01-01", "2026-01-01"),
            ("2025-01-01", "2027-01-01"),
            ("2024-02-29", "2026-02-28"),
        ],
    )
    def test_exactly_two_calendar_years_is_clean(self, validator, start, end):
        findings = validator.validate({"startDate": start, "endDate": end})
        assert findings.warnings == []

    def test_one_day_past_two_calendar_years_is_a_warning(self, validator):
        findings = validator.validate({"startDate": "2024-01-01", "endDate": "2026-01-02"})
        assert len(findings.warnings) == 1

    def test_fractional_limit(self):
        validator = CrossFieldValidator(ReconciliationConfig(max_coverage_years=1.5))

        assert validator.validate({"startDate": "2024-01-01", "endDate": "2025-06-01"}).warnings == []
        assert len(validator.validate({"startDate": "2024-01-01", "endDate": "2025-08-01"}).warnings) == 1

    def test_missing_date_skips_check(self, validator):
        findings = validator.validate({"startDate": "2024-01-01"})
        assert findings.errors == []


class TestMonthlyAmount:

    @pytest.mark.parametrize("monthly", ["100", "81", "119"])
    def test_within_tolerance(self, validator, monthly):
        findings = validator.validate({"premium": Decimal("1200"), "monthlyAmount": Decimal(monthly)})
        assert findings.pending_review == []

    @pytest.mark.parametrize("monthly", ["70", "79.99", "121"])
    def test_outside_tolerance_needs_review(self, validator, monthly):
        findings = validator.validate({"premium": Decimal("1200"), "monthlyAmount": Decimal(monthly)})

        assert len(findings.pending_review) == 1
        assert "inconsistent with annual premium" in findings.pending_review[0]
        assert findings.errors == []

    def test_tolerance_is_configurable(self):
        validator = CrossFieldValidator(ReconciliationConfig(monthly_tolerance_ratio=0.5))
        findings = validator.validate({"premium": Decimal("1200"), "monthlyAmount": Decimal("70")})
        assert findings.pending_review == []


class TestDeductible:

    def test_deductible_above_premium_is_a_warning(self, validator):
        findings = validator.validate({"premium": Decimal("1200"), "deductible": Decimal("5000")})
        assert findings.warnings == ["deductible: deductible (5000) exceeds annual premium (1200)"]

    def test_deductible_equal_to_premium_is_clean(self, validator):
        findings = validator.validate({"premium": Decimal("1200"), "deductible": Decimal("1200")})
        assert findings.warnings == []
