"""Unit tests for ReconciliationEngine."""

from datetime import date
from decimal import Decimal

import pytest

from policy_reconciler.config import ReconciliationConfig
from policy_reconciler.core.exceptions import InvalidCandidateError
from policy_reconciler.models.policy import (
    DecisionAction,
    PolicyRecord,
    SourceReliability,
    ValueSource,
)
from policy_reconciler.services.reconciliation.reconciliation_engine import (
    ReconciliationEngine,
    reconcile,
)

REQUIRED_FIELDS = ["insurer", "policyNumber", "insuredName", "premium", "startDate", "endDate"]


@pytest.fixture
def engine() -> ReconciliationEngine:
    return ReconciliationEngine()


class TestFirstCreation:
    """Reconciling without a stored record."""

    def test_clean_extraction(self, engine, raw_candidate, stored_fields):
        result = engine.reconcile(raw_candidate)

        assert result.is_valid is True
        assert result.normalized_data == stored_fields
        assert result.errors == []
        assert result.pending_review == []
        assert result.metadata.extraction_quality == 100
        assert result.metadata.source_reliability == SourceReliability.HIGH
        assert len(result.metadata.fields_found) == 8
        assert result.metadata.fields_missing == []
        assert "premium" in result.metadata.fields_normalized
        assert all(decision.action == DecisionAction.ADOPT for decision in result.decisions)

    def test_empty_candidate_fabricates_nothing(self, engine):
        result = engine.reconcile({})

        assert result.normalized_data == {}
        assert result.is_valid is False
        assert result.errors == [f"Required field missing: {name}" for name in REQUIRED_FIELDS]
        assert result.metadata.extraction_quality == 0
        assert result.metadata.source_reliability == SourceReliability.LOW
        assert result.decision_for("deductible").action == DecisionAction.UNSET

    def test_date_order_is_a_blocking_error(self, engine):
        result = engine.reconcile({"startDate": "2024-06-01", "endDate": "2024-01-01"})

        assert result.is_valid is False
        assert "endDate (2024-01-01) must be after startDate (2024-06-01)" in result.errors

    def test_failed_validator_warns_but_keeps_value(self, engine, raw_candidate):
        raw_candidate["seguradora"] = "ab"

        result = engine.reconcile(raw_candidate)

        assert result.normalized_data["insurer"] == "AB"
        assert "insurer: insurer must have at least 3 characters" in result.warnings
        assert "insurer" in result.metadata.fields_found
        assert result.metadata.extraction_quality == 90
        assert result.is_valid is True

    def test_value_already_canonical_is_not_normalized(self, engine):
        result = engine.reconcile({"insurer": "ACME SEGUROS"})
        assert "insurer" not in result.metadata.fields_normalized

    def test_unparsable_value_counts_as_missing(self, engine, raw_candidate):
        raw_candidate["informacoes_financeiras"]["premio"] = "a combinar"

        result = engine.reconcile(raw_candidate)

        assert "premium" not in result.normalized_data
        assert "premium" in result.metadata.fields_missing
        assert result.metadata.fields_unparsable == ["premium"]
        assert "Required field missing: premium" in result.errors

    def test_oversized_amount_counts_as_missing(self, engine):
        result = reconcile({"premio": 10**30, "franquia": "R$ " + "9" * 27})

        assert "premium" not in result.normalized_data
        assert "deductible" not in result.normalized_data
        assert set(result.metadata.fields_unparsable) == {"premium", "deductible"}
        assert result.is_valid is False

    def test_undefined_wrapper_counts_as_missing(self, engine, raw_candidate):
        raw_candidate["segurado"] = {"_type": "undefined"}

        result = engine.reconcile(raw_candidate)

        assert "insuredName" in result.metadata.fields_missing
        assert result.metadata.fields_unparsable == []


class TestExistingRecord:
    """Reconciling into a stored record."""

    def test_divergence_keeps_stored_value(self, engine, stored_fields):
        result = engine.reconcile({"seguradora": "OUTRA CIA"}, existing=stored_fields)

        assert result.normalized_data["insurer"] == "ACME SEGUROS"
        assert result.is_valid is True
        assert any(note.startswith("insurer: divergence") for note in result.pending_review)
        decision = result.decision_for("insurer")
        assert decision.action == DecisionAction.FLAG
        assert decision.source == ValueSource.EXISTING
        assert decision.incoming_value == "OUTRA CIA"

    def test_fields_missing_from_extraction_are_retained(self, engine, stored_fields):
        result = engine.reconcile({"seguradora": "OUTRA CIA"}, existing=stored_fields)

        assert result.normalized_data == stored_fields
        retained = [note for note in result.pending_review if "not found in new extraction" in note]
        # Deductible may disappear from a document without a review note
        assert len(retained) == 6
        assert not any(note.startswith("deductible") for note in result.pending_review)
        # 100 - 15 (divergence) - 6 * 5 (retained)
        assert result.metadata.extraction_quality == 55
        assert result.metadata.source_reliability == SourceReliability.LOW

    def test_equal_values_in_another_form_are_not_divergent(self, engine, stored_fields, raw_candidate):
        result = engine.reconcile(raw_candidate, existing=stored_fields)

        assert result.pending_review == []
        assert result.normalized_data == stored_fields
        assert result.metadata.extraction_quality == 100

    def test_float_amount_equals_formatted_string(self, engine):
        result = engine.reconcile({"premio": "R$ 1.200,00"}, existing={"premium": 1200.0})

        assert result.normalized_data["premium"] == Decimal("1200.00")
        assert not any(note.startswith("premium") for note in result.pending_review)

    def test_new_field_fills_gap(self, engine):
        result = engine.reconcile({"franquia": "250"}, existing={"insurer": "ACME SEGUROS"})

        assert result.normalized_data["deductible"] == Decimal("250.00")
        assert result.decision_for("deductible").action == DecisionAction.ADOPT

    def test_unparsable_extraction_never_replaces_stored_value(self, engine, stored_fields):
        result = engine.reconcile({"premio": "n/a"}, existing=stored_fields)
        assert result.normalized_data["premium"] == Decimal("1200.00")

    def test_oversized_extraction_never_replaces_stored_value(self, engine, stored_fields):
        result = engine.reconcile({"premio": "9" * 30}, existing=stored_fields)

        assert result.normalized_data["premium"] == Decimal("1200.00")
        assert result.decision_for("premium").source == ValueSource.EXISTING

    def test_non_logical_keys_are_carried_through(self, engine, stored_fields):
        stored_fields["notes"] = "renewal pending"
        result = engine.reconcile({}, existing=stored_fields)
        assert result.normalized_data["notes"] == "renewal pending"

    def test_existing_as_policy_record(self, engine):
        existing = PolicyRecord(premium=Decimal("1200"), start_date=date(2024, 1, 1))

        result = engine.reconcile({"premio": "1200", "inicio": "01/01/2024"}, existing=existing)

        assert result.normalized_data["premium"] == Decimal("1200.00")
        assert result.normalized_data["startDate"] == "2024-01-01"
        assert result.pending_review == []


class TestConfirmedFields:
    """Confirmed values are never replaced."""

    def test_confirmed_value_wins(self, engine, stored_fields, raw_candidate, confirmed_policy_number):
        raw_candidate["numero_apolice"] = "99999-Z"

        result = engine.reconcile(
            raw_candidate,
            existing=stored_fields,
            confirmed_fields={"policyNumber": confirmed_policy_number},
        )

        assert result.normalized_data["policyNumber"] == "12345-X"
        assert result.is_valid is True
        assert result.metadata.extraction_quality == 85
        assert result.metadata.fields_confirmed == ["policyNumber"]
        assert result.pending_review == [
            'policyNumber: field confirmed by analyst@example.com on 2024-03-10; incoming '
            'extraction "99999-Z" differs from confirmed value "12345-X" and was ignored'
        ]
        decision = result.decision_for("policyNumber")
        assert decision.action == DecisionAction.FLAG
        assert decision.source == ValueSource.CONFIRMED

    def test_confirmed_value_wins_over_stored_value(self, engine, stored_fields):
        result = engine.reconcile(
            {},
            existing=stored_fields,
            confirmed_fields={"insurer": "ACME SEGUROS S.A."},
        )

        assert result.normalized_data["insurer"] == "ACME SEGUROS S.A."
        assert result.decision_for("insurer").action == DecisionAction.RETAIN
        assert not any(note.startswith("insurer") for note in result.pending_review)

    def test_matching_extraction_is_not_flagged(self, engine, raw_candidate, confirmed_policy_number):
        result = engine.reconcile(raw_candidate, confirmed_fields=[confirmed_policy_number])

        assert result.pending_review == []
        assert result.decision_for("policyNumber").source == ValueSource.CONFIRMED

    def test_confirmed_text_amount_is_canonicalized(self, engine):
        result = engine.reconcile({"premio": "1300"}, confirmed_fields={"premium": "1200.00"})

        assert result.normalized_data["premium"] == Decimal("1200.00")
        assert len(result.pending_review) == 1

    def test_confirmed_required_field_is_never_missing(self, engine):
        result = engine.reconcile({}, confirmed_fields={"insurer": "ACME SEGUROS"})
        assert "Required field missing: insurer" not in result.errors


class TestInputContract:

    @pytest.mark.parametrize("raw", [None, ["premio"], "premio=1200"])
    def test_raw_must_be_a_mapping(self, engine, raw):
        with pytest.raises(InvalidCandidateError):
            engine.reconcile(raw)

    def test_existing_must_be_a_mapping(self, engine):
        with pytest.raises(InvalidCandidateError):
            engine.reconcile({}, existing="ACME")

    def test_confirmations_must_be_confirmed_fields(self, engine):
        with pytest.raises(InvalidCandidateError):
            engine.reconcile({}, confirmed_fields=[("insurer", "ACME")])


class TestConfiguration:

    def test_penalties_come_from_config(self, stored_fields):
        config = ReconciliationConfig(penalty_divergence=40, penalty_retained_not_found=0)

        result = reconcile({"seguradora": "OUTRA CIA"}, existing=stored_fields, config=config)

        assert result.metadata.extraction_quality == 60
        assert result.metadata.source_reliability == SourceReliability.MEDIUM


class TestResultViews:

    def test_result_serializes_with_camel_case_keys(self, engine, raw_candidate):
        data = engine.reconcile(raw_candidate).model_dump(by_alias=True)

        assert data["isValid"] is True
        assert data["metadata"]["extractionQuality"] == 100
        assert "pendingReview" in data
        assert data["decisions"][0]["mergedValue"] == "ACME SEGUROS"
