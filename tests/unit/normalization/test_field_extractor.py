"""Unit tests for FieldExtractor."""

import pytest

from policy_reconciler.models.policy import LogicalField
from policy_reconciler.services.normalization.field_extractor import FieldExtractor


@pytest.fixture
def extractor() -> FieldExtractor:
    return FieldExtractor()


class TestFieldExtractor:
    """Alias and nesting-group lookup."""

    def test_top_level_alias(self, extractor):
        assert extractor.extract({"numero_apolice": "12345-X"}, LogicalField.POLICY_NUMBER) == "12345-X"

    def test_camel_case_key(self, extractor):
        assert extractor.extract({"policyNumber": "12345-X"}, LogicalField.POLICY_NUMBER) == "12345-X"

    def test_alias_order_decides(self, extractor):
        raw = {"policyNumber": "LATE-ALIAS", "apolice": "EARLY-ALIAS"}
        assert extractor.extract(raw, LogicalField.POLICY_NUMBER) == "EARLY-ALIAS"

    def test_empty_alias_falls_through_to_next(self, extractor):
        raw = {"premio": "  ", "valor_premio": "1200"}
        assert extractor.extract(raw, LogicalField.PREMIUM) == "1200"

    def test_nested_group(self, extractor):
        raw = {"vigencia": {"inicio": "01/01/2024", "fim": "01/01/2025"}}
        assert extractor.extract(raw, LogicalField.START_DATE) == "01/01/2024"
        assert extractor.extract(raw, LogicalField.END_DATE) == "01/01/2025"

    def test_top_level_wins_over_group(self, extractor):
        raw = {"premio": "100", "informacoes_financeiras": {"premio": "200"}}
        assert extractor.extract(raw, LogicalField.PREMIUM) == "100"

    def test_group_object_is_not_a_scalar_candidate(self, extractor):
        raw = {"seguradora": {"empresa": "ACME SEGUROS"}}
        assert extractor.extract(raw, LogicalField.INSURER) == "ACME SEGUROS"

    def test_missing_field(self, extractor):
        assert extractor.extract({"foo": "bar"}, LogicalField.DEDUCTIBLE) is None

    def test_non_mapping_payload(self, extractor):
        assert extractor.extract(["premio", "100"], LogicalField.PREMIUM) is None


class TestUnwrap:
    """Integration wrappers and absent markers."""

    def test_nested_value_wrapper(self):
        assert FieldExtractor.unwrap({"value": {"value": "ACME"}}) == "ACME"

    def test_wrapped_value_is_extracted(self, extractor):
        raw = {"seguradora": {"value": "ACME"}}
        assert extractor.extract(raw, LogicalField.INSURER) == "ACME"

    @pytest.mark.parametrize(
        "value",
        [{"_type": "undefined"}, {"value": {"_type": "undefined", "value": "x"}}, "undefined", " null ", "", [1, 2]],
    )
    def test_absent_values(self, value):
        assert FieldExtractor.unwrap(value) is None

    def test_scalars_pass_through(self):
        assert FieldExtractor.unwrap(0) == 0
        assert FieldExtractor.unwrap("abc") == "abc"
