"""Lookup tables and patterns for policy field extraction and normalization."""

from policy_reconciler.models.policy import LogicalField

# Source keys tried for each logical field, in priority order. Covers the
# upload parser, the integration webhook payloads and the current camelCase form.
FIELD_ALIASES = {
    LogicalField.INSURER: ("seguradora", "seguradora_empresa", "empresa", "insurer"),
    LogicalField.POLICY_NUMBER: ("numero_apolice", "apolice", "policy_number", "policyNumber"),
    LogicalField.INSURED_NAME: ("segurado", "nome", "name", "insuredName", "insured_name"),
    LogicalField.PREMIUM: ("premio", "valor_premio", "premium", "valor_total"),
    LogicalField.MONTHLY_AMOUNT: ("custo_mensal", "valor_mensal", "monthlyAmount", "valor_parcela"),
    LogicalField.START_DATE: ("inicio", "inicio_vigencia", "startDate", "data_inicio"),
    LogicalField.END_DATE: ("fim", "fim_vigencia", "endDate", "data_fim"),
    LogicalField.DEDUCTIBLE: ("franquia", "deductible"),
}

# Groupings older payloads nest fields under, searched after the top level
NESTING_GROUPS = (
    "informacoes_gerais",
    "seguradora",
    "informacoes_financeiras",
    "vigencia",
)

# Integration placeholders that mean "no value"
ABSENT_MARKERS = frozenset({"undefined", "null", "none"})
WRAPPER_VALUE_KEY = "value"
WRAPPER_TYPE_KEY = "_type"

# Everything that is not a digit, separator or sign is stripped from money
MONEY_NOISE_PATTERN = r"[^\d.,\-]"
THOUSANDS_GROUPING_PATTERN = r"^\d{1,3}([.,]\d{3})+$"

ISO_DATE_PATTERN = r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$"
DAY_FIRST_DATE_PATTERN = r"^(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{2}|\d{4})$"
TWO_DIGIT_YEAR_PIVOT = 50
