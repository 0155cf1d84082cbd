"""Field normalization and extraction for raw policy candidates."""

from policy_reconciler.services.normalization.field_extractor import FieldExtractor
from policy_reconciler.services.normalization.field_normalizer import FieldNormalizer

__all__ = ["FieldExtractor", "FieldNormalizer"]
