"""Locate candidate values for logical fields inside raw extraction payloads.

Raw candidates arrive in several historical shapes: flat dictionaries keyed by
Portuguese or camelCase names, payloads grouping fields under sections such as
"informacoes_gerais" or "vigencia", and integration payloads wrapping each
value as {"value": ...}. The extractor resolves all of them through one alias
table instead of ad hoc probing at every call site.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Optional, Tuple

from policy_reconciler.models.policy import LogicalField
from policy_reconciler.services.normalization.constants import (
    ABSENT_MARKERS,
    FIELD_ALIASES,
    NESTING_GROUPS,
    WRAPPER_TYPE_KEY,
    WRAPPER_VALUE_KEY,
)


class FieldExtractor:
    """Find the raw value for a logical field.

    Lookup order for a field:
    1. each alias at the top level of the payload
    2. each alias inside each nesting group, in group order

    The first present, non-empty value wins. Values from different aliases are
    never combined.

    Attributes:
        aliases: Source keys tried per logical field
        groups: Nesting groups searched after the top level
    """

    def __init__(
        self,
        aliases: Optional[Mapping] = None,
        groups: Iterable[str] = NESTING_GROUPS,
    ):
        self.aliases: Dict[LogicalField, Tuple[str, ...]] = dict(aliases or FIELD_ALIASES)
        self.groups: Tuple[str, ...] = tuple(groups)

    def extract(self, raw: Any, field: LogicalField) -> Any:
        """Return the raw candidate value for a field, or None if absent.

        Args:
            raw: Raw candidate payload
            field: Logical field to look up

        Returns:
            The unwrapped raw value (not yet normalized), or None
        """
        if not isinstance(raw, Mapping):
            return None

        keys = self.aliases.get(field, (field.value,))

        for key in keys:
            value = self.unwrap(raw.get(key))
            if value is not None:
                return value

        for group_name in self.groups:
            group = raw.get(group_name)
            if not isinstance(group, Mapping) or WRAPPER_VALUE_KEY in group:
                continue
            for key in keys:
                value = self.unwrap(group.get(key))
                if value is not None:
                    return value

        return None

    @classmethod
    def unwrap(cls, value: Any) -> Any:
        """Reduce an integration value to a scalar, or None when it means "absent".

        Examples:
            >>> FieldExtractor.unwrap({"value": {"value": "ACME"}})
            'ACME'
            >>> FieldExtractor.unwrap({"_type": "undefined"}) is None
            True
            >>> FieldExtractor.unwrap("undefined") is None
            True
        """
        if value is None:
            return None

        if isinstance(value, Mapping):
            if value.get(WRAPPER_TYPE_KEY) == "undefined":
                return None
            if WRAPPER_VALUE_KEY in value:
                return cls.unwrap(value[WRAPPER_VALUE_KEY])
            # A grouping object is not a scalar candidate
            return None

        if isinstance(value, (list, tuple, set)):
            return None

        if isinstance(value, str):
            stripped = value.strip()
            if not stripped or stripped.lower() in ABSENT_MARKERS:
                return None

        return value
