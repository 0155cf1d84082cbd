"""Deterministic normalizers for policy fields.

Each normalizer coerces a raw extracted value into its canonical form without
changing its meaning:
- Strings/identifiers -> trimmed, upper-case
- Person names -> trimmed, title-cased
- Policy numbers -> trimmed, at least 5 characters
- Monetary amounts -> Decimal rounded to 2 places
- Dates -> YYYY-MM-DD

Normalizers never raise. Anything that cannot be normalized becomes None,
which reconciliation treats as "not found", never as empty or zero.
"""

import math
import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from policy_reconciler.services.normalization.constants import (
    DAY_FIRST_DATE_PATTERN,
    ISO_DATE_PATTERN,
    MONEY_NOISE_PATTERN,
    THOUSANDS_GROUPING_PATTERN,
    TWO_DIGIT_YEAR_PIVOT,
)

CENTS = Decimal("0.01")
# Largest amount a Numeric(14, 2) column holds
MAX_MONETARY_AMOUNT = Decimal("999999999999.99")
MIN_PERSON_NAME_LENGTH = 3
MIN_POLICY_NUMBER_LENGTH = 5


class FieldNormalizer:
    """Rule-based normalizer for the semantic types of a policy record."""

    @staticmethod
    def _as_text(value: Any) -> Optional[str]:
        if value is None or isinstance(value, (bool, dict, list, tuple, set)):
            return None
        text = str(value).strip()
        return text or None

    def normalize_string(self, value: Any) -> Optional[str]:
        """Normalize a free-form identifier such as an insurer name.

        Example:
            >>> FieldNormalizer().normalize_string("  acme seguros ")
            'ACME SEGUROS'
        """
        text = self._as_text(value)
        return text.upper() if text else None

    def normalize_person_name(self, value: Any) -> Optional[str]:
        """Normalize a person name to title case.

        Names shorter than 3 characters are rejected.

        Example:
            >>> FieldNormalizer().normalize_person_name("maria  DA silva")
            'Maria Da Silva'
        """
        text = self._as_text(value)
        if not text or len(text) < MIN_PERSON_NAME_LENGTH:
            return None
        return " ".join(word.capitalize() for word in text.split())

    def normalize_policy_number(self, value: Any) -> Optional[str]:
        """Normalize a policy number.

        Only whitespace is trimmed; the number itself is kept verbatim since
        insurers use punctuation and letters meaningfully.
        """
        text = self._as_text(value)
        if not text or len(text) < MIN_POLICY_NUMBER_LENGTH:
            return None
        return text

    def normalize_monetary(self, value: Any, allow_zero: bool = False) -> Optional[Decimal]:
        """Normalize a monetary amount to a Decimal with 2 places.

        Handles numbers and strings with currency symbols, thousands separators
        and decimal commas:
        - "R$ 1.234,56" -> 1234.56
        - "$1,200.50" -> 1200.50
        - 1234.5 -> 1234.50

        Args:
            value: Raw amount
            allow_zero: Accept 0 (e.g. deductibles); otherwise the amount must be > 0

        Returns:
            Decimal: Rounded amount, or None if unparsable or outside 0..MAX_MONETARY_AMOUNT
        """
        if value is None or isinstance(value, bool):
            return None

        if isinstance(value, Decimal):
            amount = value
        elif isinstance(value, int):
            amount = Decimal(value)
        elif isinstance(value, float):
            if not math.isfinite(value):
                return None
            amount = Decimal(str(value))
        elif isinstance(value, str):
            amount = self._parse_amount(value)
        else:
            return None

        if amount is None or not amount.is_finite():
            return None
        if amount < 0 or amount > MAX_MONETARY_AMOUNT:
            return None

        amount = amount.quantize(CENTS, rounding=ROUND_HALF_UP)
        if amount == 0 and not allow_zero:
            return None
        return amount

    def _parse_amount(self, text: str) -> Optional[Decimal]:
        cleaned = re.sub(MONEY_NOISE_PATTERN, "", text)
        if not cleaned:
            return None

        negative = cleaned.startswith("-")
        cleaned = cleaned.lstrip("-")
        if "-" in cleaned or not any(char.isdigit() for char in cleaned):
            return None

        has_dot = "." in cleaned
        has_comma = "," in cleaned
        if has_dot and has_comma:
            # The right-most separator is the decimal one
            if cleaned.rfind(".") > cleaned.rfind(","):
                cleaned = cleaned.replace(",", "")
            else:
                cleaned = cleaned.replace(".", "").replace(",", ".")
        elif has_comma:
            if cleaned.count(",") > 1 and re.match(THOUSANDS_GROUPING_PATTERN, cleaned):
                cleaned = cleaned.replace(",", "")
            else:
                cleaned = cleaned.replace(",", ".")
        elif has_dot and cleaned.count(".") > 1 and re.match(THOUSANDS_GROUPING_PATTERN, cleaned):
            cleaned = cleaned.replace(".", "")

        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            return None
        return -amount if negative else amount

    def normalize_date(self, value: Any) -> Optional[str]:
        """Normalize a date to YYYY-MM-DD.

        Handles:
        - date and datetime objects
        - ISO dates, optionally with a time part: 2024-06-01, 2024-06-01T10:00:00Z
        - Day-first dates: 01/06/2024, 01-06-2024, 01.06.24

        Returns:
            str: ISO date, or None if the value is not a valid calendar date
        """
        if isinstance(value, datetime):
            return value.date().isoformat()
        if isinstance(value, date):
            return value.isoformat()

        text = self._as_text(value)
        if not text:
            return None

        iso_match = re.match(ISO_DATE_PATTERN, text)
        if iso_match:
            year, month, day = iso_match.groups()
            return self._build_date(year, month, day)

        day_first_match = re.match(DAY_FIRST_DATE_PATTERN, text)
        if day_first_match:
            day, month, year = day_first_match.groups()
            if len(year) == 2:
                year = f"20{year}" if int(year) < TWO_DIGIT_YEAR_PIVOT else f"19{year}"
            return self._build_date(year, month, day)

        return None

    @staticmethod
    def _build_date(year: str, month: str, day: str) -> Optional[str]:
        try:
            return date(int(year), int(month), int(day)).isoformat()
        except ValueError:
            return None

    def is_valid_date(self, value: Any) -> bool:
        return self.normalize_date(value) is not None
