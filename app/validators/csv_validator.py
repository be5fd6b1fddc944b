"""
app/validators/csv_validator.py

Row-level validation for talk CSV imports.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from app.domain.talk import MAX_COUNT_VALUE
from app.domain.talk_import import RowValidationError

REQUIRED_FIELDS: tuple[str, ...] = ("title", "author", "date", "views", "likes", "link")
NUMERIC_FIELDS: tuple[str, ...] = ("views", "likes")

# Thousands separators tolerated inside numeric columns.
NUMERIC_SEPARATORS: tuple[str, ...] = (",", " ", "_")

_SIGNED_DIGITS = re.compile(r"-?[0-9]+")
_MAX_COUNT_DIGITS = str(MAX_COUNT_VALUE)


def exceeds_max_count(digits: str) -> bool:
    """
    True when an unsigned digit string is above ``MAX_COUNT_VALUE``.

    Compared as text so arbitrarily long inputs never reach ``int()``.
    """

    significant = digits.lstrip("0")
    if len(significant) != len(_MAX_COUNT_DIGITS):
        return len(significant) > len(_MAX_COUNT_DIGITS)
    return significant > _MAX_COUNT_DIGITS


class TalkRowValidator:
    """
    Checks required fields and numeric columns of one raw CSV row.

    Validation is deterministic and never raises for any row content.
    """

    def validate(self, row: Mapping[str, Any], row_number: int) -> list[RowValidationError]:
        """
        Return every validation error for ``row`` (empty when valid).

        Missing required fields short-circuit: numeric checks only run once
        every required field is present.
        """

        errors: list[RowValidationError] = []
        for column in REQUIRED_FIELDS:
            if self._is_blank(row.get(column)):
                errors.append(RowValidationError.missing_field(row_number, column))
        if errors:
            return errors

        for column in NUMERIC_FIELDS:
            error = self._validate_numeric(
                value=str(row[column]),
                row_number=row_number,
                column=column,
            )
            if error is not None:
                errors.append(error)
        return errors

    def parse_numeric(self, value: Any) -> int | None:
        """
        Parse a cleaned, valid counter value; ``None`` when it would not validate.
        """

        if self._is_blank(value):
            return None
        cleaned = self.clean_numeric(str(value))
        if not _SIGNED_DIGITS.fullmatch(cleaned) or cleaned.startswith("-"):
            return None
        if exceeds_max_count(cleaned):
            return None
        return int(cleaned.lstrip("0") or "0")

    @staticmethod
    def clean_numeric(value: str) -> str:
        cleaned = value.strip()
        for separator in NUMERIC_SEPARATORS:
            cleaned = cleaned.replace(separator, "")
        return cleaned

    def _validate_numeric(
        self,
        *,
        value: str,
        row_number: int,
        column: str,
    ) -> RowValidationError | None:
        cleaned = self.clean_numeric(value)
        if not _SIGNED_DIGITS.fullmatch(cleaned):
            return RowValidationError.garbage_data(row_number, column, value)
        if cleaned.startswith("-"):
            return RowValidationError.negative_value(row_number, column, value)
        if exceeds_max_count(cleaned):
            return RowValidationError.overflow(row_number, column, value)
        return None

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        return str(value).strip() == ""
