"""
app/mappers/talk_mapper.py

Maps validated CSV rows into speaker/talk domain records.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from app.domain.talk import Likes, Link, Speaker, Talk, TalkDate, Views
from app.domain.talk_import import RowValidationError
from app.validators.csv_validator import TalkRowValidator

logger = logging.getLogger(__name__)

DATE_FORMAT_HINT = "Expected format like 'December 2021'"


@dataclass(frozen=True)
class ImportRecord:
    """
    A mapped row: a provisional speaker and the talk bound to it.

    The speaker is identified by name only; the import service resolves it
    against persisted speakers before the talk is stored.
    """

    speaker: Speaker
    talk: Talk


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of mapping one CSV row: exactly one of record/errors is set.
    """

    row_number: int
    record: ImportRecord | None = None
    errors: tuple[RowValidationError, ...] = ()

    @classmethod
    def success(cls, row_number: int, record: ImportRecord) -> "ValidationResult":
        return cls(row_number=row_number, record=record)

    @classmethod
    def failure(cls, row_number: int, errors: list[RowValidationError]) -> "ValidationResult":
        return cls(row_number=row_number, errors=tuple(errors))

    @property
    def is_valid(self) -> bool:
        return self.record is not None and not self.errors

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)


class _FieldFormatError(ValueError):
    def __init__(self, column: str, value: str, message: str) -> None:
        super().__init__(message)
        self.column = column
        self.value = value


class TalkCsvMapper:
    """
    Validates a raw row and builds domain objects from it.

    ``map_row`` never raises: every failure becomes a ``ValidationResult``
    carrying the row's errors.
    """

    def __init__(self, *, validator: TalkRowValidator | None = None) -> None:
        self._validator = validator or TalkRowValidator()

    def map_row(self, row: Mapping[str, Any], row_number: int) -> ValidationResult:
        try:
            errors = self._validator.validate(row, row_number)
            if errors:
                logger.debug("Row %s rejected with %s validation error(s).", row_number, len(errors))
                return ValidationResult.failure(row_number, errors)

            record = self._build_record(row)
        except _FieldFormatError as exc:
            return ValidationResult.failure(
                row_number,
                [RowValidationError.invalid_format(row_number, exc.column, exc.value, str(exc))],
            )
        except Exception as exc:  # noqa: BLE001
            logger.error("Unexpected error mapping row %s: %s", row_number, exc)
            return ValidationResult.failure(
                row_number,
                [
                    RowValidationError.invalid_format(
                        row_number,
                        "unknown",
                        None,
                        f"Unexpected error: {exc}",
                    )
                ],
            )
        return ValidationResult.success(row_number, record)

    def _build_record(self, row: Mapping[str, Any]) -> ImportRecord:
        title = str(row["title"]).strip()
        author = str(row["author"]).strip()
        date_raw = str(row["date"]).strip()
        link_raw = str(row["link"]).strip()

        talk_date = self._parse_date(date_raw)
        views = Views(self._parse_count("views", row["views"]))
        likes = Likes(self._parse_count("likes", row["likes"]))
        link = self._parse_link(link_raw)

        speaker = Speaker.create(author)
        talk = Talk.create(
            title=title,
            speaker=speaker,
            date=talk_date,
            views=views,
            likes=likes,
            link=link,
        )
        return ImportRecord(speaker=speaker, talk=talk)

    @staticmethod
    def _parse_date(raw: str) -> TalkDate:
        try:
            return TalkDate.parse(raw)
        except ValueError as exc:
            raise _FieldFormatError(
                "date",
                raw,
                f"Invalid date format: {raw}. {DATE_FORMAT_HINT}",
            ) from exc

    def _parse_count(self, column: str, raw: Any) -> int:
        parsed = self._validator.parse_numeric(raw)
        if parsed is None:
            raise _FieldFormatError(column, str(raw), f"Invalid numeric value: '{raw}'")
        return parsed

    @staticmethod
    def _parse_link(raw: str) -> Link:
        try:
            return Link(raw)
        except ValueError as exc:
            raise _FieldFormatError("link", raw, f"Invalid URL format: {raw}") from exc
