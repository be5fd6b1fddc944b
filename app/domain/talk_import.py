"""
app/domain/talk_import.py

Domain models used by the talk CSV import flow.
"""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable


class ErrorKind(str, Enum):
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FORMAT = "INVALID_FORMAT"
    GARBAGE_DATA = "GARBAGE_DATA"
    NEGATIVE_VALUE = "NEGATIVE_VALUE"
    OVERFLOW = "OVERFLOW"
    CONSTRAINT_VIOLATION = "CONSTRAINT_VIOLATION"


class ImportStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    PARTIALLY_COMPLETED = "PARTIALLY_COMPLETED"


TERMINAL_STATUSES = frozenset(
    {ImportStatus.COMPLETED, ImportStatus.FAILED, ImportStatus.PARTIALLY_COMPLETED}
)


@dataclass(frozen=True)
class RowValidationError:
    """
    One CSV row validation error detail.
    """

    row_number: int
    field: str
    value: str | None
    message: str
    kind: ErrorKind

    @classmethod
    def missing_field(cls, row_number: int, column: str) -> "RowValidationError":
        return cls(row_number, column, None, "Required field is missing or empty", ErrorKind.MISSING_FIELD)

    @classmethod
    def garbage_data(cls, row_number: int, column: str, value: str) -> "RowValidationError":
        return cls(
            row_number,
            column,
            value,
            f"Contains non-numeric characters: '{value}'",
            ErrorKind.GARBAGE_DATA,
        )

    @classmethod
    def negative_value(cls, row_number: int, column: str, value: str) -> "RowValidationError":
        return cls(row_number, column, value, "Negative values are not allowed", ErrorKind.NEGATIVE_VALUE)

    @classmethod
    def overflow(cls, row_number: int, column: str, value: str) -> "RowValidationError":
        return cls(
            row_number,
            column,
            value,
            "Number is too large (exceeds 64-bit integer range)",
            ErrorKind.OVERFLOW,
        )

    @classmethod
    def invalid_format(
        cls,
        row_number: int,
        column: str,
        value: str | None,
        message: str,
    ) -> "RowValidationError":
        return cls(row_number, column, value, message, ErrorKind.INVALID_FORMAT)

    def to_dict(self) -> dict[str, Any]:
        return {
            "row_number": self.row_number,
            "field": self.field,
            "value": self.value,
            "message": self.message,
            "kind": self.kind.value,
        }


class ImportStatistics:
    """
    Thread-safe counters and per-row validation errors for one import run.

    Every processed row increments ``total`` and exactly one of
    ``successful``, ``failed`` or ``skipped``.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._total = 0
        self._successful = 0
        self._failed = 0
        self._skipped = 0
        self._errors_by_row: dict[int, list[RowValidationError]] = {}

    def increment_total(self) -> int:
        with self._lock:
            self._total += 1
            return self._total

    def increment_successful(self) -> int:
        with self._lock:
            self._successful += 1
            return self._successful

    def increment_failed(self) -> int:
        with self._lock:
            self._failed += 1
            return self._failed

    def increment_skipped(self) -> int:
        with self._lock:
            self._skipped += 1
            return self._skipped

    def add_validation_errors(self, row_number: int, errors: Iterable[RowValidationError]) -> None:
        errors = list(errors)
        if not errors:
            return
        with self._lock:
            self._errors_by_row.setdefault(row_number, []).extend(errors)

    @property
    def total(self) -> int:
        return self._total

    @property
    def successful(self) -> int:
        return self._successful

    @property
    def failed(self) -> int:
        return self._failed

    @property
    def skipped(self) -> int:
        return self._skipped

    @property
    def failed_row_count(self) -> int:
        with self._lock:
            return len(self._errors_by_row)

    @property
    def validation_error_count(self) -> int:
        with self._lock:
            return sum(len(errors) for errors in self._errors_by_row.values())

    @property
    def success_rate(self) -> float:
        """
        Percentage of processed rows that were inserted (0.0 when nothing ran).
        """

        with self._lock:
            if self._total == 0:
                return 0.0
            return self._successful * 100.0 / self._total

    def all_validation_errors(self) -> list[RowValidationError]:
        """
        Flatten recorded errors ordered by row number.
        """

        with self._lock:
            return [
                error
                for row_number in sorted(self._errors_by_row)
                for error in self._errors_by_row[row_number]
            ]

    def error_counts_by_kind(self) -> dict[str, int]:
        counts = Counter(error.kind.value for error in self.all_validation_errors())
        return dict(sorted(counts.items()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "successful": self.successful,
            "failed": self.failed,
            "skipped": self.skipped,
            "validation_error_count": self.validation_error_count,
            "success_rate": round(self.success_rate, 2),
        }


def derive_status(statistics: ImportStatistics) -> ImportStatus:
    """
    Terminal status of a run that finished without a structural failure.

    Any failed row makes the run partial; an empty source completes.
    """

    if statistics.total == 0 or statistics.failed == 0:
        return ImportStatus.COMPLETED
    return ImportStatus.PARTIALLY_COMPLETED


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ImportRun:
    """
    Snapshot of one import run as tracked by the registry.
    """

    run_id: str
    status: ImportStatus
    started_at: datetime
    statistics: ImportStatistics
    completed_at: datetime | None = None
    errors: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def pending(cls, run_id: str, *, now: datetime | None = None) -> "ImportRun":
        return cls(
            run_id=run_id,
            status=ImportStatus.PENDING,
            started_at=now or _utcnow(),
            statistics=ImportStatistics(),
        )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def duration_seconds(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def with_status(self, status: ImportStatus, **changes: Any) -> "ImportRun":
        return replace(self, status=status, **changes)
