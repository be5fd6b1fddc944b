"""
app/parsing/csv_stream.py

Streaming, header-driven reader for talk CSV files.

Rows are produced lazily so arbitrarily large files can be imported with
bounded memory. Column order is irrelevant; columns are matched by header
name after trimming.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, BinaryIO, Iterator

from app.mappers.talk_mapper import TalkCsvMapper, ValidationResult

logger = logging.getLogger(__name__)


class CSVStreamError(RuntimeError):
    """
    Raised when the CSV source itself cannot be read (structural failure).
    """


class TalkCsvParser:
    """
    Turns a binary CSV source into a lazy sequence of ``ValidationResult``.
    """

    def __init__(self, *, mapper: TalkCsvMapper | None = None, encoding: str = "utf-8-sig") -> None:
        self._mapper = mapper or TalkCsvMapper()
        self._encoding = encoding

    def parse(self, source: BinaryIO) -> Iterator[ValidationResult]:
        """
        Yield one result per non-blank data row, numbered from 1.

        The source is closed once the iterator is exhausted, closed early or
        fails. Decoding, CSV syntax and I/O failures raise ``CSVStreamError``.
        """

        text_stream = io.TextIOWrapper(source, encoding=self._encoding, newline="")
        try:
            reader = csv.DictReader(text_stream)
            if reader.fieldnames is None:
                logger.info("CSV source has no header row; nothing to import.")
                return
            reader.fieldnames = [name.strip() for name in reader.fieldnames]

            row_number = 0
            for raw_row in reader:
                if self._is_blank_row(raw_row):
                    continue
                row_number += 1
                yield self._mapper.map_row(self._normalize_row(raw_row), row_number)
        except UnicodeDecodeError as exc:
            raise CSVStreamError("CSV must be UTF-8 encoded.") from exc
        except csv.Error as exc:
            raise CSVStreamError(f"Invalid CSV format: {exc}") from exc
        except OSError as exc:
            raise CSVStreamError(f"Failed to read CSV source: {exc}") from exc
        finally:
            text_stream.close()

    @staticmethod
    def _normalize_row(raw_row: dict[Any, Any]) -> dict[str, str | None]:
        # Values past the last header land under the ``None`` key; drop them.
        return {
            key: value.strip() if isinstance(value, str) else None
            for key, value in raw_row.items()
            if key is not None
        }

    @staticmethod
    def _is_blank_row(raw_row: dict[Any, Any]) -> bool:
        for value in raw_row.values():
            if isinstance(value, list):
                if any(str(item).strip() for item in value):
                    return False
            elif value is not None and str(value).strip():
                return False
        return True
