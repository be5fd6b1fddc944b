"""
app/services/talk_import_service.py

Import coordinator: streams a talk CSV, resolves speakers, deduplicates
talks and persists them in batches inside one transaction per run.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from contextlib import AbstractContextManager, closing
from functools import lru_cache
from typing import BinaryIO

from app.config import get_import_settings
from app.domain.talk import Speaker, Talk
from app.domain.talk_import import ImportStatistics
from app.mappers.talk_mapper import ImportRecord, ValidationResult
from app.parsing.csv_stream import CSVStreamError, TalkCsvParser
from app.repositories.sqlalchemy_talk_store import transactional_store
from app.repositories.talk_store import TalkStore

logger = logging.getLogger(__name__)

StoreScope = Callable[[], AbstractContextManager[TalkStore]]


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ImportStreamError(RuntimeError):
    """
    Raised when the import source cannot be consumed; the run is rolled back.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class _RunState:
    """
    Mutable state scoped to a single import run.
    """

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        self.statistics = ImportStatistics()
        self.speakers_by_name: dict[str, Speaker] = {}
        self.batch: list[Talk] = []
        self.queued_keys: set[tuple[str, uuid.UUID]] = set()
        self.flushed = 0


class TalkImportService:
    """
    Coordinates parsing, speaker resolution, deduplication and persistence.

    Each run opens its own transaction through ``store_scope`` and never
    joins a caller's. Per-row problems are recorded and skipped; a failure
    to read the source (or to persist) rolls the whole run back.
    """

    def __init__(
        self,
        *,
        store_scope: StoreScope,
        batch_size: int = 1000,
        log_validation_errors: bool = True,
        parser: TalkCsvParser | None = None,
    ) -> None:
        self._store_scope = store_scope
        self._batch_size = max(1, batch_size)
        self._log_validation_errors = log_validation_errors
        self._parser = parser or TalkCsvParser()

    def run(self, source: BinaryIO, run_id: str) -> ImportStatistics:
        """
        Import every row of ``source`` and return the run's statistics.

        Args:
            source: Binary CSV stream; closed once consumed.
            run_id: Identifier used in log lines.

        Raises:
            ImportStreamError: the source could not be read. Nothing from the
                run is persisted.
        """

        state = _RunState(run_id)
        try:
            with self._store_scope() as store:
                with closing(self._parser.parse(source)) as results:
                    for result in results:
                        self._process_result(store, state, result)
                if state.batch:
                    self._flush(store, state)
        except CSVStreamError as exc:
            logger.error(
                "Import run %s aborted after %s row(s); rolled back: %s",
                run_id,
                state.statistics.total,
                exc,
            )
            raise ImportStreamError(str(exc)) from exc

        self._log_summary(state)
        return state.statistics

    # ------------------------------------------------------------------
    # Per-row processing
    # ------------------------------------------------------------------

    def _process_result(self, store: TalkStore, state: _RunState, result: ValidationResult) -> None:
        statistics = state.statistics
        statistics.increment_total()

        if result.has_errors or result.record is None:
            statistics.increment_failed()
            statistics.add_validation_errors(result.row_number, result.errors)
            if self._log_validation_errors:
                for error in result.errors:
                    logger.warning(
                        "Row %s rejected field=%s kind=%s: %s",
                        error.row_number,
                        error.field,
                        error.kind.value,
                        error.message,
                    )
            return

        self._process_record(store, state, result.record)

    def _process_record(self, store: TalkStore, state: _RunState, record: ImportRecord) -> None:
        speaker = self._resolve_speaker(store, state, record.speaker.name)
        parsed = record.talk
        talk = Talk.create(
            title=parsed.title,
            speaker=speaker,
            date=parsed.date,
            views=parsed.views,
            likes=parsed.likes,
            link=parsed.link,
        )
        key = talk.business_key

        if key in state.queued_keys or store.talk_exists(*key):
            state.statistics.increment_skipped()
            return

        state.batch.append(talk)
        state.queued_keys.add(key)
        state.statistics.increment_successful()

        if len(state.batch) >= self._batch_size:
            self._flush(store, state)

    @staticmethod
    def _resolve_speaker(store: TalkStore, state: _RunState, name: str) -> Speaker:
        # Names that differ only by case resolve to the first stored spelling.
        cache_key = name.lower()
        speaker = state.speakers_by_name.get(cache_key)
        if speaker is not None:
            return speaker

        speaker = store.find_speaker_by_name(name)
        if speaker is None:
            speaker = store.save_speaker(Speaker.create(name))
            logger.debug("Created speaker %r id=%s", name, speaker.id)
        state.speakers_by_name[cache_key] = speaker
        return speaker

    def _flush(self, store: TalkStore, state: _RunState) -> None:
        inserted = store.save_talks_batch(list(state.batch))
        state.flushed += len(state.batch)
        if inserted != len(state.batch):
            logger.warning(
                "Import run %s: %s of %s batched talk(s) already existed at insert time.",
                state.run_id,
                len(state.batch) - inserted,
                len(state.batch),
            )
        state.batch.clear()
        state.queued_keys.clear()
        logger.info(
            "Import run %s progress: %s row(s) processed, %s talk(s) flushed.",
            state.run_id,
            state.statistics.total,
            state.flushed,
        )

    def _log_summary(self, state: _RunState) -> None:
        statistics = state.statistics
        logger.info(
            "Import run %s finished total=%s successful=%s failed=%s skipped=%s",
            state.run_id,
            statistics.total,
            statistics.successful,
            statistics.failed,
            statistics.skipped,
        )
        breakdown = statistics.error_counts_by_kind()
        if breakdown:
            logger.info("Import run %s validation errors by kind: %s", state.run_id, breakdown)


@lru_cache(maxsize=1)
def get_talk_import_service() -> TalkImportService:
    """
    Return the process-wide import service bound to the shared session factory.
    """

    from db.session import SessionLocal

    settings = get_import_settings()
    return TalkImportService(
        store_scope=lambda: transactional_store(SessionLocal),
        batch_size=settings.batch_size,
        log_validation_errors=settings.log_validation_errors,
    )
