"""
app/services/import_registry.py

In-process registry of import runs keyed by run id.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from app.config import get_import_settings
from app.domain.talk_import import (
    ImportRun,
    ImportStatistics,
    ImportStatus,
    derive_status,
)

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ImportRegistry:
    """
    Tracks every run's lifecycle: PENDING -> PROCESSING -> terminal.

    Runs are kept until ``evict_expired`` drops terminal runs older than the
    configured TTL. A TTL of 0 keeps runs for the life of the process.
    """

    def __init__(
        self,
        *,
        ttl_seconds: int = 0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._ttl = timedelta(seconds=max(0, ttl_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._runs: dict[str, ImportRun] = {}

    def register(self, run_id: str) -> ImportRun:
        """
        Record a newly accepted run as PENDING.
        """

        run = ImportRun.pending(run_id, now=self._clock())
        with self._lock:
            self._runs[run_id] = run
        return run

    def start(self, run_id: str) -> ImportRun:
        """
        Move a run to PROCESSING, registering it first when unknown.
        """

        with self._lock:
            run = self._runs.get(run_id) or ImportRun.pending(run_id, now=self._clock())
            run = run.with_status(ImportStatus.PROCESSING)
            self._runs[run_id] = run
        logger.info("Import run started id=%s", run_id)
        return run

    def complete(self, run_id: str, statistics: ImportStatistics) -> ImportRun:
        """
        Finish a run that processed its whole source.
        """

        status = derive_status(statistics)
        return self._finish(run_id, status=status, statistics=statistics, errors=())

    def fail(self, run_id: str, message: str) -> ImportRun:
        """
        Mark a run FAILED. Nothing from it was persisted, so counters reset.
        """

        return self._finish(
            run_id,
            status=ImportStatus.FAILED,
            statistics=ImportStatistics(),
            errors=(message,),
        )

    def get(self, run_id: str) -> ImportRun | None:
        with self._lock:
            return self._runs.get(run_id)

    def list_runs(self) -> list[ImportRun]:
        """
        All tracked runs, most recently started first.
        """

        with self._lock:
            runs = list(self._runs.values())
        return sorted(runs, key=lambda run: run.started_at, reverse=True)

    def evict_expired(self, now: datetime | None = None) -> int:
        """
        Drop terminal runs that completed more than TTL ago; returns the count.
        """

        if not self._ttl:
            return 0
        cutoff = (now or self._clock()) - self._ttl
        with self._lock:
            expired = [
                run_id
                for run_id, run in self._runs.items()
                if run.is_terminal and run.completed_at is not None and run.completed_at < cutoff
            ]
            for run_id in expired:
                del self._runs[run_id]
        if expired:
            logger.info("Evicted %s expired import run(s).", len(expired))
        return len(expired)

    def _finish(
        self,
        run_id: str,
        *,
        status: ImportStatus,
        statistics: ImportStatistics,
        errors: tuple[str, ...],
    ) -> ImportRun:
        now = self._clock()
        with self._lock:
            run = self._runs.get(run_id) or ImportRun.pending(run_id, now=now)
            run = run.with_status(
                status,
                statistics=statistics,
                completed_at=now,
                errors=errors,
            )
            self._runs[run_id] = run
        return run


@lru_cache(maxsize=1)
def get_import_registry() -> ImportRegistry:
    return ImportRegistry(ttl_seconds=get_import_settings().registry_ttl_seconds)
