"""
app/services/import_orchestrator_service.py

Orchestrator for async talk import dispatch and run lifecycle tracking.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, BinaryIO, Protocol

from app.cache.result_cache import MUTATION_EVICTED_BUCKETS, ResultCache, get_result_cache
from app.domain.talk_import import ImportRun, RowValidationError
from app.logging_utils import log_event
from app.services.executors import get_import_executor
from app.services.import_registry import ImportRegistry, get_import_registry
from app.services.talk_import_service import TalkImportService, get_talk_import_service

logger = logging.getLogger(__name__)

_MAX_ERROR_MESSAGE_LENGTH = 2000
_COPY_CHUNK_SIZE = 1024 * 1024


class ImportTaskExecutor(Protocol):
    def submit(self, task: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        ...


@dataclass(frozen=True)
class ValidationErrorReport:
    """
    Validation errors recorded for one run, ordered by row number.
    """

    import_id: str
    total_errors: int
    failed_row_count: int
    errors: list[RowValidationError]


class ImportOrchestratorService:
    """
    Accepts uploads, runs imports on the import pool and tracks their status.

    A background run never lets an exception escape: it always ends in a
    terminal status in the registry.
    """

    def __init__(
        self,
        *,
        import_service: TalkImportService,
        registry: ImportRegistry,
        executor: ImportTaskExecutor,
        cache: ResultCache | None = None,
    ) -> None:
        self._import_service = import_service
        self._registry = registry
        self._executor = executor
        self._cache = cache

    def submit_import(self, source: BinaryIO, *, file_name: str | None = None) -> ImportRun:
        """
        Spool ``source`` to a temporary file and schedule the import.

        Returns the PENDING run; poll ``get_run_status`` with its id.
        """

        self._registry.evict_expired()
        temp_file_path, file_size = self._persist_temp_upload(source, file_name=file_name)
        run_id = str(uuid.uuid4())
        run = self._registry.register(run_id)
        log_event(
            logger,
            logging.INFO,
            "import_submitted",
            import_id=run_id,
            file_name=file_name,
            file_size_bytes=file_size,
        )

        try:
            self._executor.submit(self._run_import_job, run_id, temp_file_path)
        except Exception:
            self._delete_file_quietly(temp_file_path)
            self._registry.fail(run_id, "Failed to schedule import job.")
            raise
        return run

    def run_import_file(self, path: str) -> ImportRun:
        """
        Import a local file synchronously in the calling thread.
        """

        run_id = str(uuid.uuid4())
        self._registry.register(run_id)
        return self._execute(run_id, path)

    def get_run_status(self, run_id: str) -> ImportRun | None:
        return self._registry.get(run_id)

    def list_runs(self) -> list[ImportRun]:
        return self._registry.list_runs()

    def get_validation_errors(self, run_id: str) -> ValidationErrorReport | None:
        run = self._registry.get(run_id)
        if run is None:
            return None
        statistics = run.statistics
        errors = statistics.all_validation_errors()
        return ValidationErrorReport(
            import_id=run_id,
            total_errors=len(errors),
            failed_row_count=statistics.failed_row_count,
            errors=errors,
        )

    # ------------------------------------------------------------------
    # Background execution
    # ------------------------------------------------------------------

    def _run_import_job(self, run_id: str, temp_file_path: str) -> ImportRun:
        try:
            return self._execute(run_id, temp_file_path)
        finally:
            self._delete_file_quietly(temp_file_path)

    def _execute(self, run_id: str, path: str) -> ImportRun:
        self._registry.start(run_id)
        try:
            with open(path, "rb") as source:
                statistics = self._import_service.run(source, run_id)
        except Exception as exc:
            return self._mark_run_failed(run_id, exc)

        run = self._registry.complete(run_id, statistics)
        if statistics.successful > 0 and self._cache is not None:
            self._cache.evict_all(MUTATION_EVICTED_BUCKETS)
        log_event(
            logger,
            logging.INFO,
            "import_finished",
            import_id=run_id,
            status=run.status.value,
            duration_seconds=run.duration_seconds,
            **statistics.to_dict(),
        )
        return run

    def _mark_run_failed(self, run_id: str, exc: Exception) -> ImportRun:
        error_message = f"{type(exc).__name__}: {exc}"[:_MAX_ERROR_MESSAGE_LENGTH]
        logger.exception("Import run failed id=%s error=%s", run_id, error_message)
        run = self._registry.fail(run_id, error_message)
        log_event(logger, logging.ERROR, "import_failed", import_id=run_id, error=error_message)
        return run

    # ------------------------------------------------------------------
    # Temp file handling
    # ------------------------------------------------------------------

    @staticmethod
    def _persist_temp_upload(source: BinaryIO, *, file_name: str | None) -> tuple[str, int]:
        _, ext = os.path.splitext(file_name or "")
        suffix = ext if ext else ".csv"
        if hasattr(source, "seek"):
            source.seek(0)

        with tempfile.NamedTemporaryFile(delete=False, prefix="talk_import_", suffix=suffix) as temp_file:
            shutil.copyfileobj(source, temp_file, _COPY_CHUNK_SIZE)
            temp_path = temp_file.name
            file_size = temp_file.tell()
        return temp_path, file_size

    @staticmethod
    def _delete_file_quietly(file_path: str) -> None:
        try:
            os.remove(file_path)
        except OSError:
            return


@lru_cache(maxsize=1)
def get_import_orchestrator_service() -> ImportOrchestratorService:
    return ImportOrchestratorService(
        import_service=get_talk_import_service(),
        registry=get_import_registry(),
        executor=get_import_executor(),
        cache=get_result_cache(),
    )
