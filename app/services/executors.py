"""
app/services/executors.py

Bounded worker pools for import runs and analysis fan-out.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from functools import lru_cache
from typing import Any, TypeVar

from app.config import get_analysis_settings, get_import_settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BoundedExecutor:
    """
    Thread pool with a bounded backlog and a caller-runs saturation policy.

    At most ``max_workers + queue_size`` tasks are in flight. When the pool
    is saturated the task runs synchronously in the submitting thread, which
    throttles producers instead of dropping work.
    """

    def __init__(self, *, max_workers: int, queue_size: int, thread_name_prefix: str) -> None:
        self._name = thread_name_prefix
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix=thread_name_prefix,
        )
        self._slots = threading.BoundedSemaphore(max(1, max_workers) + max(0, queue_size))

    def submit(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        if not self._slots.acquire(blocking=False):
            logger.warning("Executor %s saturated; running task in caller thread.", self._name)
            return self._run_in_caller(fn, *args, **kwargs)

        try:
            future = self._executor.submit(fn, *args, **kwargs)
        except Exception:
            self._slots.release()
            raise
        future.add_done_callback(self._release_slot)
        return future

    def shutdown(self, *, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _release_slot(self, _future: Future[Any]) -> None:
        self._slots.release()

    @staticmethod
    def _run_in_caller(fn: Callable[..., T], *args: Any, **kwargs: Any) -> Future[T]:
        future: Future[T] = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args, **kwargs)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future


@lru_cache(maxsize=1)
def get_import_executor() -> BoundedExecutor:
    settings = get_import_settings()
    return BoundedExecutor(
        max_workers=settings.worker_count,
        queue_size=settings.queue_size,
        thread_name_prefix="talk-import",
    )


@lru_cache(maxsize=1)
def get_analysis_executor() -> BoundedExecutor:
    settings = get_analysis_settings()
    return BoundedExecutor(
        max_workers=settings.worker_count,
        queue_size=settings.queue_size,
        thread_name_prefix="influence-analysis",
    )


def shutdown_executors() -> None:
    """
    Stop both pools if they were ever created.
    """

    for getter in (get_import_executor, get_analysis_executor):
        if getter.cache_info().currsize:
            getter().shutdown(wait=False)
            getter.cache_clear()
