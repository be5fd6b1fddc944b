"""
app/cache/result_cache.py

Named-bucket cache for analysis and list results.

Entries live until explicitly evicted (any catalogue mutation), cleared by
the nightly refresh job, or optionally expire after a TTL.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from app.config import get_cache_settings

logger = logging.getLogger(__name__)

TOP_SPEAKERS = "top_speakers"
MOST_INFLUENTIAL_PER_YEAR = "most_influential_per_year"
SPEAKER_ANALYSIS = "speaker_analysis"
ALL_SPEAKERS = "all_speakers"
ALL_TALKS = "all_talks"

ANALYSIS_BUCKETS: tuple[str, ...] = (TOP_SPEAKERS, MOST_INFLUENTIAL_PER_YEAR, SPEAKER_ANALYSIS)
LIST_BUCKETS: tuple[str, ...] = (ALL_SPEAKERS, ALL_TALKS)

# Buckets invalidated by any speaker/talk write, including imports.
MUTATION_EVICTED_BUCKETS: tuple[str, ...] = ANALYSIS_BUCKETS + LIST_BUCKETS


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    expires_at: float | None = None

    def is_expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class ResultCache(Protocol):
    def get(self, bucket: str, key: Hashable) -> CacheEntry | None:
        ...

    def put(self, bucket: str, key: Hashable, value: Any) -> None:
        ...

    def get_or_compute(self, bucket: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        ...

    def evict_all(self, buckets: Iterable[str]) -> None:
        ...

    def clear(self) -> None:
        ...

    def size(self, bucket: str | None = None) -> int:
        ...


class InMemoryResultCache:
    """
    Lock-guarded, process-local ``ResultCache``.

    A stored ``None`` is a real entry (e.g. "speaker has no talks"); a miss
    is reported by ``get`` returning ``None`` instead of a ``CacheEntry``.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = max(0.0, float(ttl_seconds))
        self._clock = clock
        self._lock = threading.Lock()
        self._buckets: dict[str, dict[Hashable, CacheEntry]] = {}

    def get(self, bucket: str, key: Hashable) -> CacheEntry | None:
        with self._lock:
            entries = self._buckets.get(bucket)
            if not entries:
                return None
            entry = entries.get(key)
            if entry is None:
                return None
            if entry.is_expired(self._clock()):
                del entries[key]
                return None
            return entry

    def put(self, bucket: str, key: Hashable, value: Any) -> None:
        expires_at = self._clock() + self._ttl if self._ttl else None
        with self._lock:
            self._buckets.setdefault(bucket, {})[key] = CacheEntry(value=value, expires_at=expires_at)

    def get_or_compute(self, bucket: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        """
        Return the cached value or compute, store and return it.

        Concurrent misses may compute twice; the last writer wins.
        """

        entry = self.get(bucket, key)
        if entry is not None:
            return entry.value
        value = loader()
        self.put(bucket, key, value)
        return value

    def evict_all(self, buckets: Iterable[str]) -> None:
        names = tuple(buckets)
        with self._lock:
            for name in names:
                self._buckets.pop(name, None)
        logger.debug("Evicted cache buckets: %s", ", ".join(names))

    def clear(self) -> None:
        with self._lock:
            self._buckets.clear()
        logger.info("Result cache cleared.")

    def size(self, bucket: str | None = None) -> int:
        with self._lock:
            if bucket is not None:
                return len(self._buckets.get(bucket, {}))
            return sum(len(entries) for entries in self._buckets.values())


@lru_cache(maxsize=1)
def get_result_cache() -> InMemoryResultCache:
    """
    Process-wide cache shared by analysis, catalogue services and jobs.
    """

    return InMemoryResultCache(ttl_seconds=get_cache_settings().ttl_seconds)
