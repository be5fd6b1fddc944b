"""
app/cache package marker.
"""

from app.cache.result_cache import (
    ALL_SPEAKERS,
    ALL_TALKS,
    ANALYSIS_BUCKETS,
    LIST_BUCKETS,
    MOST_INFLUENTIAL_PER_YEAR,
    MUTATION_EVICTED_BUCKETS,
    SPEAKER_ANALYSIS,
    TOP_SPEAKERS,
    CacheEntry,
    InMemoryResultCache,
    ResultCache,
    get_result_cache,
)

__all__ = [
    "ALL_SPEAKERS",
    "ALL_TALKS",
    "ANALYSIS_BUCKETS",
    "LIST_BUCKETS",
    "MOST_INFLUENTIAL_PER_YEAR",
    "MUTATION_EVICTED_BUCKETS",
    "SPEAKER_ANALYSIS",
    "TOP_SPEAKERS",
    "CacheEntry",
    "InMemoryResultCache",
    "ResultCache",
    "get_result_cache",
]
