"""
app/services/influence_analysis_service.py

Influence analysis over the talk catalogue.

Speakers are ranked by the sum of their talks' influence scores
(``views * 0.7 + likes * 0.3``). Per-speaker summaries are computed on the
analysis worker pool and joined before anything is sorted or returned.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future
from contextlib import AbstractContextManager
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

from app.cache.result_cache import (
    MOST_INFLUENTIAL_PER_YEAR,
    SPEAKER_ANALYSIS,
    TOP_SPEAKERS,
    ResultCache,
    get_result_cache,
)
from app.domain.talk import Talk
from app.repositories.sqlalchemy_talk_store import transactional_store
from app.repositories.talk_store import TalkStore
from app.services.executors import get_analysis_executor

logger = logging.getLogger(__name__)

StoreScope = Callable[[], AbstractContextManager[TalkStore]]


class AnalysisTaskExecutor(Protocol):
    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future[Any]:
        ...


@dataclass(frozen=True)
class SpeakerInfluenceSummary:
    """
    Aggregate influence figures for one speaker.
    """

    speaker: str
    talk_count: int
    total_views: int
    total_likes: int
    average_influence_score: float
    total_influence_score: float
    first_talk_year: int
    last_talk_year: int


def summarize_speaker(speaker_name: str, talks: Sequence[Talk]) -> SpeakerInfluenceSummary:
    """
    Summarize ``talks`` in a single pass.

    An empty sequence yields zero counts, 0.0 scores and years of 0.
    """

    total_views = 0
    total_likes = 0
    total_score = 0.0
    first_year: int | None = None
    last_year: int | None = None
    for talk in talks:
        total_views += talk.views.value
        total_likes += talk.likes.value
        total_score += talk.influence_score
        year = talk.date.year
        first_year = year if first_year is None else min(first_year, year)
        last_year = year if last_year is None else max(last_year, year)

    talk_count = len(talks)
    return SpeakerInfluenceSummary(
        speaker=speaker_name,
        talk_count=talk_count,
        total_views=total_views,
        total_likes=total_likes,
        average_influence_score=total_score / talk_count if talk_count else 0.0,
        total_influence_score=total_score,
        first_talk_year=first_year or 0,
        last_talk_year=last_year or 0,
    )


class InfluenceAnalysisService:
    """
    Read-only analysis engine. Results are not cached here; see
    ``CachedInfluenceAnalysis``.
    """

    def __init__(self, *, store_scope: StoreScope, executor: AnalysisTaskExecutor) -> None:
        self._store_scope = store_scope
        self._executor = executor

    def top_influential_speakers(self, limit: int) -> list[SpeakerInfluenceSummary]:
        """
        Speakers ordered by total influence, highest first.

        Ties keep the order in which speakers were first encountered.

        Raises:
            ValueError: ``limit`` is smaller than 1.
        """

        if limit < 1:
            raise ValueError("limit must be at least 1.")

        groups: dict[str, list[Talk]] = {}
        with self._store_scope() as store:
            for talk in store.stream_all_talks():
                groups.setdefault(talk.speaker.name, []).append(talk)

        futures = [
            self._executor.submit(summarize_speaker, name, talks)
            for name, talks in groups.items()
        ]
        summaries = [future.result() for future in futures]
        summaries.sort(key=lambda summary: summary.total_influence_score, reverse=True)
        logger.debug("Ranked %s speaker(s); returning top %s.", len(summaries), limit)
        return summaries[:limit]

    def most_influential_talk_per_year(self) -> dict[int, Talk]:
        """
        Highest-scoring talk for every year present, keyed and ordered by year.

        On equal scores the first talk encountered wins.
        """

        best: dict[int, Talk] = {}
        with self._store_scope() as store:
            for talk in store.stream_all_talks():
                current = best.get(talk.date.year)
                if current is None or talk.influence_score > current.influence_score:
                    best[talk.date.year] = talk
        return dict(sorted(best.items()))

    def analyze_speaker(self, speaker_name: str) -> SpeakerInfluenceSummary | None:
        """
        Summary for one speaker (name matched ignoring case), or None when
        the speaker has no talks.
        """

        with self._store_scope() as store:
            talks = store.find_talks_by_speaker_name(speaker_name)
        if not talks:
            return None
        return summarize_speaker(talks[0].speaker.name, talks)


class CachedInfluenceAnalysis:
    """
    Serves analysis queries from the result cache, computing on miss.
    """

    def __init__(self, *, engine: InfluenceAnalysisService, cache: ResultCache) -> None:
        self._engine = engine
        self._cache = cache

    def top_speakers(self, limit: int) -> list[SpeakerInfluenceSummary]:
        if limit < 1:
            raise ValueError("limit must be at least 1.")
        value = self._cache.get_or_compute(
            TOP_SPEAKERS,
            limit,
            lambda: tuple(self._engine.top_influential_speakers(limit)),
        )
        return list(value)

    def most_influential_per_year(self) -> dict[int, Talk]:
        value = self._cache.get_or_compute(
            MOST_INFLUENTIAL_PER_YEAR,
            None,
            self._engine.most_influential_talk_per_year,
        )
        return dict(value)

    def analyze_speaker(self, speaker_name: str) -> SpeakerInfluenceSummary | None:
        key = speaker_name.strip().lower()
        return self._cache.get_or_compute(
            SPEAKER_ANALYSIS,
            key,
            lambda: self._engine.analyze_speaker(speaker_name),
        )

    def refresh(self) -> None:
        self._cache.clear()


@lru_cache(maxsize=1)
def get_influence_analysis() -> CachedInfluenceAnalysis:
    from db.session import SessionLocal

    engine = InfluenceAnalysisService(
        store_scope=lambda: transactional_store(SessionLocal),
        executor=get_analysis_executor(),
    )
    return CachedInfluenceAnalysis(engine=engine, cache=get_result_cache())
