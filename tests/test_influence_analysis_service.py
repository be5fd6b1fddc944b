"""
tests/test_influence_analysis_service.py

Pytest tests for the influence analysis engine and its cached facade.

Coverage
--------
- Per-speaker summaries (including the empty case)
- Top speaker ranking, limit handling and stable tie order
- Most influential talk per year (first talk wins ties)
- Speaker lookup ignoring case
- Cache hits, per-argument keys, cached misses and refresh
- End-to-end ranking through the SQLAlchemy store
"""

from __future__ import annotations

from typing import Any

import pytest

from app.cache.result_cache import InMemoryResultCache
from app.domain.talk import Speaker
from app.services.influence_analysis_service import (
    CachedInfluenceAnalysis,
    InfluenceAnalysisService,
    summarize_speaker,
)
from app.services.talk_import_service import TalkImportService


@pytest.fixture()
def speakers() -> dict[str, Speaker]:
    return {name: Speaker.create(name) for name in ("Alice", "Bob", "Carol", "Dave")}


@pytest.fixture()
def seeded_store(memory_store, talk_factory, speakers):
    alice, bob, carol, dave = (speakers[name] for name in ("Alice", "Bob", "Carol", "Dave"))
    memory_store.add(talk_factory("A1", alice, views=1000, likes=100, year=2019))
    memory_store.add(talk_factory("B1", bob, views=5000, likes=0, year=2019))
    memory_store.add(talk_factory("A2", alice, views=2000, likes=200, year=2020))
    memory_store.add(talk_factory("C1", carol, views=10, likes=10, year=2020))
    # Dave ties Carol on total influence and is encountered after her.
    memory_store.add(talk_factory("D1", dave, views=10, likes=10, year=2021))
    return memory_store


@pytest.fixture()
def analysis_engine(memory_store_scope, inline_executor, seeded_store) -> InfluenceAnalysisService:
    return InfluenceAnalysisService(store_scope=memory_store_scope, executor=inline_executor)


class _CountingEngine:
    def __init__(self, wrapped: InfluenceAnalysisService) -> None:
        self._wrapped = wrapped
        self.calls: list[tuple[str, Any]] = []

    def top_influential_speakers(self, limit: int):
        self.calls.append(("top", limit))
        return self._wrapped.top_influential_speakers(limit)

    def most_influential_talk_per_year(self):
        self.calls.append(("per_year", None))
        return self._wrapped.most_influential_talk_per_year()

    def analyze_speaker(self, name: str):
        self.calls.append(("speaker", name))
        return self._wrapped.analyze_speaker(name)


class TestSummarizeSpeaker:
    def test_aggregates_talks(self, seeded_store) -> None:
        alice_talks = seeded_store.find_talks_by_speaker_name("Alice")

        summary = summarize_speaker("Alice", alice_talks)

        assert summary.talk_count == 2
        assert summary.total_views == 3000
        assert summary.total_likes == 300
        assert summary.total_influence_score == pytest.approx(3000 * 0.7 + 300 * 0.3)
        assert summary.average_influence_score == pytest.approx((3000 * 0.7 + 300 * 0.3) / 2)
        assert (summary.first_talk_year, summary.last_talk_year) == (2019, 2020)

    def test_empty_talks_give_zero_summary(self) -> None:
        summary = summarize_speaker("Nobody", [])

        assert summary.talk_count == 0
        assert summary.average_influence_score == 0.0
        assert summary.total_influence_score == 0.0
        assert (summary.first_talk_year, summary.last_talk_year) == (0, 0)


class TestTopInfluentialSpeakers:
    def test_ranks_by_total_influence(self, analysis_engine: InfluenceAnalysisService) -> None:
        ranking = analysis_engine.top_influential_speakers(10)

        assert [summary.speaker for summary in ranking] == ["Bob", "Alice", "Carol", "Dave"]

    def test_limit_truncates(self, analysis_engine: InfluenceAnalysisService) -> None:
        assert [summary.speaker for summary in analysis_engine.top_influential_speakers(2)] == ["Bob", "Alice"]

    def test_ties_keep_encounter_order(self, analysis_engine: InfluenceAnalysisService) -> None:
        ranking = analysis_engine.top_influential_speakers(10)

        assert ranking[2].total_influence_score == ranking[3].total_influence_score
        assert [ranking[2].speaker, ranking[3].speaker] == ["Carol", "Dave"]

    @pytest.mark.parametrize("limit", [0, -1])
    def test_rejects_non_positive_limit(self, analysis_engine: InfluenceAnalysisService, limit: int) -> None:
        with pytest.raises(ValueError):
            analysis_engine.top_influential_speakers(limit)

    def test_empty_catalogue(self, memory_store_scope, inline_executor) -> None:
        service = InfluenceAnalysisService(store_scope=memory_store_scope, executor=inline_executor)
        assert service.top_influential_speakers(5) == []

    def test_summaries_fan_out_to_executor(self, analysis_engine: InfluenceAnalysisService, inline_executor) -> None:
        analysis_engine.top_influential_speakers(1)
        assert inline_executor.submitted == 4


class TestMostInfluentialPerYear:
    def test_best_talk_per_year_sorted_by_year(self, analysis_engine: InfluenceAnalysisService) -> None:
        best = analysis_engine.most_influential_talk_per_year()

        assert list(best) == [2019, 2020, 2021]
        assert {year: talk.title for year, talk in best.items()} == {2019: "B1", 2020: "A2", 2021: "D1"}

    def test_first_talk_wins_equal_scores(
        self,
        memory_store,
        memory_store_scope,
        inline_executor,
        talk_factory,
        speakers,
    ) -> None:
        memory_store.add(talk_factory("First", speakers["Alice"], views=100, likes=0, year=2018))
        memory_store.add(talk_factory("Second", speakers["Bob"], views=100, likes=0, year=2018))
        service = InfluenceAnalysisService(store_scope=memory_store_scope, executor=inline_executor)

        assert service.most_influential_talk_per_year()[2018].title == "First"


class TestAnalyzeSpeaker:
    def test_lookup_ignores_case(self, analysis_engine: InfluenceAnalysisService) -> None:
        summary = analysis_engine.analyze_speaker("aLiCe")

        assert summary is not None
        assert summary.speaker == "Alice"
        assert summary.talk_count == 2

    def test_unknown_speaker_is_none(self, analysis_engine: InfluenceAnalysisService) -> None:
        assert analysis_engine.analyze_speaker("Zed") is None


class TestCachedInfluenceAnalysis:
    @pytest.fixture()
    def counting(self, analysis_engine: InfluenceAnalysisService) -> _CountingEngine:
        return _CountingEngine(analysis_engine)

    @pytest.fixture()
    def cached(self, counting: _CountingEngine) -> CachedInfluenceAnalysis:
        return CachedInfluenceAnalysis(engine=counting, cache=InMemoryResultCache())  # type: ignore[arg-type]

    def test_top_speakers_cached_per_limit(self, cached, counting) -> None:
        first = cached.top_speakers(2)
        second = cached.top_speakers(2)
        cached.top_speakers(3)

        assert first == second
        assert counting.calls == [("top", 2), ("top", 3)]

    def test_invalid_limit_never_reaches_cache(self, cached, counting) -> None:
        with pytest.raises(ValueError):
            cached.top_speakers(0)
        assert counting.calls == []

    def test_per_year_cached(self, cached, counting) -> None:
        cached.most_influential_per_year()
        cached.most_influential_per_year()

        assert counting.calls == [("per_year", None)]

    def test_speaker_analysis_keyed_ignoring_case(self, cached, counting) -> None:
        cached.analyze_speaker("Alice")
        cached.analyze_speaker(" alice ")

        assert counting.calls == [("speaker", "Alice")]

    def test_absent_speaker_result_is_cached(self, cached, counting) -> None:
        assert cached.analyze_speaker("Zed") is None
        assert cached.analyze_speaker("Zed") is None

        assert counting.calls == [("speaker", "Zed")]

    def test_refresh_forces_recompute(self, cached, counting) -> None:
        cached.top_speakers(2)
        cached.refresh()
        cached.top_speakers(2)

        assert counting.calls == [("top", 2), ("top", 2)]

    def test_returned_lists_are_copies(self, cached) -> None:
        cached.top_speakers(2).clear()

        assert len(cached.top_speakers(2)) == 2


class TestAnalysisOverDatabase:
    def test_ranking_from_imported_talks(self, store_scope, inline_executor, make_csv) -> None:
        TalkImportService(store_scope=store_scope).run(
            make_csv(
                "Small,Alice,May 2020,10,1,https://ted.com/talks/small",
                "Huge,Bob,June 2021,100000,5000,https://ted.com/talks/huge",
                "Medium,Alice,June 2021,500,20,https://ted.com/talks/medium",
            ),
            "seed",
        )
        service = InfluenceAnalysisService(store_scope=store_scope, executor=inline_executor)

        ranking = service.top_influential_speakers(5)
        best = service.most_influential_talk_per_year()
        alice = service.analyze_speaker("ALICE")

        assert [summary.speaker for summary in ranking] == ["Bob", "Alice"]
        assert {year: talk.title for year, talk in best.items()} == {2020: "Small", 2021: "Huge"}
        assert alice is not None
        assert alice.talk_count == 2
        assert alice.total_views == 510

    def test_names_differing_by_case_are_one_speaker(self, store_scope, inline_executor, make_csv) -> None:
        TalkImportService(store_scope=store_scope).run(
            make_csv(
                "T1,Alice,May 2020,100,10,https://ted.com/talks/t1",
                "T2,alice,June 2021,200,20,https://ted.com/talks/t2",
            ),
            "seed",
        )
        service = InfluenceAnalysisService(store_scope=store_scope, executor=inline_executor)

        ranking = service.top_influential_speakers(10)
        summary = service.analyze_speaker("alice")

        assert [(entry.speaker, entry.talk_count) for entry in ranking] == [("Alice", 2)]
        assert summary is not None
        assert (summary.speaker, summary.talk_count) == ("Alice", 2)
        assert summary == ranking[0]
