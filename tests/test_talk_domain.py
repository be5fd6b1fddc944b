"""
tests/test_talk_domain.py

Pytest unit tests for the speaker/talk domain model and import run models.

All tests are pure Python: no database, no I/O.

Coverage
--------
- Influence score weighting
- TalkDate parsing, rendering and ordering
- Counter value objects (type, sign and 64-bit bounds)
- Link, Speaker and Talk construction rules
- Identifier parsing
- ImportStatistics counters (also from concurrent threads), error
  bookkeeping and derived status
- ImportRun lifecycle helpers
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.domain.talk import (
    MAX_COUNT_VALUE,
    InvalidIdentifierError,
    Likes,
    Link,
    Speaker,
    Talk,
    TalkDate,
    Views,
    influence_score,
    parse_identifier,
)
from app.domain.talk_import import (
    ErrorKind,
    ImportRun,
    ImportStatistics,
    ImportStatus,
    RowValidationError,
    derive_status,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def speaker() -> Speaker:
    return Speaker.create("Ken Robinson")


@pytest.fixture()
def talk(speaker: Speaker) -> Talk:
    return Talk.create(
        title="Do schools kill creativity?",
        speaker=speaker,
        date=TalkDate(year=2006, month=2),
        views=Views(1000),
        likes=Likes(100),
        link=Link("https://ted.com/talks/do_schools_kill_creativity"),
    )


# ---------------------------------------------------------------------------
# Influence score
# ---------------------------------------------------------------------------


class TestInfluenceScore:
    def test_weights_views_and_likes(self) -> None:
        assert influence_score(1000, 100) == pytest.approx(730.0)

    def test_zero_counts_score_zero(self) -> None:
        assert influence_score(0, 0) == 0.0

    def test_talk_computes_score_on_construction(self, talk: Talk) -> None:
        assert talk.influence_score == pytest.approx(730.0)


# ---------------------------------------------------------------------------
# TalkDate
# ---------------------------------------------------------------------------


class TestTalkDate:
    def test_parses_month_name_and_year(self) -> None:
        assert TalkDate.parse("December 2021") == TalkDate(year=2021, month=12)

    def test_month_name_is_case_insensitive(self) -> None:
        assert TalkDate.parse("february 2006") == TalkDate(year=2006, month=2)

    @pytest.mark.parametrize(
        "raw",
        ["Dec 2021", "2021-12", "December", "December 21", "Smarch 2021", "December 2021 extra", ""],
    )
    def test_rejects_malformed_dates(self, raw: str) -> None:
        with pytest.raises(ValueError, match="Invalid date format"):
            TalkDate.parse(raw)

    def test_renders_canonical_form(self) -> None:
        assert str(TalkDate(year=2019, month=7)) == "July 2019"

    def test_orders_by_year_then_month(self) -> None:
        assert TalkDate(2020, 11) < TalkDate(2021, 1) < TalkDate(2021, 3)

    def test_rejects_month_out_of_range(self) -> None:
        with pytest.raises(ValueError):
            TalkDate(year=2021, month=13)


# ---------------------------------------------------------------------------
# Counters and links
# ---------------------------------------------------------------------------


class TestCounters:
    @pytest.mark.parametrize("factory", [Views, Likes])
    def test_accepts_zero_and_max(self, factory: type) -> None:
        assert factory(0).value == 0
        assert factory(MAX_COUNT_VALUE).value == MAX_COUNT_VALUE

    @pytest.mark.parametrize("factory", [Views, Likes])
    def test_rejects_negative(self, factory: type) -> None:
        with pytest.raises(ValueError):
            factory(-1)

    @pytest.mark.parametrize("factory", [Views, Likes])
    def test_rejects_overflow(self, factory: type) -> None:
        with pytest.raises(ValueError):
            factory(MAX_COUNT_VALUE + 1)

    @pytest.mark.parametrize("value", [True, 1.5, "10"])
    def test_rejects_non_integers(self, value: object) -> None:
        with pytest.raises(TypeError):
            Views(value)  # type: ignore[arg-type]


class TestLink:
    def test_accepts_http_and_https(self) -> None:
        assert str(Link("https://ted.com/talks/x")) == "https://ted.com/talks/x"
        assert Link("http://example.org/a?b=c").value == "http://example.org/a?b=c"

    @pytest.mark.parametrize(
        "raw",
        [
            "ftp://ted.com/x",
            "ted.com/talks/x",
            "https://",
            "not a url",
            "https://ted.com/x\n",
            "https://ted.com/x\n/y",
            "https://ted.com/a b",
            " https://ted.com/x",
        ],
    )
    def test_rejects_malformed_links(self, raw: str) -> None:
        with pytest.raises(ValueError):
            Link(raw)


# ---------------------------------------------------------------------------
# Speaker / Talk
# ---------------------------------------------------------------------------


class TestSpeakerAndTalk:
    def test_speaker_name_required(self) -> None:
        with pytest.raises(ValueError):
            Speaker.create("   ")

    def test_speaker_bio_is_mutable(self, speaker: Speaker) -> None:
        speaker.update_bio("Educator")
        assert speaker.bio == "Educator"

    def test_talk_title_required(self, speaker: Speaker) -> None:
        with pytest.raises(ValueError):
            Talk.create(
                title=" ",
                speaker=speaker,
                date=TalkDate(2020, 1),
                views=Views(1),
                likes=Likes(1),
                link=Link("https://ted.com/talks/x"),
            )

    def test_business_key_is_title_and_speaker_id(self, talk: Talk, speaker: Speaker) -> None:
        assert talk.business_key == ("Do schools kill creativity?", speaker.id)
        assert talk.year == 2006

    def test_talk_is_frozen(self, talk: Talk) -> None:
        with pytest.raises(AttributeError):
            talk.title = "changed"  # type: ignore[misc]


class TestParseIdentifier:
    def test_parses_uuid_strings(self) -> None:
        value = uuid.uuid4()
        assert parse_identifier(str(value)) == value
        assert parse_identifier(value) is value

    @pytest.mark.parametrize("raw", ["not-a-uuid", "", None, 42])
    def test_rejects_garbage(self, raw: object) -> None:
        with pytest.raises(InvalidIdentifierError):
            parse_identifier(raw, kind="talk id")

    def test_is_a_value_error(self) -> None:
        assert issubclass(InvalidIdentifierError, ValueError)


# ---------------------------------------------------------------------------
# Import statistics
# ---------------------------------------------------------------------------


class TestImportStatistics:
    def test_starts_empty(self) -> None:
        stats = ImportStatistics()
        assert (stats.total, stats.successful, stats.failed, stats.skipped) == (0, 0, 0, 0)
        assert stats.success_rate == 0.0
        assert stats.all_validation_errors() == []

    def test_success_rate_is_a_percentage(self) -> None:
        stats = ImportStatistics()
        for _ in range(4):
            stats.increment_total()
        stats.increment_successful()
        stats.increment_failed()
        stats.increment_skipped()
        stats.increment_skipped()
        assert stats.success_rate == pytest.approx(25.0)
        assert stats.to_dict() == {
            "total": 4,
            "successful": 1,
            "failed": 1,
            "skipped": 2,
            "validation_error_count": 0,
            "success_rate": 25.0,
        }

    def test_errors_are_ordered_by_row_number(self) -> None:
        stats = ImportStatistics()
        stats.add_validation_errors(7, [RowValidationError.missing_field(7, "title")])
        stats.add_validation_errors(
            2,
            [
                RowValidationError.garbage_data(2, "views", "abc"),
                RowValidationError.negative_value(2, "likes", "-1"),
            ],
        )
        stats.add_validation_errors(3, [])

        errors = stats.all_validation_errors()
        assert [error.row_number for error in errors] == [2, 2, 7]
        assert stats.failed_row_count == 2
        assert stats.validation_error_count == 3
        assert stats.error_counts_by_kind() == {
            "GARBAGE_DATA": 1,
            "MISSING_FIELD": 1,
            "NEGATIVE_VALUE": 1,
        }

    def test_counters_are_exact_under_concurrent_updates(self) -> None:
        stats = ImportStatistics()
        workers = 8
        rows_per_worker = 500
        start = threading.Barrier(workers)

        def process(worker: int) -> None:
            start.wait()
            for offset in range(rows_per_worker):
                row_number = worker * rows_per_worker + offset + 1
                stats.increment_total()
                if offset % 3 == 0:
                    stats.increment_failed()
                    stats.add_validation_errors(
                        row_number,
                        [RowValidationError.missing_field(row_number, "title")],
                    )
                elif offset % 3 == 1:
                    stats.increment_successful()
                else:
                    stats.increment_skipped()

        threads = [threading.Thread(target=process, args=(worker,)) for worker in range(workers)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        per_kind = (rows_per_worker + 2) // 3, (rows_per_worker + 1) // 3, rows_per_worker // 3
        assert stats.total == workers * rows_per_worker
        assert (stats.failed, stats.successful, stats.skipped) == tuple(workers * n for n in per_kind)
        assert stats.total == stats.successful + stats.failed + stats.skipped
        assert stats.failed_row_count == stats.failed
        assert stats.validation_error_count == stats.failed
        row_numbers = [error.row_number for error in stats.all_validation_errors()]
        assert row_numbers == sorted(row_numbers)

    def test_error_factories_carry_messages(self) -> None:
        garbage = RowValidationError.garbage_data(1, "views", "12abc")
        assert garbage.kind is ErrorKind.GARBAGE_DATA
        assert garbage.message == "Contains non-numeric characters: '12abc'"
        assert RowValidationError.overflow(1, "likes", "9" * 30).kind is ErrorKind.OVERFLOW
        assert RowValidationError.missing_field(1, "link").to_dict() == {
            "row_number": 1,
            "field": "link",
            "value": None,
            "message": "Required field is missing or empty",
            "kind": "MISSING_FIELD",
        }


class TestDeriveStatus:
    def test_empty_run_completes(self) -> None:
        assert derive_status(ImportStatistics()) is ImportStatus.COMPLETED

    def test_no_failures_completes(self) -> None:
        stats = ImportStatistics()
        stats.increment_total()
        stats.increment_skipped()
        assert derive_status(stats) is ImportStatus.COMPLETED

    def test_any_failure_is_partial(self) -> None:
        stats = ImportStatistics()
        stats.increment_total()
        stats.increment_failed()
        assert derive_status(stats) is ImportStatus.PARTIALLY_COMPLETED


class TestImportRun:
    def test_pending_run_is_not_terminal(self) -> None:
        run = ImportRun.pending("run-1")
        assert run.status is ImportStatus.PENDING
        assert not run.is_terminal
        assert run.duration_seconds is None

    def test_with_status_records_completion(self) -> None:
        started = datetime(2026, 1, 1, tzinfo=timezone.utc)
        run = ImportRun.pending("run-1", now=started)
        done = run.with_status(ImportStatus.COMPLETED, completed_at=started + timedelta(seconds=3))
        assert done.is_terminal
        assert done.duration_seconds == pytest.approx(3.0)
        assert run.status is ImportStatus.PENDING
