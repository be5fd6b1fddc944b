"""
tests/test_catalog_services.py

Pytest tests for SpeakerService and TalkService over SQLite.

Coverage
--------
- Speaker create/update/delete with conflict rules
- Talk create (speaker resolved or created), update, delete and conflicts
- Input validation surfaces as ValueError / InvalidIdentifierError
- Cached list results are evicted by every write
"""

from __future__ import annotations

import uuid

import pytest
from sqlalchemy.orm import Session

from app.cache.result_cache import ALL_SPEAKERS, ALL_TALKS, TOP_SPEAKERS, InMemoryResultCache
from app.domain.talk import InvalidIdentifierError
from app.services.speaker_service import SpeakerConflictError, SpeakerService
from app.services.talk_service import TalkConflictError, TalkService


@pytest.fixture()
def cache() -> InMemoryResultCache:
    return InMemoryResultCache()


@pytest.fixture()
def speaker_service(session: Session, cache: InMemoryResultCache) -> SpeakerService:
    return SpeakerService(session, cache=cache)


@pytest.fixture()
def talk_service(session: Session, cache: InMemoryResultCache) -> TalkService:
    return TalkService(session, cache=cache)


def _create_talk(service: TalkService, title: str = "Talk A", speaker: str = "Alice", **overrides):
    values = {
        "title": title,
        "speaker_name": speaker,
        "date": "May 2020",
        "views": 100,
        "likes": 10,
        "link": "https://ted.com/talks/a",
    }
    values.update(overrides)
    return service.create_talk(**values)


class TestSpeakerService:
    def test_create_and_fetch(self, speaker_service: SpeakerService) -> None:
        created = speaker_service.create_speaker(name="  Alice  ", bio="Researcher")

        fetched = speaker_service.get_speaker(str(created.speaker.id))
        assert fetched is not None
        assert fetched.speaker.name == "Alice"
        assert speaker_service.get_speaker_by_name("Alice").speaker.bio == "Researcher"
        assert speaker_service.count_speakers() == 1

    @pytest.mark.parametrize("duplicate", ["Alice", "alice", "ALICE"])
    def test_duplicate_name_conflicts(self, speaker_service: SpeakerService, duplicate: str) -> None:
        speaker_service.create_speaker(name="Alice")

        with pytest.raises(SpeakerConflictError):
            speaker_service.create_speaker(name=duplicate)

        assert speaker_service.count_speakers() == 1

    def test_blank_name_rejected(self, speaker_service: SpeakerService) -> None:
        with pytest.raises(ValueError):
            speaker_service.create_speaker(name="   ")

    def test_invalid_identifier(self, speaker_service: SpeakerService) -> None:
        with pytest.raises(InvalidIdentifierError):
            speaker_service.get_speaker("not-a-uuid")

    def test_unknown_speaker(self, speaker_service: SpeakerService) -> None:
        missing = str(uuid.uuid4())
        assert speaker_service.get_speaker(missing) is None
        assert speaker_service.talks_for_speaker(missing) is None
        assert speaker_service.update_bio(missing, "bio") is None
        assert speaker_service.delete_speaker(missing) is False

    def test_update_bio(self, speaker_service: SpeakerService) -> None:
        created = speaker_service.create_speaker(name="Alice")

        updated = speaker_service.update_bio(created.speaker.id, "Now with a bio")

        assert updated.speaker.bio == "Now with a bio"

    def test_cannot_delete_speaker_with_talks(
        self,
        speaker_service: SpeakerService,
        talk_service: TalkService,
    ) -> None:
        talk = _create_talk(talk_service)

        with pytest.raises(SpeakerConflictError):
            speaker_service.delete_speaker(talk.speaker.id)

        talk_service.delete_talk(talk.id)
        assert speaker_service.delete_speaker(talk.speaker.id) is True
        assert speaker_service.count_speakers() == 0

    def test_list_is_cached_until_a_write(
        self,
        speaker_service: SpeakerService,
        cache: InMemoryResultCache,
    ) -> None:
        speaker_service.create_speaker(name="Alice")
        assert [p.speaker.name for p in speaker_service.list_speakers()] == ["Alice"]
        assert cache.size(ALL_SPEAKERS) == 1

        speaker_service.create_speaker(name="Bob")

        assert cache.size(ALL_SPEAKERS) == 0
        assert [p.speaker.name for p in speaker_service.list_speakers()] == ["Alice", "Bob"]

    def test_search_and_talks_for_speaker(
        self,
        speaker_service: SpeakerService,
        talk_service: TalkService,
    ) -> None:
        talk = _create_talk(talk_service, speaker="Alice Walker")
        speaker_service.create_speaker(name="Bob")

        assert [p.speaker.name for p in speaker_service.search_speakers("walk")] == ["Alice Walker"]
        assert [t.title for t in speaker_service.talks_for_speaker(talk.speaker.id)] == ["Talk A"]


class TestTalkService:
    def test_create_resolves_or_creates_speaker(
        self,
        talk_service: TalkService,
        speaker_service: SpeakerService,
    ) -> None:
        existing = speaker_service.create_speaker(name="Alice")

        first = _create_talk(talk_service, speaker="Alice")
        second = _create_talk(talk_service, title="Talk B", speaker="Bob")
        third = _create_talk(talk_service, title="Talk C", speaker="alice")

        assert first.speaker.id == existing.speaker.id
        assert third.speaker.id == existing.speaker.id
        assert second.speaker.name == "Bob"
        assert speaker_service.count_speakers() == 2
        assert talk_service.count_talks() == 3

    def test_duplicate_title_for_speaker_conflicts(self, talk_service: TalkService) -> None:
        _create_talk(talk_service)

        with pytest.raises(TalkConflictError):
            _create_talk(talk_service, views=5)

        assert talk_service.count_talks() == 1

    @pytest.mark.parametrize(
        "overrides",
        [
            {"date": "2020-05"},
            {"views": -1},
            {"link": "ftp://ted.com/x"},
            {"title": "   "},
        ],
    )
    def test_invalid_values_rejected(self, talk_service: TalkService, overrides: dict) -> None:
        with pytest.raises(ValueError):
            _create_talk(talk_service, **overrides)
        assert talk_service.count_talks() == 0

    def test_queries(self, talk_service: TalkService) -> None:
        _create_talk(talk_service, title="Ideas", date="May 2019")
        _create_talk(talk_service, title="More ideas", speaker="Bob", date="June 2020")

        assert [t.title for t in talk_service.talks_by_speaker_name("bob")] == ["More ideas"]
        assert [t.title for t in talk_service.talks_by_year(2019)] == ["Ideas"]
        assert len(talk_service.search_talks("idea")) == 2
        assert len(talk_service.list_talks()) == 2

    def test_update_talk(self, talk_service: TalkService) -> None:
        talk = _create_talk(talk_service)

        updated = talk_service.update_talk(
            str(talk.id),
            title="Talk A (remastered)",
            date="June 2021",
            views=500,
            likes=50,
            link="https://ted.com/talks/a2",
        )

        assert updated is not None
        reloaded = talk_service.get_talk(talk.id)
        assert reloaded.title == "Talk A (remastered)"
        assert str(reloaded.date) == "June 2021"
        assert reloaded.influence_score == pytest.approx(500 * 0.7 + 50 * 0.3)

    def test_update_unknown_and_invalid(self, talk_service: TalkService) -> None:
        assert (
            talk_service.update_talk(
                str(uuid.uuid4()),
                title="x",
                date="May 2020",
                views=1,
                likes=1,
                link="https://ted.com/x",
            )
            is None
        )
        with pytest.raises(InvalidIdentifierError):
            talk_service.get_talk("garbage")

    def test_delete_talk(self, talk_service: TalkService) -> None:
        talk = _create_talk(talk_service)

        assert talk_service.delete_talk(talk.id) is True
        assert talk_service.delete_talk(talk.id) is False
        assert talk_service.get_talk(talk.id) is None

    def test_writes_evict_cached_results(self, talk_service: TalkService, cache: InMemoryResultCache) -> None:
        _create_talk(talk_service)
        talk_service.list_talks()
        cache.put(TOP_SPEAKERS, 10, ("stale",))
        assert cache.size(ALL_TALKS) == 1

        _create_talk(talk_service, title="Talk B")

        assert cache.size() == 0
