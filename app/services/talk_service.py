"""
app/services/talk_service.py

Talk catalogue operations. Every write evicts cached results.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.cache.result_cache import ALL_TALKS, MUTATION_EVICTED_BUCKETS, ResultCache
from app.domain.talk import Likes, Link, Speaker, Talk, TalkDate, Views, parse_identifier
from app.repositories.errors import DuplicateTalkError
from app.repositories.speaker_repository import SpeakerRepository
from app.repositories.talk_repository import TalkRepository

logger = logging.getLogger(__name__)


class TalkConflictError(RuntimeError):
    """
    Raised when a speaker already has a talk with the same title.
    """


class TalkService:
    """
    Read/write access to talks for one request-scoped session.

    Talks are attached to speakers by name; an unknown name creates the
    speaker, as the import path does.
    """

    def __init__(self, session: Session, *, cache: ResultCache) -> None:
        self._session = session
        self._cache = cache
        self._speakers = SpeakerRepository(session)
        self._talks = TalkRepository(session)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_talks(self) -> list[Talk]:
        talks = self._cache.get_or_compute(
            ALL_TALKS,
            None,
            lambda: tuple(self._talks.list_all()),
        )
        return list(talks)

    def get_talk(self, talk_id: Any) -> Talk | None:
        return self._talks.get(parse_identifier(talk_id, kind="talk id"))

    def talks_by_speaker_name(self, name: str) -> list[Talk]:
        return self._talks.find_by_speaker_name(name)

    def talks_by_year(self, year: int) -> list[Talk]:
        return self._talks.find_by_year(year)

    def search_talks(self, title_fragment: str) -> list[Talk]:
        return self._talks.search_by_title(title_fragment)

    def count_talks(self) -> int:
        return self._talks.count()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_talk(
        self,
        *,
        title: str,
        speaker_name: str,
        date: str,
        views: int,
        likes: int,
        link: str,
    ) -> Talk:
        """
        Create a talk; value objects raise ``ValueError`` on bad input.

        Raises:
            TalkConflictError: the speaker already has a talk with this title.
        """

        talk_date = TalkDate.parse(date)
        talk_views, talk_likes, talk_link = Views(views), Likes(likes), Link(link.strip())
        if not title.strip():
            raise ValueError("Talk title must not be empty.")

        speaker = self._resolve_speaker(speaker_name.strip())
        talk = Talk.create(
            title=title.strip(),
            speaker=speaker,
            date=talk_date,
            views=talk_views,
            likes=talk_likes,
            link=talk_link,
        )
        if self._talks.exists(talk.title, speaker.id):
            self._session.rollback()
            raise TalkConflictError(f"Talk already exists for speaker: {talk.title!r}")
        self._save(talk, self._talks.save)
        logger.info("Created talk id=%s speaker=%r", talk.id, speaker.name)
        return talk

    def update_talk(
        self,
        talk_id: Any,
        *,
        title: str,
        date: str,
        views: int,
        likes: int,
        link: str,
    ) -> Talk | None:
        identifier = parse_identifier(talk_id, kind="talk id")
        current = self._talks.get(identifier)
        if current is None:
            return None
        updated = Talk(
            id=current.id,
            title=title.strip(),
            speaker=current.speaker,
            date=TalkDate.parse(date),
            views=Views(views),
            likes=Likes(likes),
            link=Link(link.strip()),
        )
        self._save(updated, self._talks.update)
        return updated

    def delete_talk(self, talk_id: Any) -> bool:
        identifier = parse_identifier(talk_id, kind="talk id")
        if not self._talks.delete(identifier):
            return False
        self._session.commit()
        self._evict()
        logger.info("Deleted talk id=%s", identifier)
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _resolve_speaker(self, name: str) -> Speaker:
        speaker = self._speakers.find_by_name(name)
        if speaker is None:
            speaker = self._speakers.save(Speaker.create(name))
        return speaker

    def _save(self, talk: Talk, write: Any) -> None:
        try:
            write(talk)
            self._session.commit()
        except DuplicateTalkError as exc:
            self._session.rollback()
            raise TalkConflictError(str(exc)) from exc
        self._evict()

    def _evict(self) -> None:
        self._cache.evict_all(MUTATION_EVICTED_BUCKETS)
