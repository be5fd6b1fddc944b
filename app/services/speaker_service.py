"""
app/services/speaker_service.py

Speaker catalogue operations. Every write evicts cached results.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from app.cache.result_cache import ALL_SPEAKERS, MUTATION_EVICTED_BUCKETS, ResultCache
from app.domain.talk import Speaker, SpeakerProfile, Talk, parse_identifier
from app.repositories.errors import DuplicateSpeakerError
from app.repositories.speaker_repository import SpeakerRepository
from app.repositories.talk_repository import TalkRepository

logger = logging.getLogger(__name__)


class SpeakerConflictError(RuntimeError):
    """
    Raised when a write would duplicate a speaker name or orphan talks.
    """


class SpeakerService:
    """
    Read/write access to speakers for one request-scoped session.
    """

    def __init__(self, session: Session, *, cache: ResultCache) -> None:
        self._session = session
        self._cache = cache
        self._speakers = SpeakerRepository(session)
        self._talks = TalkRepository(session)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_speakers(self) -> list[SpeakerProfile]:
        profiles = self._cache.get_or_compute(
            ALL_SPEAKERS,
            None,
            lambda: tuple(self._speakers.list_profiles()),
        )
        return list(profiles)

    def get_speaker(self, speaker_id: Any) -> SpeakerProfile | None:
        return self._speakers.get_profile(parse_identifier(speaker_id, kind="speaker id"))

    def get_speaker_by_name(self, name: str) -> SpeakerProfile | None:
        return self._speakers.get_profile_by_name(name)

    def search_speakers(self, name_fragment: str) -> list[SpeakerProfile]:
        return self._speakers.list_profiles(name_contains=name_fragment)

    def talks_for_speaker(self, speaker_id: Any) -> list[Talk] | None:
        identifier = parse_identifier(speaker_id, kind="speaker id")
        if self._speakers.get(identifier) is None:
            return None
        return self._talks.find_by_speaker_id(identifier)

    def count_speakers(self) -> int:
        return self._speakers.count()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create_speaker(self, *, name: str, bio: str | None = None) -> SpeakerProfile:
        """
        Create a speaker whose name is unique ignoring case.

        Raises:
            SpeakerConflictError: the name is already taken.
            ValueError: the name is blank.
        """

        speaker = Speaker.create(name.strip(), bio)
        if self._speakers.find_by_name(speaker.name) is not None:
            raise SpeakerConflictError(f"Speaker already exists: {speaker.name!r}")
        try:
            self._speakers.save(speaker)
            self._session.commit()
        except DuplicateSpeakerError as exc:
            self._session.rollback()
            raise SpeakerConflictError(str(exc)) from exc
        self._evict()
        logger.info("Created speaker id=%s name=%r", speaker.id, speaker.name)
        return SpeakerProfile(speaker=speaker)

    def update_bio(self, speaker_id: Any, bio: str | None) -> SpeakerProfile | None:
        identifier = parse_identifier(speaker_id, kind="speaker id")
        if self._speakers.update_bio(identifier, bio) is None:
            return None
        self._session.commit()
        self._evict()
        return self._speakers.get_profile(identifier)

    def delete_speaker(self, speaker_id: Any) -> bool:
        """
        Delete a speaker that has no talks.

        Raises:
            SpeakerConflictError: talks still reference the speaker.
        """

        identifier = parse_identifier(speaker_id, kind="speaker id")
        if self._speakers.get(identifier) is None:
            return False
        if self._speakers.has_talks(identifier):
            raise SpeakerConflictError("Cannot delete a speaker who still has talks.")
        self._speakers.delete(identifier)
        self._session.commit()
        self._evict()
        logger.info("Deleted speaker id=%s", identifier)
        return True

    def _evict(self) -> None:
        self._cache.evict_all(MUTATION_EVICTED_BUCKETS)
