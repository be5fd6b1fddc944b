"""
app/repositories/speaker_repository.py

Persistence layer for speakers.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.talk import Speaker, SpeakerProfile
from app.repositories.errors import DuplicateSpeakerError
from db.models.speaker import SpeakerRecord
from db.models.talk import TalkRecord


def to_speaker(record: SpeakerRecord) -> Speaker:
    return Speaker(id=record.id, name=record.name, bio=record.bio)


def _name_matches(name: str) -> Any:
    return func.lower(SpeakerRecord.name) == func.lower(name.strip())


class SpeakerRepository:
    """
    Repository for speaker rows and per-speaker talk aggregates.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, speaker: Speaker) -> Speaker:
        """
        Insert a new speaker.

        Raises
        ------
        DuplicateSpeakerError
            A speaker with the same name (ignoring case) already exists.
        """
        record = SpeakerRecord(id=speaker.id, name=speaker.name, bio=speaker.bio)
        try:
            with self._session.begin_nested():
                self._session.add(record)
        except IntegrityError as exc:
            raise DuplicateSpeakerError(f"Speaker already exists: {speaker.name!r}") from exc
        return to_speaker(record)

    def update_bio(self, speaker_id: uuid.UUID, bio: str | None) -> Speaker | None:
        record = self._session.get(SpeakerRecord, speaker_id)
        if record is None:
            return None
        record.bio = bio
        self._session.flush()
        return to_speaker(record)

    def delete(self, speaker_id: uuid.UUID) -> bool:
        record = self._session.get(SpeakerRecord, speaker_id)
        if record is None:
            return False
        self._session.delete(record)
        self._session.flush()
        return True

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get(self, speaker_id: uuid.UUID) -> Speaker | None:
        record = self._session.get(SpeakerRecord, speaker_id)
        return to_speaker(record) if record is not None else None

    def find_by_name(self, name: str) -> Speaker | None:
        """
        Lookup by speaker name ignoring case; names are unique case-insensitively.
        """
        record = self._session.scalars(
            select(SpeakerRecord).where(_name_matches(name))
        ).one_or_none()
        return to_speaker(record) if record is not None else None

    def has_talks(self, speaker_id: uuid.UUID) -> bool:
        stmt = select(TalkRecord.id).where(TalkRecord.speaker_id == speaker_id).limit(1)
        return self._session.scalar(stmt) is not None

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(SpeakerRecord)) or 0)

    def list_profiles(self, *, name_contains: str | None = None) -> list[SpeakerProfile]:
        """
        All speakers with talk aggregates, ordered by name.

        Aggregates come from one grouped query rather than per-speaker lookups.
        """
        stmt = self._profile_query()
        if name_contains:
            stmt = stmt.where(SpeakerRecord.name.ilike(f"%{name_contains}%"))
        stmt = stmt.order_by(SpeakerRecord.name)
        return [self._to_profile(row) for row in self._session.execute(stmt)]

    def get_profile(self, speaker_id: uuid.UUID) -> SpeakerProfile | None:
        stmt = self._profile_query().where(SpeakerRecord.id == speaker_id)
        row = self._session.execute(stmt).one_or_none()
        return self._to_profile(row) if row is not None else None

    def get_profile_by_name(self, name: str) -> SpeakerProfile | None:
        stmt = self._profile_query().where(_name_matches(name))
        row = self._session.execute(stmt).one_or_none()
        return self._to_profile(row) if row is not None else None

    @staticmethod
    def _profile_query() -> Any:
        return (
            select(
                SpeakerRecord,
                func.count(TalkRecord.id).label("talk_count"),
                func.coalesce(func.sum(TalkRecord.views), 0).label("total_views"),
                func.coalesce(func.sum(TalkRecord.likes), 0).label("total_likes"),
            )
            .outerjoin(TalkRecord, TalkRecord.speaker_id == SpeakerRecord.id)
            .group_by(SpeakerRecord.id)
        )

    @staticmethod
    def _to_profile(row: Any) -> SpeakerProfile:
        record, talk_count, total_views, total_likes = row
        return SpeakerProfile(
            speaker=to_speaker(record),
            talk_count=int(talk_count),
            total_views=int(total_views),
            total_likes=int(total_likes),
        )
