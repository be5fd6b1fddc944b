"""
app/repositories/talk_repository.py

Persistence layer for talks.

The caller controls commit/rollback; this repository never commits.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.talk import Likes, Link, Talk, TalkDate, Views
from app.repositories.errors import DuplicateTalkError
from app.repositories.speaker_repository import to_speaker
from db.models.speaker import SpeakerRecord
from db.models.talk import TalkRecord

_DEFAULT_BATCH_SIZE = 500
_DEFAULT_YIELD_PER = 500
_BUSINESS_KEY_COLUMNS = ("title", "speaker_id")


def to_talk(record: TalkRecord, speaker_record: SpeakerRecord) -> Talk:
    return Talk(
        id=record.id,
        title=record.title,
        speaker=to_speaker(speaker_record),
        date=TalkDate(year=record.talk_year, month=record.talk_month),
        views=Views(int(record.views)),
        likes=Likes(int(record.likes)),
        link=Link(record.link),
    )


def to_payload(talk: Talk) -> dict[str, Any]:
    return {
        "id": talk.id,
        "title": talk.title,
        "speaker_id": talk.speaker.id,
        "talk_year": talk.date.year,
        "talk_month": talk.date.month,
        "views": talk.views.value,
        "likes": talk.likes.value,
        "link": talk.link.value,
    }


class TalkRepository:
    """
    Repository for talk rows.

    Batch inserts skip rows whose ``(title, speaker_id)`` already exists
    instead of raising a duplicate-key error.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def save(self, talk: Talk) -> Talk:
        """
        Insert a single talk.

        Raises
        ------
        DuplicateTalkError
            The speaker already has a talk with this title.
        """
        record = TalkRecord(**to_payload(talk))
        try:
            with self._session.begin_nested():
                self._session.add(record)
        except IntegrityError as exc:
            raise DuplicateTalkError(
                f"Talk already exists for speaker: {talk.title!r}"
            ) from exc
        return talk

    def save_batch(
        self,
        talks: Sequence[Talk],
        *,
        batch_size: int = _DEFAULT_BATCH_SIZE,
    ) -> int:
        """
        Bulk insert talks, ignoring business-key conflicts.

        Parameters
        ----------
        talks:
            Talks whose speakers are already persisted.
        batch_size:
            Maximum rows per INSERT statement.

        Returns
        -------
        int
            Number of rows actually inserted.
        """
        if not talks:
            return 0

        payloads = self._deduplicate_payloads([to_payload(talk) for talk in talks])
        size = max(1, batch_size)
        inserted = 0
        for start in range(0, len(payloads), size):
            chunk = payloads[start : start + size]
            stmt = (
                self._insert()
                .values(chunk)
                .on_conflict_do_nothing(index_elements=list(_BUSINESS_KEY_COLUMNS))
                .returning(TalkRecord.id)
            )
            inserted += len(self._session.scalars(stmt).all())
        return inserted

    def update(self, talk: Talk) -> Talk | None:
        record = self._session.get(TalkRecord, talk.id)
        if record is None:
            return None
        payload = to_payload(talk)
        payload.pop("id")
        for key, value in payload.items():
            setattr(record, key, value)
        try:
            with self._session.begin_nested():
                self._session.flush()
        except IntegrityError as exc:
            raise DuplicateTalkError(
                f"Talk already exists for speaker: {talk.title!r}"
            ) from exc
        return talk

    def delete(self, talk_id: uuid.UUID) -> bool:
        record = self._session.get(TalkRecord, talk_id)
        if record is None:
            return False
        self._session.delete(record)
        self._session.flush()
        return True

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def exists(self, title: str, speaker_id: uuid.UUID) -> bool:
        stmt = (
            select(TalkRecord.id)
            .where(TalkRecord.title == title, TalkRecord.speaker_id == speaker_id)
            .limit(1)
        )
        return self._session.scalar(stmt) is not None

    def get(self, talk_id: uuid.UUID) -> Talk | None:
        row = self._session.execute(self._base_query().where(TalkRecord.id == talk_id)).one_or_none()
        return to_talk(*row) if row is not None else None

    def stream_all(self, *, yield_per: int = _DEFAULT_YIELD_PER) -> Iterator[Talk]:
        """
        Lazily iterate every talk, oldest first.

        Must be consumed while the owning session is open.
        """
        stmt = self._base_query().execution_options(yield_per=max(1, yield_per))
        for talk_record, speaker_record in self._session.execute(stmt):
            yield to_talk(talk_record, speaker_record)

    def list_all(self) -> list[Talk]:
        return list(self.stream_all())

    def find_by_speaker_name(self, name: str) -> list[Talk]:
        """
        Talks of the speaker whose name matches ``name`` ignoring case.
        """
        stmt = self._base_query().where(func.lower(SpeakerRecord.name) == func.lower(name.strip()))
        return [to_talk(*row) for row in self._session.execute(stmt)]

    def find_by_speaker_id(self, speaker_id: uuid.UUID) -> list[Talk]:
        stmt = self._base_query().where(TalkRecord.speaker_id == speaker_id)
        return [to_talk(*row) for row in self._session.execute(stmt)]

    def find_by_year(self, year: int) -> list[Talk]:
        stmt = self._base_query().where(TalkRecord.talk_year == year)
        return [to_talk(*row) for row in self._session.execute(stmt)]

    def search_by_title(self, fragment: str) -> list[Talk]:
        stmt = self._base_query().where(TalkRecord.title.ilike(f"%{fragment}%"))
        return [to_talk(*row) for row in self._session.execute(stmt)]

    def count(self) -> int:
        return int(self._session.scalar(select(func.count()).select_from(TalkRecord)) or 0)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _base_query() -> Any:
        return (
            select(TalkRecord, SpeakerRecord)
            .join(SpeakerRecord, TalkRecord.speaker_id == SpeakerRecord.id)
            .order_by(TalkRecord.created_at, TalkRecord.title, TalkRecord.id)
        )

    def _insert(self) -> Any:
        # ON CONFLICT is dialect specific; SQLite backs the test suite.
        if self._session.get_bind().dialect.name == "sqlite":
            return sqlite.insert(TalkRecord)
        return postgresql.insert(TalkRecord)

    @staticmethod
    def _deduplicate_payloads(payloads: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
        seen: set[tuple[Any, ...]] = set()
        deduped: list[dict[str, Any]] = []
        for payload in payloads:
            key = tuple(payload[column] for column in _BUSINESS_KEY_COLUMNS)
            if key in seen:
                continue
            seen.add(key)
            deduped.append(payload)
        return deduped
