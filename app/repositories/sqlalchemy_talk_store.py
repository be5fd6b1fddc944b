"""
app/repositories/sqlalchemy_talk_store.py

SQLAlchemy-backed ``TalkStore`` and its transaction scope.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

from sqlalchemy.orm import Session

from app.domain.talk import Speaker, Talk
from app.repositories.speaker_repository import SpeakerRepository
from app.repositories.talk_repository import TalkRepository


class SqlAlchemyTalkStore:
    """
    ``TalkStore`` over one session, composed from the speaker/talk repositories.
    """

    def __init__(self, session: Session, *, insert_batch_size: int = 500) -> None:
        self._session = session
        self.speakers = SpeakerRepository(session)
        self.talks = TalkRepository(session)
        self._insert_batch_size = insert_batch_size

    def find_speaker_by_name(self, name: str) -> Speaker | None:
        return self.speakers.find_by_name(name)

    def save_speaker(self, speaker: Speaker) -> Speaker:
        return self.speakers.save(speaker)

    def talk_exists(self, title: str, speaker_id: uuid.UUID) -> bool:
        return self.talks.exists(title, speaker_id)

    def save_talks_batch(self, talks: Sequence[Talk]) -> int:
        return self.talks.save_batch(talks, batch_size=self._insert_batch_size)

    def stream_all_talks(self) -> Iterator[Talk]:
        return self.talks.stream_all()

    def find_talks_by_speaker_name(self, name: str) -> list[Talk]:
        return self.talks.find_by_speaker_name(name)

    def count_talks(self) -> int:
        return self.talks.count()


@contextmanager
def transactional_store(session_factory: Callable[[], Session]) -> Iterator[SqlAlchemyTalkStore]:
    """
    Open a session, begin a transaction and yield a store bound to it.

    Commits when the block exits normally and rolls back when it raises.
    """

    with session_factory() as session:
        with session.begin():
            yield SqlAlchemyTalkStore(session)
