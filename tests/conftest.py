"""
tests/conftest.py

Shared fixtures for the talk import and influence analysis test suite.

Database-backed tests run against an in-memory SQLite engine. pysqlite's
own transaction handling is switched off so SAVEPOINTs (used by the
repositories for duplicate detection) behave as they do on PostgreSQL.
"""

from __future__ import annotations

import io
import uuid
from collections.abc import Callable, Iterator, Sequence
from concurrent.futures import Future
from contextlib import contextmanager
from typing import Any

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import db.models  # noqa: F401 (registers tables on Base.metadata)
from app.domain.talk import Likes, Link, Speaker, Talk, TalkDate, Views
from app.repositories.sqlalchemy_talk_store import transactional_store
from db.base import Base
from db.session import build_session_factory

CSV_HEADER = "title,author,date,views,likes,link"


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class InlineExecutor:
    """
    Runs every submitted task immediately in the calling thread.
    """

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Future[Any]:
        self.submitted += 1
        future: Future[Any] = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:  # noqa: BLE001
            future.set_exception(exc)
        return future


class InMemoryTalkStore:
    """
    Dict-backed ``TalkStore`` preserving insertion order.
    """

    def __init__(self) -> None:
        self.speakers: dict[str, Speaker] = {}
        self.talks: list[Talk] = []
        self.batches: list[int] = []

    def add(self, talk: Talk) -> Talk:
        self.speakers.setdefault(talk.speaker.name.lower(), talk.speaker)
        self.talks.append(talk)
        return talk

    def find_speaker_by_name(self, name: str) -> Speaker | None:
        return self.speakers.get(name.strip().lower())

    def save_speaker(self, speaker: Speaker) -> Speaker:
        self.speakers[speaker.name.lower()] = speaker
        return speaker

    def talk_exists(self, title: str, speaker_id: uuid.UUID) -> bool:
        return any(talk.business_key == (title, speaker_id) for talk in self.talks)

    def save_talks_batch(self, talks: Sequence[Talk]) -> int:
        self.batches.append(len(talks))
        inserted = 0
        for talk in talks:
            if not self.talk_exists(*talk.business_key):
                self.talks.append(talk)
                inserted += 1
        return inserted

    def stream_all_talks(self) -> Iterator[Talk]:
        return iter(list(self.talks))

    def find_talks_by_speaker_name(self, name: str) -> list[Talk]:
        wanted = name.strip().lower()
        return [talk for talk in self.talks if talk.speaker.name.lower() == wanted]

    def count_talks(self) -> int:
        return len(self.talks)


def build_talk(
    title: str,
    speaker: Speaker,
    *,
    views: int,
    likes: int,
    year: int = 2021,
    month: int = 12,
) -> Talk:
    return Talk.create(
        title=title,
        speaker=speaker,
        date=TalkDate(year=year, month=month),
        views=Views(views),
        likes=Likes(likes),
        link=Link(f"https://ted.com/talks/{title.lower().replace(' ', '_')}"),
    )


# ---------------------------------------------------------------------------
# Database fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def engine() -> Iterator[Engine]:
    sqlite_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(sqlite_engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(sqlite_engine, "begin")
    def _emit_begin(connection: Any) -> None:
        connection.exec_driver_sql("BEGIN")

    Base.metadata.create_all(sqlite_engine)
    yield sqlite_engine
    sqlite_engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker:
    return build_session_factory(engine)


@pytest.fixture()
def session(session_factory: sessionmaker) -> Iterator[Session]:
    db_session = session_factory()
    try:
        yield db_session
    finally:
        db_session.rollback()
        db_session.close()


@pytest.fixture()
def store_scope(session_factory: sessionmaker) -> Callable[[], Any]:
    return lambda: transactional_store(session_factory)


# ---------------------------------------------------------------------------
# In-memory fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def memory_store() -> InMemoryTalkStore:
    return InMemoryTalkStore()


@pytest.fixture()
def memory_store_scope(memory_store: InMemoryTalkStore) -> Callable[[], Any]:
    @contextmanager
    def _scope() -> Iterator[InMemoryTalkStore]:
        yield memory_store

    return _scope


@pytest.fixture()
def inline_executor() -> InlineExecutor:
    return InlineExecutor()


@pytest.fixture()
def make_csv() -> Callable[..., io.BytesIO]:
    """
    Build a binary CSV source from data lines (header prepended).
    """

    def _make(*rows: str, header: str = CSV_HEADER) -> io.BytesIO:
        return io.BytesIO(("\n".join((header, *rows)) + "\n").encode("utf-8"))

    return _make


@pytest.fixture()
def talk_factory() -> Callable[..., Talk]:
    return build_talk
