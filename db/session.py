"""
db/session.py

Engine and session wiring for the talk catalogue.

The engine is built lazily so importing models or services never needs a
reachable database. Request handlers use ``get_db``; background import runs
and analysis queries open their own sessions through ``SessionLocal``.
"""

from __future__ import annotations

import os
from collections.abc import Generator, Mapping
from dataclasses import dataclass

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db.config import resolve_database_url


@dataclass(frozen=True)
class PoolSettings:
    echo: bool = False
    pool_size: int = 5
    max_overflow: int = 10
    pool_recycle: int = 1800

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PoolSettings":
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            echo=env.get("SQL_ECHO", "").strip().lower() in {"1", "true", "yes", "on"},
            pool_size=_as_int(env.get("DB_POOL_SIZE"), defaults.pool_size),
            max_overflow=_as_int(env.get("DB_MAX_OVERFLOW"), defaults.max_overflow),
            pool_recycle=_as_int(env.get("DB_POOL_RECYCLE"), defaults.pool_recycle),
        )


def _as_int(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def create_db_engine(
    database_url: str | None = None,
    pool: PoolSettings | None = None,
) -> Engine:
    """
    Build the PostgreSQL engine. Talk and speaker tables rely on
    ``ON CONFLICT`` inserts, so other backends are rejected here.
    """

    url = database_url or resolve_database_url()
    if not url.startswith("postgresql"):
        raise RuntimeError("Only PostgreSQL URLs are supported.")

    settings = pool or PoolSettings.from_env()
    return create_engine(
        url,
        echo=settings.echo,
        pool_pre_ping=True,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
    )


def build_session_factory(engine: Engine) -> sessionmaker:
    # Loaded rows stay readable after the session commits.
    return sessionmaker(bind=engine, class_=Session, autoflush=False, expire_on_commit=False)


_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_engine() -> Engine:
    """Return the shared engine, creating it on first call."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def SessionLocal() -> Session:
    global _session_factory
    if _session_factory is None:
        _session_factory = build_session_factory(get_engine())
    return _session_factory()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
