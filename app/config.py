"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


@dataclass(frozen=True)
class ImportSettings:
    """
    Runtime settings for talk CSV imports.
    """

    batch_size: int = 1000
    log_validation_errors: bool = True
    worker_count: int = 2
    queue_size: int = 50
    registry_ttl_seconds: int = 0


@dataclass(frozen=True)
class AnalysisSettings:
    """
    Worker pool sizing for influence analysis fan-out.
    """

    worker_count: int = 4
    queue_size: int = 100


@dataclass(frozen=True)
class CacheSettings:
    """
    Result cache lifetime and the daily refresh schedule (UTC).
    """

    ttl_seconds: int = 0
    refresh_hour: int = 2
    refresh_minute: int = 0
    refresh_enabled: bool = True


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@lru_cache(maxsize=1)
def get_import_settings() -> ImportSettings:
    """
    Return cached import settings from environment variables.
    """

    return ImportSettings(
        batch_size=max(1, _get_int_env("IMPORT_BATCH_SIZE", 1000)),
        log_validation_errors=_get_bool_env("IMPORT_LOG_VALIDATION_ERRORS", True),
        worker_count=max(1, _get_int_env("IMPORT_WORKER_COUNT", 2)),
        queue_size=max(0, _get_int_env("IMPORT_QUEUE_SIZE", 50)),
        registry_ttl_seconds=max(0, _get_int_env("IMPORT_REGISTRY_TTL_SECONDS", 0)),
    )


@lru_cache(maxsize=1)
def get_analysis_settings() -> AnalysisSettings:
    """
    Return cached analysis pool settings from environment variables.
    """

    return AnalysisSettings(
        worker_count=max(1, _get_int_env("ANALYSIS_WORKER_COUNT", 4)),
        queue_size=max(0, _get_int_env("ANALYSIS_QUEUE_SIZE", 100)),
    )


@lru_cache(maxsize=1)
def get_cache_settings() -> CacheSettings:
    """
    Return cached result-cache settings from environment variables.
    """

    return CacheSettings(
        ttl_seconds=max(0, _get_int_env("CACHE_TTL_SECONDS", 0)),
        refresh_hour=min(23, max(0, _get_int_env("CACHE_REFRESH_HOUR", 2))),
        refresh_minute=min(59, max(0, _get_int_env("CACHE_REFRESH_MINUTE", 0))),
        refresh_enabled=_get_bool_env("CACHE_REFRESH_ENABLED", True),
    )


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    return LoggingSettings(level=_get_str_env("LOG_LEVEL", "INFO").upper())
