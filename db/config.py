"""
db/config.py

Environment-driven database configuration helpers.
"""

from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from pathlib import Path

_ENV_FILENAMES = (".env", ".env.local")
_CLOUD_LIKE_ENVS = frozenset({"prod", "production", "staging", "cloud"})
_PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_files(
    project_root: Path | None = None,
    environ: MutableMapping[str, str] | None = None,
) -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    root = project_root or _PROJECT_ROOT
    target = os.environ if environ is None else environ
    for filename in _ENV_FILENAMES:
        env_path = root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            if key.startswith("export "):
                key = key[len("export ") :].strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in target:
                target[key] = value


def normalize_postgres_url(url: str) -> str:
    """
    Normalize postgres URLs to SQLAlchemy's psycopg (v3) driver form.
    """

    for prefix in ("postgres://", "postgresql://"):
        if url.startswith(prefix):
            return "postgresql+psycopg://" + url[len(prefix) :]
    return url


def resolve_database_url(environ: Mapping[str, str] | None = None) -> str:
    """
    Resolve the talks database URL.

    Priority:
    1) DATABASE_URL
    2) CLOUD_DATABASE_URL when ENVIRONMENT is cloud-like
    3) LOCAL_DATABASE_URL
    """

    if environ is None:
        load_env_files()
        environ = os.environ

    direct_url = environ.get("DATABASE_URL")
    if direct_url:
        return normalize_postgres_url(direct_url)

    environment = environ.get("ENVIRONMENT", "local").strip().lower()
    cloud_url = environ.get("CLOUD_DATABASE_URL")
    if environment in _CLOUD_LIKE_ENVS and cloud_url:
        return normalize_postgres_url(cloud_url)

    local_url = environ.get("LOCAL_DATABASE_URL")
    if local_url:
        return normalize_postgres_url(local_url)

    raise RuntimeError(
        "No database URL configured. Set DATABASE_URL, or configure "
        "LOCAL_DATABASE_URL / CLOUD_DATABASE_URL."
    )
