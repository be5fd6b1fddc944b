"""
app/logging_utils.py

Structured logging helpers for import and cache lifecycle events.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.

    Non-JSON values (datetimes, UUIDs, enums) are rendered with ``str``.
    Skips serialization entirely when ``level`` is disabled.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))
