"""
app/repositories/talk_store.py

Persistence port used by the import and analysis services.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator, Sequence
from typing import Protocol

from app.domain.talk import Speaker, Talk


class TalkStore(Protocol):
    """
    Storage operations the import coordinator and analysis engine need.

    Implementations run inside a caller-owned transaction and never commit.
    """

    def find_speaker_by_name(self, name: str) -> Speaker | None:
        ...

    def save_speaker(self, speaker: Speaker) -> Speaker:
        ...

    def talk_exists(self, title: str, speaker_id: uuid.UUID) -> bool:
        ...

    def save_talks_batch(self, talks: Sequence[Talk]) -> int:
        ...

    def stream_all_talks(self) -> Iterator[Talk]:
        ...

    def find_talks_by_speaker_name(self, name: str) -> list[Talk]:
        ...

    def count_talks(self) -> int:
        ...
