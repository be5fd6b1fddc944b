"""
db/models/speaker.py

Speaker table: one row per distinct speaker name, compared ignoring case.
"""

from __future__ import annotations

from sqlalchemy import Index, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class SpeakerRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "speakers"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name as first imported; unique ignoring case",
    )
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<SpeakerRecord id={self.id} name={self.name!r}>"


Index("uq_speakers_name_lower", func.lower(SpeakerRecord.name), unique=True)
