"""
db/models/talk.py

Talk table. A talk is unique per (title, speaker).
"""

from __future__ import annotations

import uuid

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class TalkRecord(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "talks"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    speaker_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("speakers.id", ondelete="RESTRICT"),
        nullable=False,
    )
    talk_year: Mapped[int] = mapped_column(Integer, nullable=False)
    talk_month: Mapped[int] = mapped_column(Integer, nullable=False)
    views: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    likes: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    link: Mapped[str] = mapped_column(Text, nullable=False)

    __table_args__ = (
        UniqueConstraint("title", "speaker_id", name="uq_talks_title_speaker"),
        CheckConstraint("talk_month BETWEEN 1 AND 12", name="ck_talks_month_range"),
        CheckConstraint("views >= 0", name="ck_talks_views_non_negative"),
        CheckConstraint("likes >= 0", name="ck_talks_likes_non_negative"),
        Index("ix_talks_speaker_id", "speaker_id"),
        Index("ix_talks_talk_year", "talk_year"),
        Index("ix_talks_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TalkRecord id={self.id} title={self.title!r}>"
