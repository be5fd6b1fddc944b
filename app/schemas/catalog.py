"""
Schemas for speaker and talk catalogue endpoints.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, Field

from app.domain.talk import SpeakerProfile, Talk


class SpeakerResponse(BaseModel):
    id: UUID
    name: str
    bio: str | None = None
    talk_count: int = 0
    total_views: int = 0
    total_likes: int = 0

    @classmethod
    def from_profile(cls, profile: SpeakerProfile) -> "SpeakerResponse":
        return cls(
            id=profile.speaker.id,
            name=profile.speaker.name,
            bio=profile.speaker.bio,
            talk_count=profile.talk_count,
            total_views=profile.total_views,
            total_likes=profile.total_likes,
        )


class SpeakerCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    bio: str | None = None


class SpeakerUpdateRequest(BaseModel):
    bio: str | None = None


class TalkResponse(BaseModel):
    id: UUID
    title: str
    speaker_id: UUID
    speaker: str
    date: str
    year: int
    month: int
    views: int
    likes: int
    link: str
    influence_score: float

    @classmethod
    def from_talk(cls, talk: Talk) -> "TalkResponse":
        return cls(
            id=talk.id,
            title=talk.title,
            speaker_id=talk.speaker.id,
            speaker=talk.speaker.name,
            date=str(talk.date),
            year=talk.date.year,
            month=talk.date.month,
            views=talk.views.value,
            likes=talk.likes.value,
            link=talk.link.value,
            influence_score=talk.influence_score,
        )


class TalkCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    speaker: str = Field(min_length=1, max_length=255)
    date: str = Field(description="Month and year, e.g. 'December 2021'")
    views: int = Field(ge=0)
    likes: int = Field(ge=0)
    link: str


class TalkUpdateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=500)
    date: str = Field(description="Month and year, e.g. 'December 2021'")
    views: int = Field(ge=0)
    likes: int = Field(ge=0)
    link: str


class CountResponse(BaseModel):
    count: int
