"""
Schemas for influence analysis endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.catalog import TalkResponse
from app.services.influence_analysis_service import SpeakerInfluenceSummary


class SpeakerInfluenceResponse(BaseModel):
    speaker: str
    talk_count: int
    total_views: int
    total_likes: int
    average_influence_score: float
    total_influence_score: float
    first_talk_year: int
    last_talk_year: int

    @classmethod
    def from_summary(cls, summary: SpeakerInfluenceSummary) -> "SpeakerInfluenceResponse":
        return cls(
            speaker=summary.speaker,
            talk_count=summary.talk_count,
            total_views=summary.total_views,
            total_likes=summary.total_likes,
            average_influence_score=summary.average_influence_score,
            total_influence_score=summary.total_influence_score,
            first_talk_year=summary.first_talk_year,
            last_talk_year=summary.last_talk_year,
        )


class TopSpeakersResponse(BaseModel):
    limit: int
    speakers: list[SpeakerInfluenceResponse] = Field(default_factory=list)


class MostInfluentialPerYearResponse(BaseModel):
    talks_by_year: dict[int, TalkResponse] = Field(default_factory=dict)
