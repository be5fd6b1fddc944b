"""
Influence analysis endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.schemas.analysis import (
    MostInfluentialPerYearResponse,
    SpeakerInfluenceResponse,
    TopSpeakersResponse,
)
from app.schemas.catalog import TalkResponse
from app.services.influence_analysis_service import CachedInfluenceAnalysis, get_influence_analysis

router = APIRouter(prefix="/analysis", tags=["analysis"])


@router.get("/speakers/top", response_model=TopSpeakersResponse)
def get_top_speakers(
    limit: int = Query(default=10, ge=1, le=100, description="Number of speakers to return"),
    analysis: CachedInfluenceAnalysis = Depends(get_influence_analysis),
) -> TopSpeakersResponse:
    try:
        summaries = analysis.top_speakers(limit)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return TopSpeakersResponse(
        limit=limit,
        speakers=[SpeakerInfluenceResponse.from_summary(summary) for summary in summaries],
    )


@router.get("/talks/most-influential-per-year", response_model=MostInfluentialPerYearResponse)
def get_most_influential_per_year(
    analysis: CachedInfluenceAnalysis = Depends(get_influence_analysis),
) -> MostInfluentialPerYearResponse:
    talks = analysis.most_influential_per_year()
    return MostInfluentialPerYearResponse(
        talks_by_year={year: TalkResponse.from_talk(talk) for year, talk in talks.items()}
    )


@router.get("/speakers/{speaker}", response_model=SpeakerInfluenceResponse)
def get_speaker_analysis(
    speaker: str,
    analysis: CachedInfluenceAnalysis = Depends(get_influence_analysis),
) -> SpeakerInfluenceResponse:
    summary = analysis.analyze_speaker(speaker)
    if summary is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No talks found for speaker: {speaker}",
        )
    return SpeakerInfluenceResponse.from_summary(summary)
