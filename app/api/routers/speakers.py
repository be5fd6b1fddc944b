"""
app/api/routers/speakers.py

Speaker catalogue endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_speaker_service
from app.domain.talk import InvalidIdentifierError
from app.schemas.catalog import (
    CountResponse,
    SpeakerCreateRequest,
    SpeakerResponse,
    SpeakerUpdateRequest,
    TalkResponse,
)
from app.services.speaker_service import SpeakerConflictError, SpeakerService

router = APIRouter(prefix="/speakers", tags=["speakers"])


def _bad_identifier(exc: InvalidIdentifierError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _speaker_not_found(speaker_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Speaker not found: {speaker_id}",
    )


@router.get("", response_model=list[SpeakerResponse])
def list_speakers(service: SpeakerService = Depends(get_speaker_service)) -> list[SpeakerResponse]:
    return [SpeakerResponse.from_profile(profile) for profile in service.list_speakers()]


@router.get("/count", response_model=CountResponse)
def count_speakers(service: SpeakerService = Depends(get_speaker_service)) -> CountResponse:
    return CountResponse(count=service.count_speakers())


@router.get("/search", response_model=list[SpeakerResponse])
def search_speakers(
    name: str = Query(min_length=1, description="Case-insensitive name fragment"),
    service: SpeakerService = Depends(get_speaker_service),
) -> list[SpeakerResponse]:
    return [SpeakerResponse.from_profile(profile) for profile in service.search_speakers(name)]


@router.get("/name/{name}", response_model=SpeakerResponse)
def get_speaker_by_name(
    name: str,
    service: SpeakerService = Depends(get_speaker_service),
) -> SpeakerResponse:
    profile = service.get_speaker_by_name(name)
    if profile is None:
        raise _speaker_not_found(name)
    return SpeakerResponse.from_profile(profile)


@router.get("/{speaker_id}", response_model=SpeakerResponse)
def get_speaker(
    speaker_id: str,
    service: SpeakerService = Depends(get_speaker_service),
) -> SpeakerResponse:
    try:
        profile = service.get_speaker(speaker_id)
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    if profile is None:
        raise _speaker_not_found(speaker_id)
    return SpeakerResponse.from_profile(profile)


@router.get("/{speaker_id}/talks", response_model=list[TalkResponse])
def get_speaker_talks(
    speaker_id: str,
    service: SpeakerService = Depends(get_speaker_service),
) -> list[TalkResponse]:
    try:
        talks = service.talks_for_speaker(speaker_id)
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    if talks is None:
        raise _speaker_not_found(speaker_id)
    return [TalkResponse.from_talk(talk) for talk in talks]


@router.post("", response_model=SpeakerResponse, status_code=status.HTTP_201_CREATED)
def create_speaker(
    body: SpeakerCreateRequest,
    service: SpeakerService = Depends(get_speaker_service),
) -> SpeakerResponse:
    """
    Create a speaker. Raises HTTP 409 when the name is already taken.
    """
    try:
        profile = service.create_speaker(name=body.name, bio=body.bio)
    except SpeakerConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return SpeakerResponse.from_profile(profile)


@router.put("/{speaker_id}", response_model=SpeakerResponse)
def update_speaker(
    speaker_id: str,
    body: SpeakerUpdateRequest,
    service: SpeakerService = Depends(get_speaker_service),
) -> SpeakerResponse:
    try:
        profile = service.update_bio(speaker_id, body.bio)
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    if profile is None:
        raise _speaker_not_found(speaker_id)
    return SpeakerResponse.from_profile(profile)


@router.delete("/{speaker_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_speaker(
    speaker_id: str,
    service: SpeakerService = Depends(get_speaker_service),
) -> Response:
    """
    Delete a speaker. Raises HTTP 409 while the speaker still has talks.
    """
    try:
        deleted = service.delete_speaker(speaker_id)
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    except SpeakerConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    if not deleted:
        raise _speaker_not_found(speaker_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
