"""
app/api/routers/talks.py

Talk catalogue endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.api.dependencies import get_talk_service
from app.domain.talk import InvalidIdentifierError
from app.schemas.catalog import CountResponse, TalkCreateRequest, TalkResponse, TalkUpdateRequest
from app.services.talk_service import TalkConflictError, TalkService

router = APIRouter(prefix="/talks", tags=["talks"])


def _bad_identifier(exc: InvalidIdentifierError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _talk_not_found(talk_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Talk not found: {talk_id}",
    )


@router.get("", response_model=list[TalkResponse])
def list_talks(service: TalkService = Depends(get_talk_service)) -> list[TalkResponse]:
    return [TalkResponse.from_talk(talk) for talk in service.list_talks()]


@router.get("/count", response_model=CountResponse)
def count_talks(service: TalkService = Depends(get_talk_service)) -> CountResponse:
    return CountResponse(count=service.count_talks())


@router.get("/search", response_model=list[TalkResponse])
def search_talks(
    title: str = Query(min_length=1, description="Case-insensitive title fragment"),
    service: TalkService = Depends(get_talk_service),
) -> list[TalkResponse]:
    return [TalkResponse.from_talk(talk) for talk in service.search_talks(title)]


@router.get("/speaker/{name}", response_model=list[TalkResponse])
def get_talks_by_speaker(
    name: str,
    service: TalkService = Depends(get_talk_service),
) -> list[TalkResponse]:
    return [TalkResponse.from_talk(talk) for talk in service.talks_by_speaker_name(name)]


@router.get("/year/{year}", response_model=list[TalkResponse])
def get_talks_by_year(
    year: int,
    service: TalkService = Depends(get_talk_service),
) -> list[TalkResponse]:
    return [TalkResponse.from_talk(talk) for talk in service.talks_by_year(year)]


@router.get("/{talk_id}", response_model=TalkResponse)
def get_talk(
    talk_id: str,
    service: TalkService = Depends(get_talk_service),
) -> TalkResponse:
    try:
        talk = service.get_talk(talk_id)
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    if talk is None:
        raise _talk_not_found(talk_id)
    return TalkResponse.from_talk(talk)


@router.post("", response_model=TalkResponse, status_code=status.HTTP_201_CREATED)
def create_talk(
    body: TalkCreateRequest,
    service: TalkService = Depends(get_talk_service),
) -> TalkResponse:
    """
    Create a talk. Raises HTTP 409 when the speaker already has this title.
    """
    try:
        talk = service.create_talk(
            title=body.title,
            speaker_name=body.speaker,
            date=body.date,
            views=body.views,
            likes=body.likes,
            link=body.link,
        )
    except TalkConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return TalkResponse.from_talk(talk)


@router.put("/{talk_id}", response_model=TalkResponse)
def update_talk(
    talk_id: str,
    body: TalkUpdateRequest,
    service: TalkService = Depends(get_talk_service),
) -> TalkResponse:
    try:
        talk = service.update_talk(
            talk_id,
            title=body.title,
            date=body.date,
            views=body.views,
            likes=body.likes,
            link=body.link,
        )
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    except TalkConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    if talk is None:
        raise _talk_not_found(talk_id)
    return TalkResponse.from_talk(talk)


@router.delete("/{talk_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_talk(
    talk_id: str,
    service: TalkService = Depends(get_talk_service),
) -> Response:
    try:
        deleted = service.delete_talk(talk_id)
    except InvalidIdentifierError as exc:
        raise _bad_identifier(exc) from exc
    if not deleted:
        raise _talk_not_found(talk_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
