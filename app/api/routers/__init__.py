"""
app/api/routers package marker.
"""

from fastapi import APIRouter

from app.api.routers.analysis import router as analysis_router
from app.api.routers.speakers import router as speakers_router
from app.api.routers.talk_import import router as talk_import_router
from app.api.routers.talks import router as talks_router

API_PREFIX = "/api/v1"


def build_api_router() -> APIRouter:
    """
    Versioned router bundling every public endpoint group.
    """

    api_router = APIRouter(prefix=API_PREFIX)
    api_router.include_router(talk_import_router)
    api_router.include_router(analysis_router)
    api_router.include_router(speakers_router)
    api_router.include_router(talks_router)
    return api_router


__all__ = [
    "API_PREFIX",
    "analysis_router",
    "build_api_router",
    "speakers_router",
    "talk_import_router",
    "talks_router",
]
