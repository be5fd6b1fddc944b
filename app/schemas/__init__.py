"""
app/schemas package marker.
"""

from app.schemas.analysis import (
    MostInfluentialPerYearResponse,
    SpeakerInfluenceResponse,
    TopSpeakersResponse,
)
from app.schemas.catalog import (
    CountResponse,
    SpeakerCreateRequest,
    SpeakerResponse,
    SpeakerUpdateRequest,
    TalkCreateRequest,
    TalkResponse,
    TalkUpdateRequest,
)
from app.schemas.talk_import import (
    ImportAcceptedResponse,
    ImportRunListResponse,
    ImportRunResponse,
    ImportStatisticsResponse,
    ValidationErrorReportResponse,
    ValidationErrorResponse,
)

__all__ = [
    "CountResponse",
    "ImportAcceptedResponse",
    "ImportRunListResponse",
    "ImportRunResponse",
    "ImportStatisticsResponse",
    "MostInfluentialPerYearResponse",
    "SpeakerCreateRequest",
    "SpeakerInfluenceResponse",
    "SpeakerResponse",
    "SpeakerUpdateRequest",
    "TalkCreateRequest",
    "TalkResponse",
    "TalkUpdateRequest",
    "TopSpeakersResponse",
    "ValidationErrorReportResponse",
    "ValidationErrorResponse",
]
