"""
app/domain package marker.
"""

from app.domain.talk import (
    InvalidIdentifierError,
    Likes,
    Link,
    Speaker,
    SpeakerProfile,
    Talk,
    TalkDate,
    Views,
    influence_score,
    parse_identifier,
)
from app.domain.talk_import import (
    ErrorKind,
    ImportRun,
    ImportStatistics,
    ImportStatus,
    RowValidationError,
    derive_status,
)

__all__ = [
    "ErrorKind",
    "ImportRun",
    "ImportStatistics",
    "ImportStatus",
    "InvalidIdentifierError",
    "Likes",
    "Link",
    "RowValidationError",
    "Speaker",
    "SpeakerProfile",
    "Talk",
    "TalkDate",
    "Views",
    "derive_status",
    "influence_score",
    "parse_identifier",
]
