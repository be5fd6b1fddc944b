"""
app/mappers package marker.
"""

from app.mappers.talk_mapper import ImportRecord, TalkCsvMapper, ValidationResult

__all__ = [
    "ImportRecord",
    "TalkCsvMapper",
    "ValidationResult",
]
