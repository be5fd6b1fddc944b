"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.speaker import SpeakerRecord
from db.models.talk import TalkRecord

__all__ = [
    "SpeakerRecord",
    "TalkRecord",
]
