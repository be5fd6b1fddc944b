"""
app/repositories package marker.
"""

from app.repositories.errors import CatalogRepositoryError, DuplicateSpeakerError, DuplicateTalkError
from app.repositories.speaker_repository import SpeakerRepository
from app.repositories.sqlalchemy_talk_store import SqlAlchemyTalkStore, transactional_store
from app.repositories.talk_repository import TalkRepository
from app.repositories.talk_store import TalkStore

__all__ = [
    "CatalogRepositoryError",
    "DuplicateSpeakerError",
    "DuplicateTalkError",
    "SpeakerRepository",
    "SqlAlchemyTalkStore",
    "TalkRepository",
    "TalkStore",
    "transactional_store",
]
