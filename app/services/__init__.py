"""
app/services package marker.
"""

from app.services.import_orchestrator_service import (
    ImportOrchestratorService,
    ValidationErrorReport,
    get_import_orchestrator_service,
)
from app.services.import_registry import ImportRegistry, get_import_registry
from app.services.influence_analysis_service import (
    CachedInfluenceAnalysis,
    InfluenceAnalysisService,
    SpeakerInfluenceSummary,
    get_influence_analysis,
)
from app.services.speaker_service import SpeakerConflictError, SpeakerService
from app.services.talk_import_service import (
    ImportStreamError,
    TalkImportService,
    get_talk_import_service,
)
from app.services.talk_service import TalkConflictError, TalkService

__all__ = [
    "CachedInfluenceAnalysis",
    "ImportOrchestratorService",
    "ImportRegistry",
    "ImportStreamError",
    "InfluenceAnalysisService",
    "SpeakerConflictError",
    "SpeakerInfluenceSummary",
    "SpeakerService",
    "TalkConflictError",
    "TalkImportService",
    "TalkService",
    "ValidationErrorReport",
    "get_import_orchestrator_service",
    "get_import_registry",
    "get_influence_analysis",
    "get_talk_import_service",
]
