"""
Survey services.

This package contains business logic for:
- Creating a survey with its questions, options and recipients (SurveyCreationService)
- Editing questions of unpublished drafts (QuestionEditService)
- Date-driven status transitions run on a schedule (StatusSyncService)
"""

from .creation_service import SurveyCreationService
from .question_service import QuestionEditService
from .status_sync_service import StatusSyncService

__all__ = ["QuestionEditService", "StatusSyncService", "SurveyCreationService"]
