"""Pydantic schemas for API request/response validation."""

from cadence.schemas.profile import (
    PreferencesRead,
    PreferencesUpdate,
    ProfileRead,
    ProfileUpdate,
)
from cadence.schemas.tasks import (
    AcademicTaskCreate,
    AcademicTaskFilters,
    AcademicTaskRead,
    AcademicTaskUpdate,
    ProfessionalTaskCreate,
    ProfessionalTaskFilters,
    ProfessionalTaskRead,
    ProfessionalTaskUpdate,
)
from cadence.schemas.courses import (
    CourseCreate,
    CourseFilters,
    CourseRead,
    KnowledgeEntryRead,
    StudySessionCreate,
    StudySessionFilters,
    StudySessionRead,
)
from cadence.schemas.context import (
    FullContext,
    StudentContext,
    UpcomingAcademicTask,
    UpcomingItem,
    UpcomingProfessionalTask,
)
from cadence.schemas.chat import (
    ChatMessageRead,
    ChatRequest,
    ChatResponse,
    ToolCallRead,
    ToolResultRead,
)

__all__ = [
    # Profile
    "ProfileRead",
    "ProfileUpdate",
    "PreferencesRead",
    "PreferencesUpdate",
    # Tasks
    "AcademicTaskCreate",
    "AcademicTaskFilters",
    "AcademicTaskRead",
    "AcademicTaskUpdate",
    "ProfessionalTaskCreate",
    "ProfessionalTaskFilters",
    "ProfessionalTaskRead",
    "ProfessionalTaskUpdate",
    # Courses & study
    "CourseCreate",
    "CourseFilters",
    "CourseRead",
    "KnowledgeEntryRead",
    "StudySessionCreate",
    "StudySessionFilters",
    "StudySessionRead",
    # Context
    "FullContext",
    "StudentContext",
    "UpcomingAcademicTask",
    "UpcomingItem",
    "UpcomingProfessionalTask",
    # Chat
    "ChatMessageRead",
    "ChatRequest",
    "ChatResponse",
    "ToolCallRead",
    "ToolResultRead",
]
