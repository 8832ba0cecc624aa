"""Academic and professional task schemas."""

from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, Field

from cadence.schemas.base import BaseSchema, Minutes, TimestampMixin

# Type aliases for enums (used as literals for API validation)
PriorityType = Literal["low", "medium", "high", "urgent"]
AcademicTaskTypeType = Literal["lecture", "quiz", "exam", "lab", "assignment", "selfstudy", "deadline"]
AcademicTaskStatusType = Literal["pending", "in_progress", "completed", "cancelled"]
ProfessionalTaskTypeType = Literal["application", "course", "certification", "interview", "networking", "deadline"]
ProfessionalTaskStatusType = Literal[
    "not_started", "in_progress", "applied", "interviewing", "offer", "accepted", "rejected", "completed"
]


# =============================================================================
# ACADEMIC
# =============================================================================


class AcademicTaskCreate(BaseSchema):
    """
    Schema for creating an academic task.

    Omitted or null priority/status fall back to the column defaults
    (medium / pending). due_date is an ISO-8601 string and is not validated.
    """

    type: AcademicTaskTypeType
    title: str = Field(..., min_length=1, max_length=255)
    course_code: str | None = Field(None, max_length=50)
    course_name: str | None = Field(None, max_length=255)
    description: str | None = None
    due_date: str | None = None
    duration_minutes: Minutes | None = None
    location: str | None = Field(None, max_length=255)
    priority: PriorityType | None = None
    status: AcademicTaskStatusType | None = None
    notes: str | None = None
    tags: str | None = None


class AcademicTaskRead(BaseSchema, TimestampMixin):
    """Schema for reading academic task data."""

    id: int
    type: str
    title: str
    course_code: str | None
    course_name: str | None
    description: str | None
    due_date: str | None
    duration_minutes: int | None
    location: str | None
    priority: str
    status: str
    grade: str | None
    notes: str | None
    tags: str | None
    completed_at: datetime | None


class AcademicTaskUpdate(BaseSchema):
    """
    Patch for an academic task.

    Only the columns listed here may be changed; any other key is rejected.
    Timestamps are stamped by the ledger, never taken from the caller.
    """

    model_config = ConfigDict(extra="forbid")

    type: AcademicTaskTypeType | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    course_code: str | None = Field(None, max_length=50)
    course_name: str | None = Field(None, max_length=255)
    description: str | None = None
    due_date: str | None = None
    duration_minutes: Minutes | None = None
    location: str | None = Field(None, max_length=255)
    priority: PriorityType | None = None
    status: AcademicTaskStatusType | None = None
    grade: str | None = Field(None, max_length=20)
    notes: str | None = None
    tags: str | None = None


class AcademicTaskFilters(BaseSchema):
    """Conjunctive filters for listing academic tasks. Empty values are ignored."""

    status: str | None = None
    course_code: str | None = None
    type: str | None = None
    upcoming_days: float | None = None


# =============================================================================
# PROFESSIONAL
# =============================================================================


class ProfessionalTaskCreate(BaseSchema):
    """Schema for creating a professional task."""

    type: ProfessionalTaskTypeType
    title: str = Field(..., min_length=1, max_length=255)
    company_organization: str | None = Field(None, max_length=255)
    position_role: str | None = Field(None, max_length=255)
    description: str | None = None
    deadline: str | None = None
    status: ProfessionalTaskStatusType | None = None
    priority: PriorityType | None = None
    application_url: str | None = None
    contact_info: str | None = None
    salary_compensation: str | None = Field(None, max_length=255)
    notes: str | None = None
    tags: str | None = None


class ProfessionalTaskRead(BaseSchema, TimestampMixin):
    """Schema for reading professional task data."""

    id: int
    type: str
    title: str
    company_organization: str | None
    position_role: str | None
    description: str | None
    deadline: str | None
    status: str
    priority: str
    application_url: str | None
    contact_info: str | None
    salary_compensation: str | None
    notes: str | None
    tags: str | None
    completed_at: datetime | None


class ProfessionalTaskUpdate(BaseSchema):
    """Patch for a professional task. Unknown keys are rejected."""

    model_config = ConfigDict(extra="forbid")

    type: ProfessionalTaskTypeType | None = None
    title: str | None = Field(None, min_length=1, max_length=255)
    company_organization: str | None = Field(None, max_length=255)
    position_role: str | None = Field(None, max_length=255)
    description: str | None = None
    deadline: str | None = None
    status: ProfessionalTaskStatusType | None = None
    priority: PriorityType | None = None
    application_url: str | None = None
    contact_info: str | None = None
    salary_compensation: str | None = Field(None, max_length=255)
    notes: str | None = None
    tags: str | None = None


class ProfessionalTaskFilters(BaseSchema):
    """Conjunctive filters for listing professional tasks."""

    status: str | None = None
    type: str | None = None
    company_organization: str | None = None  # Case-insensitive substring
    upcoming_days: float | None = None
