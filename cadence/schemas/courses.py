"""Course, study session and knowledge base schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from cadence.schemas.base import BaseSchema, Minutes, TimestampMixin

CourseStatusType = Literal["active", "completed", "dropped"]
SessionTypeType = Literal["lecture_review", "practice", "reading", "problem_solving", "group_study"]
UnderstandingLevelType = Literal["struggling", "partial", "good", "excellent"]


# =============================================================================
# COURSES
# =============================================================================


class CourseCreate(BaseSchema):
    """Schema for adding a course to the catalog."""

    course_code: str = Field(..., min_length=1, max_length=50)
    course_name: str = Field(..., min_length=1, max_length=255)
    instructor: str | None = Field(None, max_length=255)
    semester: str | None = Field(None, max_length=50)
    credits: float | None = None
    status: CourseStatusType | None = None
    final_grade: str | None = Field(None, max_length=20)
    description: str | None = None
    topics_covered: str | None = None


class CourseRead(BaseSchema, TimestampMixin):
    """Schema for reading course data."""

    id: int
    course_code: str
    course_name: str
    instructor: str | None
    semester: str | None
    credits: float | None
    status: str
    final_grade: str | None
    description: str | None
    topics_covered: str | None


class CourseFilters(BaseSchema):
    """Filters for listing courses."""

    status: str | None = None
    semester: str | None = None


# =============================================================================
# STUDY SESSIONS
# =============================================================================


class StudySessionCreate(BaseSchema):
    """
    Schema for logging a study session.

    When both course_code and topic are present the knowledge base entry for
    (course_code, topic) is created or bumped.
    """

    topic: str = Field(..., min_length=1, max_length=255)
    course_code: str | None = Field(None, max_length=50)
    subtopics: str | None = None
    duration_minutes: Minutes | None = Field(None, ge=0)
    session_type: SessionTypeType | None = None
    understanding_level: UnderstandingLevelType | None = None
    key_concepts: str | None = None
    questions_raised: str | None = None
    notes: str | None = None
    session_date: datetime | None = None  # Defaults to now


class StudySessionRead(BaseSchema):
    """Schema for reading study session data."""

    id: int
    course_code: str | None
    topic: str
    subtopics: str | None
    duration_minutes: int | None
    session_type: str | None
    understanding_level: str | None
    key_concepts: str | None
    questions_raised: str | None
    notes: str | None
    session_date: datetime
    created_at: datetime


class StudySessionFilters(BaseSchema):
    """Filters for listing study sessions."""

    course_code: str | None = None
    topic: str | None = None  # Case-insensitive substring
    last_n_days: float | None = None


# =============================================================================
# KNOWLEDGE BASE
# =============================================================================


class KnowledgeEntryRead(BaseSchema, TimestampMixin):
    """Proficiency record for one (course, topic)."""

    id: int
    course_code: str
    topic: str
    subtopic: str | None
    proficiency_level: str
    last_studied: datetime | None
    study_count: int
    notes: str | None
    related_topics: str | None
