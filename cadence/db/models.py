"""
SQLAlchemy 2.0 Models for Cadence.

Uses modern declarative syntax with Mapped[] type annotations.
Every table carries a session_id column: all state is namespaced by the
client-chosen session token and every query filters on it.
Column types are kept portable so the same models run on PostgreSQL
(production) and SQLite (tests, local runs).
"""

from datetime import datetime
from enum import Enum as PyEnum
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from cadence.db.base import Base


# =============================================================================
# ENUMS
# =============================================================================


class Priority(str, PyEnum):
    """Task priority, shared by academic and professional tasks."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Severity order; string order of the values does not match it
PRIORITY_RANK: dict[str, int] = {
    Priority.LOW.value: 0,
    Priority.MEDIUM.value: 1,
    Priority.HIGH.value: 2,
    Priority.URGENT.value: 3,
}


class AcademicTaskStatus(str, PyEnum):
    """Progress status of an academic task."""

    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ProfessionalTaskStatus(str, PyEnum):
    """Pipeline status of a professional task."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    APPLIED = "applied"
    INTERVIEWING = "interviewing"
    OFFER = "offer"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


# Statuses that close out a professional task and stamp completed_at
PROFESSIONAL_TERMINAL_STATUSES = frozenset(
    {
        ProfessionalTaskStatus.ACCEPTED.value,
        ProfessionalTaskStatus.REJECTED.value,
        ProfessionalTaskStatus.COMPLETED.value,
    }
)


class CourseStatus(str, PyEnum):
    """Enrollment status of a course."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DROPPED = "dropped"


class ChatRole(str, PyEnum):
    """Role in chat history."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


# =============================================================================
# MODELS
# =============================================================================


class SessionValue(Base):
    """
    Key/value scalar owned by a session.

    Backs the profile and preferences: one row per (session, key), the value
    is stored as JSON so strings, numbers and booleans round-trip.
    """

    __tablename__ = "session_values"

    session_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    key: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class AcademicTask(Base):
    """
    Academic task (lecture, quiz, exam, lab, assignment, self-study, deadline).

    due_date is kept as the ISO-8601 string the caller supplied; it is parsed
    only when a date window is applied.
    """

    __tablename__ = "academic_tasks"
    __table_args__ = (
        Index("idx_academic_session_due_date", "session_id", "due_date"),
        Index("idx_academic_session_course", "session_id", "course_code"),
        Index("idx_academic_session_status", "session_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    course_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    course_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    due_date: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    location: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Priority.MEDIUM.value
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=AcademicTaskStatus.PENDING.value
    )
    grade: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # Comma-separated
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class ProfessionalTask(Base):
    """Career task (application, online course, certification, interview, networking, deadline)."""

    __tablename__ = "professional_tasks"
    __table_args__ = (
        Index("idx_professional_session_deadline", "session_id", "deadline"),
        Index("idx_professional_session_status", "session_id", "status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    company_organization: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    position_role: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    deadline: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ProfessionalTaskStatus.NOT_STARTED.value
    )
    priority: Mapped[str] = mapped_column(
        String(10), nullable=False, default=Priority.MEDIUM.value
    )
    application_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contact_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    salary_compensation: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Course(Base):
    """Course in the student's catalog. course_code is unique within a session."""

    __tablename__ = "courses"
    __table_args__ = (
        UniqueConstraint("session_id", "course_code", name="unique_session_course_code"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    course_code: Mapped[str] = mapped_column(String(50), nullable=False)
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    instructor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    semester: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)  # e.g., "Fall 2025"
    credits: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=CourseStatus.ACTIVE.value
    )
    final_grade: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    topics_covered: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # Comma-separated
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class StudySession(Base):
    """A logged block of study on one topic."""

    __tablename__ = "study_sessions"
    __table_args__ = (
        Index("idx_study_sessions_session_date", "session_id", "session_date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    course_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    subtopics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    session_type: Mapped[Optional[str]] = mapped_column(String(30), nullable=True)
    understanding_level: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    key_concepts: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    questions_raised: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    session_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class KnowledgeEntry(Base):
    """
    Derived proficiency record for one (course, topic).

    Maintained by the knowledge aggregator from logged study sessions.
    """

    __tablename__ = "knowledge_base"
    __table_args__ = (
        UniqueConstraint(
            "session_id", "course_code", "topic", "subtopic", name="unique_session_knowledge_topic"
        ),
        Index("idx_knowledge_session_course", "session_id", "course_code"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    course_code: Mapped[str] = mapped_column(String(50), nullable=False)
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    subtopic: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    proficiency_level: Mapped[str] = mapped_column(
        String(20), nullable=False, default="beginner"
    )
    last_studied: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    study_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    related_topics: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


class ChatMessage(Base):
    """
    Individual chat message, partitioned by conversation mode.

    Append-only: rows are never updated or deleted.
    """

    __tablename__ = "chat_history"
    __table_args__ = (Index("idx_chat_history_session_mode", "session_id", "mode"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    mode: Mapped[str] = mapped_column(String(30), nullable=False)  # 'study_helper', 'planner', 'general'
    role: Mapped[str] = mapped_column(String(20), nullable=False)  # 'user', 'assistant', 'system'
    content: Mapped[str] = mapped_column(Text, nullable=False)
    course_context: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    task_references: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
