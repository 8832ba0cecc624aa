"""Composite read views over a session's state."""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config import get_settings
from cadence.db.models import AcademicTaskStatus
from cadence.schemas.context import (
    FullContext,
    StudentContext,
    UpcomingAcademicTask,
    UpcomingItem,
    UpcomingProfessionalTask,
)
from cadence.schemas.courses import CourseFilters, StudySessionFilters
from cadence.schemas.tasks import AcademicTaskFilters, ProfessionalTaskFilters
from cadence.services.courses import course_ledger
from cadence.services.knowledge import knowledge_aggregator
from cadence.services.session_store import session_store
from cadence.services.tasks import parse_iso_datetime, task_ledger

logger = logging.getLogger(__name__)
settings = get_settings()


def _upcoming_sort_key(item: UpcomingItem) -> tuple[int, datetime | None]:
    """Dated items ascending, undated items last."""
    raw = item.due_date if isinstance(item, UpcomingAcademicTask) else item.deadline
    parsed = parse_iso_datetime(raw)
    if parsed is None:
        return (1, None)
    return (0, parsed)


class ContextComposer:
    """Builds the student context and the merged upcoming view."""

    async def get_student_context(
        self,
        db: AsyncSession,
        session_id: str,
        course_code: str | None = None,
    ) -> StudentContext:
        """
        Active courses, knowledge (optionally for one course) and recent study.

        total_study_time sums duration_minutes over the recent window, counting
        missing durations as zero.
        """
        courses = await course_ledger.get_courses(
            db, session_id, CourseFilters(status="active")
        )
        knowledge = await knowledge_aggregator.get_knowledge_base(db, session_id, course_code)
        recent = await course_ledger.get_study_sessions(
            db, session_id, StudySessionFilters(last_n_days=settings.recent_study_days)
        )
        return StudentContext(
            courses=courses,
            knowledge=knowledge,
            recent_study=recent,
            total_study_time=sum(s.duration_minutes or 0 for s in recent),
        )

    async def get_full_context(self, db: AsyncSession, session_id: str) -> FullContext:
        """Profile and preferences plus the student context."""
        profile = await session_store.get_profile(db, session_id)
        preferences = await session_store.get_preferences(db, session_id)
        student = await self.get_student_context(db, session_id)
        return FullContext(
            profile=profile,
            preferences=preferences,
            **student.model_dump(),
        )

    async def get_all_upcoming(
        self,
        db: AsyncSession,
        session_id: str,
        days: float = 7,
    ) -> list[UpcomingItem]:
        """
        Pending academic tasks and professional tasks due within `days`.

        Each item is tagged with its category and the list is sorted by its
        due date/deadline.
        """
        academic = await task_ledger.get_academic_tasks(
            db,
            session_id,
            AcademicTaskFilters(status=AcademicTaskStatus.PENDING.value, upcoming_days=days),
        )
        professional = await task_ledger.get_professional_tasks(
            db, session_id, ProfessionalTaskFilters(upcoming_days=days)
        )

        items: list[UpcomingItem] = [
            *(UpcomingAcademicTask(**t.model_dump()) for t in academic),
            *(UpcomingProfessionalTask(**t.model_dump()) for t in professional),
        ]
        items.sort(key=_upcoming_sort_key)
        return items


# Singleton instance
context_composer = ContextComposer()
