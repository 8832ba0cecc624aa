"""Course catalog and study session log."""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models import Course, StudySession
from cadence.schemas.courses import (
    CourseCreate,
    CourseFilters,
    CourseRead,
    StudySessionCreate,
    StudySessionFilters,
    StudySessionRead,
)
from cadence.services.knowledge import UNSET, knowledge_aggregator

logger = logging.getLogger(__name__)


class CourseLedger:
    """Storage and queries for courses and study sessions."""

    async def add_course(
        self,
        db: AsyncSession,
        session_id: str,
        data: CourseCreate,
    ) -> CourseRead:
        """
        Add a course.

        A course_code already present in the session raises IntegrityError;
        the caller is responsible for rolling back.
        """
        course = Course(session_id=session_id, **data.model_dump(exclude_none=True))
        db.add(course)
        await db.commit()
        await db.refresh(course)
        logger.info("Course %s added for session %s", course.course_code, session_id)
        return CourseRead.model_validate(course)

    async def get_courses(
        self,
        db: AsyncSession,
        session_id: str,
        filters: CourseFilters | None = None,
    ) -> list[CourseRead]:
        """List courses, newest first."""
        filters = filters or CourseFilters()
        query = select(Course).where(Course.session_id == session_id)

        if filters.status:
            query = query.where(Course.status == filters.status)
        if filters.semester:
            query = query.where(Course.semester == filters.semester)

        query = query.order_by(Course.created_at.desc(), Course.id.desc())
        result = await db.execute(query.execution_options(populate_existing=True))
        return [CourseRead.model_validate(c) for c in result.scalars().all()]

    async def log_study_session(
        self,
        db: AsyncSession,
        session_id: str,
        data: StudySessionCreate,
    ) -> StudySessionRead:
        """
        Record a study session.

        With both course_code and topic present, the knowledge base entry is
        bumped: understanding_level becomes the proficiency, and key_concepts
        replaces the notes only if it was supplied.
        """
        values = data.model_dump(exclude_none=True)
        if data.session_date is not None:
            session_date = data.session_date
            if session_date.tzinfo is None:
                session_date = session_date.replace(tzinfo=timezone.utc)
            values["session_date"] = session_date.astimezone(timezone.utc)

        study = StudySession(session_id=session_id, **values)
        db.add(study)
        await db.commit()
        await db.refresh(study)

        if data.course_code and data.topic:
            notes = data.key_concepts if "key_concepts" in data.model_fields_set else UNSET
            await knowledge_aggregator.upsert(
                db,
                session_id,
                data.course_code,
                data.topic,
                proficiency_level=data.understanding_level,
                notes=notes,
            )

        return StudySessionRead.model_validate(study)

    async def get_study_sessions(
        self,
        db: AsyncSession,
        session_id: str,
        filters: StudySessionFilters | None = None,
    ) -> list[StudySessionRead]:
        """
        List study sessions, most recent first.

        Filters:
        - course_code: exact match
        - topic: case-insensitive substring
        - last_n_days: session_date on or after now - N days
        """
        filters = filters or StudySessionFilters()
        query = select(StudySession).where(StudySession.session_id == session_id)

        if filters.course_code:
            query = query.where(StudySession.course_code == filters.course_code)
        if filters.topic:
            query = query.where(StudySession.topic.ilike(f"%{filters.topic}%"))
        if filters.last_n_days:
            cutoff = datetime.now(timezone.utc) - timedelta(days=filters.last_n_days)
            query = query.where(StudySession.session_date >= cutoff)

        query = query.order_by(StudySession.session_date.desc(), StudySession.id.desc())
        result = await db.execute(query.execution_options(populate_existing=True))
        return [StudySessionRead.model_validate(s) for s in result.scalars().all()]


# Singleton instance
course_ledger = CourseLedger()
