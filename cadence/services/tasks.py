"""Academic and professional task ledger."""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import ColumnElement, case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models import (
    PRIORITY_RANK,
    PROFESSIONAL_TERMINAL_STATUSES,
    AcademicTask,
    AcademicTaskStatus,
    ProfessionalTask,
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

logger = logging.getLogger(__name__)

# NOT NULL columns; an explicit null in a patch leaves them unchanged
_REQUIRED_COLUMNS = frozenset({"type", "title", "priority", "status"})


def parse_iso_datetime(value: str | None) -> datetime | None:
    """
    Parse a stored ISO-8601 date/datetime string.

    Naive values are taken as UTC. Returns None for empty or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def in_window(value: str | None, days: float, now: datetime | None = None) -> bool:
    """True if `value` parses and falls within [now, now + days]."""
    parsed = parse_iso_datetime(value)
    if parsed is None:
        return False
    now = now or datetime.now(timezone.utc)
    return now <= parsed <= now + timedelta(days=days)


def priority_rank(column) -> ColumnElement[int]:
    """SQL expression ranking low < medium < high < urgent; unknown values rank lowest."""
    return case(PRIORITY_RANK, value=column, else_=-1)


class TaskLedger:
    """Storage and queries for academic and professional tasks."""

    # -------------------------------------------------------------------------
    # Academic
    # -------------------------------------------------------------------------

    async def add_academic_task(
        self,
        db: AsyncSession,
        session_id: str,
        data: AcademicTaskCreate,
    ) -> AcademicTaskRead:
        """Insert an academic task; omitted priority/status take the column defaults."""
        task = AcademicTask(session_id=session_id, **data.model_dump(exclude_none=True))
        db.add(task)
        await db.commit()
        await db.refresh(task)
        logger.info("Academic task %d added for session %s", task.id, session_id)
        return AcademicTaskRead.model_validate(task)

    async def get_academic_tasks(
        self,
        db: AsyncSession,
        session_id: str,
        filters: AcademicTaskFilters | None = None,
    ) -> list[AcademicTaskRead]:
        """
        List academic tasks.

        Filters:
        - status, course_code, type: exact match
        - upcoming_days: due_date within [now, now + N days]

        Ordered by due date (undated last), then priority (urgent first).
        """
        filters = filters or AcademicTaskFilters()
        query = select(AcademicTask).where(AcademicTask.session_id == session_id)

        if filters.status:
            query = query.where(AcademicTask.status == filters.status)
        if filters.course_code:
            query = query.where(AcademicTask.course_code == filters.course_code)
        if filters.type:
            query = query.where(AcademicTask.type == filters.type)
        if filters.upcoming_days:
            query = query.where(AcademicTask.due_date.is_not(None))

        query = query.order_by(
            AcademicTask.due_date.asc().nullslast(),
            priority_rank(AcademicTask.priority).desc(),
            AcademicTask.id.asc(),
        ).execution_options(populate_existing=True)

        result = await db.execute(query)
        tasks = result.scalars().all()

        # due_date is free-form text, so the window is applied on parsed values
        if filters.upcoming_days:
            now = datetime.now(timezone.utc)
            tasks = [t for t in tasks if in_window(t.due_date, filters.upcoming_days, now)]

        return [AcademicTaskRead.model_validate(t) for t in tasks]

    async def update_academic_task(
        self,
        db: AsyncSession,
        session_id: str,
        task_id: int,
        updates: AcademicTaskUpdate,
    ) -> int:
        """
        Apply a patch to one academic task.

        Stamps updated_at, and completed_at when the patch sets status to
        completed. completed_at is never cleared. Returns the number of rows
        touched; an unknown id is a silent no-op (0).
        """
        values = {
            k: v for k, v in updates.model_dump(exclude_unset=True).items()
            if v is not None or k not in _REQUIRED_COLUMNS
        }
        values["updated_at"] = func.now()
        if values.get("status") == AcademicTaskStatus.COMPLETED.value:
            values["completed_at"] = func.now()

        result = await db.execute(
            update(AcademicTask)
            .where(AcademicTask.id == task_id, AcademicTask.session_id == session_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        if result.rowcount == 0:
            logger.info("Academic task %d not found for session %s; nothing updated", task_id, session_id)
        return result.rowcount

    # -------------------------------------------------------------------------
    # Professional
    # -------------------------------------------------------------------------

    async def add_professional_task(
        self,
        db: AsyncSession,
        session_id: str,
        data: ProfessionalTaskCreate,
    ) -> ProfessionalTaskRead:
        """Insert a professional task."""
        task = ProfessionalTask(session_id=session_id, **data.model_dump(exclude_none=True))
        db.add(task)
        await db.commit()
        await db.refresh(task)
        logger.info("Professional task %d added for session %s", task.id, session_id)
        return ProfessionalTaskRead.model_validate(task)

    async def get_professional_tasks(
        self,
        db: AsyncSession,
        session_id: str,
        filters: ProfessionalTaskFilters | None = None,
    ) -> list[ProfessionalTaskRead]:
        """
        List professional tasks.

        Filters:
        - status, type: exact match
        - company_organization: case-insensitive substring
        - upcoming_days: deadline within [now, now + N days]
        """
        filters = filters or ProfessionalTaskFilters()
        query = select(ProfessionalTask).where(ProfessionalTask.session_id == session_id)

        if filters.status:
            query = query.where(ProfessionalTask.status == filters.status)
        if filters.type:
            query = query.where(ProfessionalTask.type == filters.type)
        if filters.company_organization:
            query = query.where(
                ProfessionalTask.company_organization.ilike(f"%{filters.company_organization}%")
            )
        if filters.upcoming_days:
            query = query.where(ProfessionalTask.deadline.is_not(None))

        query = query.order_by(
            ProfessionalTask.deadline.asc().nullslast(),
            priority_rank(ProfessionalTask.priority).desc(),
            ProfessionalTask.id.asc(),
        ).execution_options(populate_existing=True)

        result = await db.execute(query)
        tasks = result.scalars().all()

        if filters.upcoming_days:
            now = datetime.now(timezone.utc)
            tasks = [t for t in tasks if in_window(t.deadline, filters.upcoming_days, now)]

        return [ProfessionalTaskRead.model_validate(t) for t in tasks]

    async def update_professional_task(
        self,
        db: AsyncSession,
        session_id: str,
        task_id: int,
        updates: ProfessionalTaskUpdate,
    ) -> int:
        """
        Apply a patch to one professional task.

        completed_at is stamped when status moves to accepted, rejected or
        completed. Returns the number of rows touched.
        """
        values = {
            k: v for k, v in updates.model_dump(exclude_unset=True).items()
            if v is not None or k not in _REQUIRED_COLUMNS
        }
        values["updated_at"] = func.now()
        if values.get("status") in PROFESSIONAL_TERMINAL_STATUSES:
            values["completed_at"] = func.now()

        result = await db.execute(
            update(ProfessionalTask)
            .where(ProfessionalTask.id == task_id, ProfessionalTask.session_id == session_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        if result.rowcount == 0:
            logger.info("Professional task %d not found for session %s; nothing updated", task_id, session_id)
        return result.rowcount


# Singleton instance
task_ledger = TaskLedger()
