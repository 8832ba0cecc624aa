"""
Per-session state handle and registry.

Every request touching a session runs inside that session's lock, so reads
and writes for one session are serialized in arrival order while different
sessions proceed independently. A handle exists only while some request
is using its session.
"""

import asyncio
import logging
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.session import ensure_schema
from cadence.schemas.chat import ChatMessageRead
from cadence.schemas.context import FullContext, StudentContext, UpcomingItem
from cadence.schemas.courses import (
    CourseCreate,
    CourseFilters,
    CourseRead,
    KnowledgeEntryRead,
    StudySessionCreate,
    StudySessionFilters,
    StudySessionRead,
)
from cadence.schemas.profile import PreferencesRead, PreferencesUpdate, ProfileRead, ProfileUpdate
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
from cadence.services.chat_history import chat_history
from cadence.services.context import context_composer
from cadence.services.courses import course_ledger
from cadence.services.knowledge import knowledge_aggregator
from cadence.services.session_store import session_store
from cadence.services.tasks import task_ledger

logger = logging.getLogger(__name__)


class StudentAgent:
    """
    All operations on one session's state, bound to a database session.

    Thin facade over the store, ledgers, aggregator and composer; it adds no
    behavior of its own beyond fixing the session id.
    """

    def __init__(self, db: AsyncSession, session_id: str):
        self.db = db
        self.session_id = session_id

    async def rollback(self) -> None:
        await self.db.rollback()

    # Profile & preferences

    async def set_profile(self, profile: ProfileUpdate) -> bool:
        return await session_store.set_profile(self.db, self.session_id, profile)

    async def get_profile(self) -> ProfileRead:
        return await session_store.get_profile(self.db, self.session_id)

    async def set_preferences(self, preferences: PreferencesUpdate) -> bool:
        return await session_store.set_preferences(self.db, self.session_id, preferences)

    async def get_preferences(self) -> PreferencesRead:
        return await session_store.get_preferences(self.db, self.session_id)

    # Academic tasks

    async def add_academic_task(self, data: AcademicTaskCreate) -> AcademicTaskRead:
        return await task_ledger.add_academic_task(self.db, self.session_id, data)

    async def get_academic_tasks(
        self, filters: AcademicTaskFilters | None = None
    ) -> list[AcademicTaskRead]:
        return await task_ledger.get_academic_tasks(self.db, self.session_id, filters)

    async def update_academic_task(self, task_id: int, updates: AcademicTaskUpdate) -> int:
        return await task_ledger.update_academic_task(self.db, self.session_id, task_id, updates)

    # Professional tasks

    async def add_professional_task(self, data: ProfessionalTaskCreate) -> ProfessionalTaskRead:
        return await task_ledger.add_professional_task(self.db, self.session_id, data)

    async def get_professional_tasks(
        self, filters: ProfessionalTaskFilters | None = None
    ) -> list[ProfessionalTaskRead]:
        return await task_ledger.get_professional_tasks(self.db, self.session_id, filters)

    async def update_professional_task(
        self, task_id: int, updates: ProfessionalTaskUpdate
    ) -> int:
        return await task_ledger.update_professional_task(
            self.db, self.session_id, task_id, updates
        )

    # Courses, study sessions, knowledge

    async def add_course(self, data: CourseCreate) -> CourseRead:
        return await course_ledger.add_course(self.db, self.session_id, data)

    async def get_courses(self, filters: CourseFilters | None = None) -> list[CourseRead]:
        return await course_ledger.get_courses(self.db, self.session_id, filters)

    async def log_study_session(self, data: StudySessionCreate) -> StudySessionRead:
        return await course_ledger.log_study_session(self.db, self.session_id, data)

    async def get_study_sessions(
        self, filters: StudySessionFilters | None = None
    ) -> list[StudySessionRead]:
        return await course_ledger.get_study_sessions(self.db, self.session_id, filters)

    async def get_knowledge_base(self, course_code: str | None = None) -> list[KnowledgeEntryRead]:
        return await knowledge_aggregator.get_knowledge_base(self.db, self.session_id, course_code)

    # Chat history

    async def add_chat_message(
        self,
        mode: str,
        role: str,
        content: str,
        course_context: str | None = None,
        task_references: str | None = None,
    ) -> None:
        await chat_history.add_message(
            self.db, self.session_id, mode, role, content, course_context, task_references
        )

    async def get_chat_history(self, limit: int = 20, mode: str | None = None) -> list[ChatMessageRead]:
        return await chat_history.get_history(self.db, self.session_id, limit, mode)

    async def append_chat_turn(self, mode: str, user_text: str, assistant_text: str) -> None:
        await chat_history.append_turn(self.db, self.session_id, mode, user_text, assistant_text)

    # Composite views

    async def get_student_context(self, course_code: str | None = None) -> StudentContext:
        return await context_composer.get_student_context(self.db, self.session_id, course_code)

    async def get_full_context(self) -> FullContext:
        return await context_composer.get_full_context(self.db, self.session_id)

    async def get_all_upcoming(self, days: float = 7) -> list[UpcomingItem]:
        return await context_composer.get_all_upcoming(self.db, self.session_id, days)


@dataclass
class SessionHandle:
    """Serialization lock and schema flag for one session id."""

    session_id: str
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    schema_ready: bool = False


class SessionRegistry:
    """
    Maps session ids to their handles, creating handles on first use.

    Handles are weakly held: one lives only while a request holds or waits on
    its lock, so idle session ids cost nothing. Tables are shared by every
    session, so once they are ensured the registry skips the check for new
    handles.
    """

    def __init__(self):
        self._handles: weakref.WeakValueDictionary[str, SessionHandle] = weakref.WeakValueDictionary()
        self._schema_ready = False

    def __len__(self) -> int:
        return len(self._handles)

    def get(self, session_id: str) -> SessionHandle:
        handle = self._handles.get(session_id)
        if handle is None:
            handle = SessionHandle(session_id=session_id)
            self._handles[session_id] = handle
        return handle

    def clear(self) -> None:
        """Forget all handles (used between test runs)."""
        self._handles.clear()
        self._schema_ready = False

    @asynccontextmanager
    async def open(self, db: AsyncSession, session_id: str) -> AsyncIterator[StudentAgent]:
        """
        Hold the session's lock for the duration of the block.

        Tables are ensured the first time the registry opens any session.
        """
        handle = self.get(session_id)
        async with handle.lock:
            if not handle.schema_ready:
                if not self._schema_ready:
                    await ensure_schema(db)
                    self._schema_ready = True
                    logger.info("Schema ensured on first use by session %s", session_id)
                handle.schema_ready = True
            yield StudentAgent(db, session_id)


# Singleton instance
session_registry = SessionRegistry()
