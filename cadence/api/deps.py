"""
FastAPI dependencies.

Key patterns:
1. State is namespaced by the `session` query parameter; a missing value
   falls back to the configured default session id
2. get_agent yields a StudentAgent while holding that session's lock, so the
   whole request is serialized against other requests for the same session
3. The orchestrator is a dependency so tests can swap in a scripted model
"""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.config import get_settings
from cadence.db.session import get_db
from cadence.services.agent import StudentAgent, session_registry
from cadence.services.orchestrator import ChatOrchestrator, chat_orchestrator

settings = get_settings()

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_session_id(
    session: Annotated[str | None, Query(max_length=255)] = None,
) -> str:
    """Session token from the query string, or the default session."""
    return session or settings.default_session_id


SessionId = Annotated[str, Depends(get_session_id)]


async def get_agent(db: DbSession, session_id: SessionId) -> AsyncGenerator[StudentAgent, None]:
    """State handle for the request's session, held under its lock."""
    async with session_registry.open(db, session_id) as agent:
        yield agent


Agent = Annotated[StudentAgent, Depends(get_agent)]


def get_orchestrator() -> ChatOrchestrator:
    return chat_orchestrator


Orchestrator = Annotated[ChatOrchestrator, Depends(get_orchestrator)]
