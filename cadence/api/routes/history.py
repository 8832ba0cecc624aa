"""Chat history reads."""

from typing import Annotated

from fastapi import APIRouter, Query

from cadence.api.deps import Agent
from cadence.config import get_settings
from cadence.schemas.chat import ChatMessageRead

settings = get_settings()

router = APIRouter(prefix="/api", tags=["history"])


@router.get("/history", response_model=list[ChatMessageRead])
async def list_history(
    agent: Agent,
    mode: str | None = None,
    limit: Annotated[int, Query(ge=1, le=500)] = settings.history_default_limit,
) -> list[ChatMessageRead]:
    """Most recent messages, oldest first, optionally for one mode."""
    return await agent.get_chat_history(limit, mode)
