"""Merged upcoming view for the dashboard."""

from typing import Annotated

from fastapi import APIRouter, Query

from cadence.api.deps import Agent
from cadence.config import get_settings
from cadence.schemas.context import UpcomingItem

settings = get_settings()

router = APIRouter(prefix="/api", tags=["upcoming"])


@router.get("/upcoming", response_model=list[UpcomingItem])
async def list_upcoming(
    agent: Agent,
    days: Annotated[int, Query(ge=0)] = settings.upcoming_default_days,
) -> list[UpcomingItem]:
    """Pending academic tasks and professional tasks due in the next `days` days."""
    return await agent.get_all_upcoming(days)
