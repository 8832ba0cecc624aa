"""Profile and preference routes."""

import logging

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from cadence.api.deps import Agent
from cadence.schemas.profile import PreferencesRead, PreferencesUpdate, ProfileRead, ProfileUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["profile"])


@router.get("/profile", response_model=ProfileRead)
async def get_profile(agent: Agent) -> ProfileRead:
    """Get the session's profile."""
    return await agent.get_profile()


@router.post("/profile", response_model=ProfileRead)
async def update_profile(request: Request, agent: Agent):
    """
    Merge a partial profile and return the result.

    The body is parsed by hand so that any malformed payload (not JSON, not an
    object, wrong field types) gets the same 400 answer.
    """
    try:
        payload = await request.json()
        update = ProfileUpdate.model_validate(payload)
    except ValueError as e:
        logger.info("Rejected profile payload for session %s: %s", agent.session_id, e)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid profile payload"},
        )

    await agent.set_profile(update)
    return await agent.get_profile()


@router.get("/preferences", response_model=PreferencesRead)
async def get_preferences(agent: Agent) -> PreferencesRead:
    """Get the session's preferences with defaults applied."""
    return await agent.get_preferences()


@router.post("/preferences", response_model=PreferencesRead)
async def update_preferences(request: Request, agent: Agent):
    """Merge partial preferences and return the result."""
    try:
        payload = await request.json()
        update = PreferencesUpdate.model_validate(payload)
    except ValueError as e:
        logger.info("Rejected preferences payload for session %s: %s", agent.session_id, e)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": "Invalid preferences payload"},
        )

    await agent.set_preferences(update)
    return await agent.get_preferences()
