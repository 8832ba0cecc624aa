"""Chat route: one tool-calling turn per request."""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from cadence.api.deps import Agent, Orchestrator
from cadence.config import sanitize_error
from cadence.schemas.chat import ChatRequest, ChatResponse, ToolCallRead, ToolResultRead
from cadence.services.llm_client import InferenceError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


@router.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
async def chat(
    data: ChatRequest,
    agent: Agent,
    orchestrator: Orchestrator,
):
    """
    Send a message to the assistant.

    tool_calls and tool_results are included only when the model used tools.
    Returns 502 if the model is unavailable; nothing is stored in that case.
    """
    try:
        turn = await orchestrator.run_turn(agent, data.message, data.mode)
    except InferenceError as e:
        logger.exception("Chat turn failed for session %s", agent.session_id)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": sanitize_error(e, generic_message="The assistant is unavailable right now.")},
        )

    if not turn.used_tools:
        return ChatResponse(response=turn.response)

    return ChatResponse(
        response=turn.response,
        tool_calls=[ToolCallRead(**call.to_dict()) for call in turn.tool_calls],
        tool_results=[ToolResultRead(**result.to_dict()) for result in turn.tool_results],
    )
