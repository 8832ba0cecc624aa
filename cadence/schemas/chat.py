"""Pydantic schemas for chat operations."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from cadence.schemas.base import BaseSchema


# Request schemas
class ChatRequest(BaseModel):
    """Request to send a chat message."""

    message: str = Field(..., min_length=1, max_length=10000)
    # study_helper and planner get dedicated prompts; anything else is treated as general chat
    mode: str = Field("general", min_length=1, max_length=30)


# Response schemas
class ToolCallRead(BaseModel):
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any]


class ToolResultRead(BaseModel):
    """Result of one dispatched tool call (JSON-encoded output)."""

    tool_call_id: str
    output: str


class ChatResponse(BaseModel):
    """Final assistant answer, with the tool trace when tools ran."""

    response: str
    tool_calls: list[ToolCallRead] | None = None
    tool_results: list[ToolResultRead] | None = None


class ChatMessageRead(BaseSchema):
    """Chat history row."""

    id: int
    mode: str
    role: str
    content: str
    course_context: str | None
    task_references: str | None
    timestamp: datetime
