"""
Hosted inference client.

Provider-neutral tool/message types plus the Anthropic adapter. Messages are
plain dicts in a chat-completions shape:

    {"role": "system" | "user", "content": str}
    {"role": "assistant", "content": str, "tool_calls": [ToolCall, ...]}
    {"role": "tool", "tool_call_id": str, "content": str}

and are converted to the Messages API format on the way out.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

import anthropic
from anthropic import APIConnectionError, APIStatusError, AsyncAnthropic, RateLimitError

from cadence.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Transient error types that warrant retrying
_RETRYABLE_ERRORS = (APIConnectionError, RateLimitError)


class InferenceError(RuntimeError):
    """The model call failed after retries."""


@dataclass
class ToolDef:
    """Provider-neutral tool definition."""

    name: str
    description: str
    parameters: dict[str, Any]  # JSON Schema (type: object)
    handler: Callable[..., Awaitable[Any]] | None = None

    def to_anthropic(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters,
        }


@dataclass
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}


@dataclass
class ToolResult:
    """Outcome of one dispatched tool call; `output` is a JSON string."""

    tool_call_id: str
    name: str
    output: str
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {"tool_call_id": self.tool_call_id, "output": self.output}


@dataclass
class LLMResponse:
    """Text and tool calls from one model call."""

    text: str
    tool_calls: list[ToolCall] = field(default_factory=list)


async def _retry_anthropic(coro_factory, *, max_attempts: int = 3, base_delay: float = 1.0):
    """
    Retry an Anthropic API call with exponential backoff.

    Args:
        coro_factory: Callable that returns a new coroutine each invocation.
        max_attempts: Maximum number of attempts.
        base_delay: Base delay in seconds (doubles each retry).

    Returns:
        The result of the coroutine.
    """
    last_error = None
    for attempt in range(max_attempts):
        try:
            return await coro_factory()
        except _RETRYABLE_ERRORS as e:
            last_error = e
            if attempt < max_attempts - 1:
                delay = base_delay * (2 ** attempt)
                logger.warning(
                    "Anthropic API transient error (attempt %d/%d), retrying in %.1fs: %s",
                    attempt + 1, max_attempts, delay, str(e),
                )
                await asyncio.sleep(delay)
            else:
                raise
        except APIStatusError as e:
            if e.status_code == 529:  # Overloaded
                last_error = e
                if attempt < max_attempts - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        "Anthropic API overloaded (attempt %d/%d), retrying in %.1fs",
                        attempt + 1, max_attempts, delay,
                    )
                    await asyncio.sleep(delay)
                else:
                    raise
            else:
                raise
    raise last_error


def to_anthropic_messages(messages: list[dict[str, Any]]) -> tuple[str, list[dict[str, Any]]]:
    """
    Split out the system prompt and convert the rest to Messages API blocks.

    Consecutive tool results are folded into a single user message, as the
    API requires every tool_result for a turn in the message that follows it.
    """
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []

    for msg in messages:
        role = msg["role"]
        if role == "system":
            system_parts.append(msg["content"])
        elif role == "tool":
            block = {
                "type": "tool_result",
                "tool_use_id": msg["tool_call_id"],
                "content": msg["content"],
            }
            last = converted[-1] if converted else None
            if last and last["role"] == "user" and isinstance(last["content"], list):
                last["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
        elif role == "assistant" and msg.get("tool_calls"):
            blocks: list[dict[str, Any]] = []
            if msg.get("content"):
                blocks.append({"type": "text", "text": msg["content"]})
            for call in msg["tool_calls"]:
                blocks.append(
                    {"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments}
                )
            converted.append({"role": "assistant", "content": blocks})
        else:
            converted.append({"role": role, "content": msg["content"]})

    return "\n\n".join(system_parts), converted


def parse_anthropic_message(message) -> LLMResponse:
    """Collect text blocks and tool_use blocks from a Messages API response."""
    text_parts: list[str] = []
    tool_calls: list[ToolCall] = []
    for block in message.content:
        if block.type == "text":
            text_parts.append(block.text)
        elif block.type == "tool_use":
            tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=dict(block.input or {})))
    return LLMResponse(text="".join(text_parts), tool_calls=tool_calls)


class LLMClient:
    """Anthropic-backed inference client."""

    def __init__(self, client: AsyncAnthropic | None = None):
        self.client = client or AsyncAnthropic(api_key=settings.anthropic_api_key)

    async def complete(
        self,
        messages: list[dict[str, Any]],
        tools: list[ToolDef] | None = None,
        *,
        allow_tool_calls: bool = True,
    ) -> LLMResponse:
        """
        Run one model call.

        With allow_tool_calls=False the tool catalog is still sent (the API
        needs it to read earlier tool_use blocks) but the model may not call
        any tool.

        Raises:
            InferenceError: on any API failure, after transient retries.
        """
        system, api_messages = to_anthropic_messages(messages)
        kwargs: dict[str, Any] = {
            "model": settings.llm_model,
            "max_tokens": settings.llm_max_tokens,
            "temperature": settings.llm_temperature,
            "messages": api_messages,
        }
        if system:
            kwargs["system"] = system
        if tools:
            kwargs["tools"] = [t.to_anthropic() for t in tools]
            if not allow_tool_calls:
                kwargs["tool_choice"] = {"type": "none"}

        try:
            message = await _retry_anthropic(
                lambda: self.client.messages.create(**kwargs),
                max_attempts=settings.llm_max_attempts,
            )
        except anthropic.AnthropicError as e:
            logger.error("Inference call failed: %s", e)
            raise InferenceError(str(e)) from e

        return parse_anthropic_message(message)
