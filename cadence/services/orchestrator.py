"""
Chat turn orchestration.

A turn moves through explicit phases:

    LOADING -> COMPOSING -> PLANNING -> [DISPATCHING -> RESOLVING] -> PERSISTING -> DONE

The dispatch/resolve pair only runs when the planning call asks for tools.
An inference failure in PLANNING or RESOLVING aborts the turn before anything
is written to history.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from cadence.config import get_settings
from cadence.services.agent import StudentAgent
from cadence.services.llm_client import LLMClient, ToolCall, ToolDef, ToolResult
from cadence.services.prompts import compose_messages
from cadence.services.tools import TOOLS, execute_tool_call

logger = logging.getLogger(__name__)
settings = get_settings()


class TurnPhase(str, Enum):
    LOADING = "loading"
    COMPOSING = "composing"
    PLANNING = "planning"
    DISPATCHING = "dispatching"
    RESOLVING = "resolving"
    PERSISTING = "persisting"
    DONE = "done"


@dataclass
class ChatTurn:
    """State carried through one turn."""

    mode: str
    message: str
    phase: TurnPhase = TurnPhase.LOADING
    messages: list[dict[str, Any]] = field(default_factory=list)
    draft: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    tool_results: list[ToolResult] = field(default_factory=list)
    response: str = ""

    @property
    def used_tools(self) -> bool:
        return bool(self.tool_calls)


class ChatOrchestrator:
    """Runs chat turns against a session with a tool-calling model."""

    def __init__(
        self,
        llm: LLMClient,
        tools: list[ToolDef] | None = None,
        history_limit: int | None = None,
    ):
        self.llm = llm
        self.tools = TOOLS if tools is None else tools
        self.tools_by_name = {tool.name: tool for tool in self.tools}
        self.history_limit = history_limit or settings.chat_history_limit

    async def run_turn(self, agent: StudentAgent, message: str, mode: str) -> ChatTurn:
        """
        Answer one user message.

        Raises:
            InferenceError: if either model call fails; history is untouched.
        """
        turn = ChatTurn(mode=mode, message=message)

        history = await agent.get_chat_history(self.history_limit, mode)

        turn.phase = TurnPhase.COMPOSING
        turn.messages = compose_messages(mode, history, message)

        turn.phase = TurnPhase.PLANNING
        plan = await self.llm.complete(turn.messages, self.tools)
        turn.draft = plan.text
        turn.tool_calls = plan.tool_calls

        if turn.used_tools:
            turn.phase = TurnPhase.DISPATCHING
            for call in turn.tool_calls:
                result = await execute_tool_call(agent, call, self.tools_by_name)
                turn.tool_results.append(result)
            logger.info(
                "Session %s dispatched %d tool call(s): %s",
                agent.session_id,
                len(turn.tool_calls),
                [c.name for c in turn.tool_calls],
            )

            turn.phase = TurnPhase.RESOLVING
            followup = [
                *turn.messages,
                {"role": "assistant", "content": turn.draft, "tool_calls": turn.tool_calls},
                *(
                    {"role": "tool", "tool_call_id": r.tool_call_id, "content": r.output}
                    for r in turn.tool_results
                ),
            ]
            final = await self.llm.complete(followup, self.tools, allow_tool_calls=False)
            turn.response = final.text
        else:
            turn.response = turn.draft

        turn.phase = TurnPhase.PERSISTING
        await agent.append_chat_turn(mode, message, turn.response)

        turn.phase = TurnPhase.DONE
        return turn


# Singleton instance
chat_orchestrator = ChatOrchestrator(LLMClient())
