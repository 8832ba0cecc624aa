"""Service layer."""

from cadence.services.agent import SessionRegistry, StudentAgent, session_registry
from cadence.services.llm_client import InferenceError, LLMClient
from cadence.services.orchestrator import ChatOrchestrator, ChatTurn, chat_orchestrator

__all__ = [
    "ChatOrchestrator",
    "ChatTurn",
    "InferenceError",
    "LLMClient",
    "SessionRegistry",
    "StudentAgent",
    "chat_orchestrator",
    "session_registry",
]
