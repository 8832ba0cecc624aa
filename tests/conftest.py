"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the environment has to be in place first
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite:///:memory:"
os.environ["ENVIRONMENT"] = "development"
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")

from collections.abc import AsyncGenerator  # noqa: E402
from typing import Any  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cadence.api.deps import get_orchestrator  # noqa: E402
from cadence.db.base import Base  # noqa: E402
from cadence.db.session import get_db  # noqa: E402
from cadence.main import app  # noqa: E402
from cadence.services.agent import StudentAgent, session_registry  # noqa: E402
from cadence.services.llm_client import InferenceError, LLMResponse, ToolCall  # noqa: E402
from cadence.services.orchestrator import ChatOrchestrator  # noqa: E402

TEST_SESSION = "test-session"


class ScriptedLLM:
    """
    Stand-in for LLMClient that replays queued responses.

    Queue LLMResponse objects (or exceptions to raise) with `script`; every
    call is recorded in `calls` as (messages, allow_tool_calls).
    """

    def __init__(self):
        self.queue: list[LLMResponse | Exception] = []
        self.calls: list[tuple[list[dict[str, Any]], bool]] = []

    def script(self, *responses: LLMResponse | Exception) -> None:
        self.queue.extend(responses)

    async def complete(self, messages, tools=None, *, allow_tool_calls=True) -> LLMResponse:
        self.calls.append((list(messages), allow_tool_calls))
        if not self.queue:
            raise InferenceError("No scripted response left")
        item = self.queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def tool_call(call_id: str, name: str, /, **arguments: Any) -> ToolCall:
    return ToolCall(id=call_id, name=name, arguments=arguments)


@pytest.fixture
async def engine():
    """Fresh in-memory SQLite database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def agent(db) -> StudentAgent:
    return StudentAgent(db, TEST_SESSION)


@pytest.fixture(autouse=True)
def reset_registry():
    session_registry.clear()
    yield
    session_registry.clear()


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def orchestrator(llm) -> ChatOrchestrator:
    return ChatOrchestrator(llm)


@pytest.fixture
async def client(session_factory, orchestrator) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
