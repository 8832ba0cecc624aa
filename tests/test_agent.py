"""Session registry and per-session serialization."""

import asyncio
import gc

from cadence.schemas.profile import ProfileUpdate
from cadence.services import agent as agent_module
from cadence.services.agent import SessionRegistry


def test_handles_are_per_session():
    registry = SessionRegistry()
    a = registry.get("a")
    b = registry.get("b")

    assert registry.get("a") is a
    assert a is not b
    assert a.lock is not b.lock


def test_idle_handles_are_released():
    registry = SessionRegistry()
    for i in range(1000):
        registry.get(f"s{i}")
    kept = registry.get("kept")
    gc.collect()

    assert len(registry) == 1
    assert registry.get("kept") is kept


async def test_handle_released_after_request(db):
    registry = SessionRegistry()

    async with registry.open(db, "a"):
        assert len(registry) == 1
    gc.collect()

    assert len(registry) == 0


async def test_schema_ensured_once_per_registry(db, monkeypatch):
    calls = []

    async def fake_ensure_schema(session):
        calls.append(session)

    monkeypatch.setattr(agent_module, "ensure_schema", fake_ensure_schema)
    registry = SessionRegistry()

    async with registry.open(db, "a"):
        pass
    async with registry.open(db, "a"):
        pass
    async with registry.open(db, "b"):
        pass

    assert len(calls) == 1

    registry.clear()
    async with registry.open(db, "c"):
        pass
    assert len(calls) == 2


async def test_open_yields_agent_bound_to_session(db):
    registry = SessionRegistry()

    async with registry.open(db, "a") as student:
        await student.set_profile(ProfileUpdate(name="Ada"))
        assert student.session_id == "a"

    async with registry.open(db, "a") as student:
        assert (await student.get_profile()).name == "Ada"


async def test_same_session_requests_do_not_overlap(db, monkeypatch):
    async def noop(session):
        return None

    monkeypatch.setattr(agent_module, "ensure_schema", noop)
    registry = SessionRegistry()
    events = []

    async def request(label: str):
        async with registry.open(db, "shared"):
            events.append(f"{label}-start")
            await asyncio.sleep(0.01)
            events.append(f"{label}-end")

    await asyncio.gather(request("first"), request("second"))

    assert events == ["first-start", "first-end", "second-start", "second-end"]


async def test_different_sessions_interleave(db, monkeypatch):
    async def noop(session):
        return None

    monkeypatch.setattr(agent_module, "ensure_schema", noop)
    registry = SessionRegistry()
    events = []

    async def request(session_id: str):
        async with registry.open(db, session_id):
            events.append(f"{session_id}-start")
            await asyncio.sleep(0.01)
            events.append(f"{session_id}-end")

    await asyncio.gather(request("a"), request("b"))

    assert events[:2] == ["a-start", "b-start"]
