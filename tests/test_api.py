"""HTTP surface."""

from datetime import datetime, timedelta, timezone

from conftest import tool_call

from cadence.schemas.tasks import AcademicTaskCreate
from cadence.services.agent import StudentAgent
from cadence.services.llm_client import InferenceError, LLMResponse


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


async def test_unknown_path_is_plain_text_404(client):
    response = await client.get("/api/nope")
    assert response.status_code == 404
    assert response.text == "Not found"


async def test_wrong_method_is_plain_text_404(client):
    response = await client.delete("/api/profile")
    assert response.status_code == 404
    assert response.text == "Not found"


async def test_profile_roundtrip(client):
    response = await client.post("/api/profile?session=s1", json={"name": "Ada", "year": "senior"})
    assert response.status_code == 200
    assert response.json()["name"] == "Ada"

    response = await client.post("/api/profile?session=s1", json={"gpa": 3.8})
    body = response.json()
    assert body["name"] == "Ada"
    assert body["gpa"] == 3.8
    assert body["timezone"] == "UTC"

    fetched = await client.get("/api/profile", params={"session": "s1"})
    assert fetched.json() == body


async def test_profile_is_scoped_to_session(client):
    await client.post("/api/profile?session=s1", json={"name": "Ada"})

    other = await client.get("/api/profile?session=s2")
    default = await client.get("/api/profile")
    assert other.json()["name"] is None
    assert default.json()["name"] is None


async def test_malformed_profile_is_400(client):
    for body in (b"not json", b"[1, 2]", b'{"gpa": "excellent"}', b'{"year": "fifth"}'):
        response = await client.post(
            "/api/profile", content=body, headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid profile payload"}

    assert (await client.get("/api/profile")).json()["profile_updated_at"] is None


async def test_preferences(client):
    defaults = await client.get("/api/preferences")
    assert defaults.json() == {
        "theme": "light",
        "notifications_enabled": True,
        "reminder_time": "20:00",
        "default_priority": "medium",
    }

    updated = await client.post("/api/preferences", json={"theme": "dark"})
    assert updated.json()["theme"] == "dark"

    bad = await client.post("/api/preferences", json={"theme": "neon"})
    assert bad.status_code == 400
    assert bad.json() == {"error": "Invalid preferences payload"}


async def test_upcoming(client, session_factory):
    due = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
    async with session_factory() as db:
        await StudentAgent(db, "s1").add_academic_task(
            AcademicTaskCreate(type="exam", title="Midterm", due_date=due)
        )

    response = await client.get("/api/upcoming", params={"session": "s1", "days": 7})
    assert response.status_code == 200
    [item] = response.json()
    assert item["title"] == "Midterm"
    assert item["category"] == "academic"

    assert (await client.get("/api/upcoming", params={"session": "s1", "days": 1})).json() == []
    assert (await client.get("/api/upcoming")).json() == []


async def test_chat_without_tools(client, llm):
    llm.script(LLMResponse(text="Hello!"))

    response = await client.post("/api/chat?session=s1", json={"message": "hi", "mode": "planner"})

    assert response.status_code == 200
    assert response.json() == {"response": "Hello!"}


async def test_chat_with_tools_returns_trace(client, llm):
    llm.script(
        LLMResponse(text="", tool_calls=[tool_call("call_1", "add_course", course_code="CS101", course_name="Intro")]),
        LLMResponse(text="Added CS101."),
    )

    response = await client.post("/api/chat?session=s1", json={"message": "add CS101", "mode": "planner"})

    body = response.json()
    assert body["response"] == "Added CS101."
    assert body["tool_calls"] == [
        {"id": "call_1", "name": "add_course", "arguments": {"course_code": "CS101", "course_name": "Intro"}}
    ]
    assert body["tool_results"][0]["tool_call_id"] == "call_1"

    history = await client.get("/api/history", params={"session": "s1", "mode": "planner"})
    assert [m["role"] for m in history.json()] == ["user", "assistant"]


async def test_chat_inference_failure_is_502(client, llm):
    llm.script(InferenceError("model offline"))

    response = await client.post("/api/chat?session=s1", json={"message": "hi", "mode": "planner"})

    assert response.status_code == 502
    assert "error" in response.json()
    assert (await client.get("/api/history?session=s1")).json() == []


async def test_chat_rejects_empty_message(client):
    response = await client.post("/api/chat", json={"message": ""})
    assert response.status_code == 422
