"""Tool catalog and dispatch."""

import json

from conftest import tool_call

from cadence.schemas.courses import CourseCreate
from cadence.services.tools import TOOLS, TOOLS_BY_NAME, execute_tool_call

EXPECTED_REQUIRED = {
    "add_academic_task": ["type", "title"],
    "add_professional_task": ["type", "title"],
    "add_course": ["course_code", "course_name"],
    "log_study_session": ["topic"],
    "update_academic_task": ["id", "updates"],
    "update_professional_task": ["id", "updates"],
}


def test_catalog_shape():
    assert len(TOOLS) == 18
    assert len(TOOLS_BY_NAME) == 18
    for tool in TOOLS:
        assert tool.handler is not None
        assert tool.parameters["type"] == "object"
        assert tool.parameters.get("required", []) == EXPECTED_REQUIRED.get(tool.name, [])


def test_anthropic_format():
    payload = TOOLS_BY_NAME["log_study_session"].to_anthropic()
    assert payload["name"] == "log_study_session"
    assert payload["input_schema"]["required"] == ["topic"]
    assert "parameters" not in payload


async def test_add_then_get(agent):
    added = await execute_tool_call(
        agent, tool_call("c1", "add_academic_task", type="exam", title="Final", priority="high")
    )
    assert not added.is_error
    task = json.loads(added.output)
    assert task["id"] is not None
    assert task["priority"] == "high"

    listed = await execute_tool_call(agent, tool_call("c2", "get_academic_tasks"))
    assert [t["id"] for t in json.loads(listed.output)] == [task["id"]]


async def test_unknown_tool(agent):
    result = await execute_tool_call(agent, tool_call("c1", "delete_everything"))

    assert result.tool_call_id == "c1"
    assert result.is_error
    assert json.loads(result.output) == {"error": "Unknown tool"}


async def test_missing_required_field_is_reported(agent):
    result = await execute_tool_call(agent, tool_call("c1", "add_academic_task", type="exam"))

    assert result.is_error
    assert "title" in json.loads(result.output)["error"]
    assert await agent.get_academic_tasks() == []


async def test_update_with_unknown_key_is_rejected(agent):
    task = json.loads(
        (await execute_tool_call(agent, tool_call("c1", "add_academic_task", type="lab", title="Lab 1"))).output
    )

    result = await execute_tool_call(
        agent,
        tool_call("c2", "update_academic_task", id=task["id"], updates={"status": "completed", "id": 42}),
    )
    assert result.is_error

    [unchanged] = await agent.get_academic_tasks()
    assert unchanged.status == "pending"


async def test_update_reports_affected_rows(agent):
    task = json.loads(
        (await execute_tool_call(agent, tool_call("c1", "add_academic_task", type="lab", title="Lab 1"))).output
    )

    hit = await execute_tool_call(
        agent, tool_call("c2", "update_academic_task", id=task["id"], updates={"status": "completed"})
    )
    miss = await execute_tool_call(
        agent, tool_call("c3", "update_academic_task", id=9999, updates={"status": "completed"})
    )

    assert json.loads(hit.output) == {"id": task["id"], "updated": 1}
    assert json.loads(miss.output) == {"id": 9999, "updated": 0}


async def test_duplicate_course_rolls_back_and_continues(agent):
    await agent.add_course(CourseCreate(course_code="CS101", course_name="Intro to CS"))

    failed = await execute_tool_call(
        agent, tool_call("c1", "add_course", course_code="CS101", course_name="Duplicate")
    )
    assert failed.is_error

    listed = await execute_tool_call(agent, tool_call("c2", "get_courses"))
    assert not listed.is_error
    assert [c["course_name"] for c in json.loads(listed.output)] == ["Intro to CS"]


async def test_profile_tool_returns_merged_profile(agent):
    await execute_tool_call(agent, tool_call("c1", "set_user_profile", name="Ada", gpa=3.7))
    result = await execute_tool_call(agent, tool_call("c2", "set_user_profile", major="Physics"))

    profile = json.loads(result.output)
    assert profile["name"] == "Ada"
    assert profile["major"] == "Physics"
    assert profile["timezone"] == "UTC"


async def test_get_all_upcoming_defaults_to_week(agent):
    result = await execute_tool_call(agent, tool_call("c1", "get_all_upcoming"))

    assert json.loads(result.output) == []


async def test_fractional_minutes_are_rounded(agent):
    task = await execute_tool_call(
        agent, tool_call("c1", "add_academic_task", type="lecture", title="Lecture 5", duration_minutes=74.6)
    )
    study = await execute_tool_call(
        agent, tool_call("c2", "log_study_session", topic="Sorting", duration_minutes=37.4)
    )

    assert not task.is_error
    assert not study.is_error
    assert json.loads(task.output)["duration_minutes"] == 75
    assert json.loads(study.output)["duration_minutes"] == 37
