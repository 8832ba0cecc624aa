"""Chat turn protocol."""

import json
from datetime import datetime, timedelta, timezone

import pytest
from conftest import tool_call

from cadence.services.llm_client import InferenceError, LLMResponse, to_anthropic_messages
from cadence.services.orchestrator import TurnPhase


async def test_direct_answer_persists_two_rows(agent, orchestrator, llm):
    llm.script(LLMResponse(text="Hi there!"))

    turn = await orchestrator.run_turn(agent, "hello", "planner")

    assert turn.response == "Hi there!"
    assert turn.phase is TurnPhase.DONE
    assert not turn.used_tools
    assert len(llm.calls) == 1

    history = await agent.get_chat_history(mode="planner")
    assert [(m.role, m.content) for m in history] == [("user", "hello"), ("assistant", "Hi there!")]


async def test_tool_turn_dispatches_in_order(agent, orchestrator, llm):
    due = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
    llm.script(
        LLMResponse(
            text="Adding that now.",
            tool_calls=[
                tool_call("call_1", "add_academic_task", type="quiz", title="Quiz 4", due_date=due),
                tool_call("call_2", "get_all_upcoming", days=7),
            ],
        ),
        LLMResponse(text="Added Quiz 4. It's your only item this week."),
    )

    turn = await orchestrator.run_turn(agent, "I have a quiz in two days", "planner")

    assert [r.tool_call_id for r in turn.tool_results] == ["call_1", "call_2"]
    added = json.loads(turn.tool_results[0].output)
    upcoming = json.loads(turn.tool_results[1].output)
    assert [item["id"] for item in upcoming] == [added["id"]]
    assert upcoming[0]["category"] == "academic"

    # Second call sees the draft with its tool calls and one tool message per result
    resolve_messages, allow_tools = llm.calls[1]
    assert allow_tools is False
    assistant = resolve_messages[-3]
    assert assistant["role"] == "assistant"
    assert [c.id for c in assistant["tool_calls"]] == ["call_1", "call_2"]
    assert [(m["role"], m["tool_call_id"]) for m in resolve_messages[-2:]] == [
        ("tool", "call_1"),
        ("tool", "call_2"),
    ]

    history = await agent.get_chat_history(mode="planner")
    assert len(history) == 2
    assert history[1].content == "Added Quiz 4. It's your only item this week."


async def test_history_feeds_next_turn(agent, orchestrator, llm):
    llm.script(LLMResponse(text="first answer"), LLMResponse(text="second answer"))

    await orchestrator.run_turn(agent, "first", "study_helper")
    await orchestrator.run_turn(agent, "second", "study_helper")

    messages, _ = llm.calls[1]
    assert messages[0]["role"] == "system"
    assert [m["content"] for m in messages[1:]] == ["first", "first answer", "second"]


async def test_history_is_partitioned_by_mode(agent, orchestrator, llm):
    llm.script(LLMResponse(text="planner reply"), LLMResponse(text="helper reply"))

    await orchestrator.run_turn(agent, "plan my week", "planner")
    await orchestrator.run_turn(agent, "explain recursion", "study_helper")

    messages, _ = llm.calls[1]
    assert [m["content"] for m in messages[1:]] == ["explain recursion"]


async def test_plan_failure_leaves_history_unchanged(agent, orchestrator, llm):
    llm.script(InferenceError("upstream unavailable"))

    with pytest.raises(InferenceError):
        await orchestrator.run_turn(agent, "hello", "planner")

    assert await agent.get_chat_history() == []


async def test_resolve_failure_leaves_history_unchanged(agent, orchestrator, llm):
    llm.script(
        LLMResponse(text="", tool_calls=[tool_call("call_1", "get_user_profile")]),
        InferenceError("upstream unavailable"),
    )

    with pytest.raises(InferenceError):
        await orchestrator.run_turn(agent, "who am I?", "general")

    assert await agent.get_chat_history() == []


async def test_failed_tool_does_not_abort_turn(agent, orchestrator, llm):
    llm.script(
        LLMResponse(
            text="",
            tool_calls=[
                tool_call("call_1", "no_such_tool"),
                tool_call("call_2", "add_course", course_code="CS101"),
                tool_call("call_3", "get_courses"),
            ],
        ),
        LLMResponse(text="Something went wrong adding the course."),
    )

    turn = await orchestrator.run_turn(agent, "add CS101", "planner")

    outputs = [json.loads(r.output) for r in turn.tool_results]
    assert outputs[0] == {"error": "Unknown tool"}
    assert "error" in outputs[1]
    assert outputs[2] == []
    assert len(await agent.get_chat_history()) == 2


async def test_system_prompt_selected_by_mode(agent, orchestrator, llm):
    llm.script(LLMResponse(text="ok"), LLMResponse(text="ok"))

    await orchestrator.run_turn(agent, "hi", "study_helper")
    await orchestrator.run_turn(agent, "hi", "whatever")

    helper_system = llm.calls[0][0][0]["content"]
    generic_system = llm.calls[1][0][0]["content"]
    assert helper_system.startswith("You are an intelligent academic study assistant.")
    assert generic_system.startswith("You are a helpful student assistant.")
    assert "Current date and time (UTC)" in generic_system


async def test_history_limit_returns_newest_oldest_first(agent):
    for i in range(5):
        await agent.add_chat_message("planner", "user", f"message {i}")

    history = await agent.get_chat_history(limit=3, mode="planner")

    assert [m.content for m in history] == ["message 2", "message 3", "message 4"]


async def test_empty_reply_is_not_replayed_to_the_model(agent, orchestrator, llm):
    llm.script(
        LLMResponse(text="", tool_calls=[tool_call("call_1", "get_courses")]),
        LLMResponse(text=""),
        LLMResponse(text="Still here."),
    )

    await orchestrator.run_turn(agent, "list my courses", "planner")
    turn = await orchestrator.run_turn(agent, "anything?", "planner")

    assert turn.response == "Still here."
    _, sent = to_anthropic_messages(llm.calls[2][0])
    assert all(m["content"] for m in sent)
    assert [m["role"] for m in sent] == ["user", "user"]
    assert len(await agent.get_chat_history(mode="planner")) == 4
