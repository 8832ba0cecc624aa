"""System prompts and message composition for chat turns."""

from datetime import datetime, timezone
from typing import Any

from cadence.schemas.chat import ChatMessageRead

STUDY_HELPER_PROMPT = """You are an intelligent academic study assistant. Your role is to:
- Help students understand concepts and solve problems
- Provide explanations tailored to their knowledge level (use get_full_context and get_knowledge_base)
- Track what they're learning (always log_study_session after teaching)
- Identify areas where they struggle and provide targeted help
- Reference their previous study sessions to build on prior knowledge
- Be encouraging and supportive

When answering study questions, ALWAYS:
1. First call get_full_context or get_knowledge_base to understand what they already know
2. Tailor your explanation to their proficiency level
3. After explaining, call log_study_session to record what was taught"""

PLANNER_PROMPT = """You are a student planner and productivity assistant. Your role is to:
- Parse natural language into structured tasks (dates, times, priorities)
- Organize academic tasks (lectures, quizzes, exams, labs, assignments, deadlines)
- Track professional tasks (job applications, courses, certifications, interviews)
- Provide overview of upcoming obligations
- Help prioritize and manage workload

Be proactive:
- When user mentions a task, immediately create it with add_academic_task or add_professional_task
- Parse dates naturally ("next Friday" = calculate ISO date)
- Ask clarifying questions if needed (course code, priority, etc.)
- Suggest get_all_upcoming to show their schedule"""

DEFAULT_PROMPT = "You are a helpful student assistant."

MODE_PROMPTS = {
    "study_helper": STUDY_HELPER_PROMPT,
    "planner": PLANNER_PROMPT,
}


def build_system_prompt(mode: str, now: datetime | None = None) -> str:
    """Mode prompt followed by the current UTC date for resolving relative dates."""
    now = now or datetime.now(timezone.utc)
    base = MODE_PROMPTS.get(mode, DEFAULT_PROMPT)
    return f"{base}\n\nCurrent date and time (UTC): {now.strftime('%A, %Y-%m-%d %H:%M')}"


def compose_messages(
    mode: str,
    history: list[ChatMessageRead],
    message: str,
    now: datetime | None = None,
) -> list[dict[str, Any]]:
    """
    System prompt, prior turns oldest first, then the new user message.

    Blank history rows (an empty model reply) are left out; the Messages API
    rejects empty assistant content.
    """
    return [
        {"role": "system", "content": build_system_prompt(mode, now)},
        *({"role": h.role, "content": h.content} for h in history if h.content.strip()),
        {"role": "user", "content": message},
    ]
