"""
Tool catalog exposed to the model and the dispatcher that runs tool calls.

Every handler takes the session's StudentAgent and the raw argument dict,
validates the arguments through the same pydantic schemas the REST layer uses
and returns a pydantic model (or list of them) that is JSON-encoded for the
model.
"""

import json
import logging
from typing import Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from cadence.schemas.courses import (
    CourseCreate,
    CourseFilters,
    StudySessionCreate,
    StudySessionFilters,
)
from cadence.schemas.profile import PreferencesUpdate, ProfileUpdate
from cadence.schemas.tasks import (
    AcademicTaskCreate,
    AcademicTaskFilters,
    AcademicTaskUpdate,
    ProfessionalTaskCreate,
    ProfessionalTaskFilters,
    ProfessionalTaskUpdate,
)
from cadence.services.agent import StudentAgent
from cadence.services.llm_client import ToolCall, ToolDef, ToolResult

logger = logging.getLogger(__name__)

_PRIORITY_ENUM = ["low", "medium", "high", "urgent"]


# =============================================================================
# ARGUMENT MODELS
# =============================================================================


class _AcademicTaskPatch(BaseModel):
    id: int
    updates: AcademicTaskUpdate


class _ProfessionalTaskPatch(BaseModel):
    id: int
    updates: ProfessionalTaskUpdate


class _CourseCodeArgs(BaseModel):
    course_code: str | None = None


class _UpcomingArgs(BaseModel):
    days: float | None = None


# =============================================================================
# HANDLERS
# =============================================================================


async def _set_user_profile(agent: StudentAgent, args: dict[str, Any]):
    await agent.set_profile(ProfileUpdate.model_validate(args))
    return await agent.get_profile()


async def _get_user_profile(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_profile()


async def _set_preferences(agent: StudentAgent, args: dict[str, Any]):
    await agent.set_preferences(PreferencesUpdate.model_validate(args))
    return await agent.get_preferences()


async def _get_preferences(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_preferences()


async def _get_full_context(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_full_context()


async def _get_student_context(agent: StudentAgent, args: dict[str, Any]):
    parsed = _CourseCodeArgs.model_validate(args)
    return await agent.get_student_context(parsed.course_code)


async def _add_academic_task(agent: StudentAgent, args: dict[str, Any]):
    return await agent.add_academic_task(AcademicTaskCreate.model_validate(args))


async def _get_academic_tasks(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_academic_tasks(AcademicTaskFilters.model_validate(args))


async def _update_academic_task(agent: StudentAgent, args: dict[str, Any]):
    patch = _AcademicTaskPatch.model_validate(args)
    updated = await agent.update_academic_task(patch.id, patch.updates)
    return {"id": patch.id, "updated": updated}


async def _add_professional_task(agent: StudentAgent, args: dict[str, Any]):
    return await agent.add_professional_task(ProfessionalTaskCreate.model_validate(args))


async def _get_professional_tasks(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_professional_tasks(ProfessionalTaskFilters.model_validate(args))


async def _update_professional_task(agent: StudentAgent, args: dict[str, Any]):
    patch = _ProfessionalTaskPatch.model_validate(args)
    updated = await agent.update_professional_task(patch.id, patch.updates)
    return {"id": patch.id, "updated": updated}


async def _add_course(agent: StudentAgent, args: dict[str, Any]):
    return await agent.add_course(CourseCreate.model_validate(args))


async def _get_courses(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_courses(CourseFilters.model_validate(args))


async def _log_study_session(agent: StudentAgent, args: dict[str, Any]):
    return await agent.log_study_session(StudySessionCreate.model_validate(args))


async def _get_study_sessions(agent: StudentAgent, args: dict[str, Any]):
    return await agent.get_study_sessions(StudySessionFilters.model_validate(args))


async def _get_knowledge_base(agent: StudentAgent, args: dict[str, Any]):
    parsed = _CourseCodeArgs.model_validate(args)
    return await agent.get_knowledge_base(parsed.course_code)


async def _get_all_upcoming(agent: StudentAgent, args: dict[str, Any]):
    parsed = _UpcomingArgs.model_validate(args)
    return await agent.get_all_upcoming(parsed.days or 7)


# =============================================================================
# CATALOG
# =============================================================================

TOOLS: list[ToolDef] = [
    # Profile & preferences
    ToolDef(
        name="set_user_profile",
        description="Set or update student profile information (name, major, year, university, GPA, timezone, study goals)",
        parameters={
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Student full name"},
                "major": {"type": "string", "description": "Academic major/field of study"},
                "year": {
                    "type": "string",
                    "enum": ["freshman", "sophomore", "junior", "senior", "graduate"],
                    "description": "Current year in school",
                },
                "university": {"type": "string", "description": "University or college name"},
                "gpa": {"type": "number", "description": "Current GPA (0.0-4.0 scale)"},
                "timezone": {"type": "string", "description": "Timezone (e.g., America/New_York, Europe/London)"},
                "study_goal_hours_per_week": {"type": "number", "description": "Weekly study goal in hours"},
            },
        },
        handler=_set_user_profile,
    ),
    ToolDef(
        name="get_user_profile",
        description="Get current student profile information",
        parameters={"type": "object", "properties": {}},
        handler=_get_user_profile,
    ),
    ToolDef(
        name="set_preferences",
        description="Set user preferences (theme, notifications, reminder time, default priority)",
        parameters={
            "type": "object",
            "properties": {
                "theme": {"type": "string", "enum": ["light", "dark"], "description": "UI theme preference"},
                "notifications_enabled": {"type": "boolean", "description": "Enable/disable notifications"},
                "reminder_time": {"type": "string", "description": "Default reminder time (HH:MM format)"},
                "default_priority": {
                    "type": "string",
                    "enum": _PRIORITY_ENUM,
                    "description": "Default priority for new tasks",
                },
            },
        },
        handler=_set_preferences,
    ),
    ToolDef(
        name="get_preferences",
        description="Get user preferences (theme, notifications, reminder time, default priority)",
        parameters={"type": "object", "properties": {}},
        handler=_get_preferences,
    ),
    ToolDef(
        name="get_full_context",
        description=(
            "Get complete student context including profile, preferences, courses, knowledge base, "
            "and recent study sessions. Use this before answering study-related questions."
        ),
        parameters={"type": "object", "properties": {}},
        handler=_get_full_context,
    ),
    ToolDef(
        name="get_student_context",
        description=(
            "Get active courses, knowledge base and the last 30 days of study sessions with total "
            "study time. Optionally narrow the knowledge base to one course."
        ),
        parameters={
            "type": "object",
            "properties": {
                "course_code": {"type": "string", "description": "Optional: filter knowledge by specific course"},
            },
        },
        handler=_get_student_context,
    ),
    # Academic tasks
    ToolDef(
        name="add_academic_task",
        description=(
            "Add a new academic task (lecture, quiz, exam, lab, assignment, self-study session, or deadline). "
            "Parse dates naturally from user input."
        ),
        parameters={
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["lecture", "quiz", "exam", "lab", "assignment", "selfstudy", "deadline"],
                    "description": "Type of academic task",
                },
                "course_code": {"type": "string", "description": "Course code (e.g., CS101, MATH201)"},
                "course_name": {"type": "string", "description": "Full course name"},
                "title": {"type": "string", "description": "Task title"},
                "description": {"type": "string", "description": "Detailed description"},
                "due_date": {"type": "string", "description": "Due date/time in ISO 8601 format (YYYY-MM-DDTHH:MM:SSZ)"},
                "duration_minutes": {"type": "number", "description": "Duration for lectures or study sessions"},
                "location": {"type": "string", "description": "Physical or virtual location (for lectures/labs)"},
                "priority": {"type": "string", "enum": _PRIORITY_ENUM, "description": "Task priority level"},
            },
            "required": ["type", "title"],
        },
        handler=_add_academic_task,
    ),
    ToolDef(
        name="get_academic_tasks",
        description=(
            "Get academic tasks with optional filters. Use to show tasks, check schedule, "
            "or find specific assignments."
        ),
        parameters={
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": ["pending", "in_progress", "completed", "cancelled"],
                    "description": "Filter by completion status",
                },
                "course_code": {"type": "string", "description": "Filter by specific course"},
                "type": {"type": "string", "description": "Filter by task type"},
                "upcoming_days": {"type": "number", "description": "Get tasks due in next N days"},
            },
        },
        handler=_get_academic_tasks,
    ),
    ToolDef(
        name="update_academic_task",
        description="Update an existing academic task (change status, dates, details, etc.)",
        parameters={
            "type": "object",
            "properties": {
                "id": {"type": "number", "description": "Task ID to update"},
                "updates": {
                    "type": "object",
                    "description": "Fields to update (status, priority, due_date, grade, notes, etc.)",
                    "additionalProperties": True,
                },
            },
            "required": ["id", "updates"],
        },
        handler=_update_academic_task,
    ),
    # Professional tasks
    ToolDef(
        name="add_professional_task",
        description=(
            "Add a professional/career task (job application, internship, online course, certification, "
            "interview, networking event)"
        ),
        parameters={
            "type": "object",
            "properties": {
                "type": {
                    "type": "string",
                    "enum": ["application", "course", "certification", "interview", "networking", "deadline"],
                    "description": "Type of professional task",
                },
                "title": {"type": "string", "description": "Task title"},
                "company_organization": {"type": "string", "description": "Company name or organization"},
                "position_role": {"type": "string", "description": "Job position or course name"},
                "description": {"type": "string", "description": "Detailed description"},
                "deadline": {"type": "string", "description": "Application deadline in ISO 8601 format"},
                "status": {
                    "type": "string",
                    "enum": [
                        "not_started", "in_progress", "applied", "interviewing",
                        "offer", "accepted", "rejected", "completed",
                    ],
                    "description": "Current status",
                },
                "priority": {"type": "string", "enum": _PRIORITY_ENUM},
                "application_url": {"type": "string", "description": "URL to application portal"},
                "contact_info": {"type": "string", "description": "Recruiter or contact information"},
                "salary_compensation": {"type": "string", "description": "Salary range or compensation details"},
            },
            "required": ["type", "title"],
        },
        handler=_add_professional_task,
    ),
    ToolDef(
        name="get_professional_tasks",
        description="Get professional tasks with optional filters (applications, courses, certifications, interviews)",
        parameters={
            "type": "object",
            "properties": {
                "status": {"type": "string", "description": "Filter by status"},
                "type": {"type": "string", "description": "Filter by task type"},
                "company_organization": {"type": "string", "description": "Filter by company/organization name"},
                "upcoming_days": {"type": "number", "description": "Get tasks with deadlines in next N days"},
            },
        },
        handler=_get_professional_tasks,
    ),
    ToolDef(
        name="update_professional_task",
        description="Update a professional task (status, deadline, notes, etc.)",
        parameters={
            "type": "object",
            "properties": {
                "id": {"type": "number", "description": "Task ID to update"},
                "updates": {"type": "object", "additionalProperties": True},
            },
            "required": ["id", "updates"],
        },
        handler=_update_professional_task,
    ),
    # Courses
    ToolDef(
        name="add_course",
        description="Add a new course to the student's course catalog",
        parameters={
            "type": "object",
            "properties": {
                "course_code": {"type": "string", "description": "Unique course code (e.g., CS101)"},
                "course_name": {"type": "string", "description": "Full course name"},
                "instructor": {"type": "string", "description": "Instructor/professor name"},
                "semester": {"type": "string", "description": "Semester (e.g., Fall 2025, Spring 2026)"},
                "credits": {"type": "number", "description": "Credit hours"},
                "description": {"type": "string", "description": "Course description"},
                "topics_covered": {"type": "string", "description": "Comma-separated list of topics"},
            },
            "required": ["course_code", "course_name"],
        },
        handler=_add_course,
    ),
    ToolDef(
        name="get_courses",
        description="Get student's courses (active, completed, or dropped)",
        parameters={
            "type": "object",
            "properties": {
                "status": {"type": "string", "enum": ["active", "completed", "dropped"]},
                "semester": {"type": "string", "description": "Filter by semester"},
            },
        },
        handler=_get_courses,
    ),
    # Study sessions & knowledge
    ToolDef(
        name="log_study_session",
        description=(
            "Log a study session to track learning progress and build knowledge base. "
            "Always use this after discussing study topics."
        ),
        parameters={
            "type": "object",
            "properties": {
                "course_code": {"type": "string", "description": "Course being studied"},
                "topic": {"type": "string", "description": "Main topic studied"},
                "subtopics": {"type": "string", "description": "Comma-separated subtopics"},
                "duration_minutes": {"type": "number", "description": "Study session duration"},
                "session_type": {
                    "type": "string",
                    "enum": ["lecture_review", "practice", "reading", "problem_solving", "group_study"],
                    "description": "Type of study activity",
                },
                "understanding_level": {
                    "type": "string",
                    "enum": ["struggling", "partial", "good", "excellent"],
                    "description": "How well the topic was understood",
                },
                "key_concepts": {"type": "string", "description": "Key concepts or facts learned"},
                "questions_raised": {"type": "string", "description": "Areas of confusion or follow-up questions"},
                "notes": {"type": "string", "description": "Additional notes"},
            },
            "required": ["topic"],
        },
        handler=_log_study_session,
    ),
    ToolDef(
        name="get_study_sessions",
        description="Get past study sessions (to review what was studied)",
        parameters={
            "type": "object",
            "properties": {
                "course_code": {"type": "string"},
                "topic": {"type": "string"},
                "last_n_days": {"type": "number", "description": "Sessions from last N days"},
            },
        },
        handler=_get_study_sessions,
    ),
    ToolDef(
        name="get_knowledge_base",
        description=(
            "Get student's knowledge base (what topics they know and proficiency levels). "
            "Use this in study_helper mode to tailor explanations."
        ),
        parameters={
            "type": "object",
            "properties": {
                "course_code": {"type": "string", "description": "Optional: filter by specific course"},
            },
        },
        handler=_get_knowledge_base,
    ),
    # Combined queries
    ToolDef(
        name="get_all_upcoming",
        description=(
            "Get all upcoming tasks from BOTH academic and professional categories. "
            "Use when user asks \"what's coming up\" without specifying category."
        ),
        parameters={
            "type": "object",
            "properties": {
                "days": {"type": "number", "description": "Number of days to look ahead (default: 7)"},
            },
        },
        handler=_get_all_upcoming,
    ),
]

TOOLS_BY_NAME: dict[str, ToolDef] = {tool.name: tool for tool in TOOLS}


# =============================================================================
# DISPATCH
# =============================================================================


async def execute_tool_call(
    agent: StudentAgent,
    call: ToolCall,
    tools_by_name: dict[str, ToolDef] | None = None,
) -> ToolResult:
    """
    Run one tool call against the session state.

    Failures never propagate: an unknown name or a handler error becomes an
    `{"error": ...}` result, and the database session is rolled back so the
    next call starts clean.
    """
    tools_by_name = TOOLS_BY_NAME if tools_by_name is None else tools_by_name
    tool = tools_by_name.get(call.name)
    if tool is None or tool.handler is None:
        logger.warning("Model requested unknown tool %r", call.name)
        return ToolResult(
            tool_call_id=call.id,
            name=call.name,
            output=json.dumps({"error": "Unknown tool"}),
            is_error=True,
        )

    try:
        result = await tool.handler(agent, call.arguments or {})
    except Exception as e:
        logger.warning("Tool %s failed: %s", call.name, e)
        await agent.rollback()
        return ToolResult(
            tool_call_id=call.id,
            name=call.name,
            output=json.dumps({"error": str(e)}),
            is_error=True,
        )

    return ToolResult(
        tool_call_id=call.id,
        name=call.name,
        output=json.dumps(to_jsonable_python(result)),
    )
