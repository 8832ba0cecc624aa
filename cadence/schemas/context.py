"""Composite context views handed to the assistant and the front end."""

from typing import Literal

from pydantic import BaseModel

from cadence.schemas.courses import CourseRead, KnowledgeEntryRead, StudySessionRead
from cadence.schemas.profile import PreferencesRead, ProfileRead
from cadence.schemas.tasks import AcademicTaskRead, ProfessionalTaskRead


class StudentContext(BaseModel):
    """Active courses, knowledge and the recent study window."""

    courses: list[CourseRead]
    knowledge: list[KnowledgeEntryRead]
    recent_study: list[StudySessionRead]
    total_study_time: int  # Minutes


class FullContext(StudentContext):
    """Student context plus profile and preferences."""

    profile: ProfileRead
    preferences: PreferencesRead


class UpcomingAcademicTask(AcademicTaskRead):
    """Academic task in the merged upcoming view."""

    category: Literal["academic"] = "academic"


class UpcomingProfessionalTask(ProfessionalTaskRead):
    """Professional task in the merged upcoming view."""

    category: Literal["professional"] = "professional"


UpcomingItem = UpcomingAcademicTask | UpcomingProfessionalTask
