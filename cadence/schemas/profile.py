"""Profile and preference schemas."""

from datetime import datetime
from typing import Literal

from cadence.schemas.base import BaseSchema
from cadence.schemas.tasks import PriorityType

YearType = Literal["freshman", "sophomore", "junior", "senior", "graduate"]
ThemeType = Literal["light", "dark"]


class ProfileUpdate(BaseSchema):
    """Partial profile. Only fields present in the payload are merged."""

    name: str | None = None
    major: str | None = None
    year: YearType | None = None
    university: str | None = None
    gpa: float | None = None  # 0.0-4.0 expected, not enforced
    timezone: str | None = None
    study_goal_hours_per_week: float | None = None


class ProfileRead(BaseSchema):
    """Full profile view."""

    name: str | None = None
    major: str | None = None
    year: str | None = None
    university: str | None = None
    gpa: float | None = None
    timezone: str = "UTC"
    study_goal_hours_per_week: float | None = None
    profile_updated_at: datetime | None = None


class PreferencesUpdate(BaseSchema):
    """Partial preferences."""

    theme: ThemeType | None = None
    notifications_enabled: bool | None = None
    reminder_time: str | None = None  # HH:MM
    default_priority: PriorityType | None = None


class PreferencesRead(BaseSchema):
    """Preferences with defaults applied."""

    theme: str = "light"
    notifications_enabled: bool = True
    reminder_time: str = "20:00"
    default_priority: str = "medium"
