"""Per-session key/value store backing the profile and preferences."""

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.db.models import SessionValue
from cadence.schemas.profile import PreferencesRead, PreferencesUpdate, ProfileRead, ProfileUpdate

logger = logging.getLogger(__name__)

# Schema field -> storage key
_PROFILE_KEYS = {
    "name": "user_name",
    "major": "user_major",
    "year": "user_year",
    "university": "user_university",
    "gpa": "user_gpa",
    "timezone": "user_timezone",
    "study_goal_hours_per_week": "study_goal_hours_per_week",
}
_PROFILE_STAMP_KEY = "profile_updated_at"

_PREFERENCE_KEYS = {
    "theme": "pref_theme",
    "notifications_enabled": "pref_notifications",
    "reminder_time": "pref_reminder_time",
    "default_priority": "pref_default_priority",
}


class SessionStore:
    """Profile and preference scalars, merged field by field."""

    async def _get_values(
        self,
        db: AsyncSession,
        session_id: str,
        keys: list[str],
    ) -> dict[str, Any]:
        stmt = select(SessionValue).where(
            SessionValue.session_id == session_id,
            SessionValue.key.in_(keys),
        )
        result = await db.execute(stmt)
        return {row.key: row.value for row in result.scalars()}

    async def _put_values(
        self,
        db: AsyncSession,
        session_id: str,
        values: dict[str, Any],
    ) -> None:
        stmt = select(SessionValue).where(
            SessionValue.session_id == session_id,
            SessionValue.key.in_(list(values)),
        )
        result = await db.execute(stmt)
        existing = {row.key: row for row in result.scalars()}

        for key, value in values.items():
            row = existing.get(key)
            if row is None:
                db.add(SessionValue(session_id=session_id, key=key, value=value))
            else:
                row.value = value
                row.updated_at = func.now()

        await db.commit()

    async def set_profile(
        self,
        db: AsyncSession,
        session_id: str,
        profile: ProfileUpdate,
    ) -> bool:
        """
        Merge the supplied profile fields.

        Only fields present in the payload are written (an explicit null is
        present). Returns False without touching storage, including the
        profile_updated_at stamp, when nothing was supplied.
        """
        supplied = profile.model_dump(exclude_unset=True)
        updates = {_PROFILE_KEYS[field]: value for field, value in supplied.items()}
        if not updates:
            return False

        updates[_PROFILE_STAMP_KEY] = datetime.now(timezone.utc).isoformat()
        await self._put_values(db, session_id, updates)
        logger.info("Profile updated for session %s: %s", session_id, sorted(supplied))
        return True

    async def get_profile(self, db: AsyncSession, session_id: str) -> ProfileRead:
        """Return every profile field; timezone falls back to UTC."""
        values = await self._get_values(
            db, session_id, [*_PROFILE_KEYS.values(), _PROFILE_STAMP_KEY]
        )
        profile = {field: values.get(key) for field, key in _PROFILE_KEYS.items()}
        profile["timezone"] = profile["timezone"] or "UTC"
        profile["profile_updated_at"] = values.get(_PROFILE_STAMP_KEY)
        return ProfileRead.model_validate(profile)

    async def set_preferences(
        self,
        db: AsyncSession,
        session_id: str,
        preferences: PreferencesUpdate,
    ) -> bool:
        """Merge the supplied preference fields. Returns False if nothing was supplied."""
        supplied = preferences.model_dump(exclude_unset=True)
        updates = {_PREFERENCE_KEYS[field]: value for field, value in supplied.items()}
        if not updates:
            return False

        await self._put_values(db, session_id, updates)
        return True

    async def get_preferences(self, db: AsyncSession, session_id: str) -> PreferencesRead:
        """Return preferences with defaults for anything unset."""
        values = await self._get_values(db, session_id, list(_PREFERENCE_KEYS.values()))
        notifications = values.get("pref_notifications")
        return PreferencesRead(
            theme=values.get("pref_theme") or "light",
            notifications_enabled=True if notifications is None else notifications,
            reminder_time=values.get("pref_reminder_time") or "20:00",
            default_priority=values.get("pref_default_priority") or "medium",
        )


# Singleton instance
session_store = SessionStore()
