"""Profile and preference merge behavior."""

from cadence.schemas.profile import PreferencesUpdate, ProfileUpdate


async def test_profile_defaults(agent):
    profile = await agent.get_profile()
    assert profile.name is None
    assert profile.timezone == "UTC"
    assert profile.profile_updated_at is None


async def test_partial_merge_keeps_omitted_fields(agent):
    await agent.set_profile(ProfileUpdate(name="Ada", major="Mathematics", gpa=3.9))
    await agent.set_profile(ProfileUpdate(major="Computer Science"))

    profile = await agent.get_profile()
    assert profile.name == "Ada"
    assert profile.major == "Computer Science"
    assert profile.gpa == 3.9
    assert profile.profile_updated_at is not None


async def test_explicit_null_overwrites(agent):
    await agent.set_profile(ProfileUpdate(name="Ada", university="Analytical U"))
    await agent.set_profile(ProfileUpdate.model_validate({"university": None}))

    profile = await agent.get_profile()
    assert profile.name == "Ada"
    assert profile.university is None


async def test_empty_merge_writes_nothing(agent):
    await agent.set_profile(ProfileUpdate(name="Ada"))
    stamped = (await agent.get_profile()).profile_updated_at

    changed = await agent.set_profile(ProfileUpdate())

    assert changed is False
    assert (await agent.get_profile()).profile_updated_at == stamped


async def test_empty_merge_on_fresh_session_leaves_no_stamp(agent):
    assert await agent.set_profile(ProfileUpdate()) is False
    assert (await agent.get_profile()).profile_updated_at is None


async def test_preferences_defaults_and_merge(agent):
    prefs = await agent.get_preferences()
    assert prefs.theme == "light"
    assert prefs.notifications_enabled is True
    assert prefs.reminder_time == "20:00"
    assert prefs.default_priority == "medium"

    await agent.set_preferences(PreferencesUpdate(theme="dark", notifications_enabled=False))
    prefs = await agent.get_preferences()
    assert prefs.theme == "dark"
    assert prefs.notifications_enabled is False
    assert prefs.reminder_time == "20:00"


async def test_sessions_are_isolated(db, agent):
    from cadence.services.agent import StudentAgent

    other = StudentAgent(db, "someone-else")
    await agent.set_profile(ProfileUpdate(name="Ada"))

    assert (await other.get_profile()).name is None
