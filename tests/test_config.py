"""Settings and error sanitizing."""

from cadence import config
from cadence.config import Settings, sanitize_error


def _settings(**overrides) -> Settings:
    return Settings(anthropic_api_key="test-key", _env_file=None, **overrides)


def test_database_url_from_parts():
    settings = _settings(database_url_override=None, postgres_user="u", postgres_password="p", postgres_db="d")
    assert settings.database_url == "postgresql+asyncpg://u:p@localhost:5432/d"


def test_database_url_override_rewrites_scheme_and_strips_query():
    settings = _settings(database_url_override="postgres://u:p@db.example.com/app?sslmode=require")
    assert settings.database_url == "postgresql+asyncpg://u:p@db.example.com/app"
    assert settings.database_requires_ssl is True


def test_sqlite_override_is_kept():
    settings = _settings(database_url_override="sqlite+aiosqlite:///./cadence.db")
    assert settings.database_url == "sqlite+aiosqlite:///./cadence.db"
    assert settings.database_requires_ssl is False


def test_sanitize_error_by_environment(monkeypatch):
    error = RuntimeError("connection refused at 10.0.0.5")

    monkeypatch.setattr(config, "get_settings", lambda: _settings(environment="development"))
    assert sanitize_error(error) == "connection refused at 10.0.0.5"

    monkeypatch.setattr(config, "get_settings", lambda: _settings(environment="production"))
    assert sanitize_error(error, generic_message="Try again later.") == "Try again later."
