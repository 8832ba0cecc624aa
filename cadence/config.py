"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Cadence"
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    # If database_url_override is set (e.g., for Neon with SSL, or sqlite for local runs), it takes precedence
    database_url_override: str | None = None
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_user: str = "cadence"
    postgres_password: str = ""
    postgres_db: str = "cadence"

    @computed_field
    @property
    def database_url(self) -> str:
        """Get async database URL. Uses override if provided, otherwise constructs from parts."""
        if self.database_url_override:
            url = self.database_url_override
            if url.startswith("sqlite"):
                return url
            # Replace scheme for async driver
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("postgres://"):
                url = url.replace("postgres://", "postgresql+asyncpg://", 1)
            # Strip query params - asyncpg doesn't accept them via URL
            # SSL is handled via connect_args in session.py
            if "?" in url:
                url = url.split("?")[0]
            return url
        return f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    @computed_field
    @property
    def database_requires_ssl(self) -> bool:
        """Check if the database connection requires SSL (for Neon, etc.)."""
        if self.database_url_override:
            return "sslmode=require" in self.database_url_override or "ssl=require" in self.database_url_override
        return False

    # CORS - the front end is served from a different origin and carries no credentials
    cors_origins: list[str] = ["*"]

    # Sessions
    # Requests without ?session= all land in this session
    default_session_id: str = "default-user"

    # Anthropic API
    anthropic_api_key: str

    # LLM Configuration
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 2048
    llm_temperature: float = 0.7
    llm_max_attempts: int = 3

    # Chat / context windows
    chat_history_limit: int = 10
    history_default_limit: int = 20
    upcoming_default_days: int = 7
    recent_study_days: int = 30


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def sanitize_error(error: Exception, *, generic_message: str = "An internal error occurred.") -> str:
    """
    Return a user-safe error message.

    In development, returns the full exception string for debugging.
    In staging/production, returns a generic message to avoid leaking internals.
    """
    settings = get_settings()
    if settings.environment == "development":
        return str(error)
    return generic_message
