"""Database session management."""

import logging
from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from cadence.config import get_settings
from cadence.db import models  # noqa: F401 - Import models to register them
from cadence.db.base import Base

logger = logging.getLogger(__name__)
settings = get_settings()


def _engine_kwargs(url: str) -> dict[str, Any]:
    """Pool/driver options for the configured backend."""
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url:
            # One shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = StaticPool
        return kwargs

    kwargs = {"pool_pre_ping": True, "pool_size": 5, "max_overflow": 10}
    if settings.database_requires_ssl:
        kwargs["connect_args"] = {"ssl": "require"}
    return kwargs


# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_kwargs(settings.database_url),
)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ensure_schema(db: AsyncSession) -> None:
    """
    Create any missing tables on the connection behind `db`.

    Idempotent (CREATE IF NOT EXISTS semantics via checkfirst), so it is safe
    after a cold start against a database that already has the tables.
    """
    conn = await db.connection()
    await conn.run_sync(Base.metadata.create_all, checkfirst=True)
    await db.commit()
    logger.debug("Schema ensured")
