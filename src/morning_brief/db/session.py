# ABOUTME: Async database session management for SQLAlchemy.
# ABOUTME: Provides the engine, a commit/rollback session scope, and the FastAPI dependency.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from morning_brief.config import get_settings
from morning_brief.db.models import Base

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

log = structlog.get_logger()

_engine: "AsyncEngine | None" = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> "AsyncEngine":
    """Get or create the async database engine.

    Raises:
        ValueError: If no database host is configured.
    """
    global _engine
    if _engine is None:
        settings = get_settings()
        if not settings.database_enabled:
            raise ValueError("DB_HOST is required for database features")
        _engine = create_async_engine(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            echo=settings.log_level == "DEBUG",
        )
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession]:
    """Context manager for database sessions with automatic commit/rollback.

    Usage:
        async with get_session() as session:
            result = await session.execute(query)
    """
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Create all tables if they don't exist. No-op without a database."""
    if not get_settings().database_enabled:
        log.info("database_disabled")
        return
    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    log.info("database_initialized")


async def close_db() -> None:
    """Close the database engine and release connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None
