"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Schema is managed by Alembic (agencyflow/infrastructure/persistence/migrations).
Engine and session factory are created lazily on first use so importing
this module does not trigger Settings validation.

Tenant isolation is enforced in the repositories: every query on a
tenant-owned table filters by tenant_id.
"""

from collections.abc import AsyncIterator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from agencyflow.core.config import get_settings
from agencyflow.domain.exceptions import SqlNotConfiguredException

# Set by _ensure_engine() on first use.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    if not settings.database_url:
        return
    connect_args: dict[str, Any] = {}
    if "asyncpg" in settings.database_url:
        connect_args["command_timeout"] = settings.db_command_timeout or 60
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size or 10,
        max_overflow=settings.db_max_overflow or 20,
        pool_recycle=3600,
        connect_args=connect_args,
    )
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Return the session factory, creating the engine if needed.

    Raises:
        SqlNotConfiguredException: DATABASE_URL is not set.
    """
    _ensure_engine()
    if AsyncSessionLocal is None:
        raise SqlNotConfiguredException()
    return AsyncSessionLocal


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""


async def get_db() -> AsyncIterator[AsyncSession]:
    """Database session dependency for read operations (no commit)."""
    factory = get_session_factory()
    async with factory() as session:
        yield session


async def get_db_transactional() -> AsyncIterator[AsyncSession]:
    """Database session dependency for writes: commits on success, rolls back on error."""
    factory = get_session_factory()
    async with factory() as session:
        async with session.begin():
            yield session
