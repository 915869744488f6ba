"""Database connection and session management."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlmodel import SQLModel

from pickem_core.config import get_settings


@lru_cache
def get_engine() -> AsyncEngine:
    """
    Return the process-wide async engine, created on first use.

    SQLite URLs (used for local runs and tests) do not accept pool sizing
    arguments, so pooling options are only applied to server databases.
    """
    settings = get_settings()
    url = settings.database.url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=False, future=True)

    return create_async_engine(
        url,
        echo=False,
        future=True,
        pool_size=settings.database.pool_size,
        max_overflow=10,
    )


@lru_cache
def get_session_maker() -> async_sessionmaker[AsyncSession]:
    """Return the async session factory bound to the process-wide engine."""
    return async_sessionmaker(get_engine(), expire_on_commit=False)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session.

    Example:
        async with get_session() as session:
            result = await session.execute(select(Game))
    """
    async with get_session_maker()() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db() -> None:
    """
    Initialize database schema.

    Creates all tables defined in SQLModel (development only).
    """
    import pickem_core.models  # noqa: F401  registers tables on SQLModel.metadata

    async with get_engine().begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await get_engine().dispose()
    get_session_maker.cache_clear()
    get_engine.cache_clear()
