"""Pytest configuration and fixtures."""

import os
import tempfile
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

# Set required environment variables for testing BEFORE any imports of Settings
os.environ.setdefault("RAPID_API_KEY", "test_api_key")
os.environ.setdefault(
    "DATABASE_URL", f"sqlite+aiosqlite:///{Path(tempfile.gettempdir()) / 'pickem_test.db'}"
)
os.environ.setdefault("LOG_FILE", str(Path(tempfile.gettempdir()) / "pickem_test.log"))

import pickem_core.models  # noqa: E402,F401  registers tables on SQLModel.metadata


@pytest.fixture
def test_database_url(tmp_path):
    """File-backed SQLite database, fresh for every test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'pickem.db'}"


@pytest.fixture
async def test_engine(test_database_url):
    """Create test database engine."""
    engine = create_async_engine(test_database_url, echo=False, future=True)

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    """Create test database session."""
    async_session_maker = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session


@pytest.fixture
def mock_session_factory(test_engine):
    """Session factory bound to the test engine, as injected into services."""
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def mock_settings(test_database_url, tmp_path):
    """Mock settings for testing."""
    from pickem_core.config import (
        DatabaseConfig,
        LoggingConfig,
        Settings,
        SyncConfig,
        Tank01Config,
    )

    return Settings(
        tank01=Tank01Config(key="test_api_key", base_url="https://tank01.test"),
        database=DatabaseConfig(url=test_database_url),
        sync=SyncConfig(
            preferred_sportsbooks=["bet365", "fanduel", "draftkings", "caesars_sportsbook"],
            season_weeks=3,
        ),
        logging=LoggingConfig(level="DEBUG", file=str(tmp_path / "logs" / "pickem.log")),
    )
