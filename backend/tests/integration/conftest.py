"""
Integration Test Fixtures

Provides fixtures for integration tests that run against real PostgreSQL
databases: the current store and a separate legacy store. Tables are dropped
and recreated for every test, so each test starts from empty stores.

IMPORTANT: All integration tests use the TEST databases only (via
POSTGRES_TEST_* env vars). A safety check fixture (verify_test_database)
runs at session start to fail fast if production credentials are detected.

The legacy store must be a second database on the same server because the
legacy and current shapes share table names:
    createdb testdb_legacy   # or set POSTGRES_TEST_LEGACY_DB
"""

import os
from pathlib import Path
from typing import AsyncGenerator, Optional
from urllib.parse import quote_plus

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from goals.config import settings
from goals.db.base import Base
from goals.db.models_legacy import LegacyBase

# Load .env file FIRST, before reading any environment variables
# This ensures POSTGRES_TEST_* variables are available
_project_root = Path(__file__).parent.parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


# =============================================================================
# Safety Check - Runs before any integration tests
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def verify_test_database():
    """
    Safety check: Verify we're using test database credentials.

    Set ALLOW_PROD_DB_TESTS=1 to skip this check (for local development only).
    """
    if os.environ.get("ALLOW_PROD_DB_TESTS", "").lower() in ("1", "true", "yes"):
        return

    config = get_test_db_config()
    production_indicators = ["studygoals", "prod", "production"]
    for indicator in production_indicators:
        for db_name in (config["db"], config["legacy_db"]):
            assert indicator not in db_name.lower(), (
                f"SAFETY CHECK FAILED: Database name '{db_name}' looks like production! "
                "Set POSTGRES_TEST_DB / POSTGRES_TEST_LEGACY_DB or ALLOW_PROD_DB_TESTS=1."
            )
        assert indicator not in config["user"].lower(), (
            f"SAFETY CHECK FAILED: Database user '{config['user']}' looks like production! "
            "Set POSTGRES_TEST_USER environment variable or ALLOW_PROD_DB_TESTS=1."
        )


@pytest.fixture(autouse=True)
def default_goal(monkeypatch: pytest.MonkeyPatch) -> None:
    """Seeded snapshots use a 60 minute default regardless of .env."""
    monkeypatch.setattr(settings, "DEFAULT_GOAL_MINUTES", 60)


# =============================================================================
# Database Configuration
# =============================================================================


def get_test_db_config() -> dict:
    """
    Get test database configuration from environment variables.

    Priority: POSTGRES_TEST_* > defaults. The production POSTGRES_DB is never
    used as a fallback for the database names.
    """
    return {
        "host": os.environ.get("POSTGRES_HOST", "localhost"),
        "port": os.environ.get("POSTGRES_PORT", "5432"),
        "user": os.environ.get(
            "POSTGRES_TEST_USER",
            os.environ.get("POSTGRES_USER", "testuser")
        ),
        "password": os.environ.get(
            "POSTGRES_TEST_PASSWORD",
            os.environ.get("POSTGRES_PASSWORD", "testpass")
        ),
        "db": os.environ.get("POSTGRES_TEST_DB", "testdb"),
        "legacy_db": os.environ.get("POSTGRES_TEST_LEGACY_DB", "testdb_legacy"),
    }


def get_test_db_url(db_name: Optional[str] = None) -> str:
    """Build an asyncpg URL for the current test store, or for `db_name`."""
    config = get_test_db_config()
    # URL-encode the password to handle special characters
    encoded_password = quote_plus(config["password"])
    return (
        f"postgresql+asyncpg://{config['user']}:{encoded_password}"
        f"@{config['host']}:{config['port']}/{db_name or config['db']}"
    )


def get_test_legacy_db_url() -> str:
    return get_test_db_url(get_test_db_config()["legacy_db"])


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def legacy_db_url() -> str:
    return get_test_legacy_db_url()


@pytest_asyncio.fixture(scope="function")
async def current_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    Engine on a freshly created current store.

    Creates a fresh engine per test to avoid event loop issues. Tables are
    dropped and recreated so the schema matches the models.
    """
    test_engine = create_async_engine(get_test_db_url(), echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def legacy_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Engine on a freshly created version 1 store."""
    test_engine = create_async_engine(get_test_legacy_db_url(), echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(LegacyBase.metadata.drop_all)
        await conn.run_sync(LegacyBase.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def current_store(current_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(current_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def legacy_store(legacy_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(legacy_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(
    current_store: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """
    One session on the current store, shared by every service in a test.

    Services commit their own work; anything left pending is rolled back.
    """
    async with current_store() as session:
        try:
            yield session
        finally:
            await session.rollback()
            await session.close()
