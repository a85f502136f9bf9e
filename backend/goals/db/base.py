"""
Database Base Configuration

Sets up the async SQLAlchemy engine and session management for PostgreSQL.

Usage:
    from goals.db.base import async_session_maker, Base

    # In a unit of work
    async with async_session_maker() as session:
        result = await session.execute(...)
"""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from goals.config import settings, yaml_config


# Get pool configuration from yaml config
db_config: dict[str, Any] = yaml_config.get("database", {})
pool_size: int = db_config.get("pool_size", 5)
max_overflow: int = db_config.get("max_overflow", 10)
pool_timeout: int = db_config.get("pool_timeout", 30)

# Create async engine
engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=pool_size,
    max_overflow=max_overflow,
    pool_timeout=pool_timeout,
    echo=settings.DEBUG,
)

# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all current-shape SQLAlchemy models."""

    pass


# Import models AFTER Base is defined to avoid circular imports.
# This ensures all models are registered with Base.metadata.
from goals.db import models  # noqa: F401, E402


def create_session_maker(url: str) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    """
    Build a standalone engine and session factory for another store.

    Used for the legacy store during migration, which lives behind its own
    URL and is never opened through the application engine.

    Args:
        url: Async SQLAlchemy connection URL.

    Returns:
        Tuple of (engine, session factory). Callers dispose the engine.
    """
    other_engine = create_async_engine(url, echo=settings.DEBUG)
    maker = async_sessionmaker(other_engine, class_=AsyncSession, expire_on_commit=False)
    return other_engine, maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session that commits on success and rolls back on error.

    Usage:
        async for db in get_db():
            service = TimeTrackingService(db)
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """
    Initialize database tables.

    Called on application startup to create tables that don't exist.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
