"""Database package."""

from goals.db.base import (
    Base,
    async_session_maker,
    create_session_maker,
    engine,
    get_db,
    init_db,
)

__all__ = [
    "Base",
    "async_session_maker",
    "create_session_maker",
    "engine",
    "get_db",
    "init_db",
]
