"""
Shared Test Fixtures and Configuration

This module provides pytest fixtures used across the unit tests: a fixed
time zone, mock database sessions and factories for unsaved ORM records.
"""

import os
import sys
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Generator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from dotenv import load_dotenv

# Add the backend directory to the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load .env file from project root BEFORE any fixtures run
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)
else:
    _backend_env = Path(__file__).parent.parent / ".env"
    if _backend_env.exists():
        load_dotenv(_backend_env)

# Settings are read at import time; pin the values tests depend on first
os.environ["TIMEZONE"] = "UTC"
os.environ["DEBUG"] = "false"
os.environ["STRICT_DAY_CHECKS"] = "false"

from goals.config import settings  # noqa: E402
from goals.db.models import StudySession, Topic, TopicGoalChange  # noqa: E402


# ============================================================================
# Environment Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def utc_day_boundaries(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """
    Compute day boundaries in UTC for every test.

    A .env file may set TIMEZONE; tests must not depend on it.
    """
    monkeypatch.setattr(settings, "TIMEZONE", "UTC")
    monkeypatch.setattr(settings, "STRICT_DAY_CHECKS", False)
    yield


# ============================================================================
# ORM Factories
# ============================================================================


@pytest.fixture
def make_topic() -> Callable[..., Topic]:
    """
    Factory for unsaved topics with goal snapshots.

    Usage:
        topic = make_topic("Math", goals=[(60, monday), (30, wednesday)])
    """

    def _make(
        name: str = "Topic",
        goals: Optional[list[tuple[int, datetime]]] = None,
    ) -> Topic:
        topic = Topic(name=name)
        for goal_minutes, effective_at in goals or []:
            topic.goal_changes.append(
                TopicGoalChange(
                    topic_id=topic.id,
                    goal_minutes=goal_minutes,
                    effective_at=effective_at,
                )
            )
        return topic

    return _make


@pytest.fixture
def make_session() -> Callable[..., StudySession]:
    """
    Factory for unsaved sessions attached to a topic.

    Usage:
        session = make_session(topic, tuesday_morning, minutes=45)
    """

    def _make(
        topic: Topic,
        started_at: datetime,
        minutes: float = 30,
        notes: Optional[str] = None,
    ) -> StudySession:
        session = StudySession(
            topic_id=topic.id,
            started_at=started_at,
            ended_at=started_at + timedelta(minutes=minutes),
            notes=notes,
        )
        topic.study_sessions.append(session)
        return session

    return _make


# ============================================================================
# Mock Fixtures
# ============================================================================


def mock_result(
    scalars: Optional[list[Any]] = None, scalar: Any = None
) -> MagicMock:
    """
    Build a mock for the object returned by AsyncSession.execute().

    Args:
        scalars: Rows returned by result.scalars().all().
        scalar: Value returned by result.scalar_one_or_none().
    """
    result = MagicMock()
    result.scalars.return_value.all.return_value = scalars or []
    result.scalar_one_or_none.return_value = scalar
    return result


@pytest.fixture
def mock_db_session() -> MagicMock:
    """
    Create a mock database session for unit testing.
    """
    mock = MagicMock()
    mock.execute = AsyncMock(return_value=mock_result())
    mock.get = AsyncMock(return_value=None)
    mock.delete = AsyncMock()
    mock.flush = AsyncMock()
    mock.refresh = AsyncMock()
    mock.commit = AsyncMock()
    mock.rollback = AsyncMock()
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def make_result() -> Callable[..., MagicMock]:
    """Provide mock_result() to tests that script several execute() calls."""
    return mock_result
