"""Pydantic models for the application."""

from goals.models.migration import MigrationReport
from goals.models.tracking import (
    CalendarDay,
    DailyStatus,
    GoalChangeRequest,
    LogSessionRequest,
    StreakData,
    StreakOverview,
    TopicDayStatus,
    TopicSummary,
)

__all__ = [
    "CalendarDay",
    "DailyStatus",
    "GoalChangeRequest",
    "LogSessionRequest",
    "MigrationReport",
    "StreakData",
    "StreakOverview",
    "TopicDayStatus",
    "TopicSummary",
]
