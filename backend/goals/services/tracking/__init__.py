"""
Goal tracking services.

Pure day-based computations (goal resolution, daily status, streaks) and the
database-backed services built on them.
"""

from goals.services.tracking.daily_status import (
    compute_daily_status,
    daily_statuses_by_day,
    group_sessions_by_day,
)
from goals.services.tracking.goal_resolution import (
    current_goal,
    resolve_goal,
    resolve_goal_from_changes,
)
from goals.services.tracking.streak_tracking import (
    StreakCalculator,
    StreakTrackingService,
    current_streak,
    longest_streak,
)
from goals.services.tracking.time_tracking import TimeTrackingService

__all__ = [
    "StreakCalculator",
    "StreakTrackingService",
    "TimeTrackingService",
    "compute_daily_status",
    "current_goal",
    "current_streak",
    "daily_statuses_by_day",
    "group_sessions_by_day",
    "longest_streak",
    "resolve_goal",
    "resolve_goal_from_changes",
]
