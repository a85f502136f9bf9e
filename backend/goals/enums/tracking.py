"""
Tracking System Enums

Defines enums for daily goal indicators and persisted schema versions.
"""

from enum import Enum


class DayIndicator(str, Enum):
    """
    Calendar indicator for one topic on one day.

    Rules:
    - NONE: nothing to show (no history yet, before the first session day,
      a future day, or today while the goal is still open)
    - MET: the topic's resolved goal was reached that day
    - MISSED: a past day where the goal was not reached (including days
      without any session)
    """

    NONE = "none"
    MET = "met"
    MISSED = "missed"


class SchemaVersion(str, Enum):
    """
    Shape of a persisted store.

    LEGACY stores keep one goal object per session (goals table referenced by
    study_sessions.goal_id). CURRENT stores keep per-topic goal snapshots
    (topic_goal_changes) and resolve goals by day.
    """

    EMPTY = "empty"  # No tracking tables at all
    LEGACY = "legacy"  # Version 1: goals referenced per session
    CURRENT = "current"  # Version 2: topic goal snapshots
