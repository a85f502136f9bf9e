"""
Goal Snapshot Resolution

Resolves which goal applied to a topic on a given day.

A topic's goal history is a set of immutable snapshots (TopicGoalChange).
For a target day, only snapshots whose effective_from_day is on or before
that day apply; among those the latest day wins, and among snapshots made on
the same day the one made latest in real time wins. Adding a snapshot that
becomes effective after a day therefore never changes what that day resolves
to.

Usage:
    from goals.services.tracking.goal_resolution import resolve_goal

    minutes = resolve_goal(topic, day)  # None when no snapshot applies
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Optional

from goals.db.models import Topic, TopicGoalChange
from goals.utils.date_utils import DayLike, normalize_day, today


def _snapshot_order(change: TopicGoalChange) -> tuple:
    """
    Total order over snapshots.

    (effective_from_day, effective_at) decides; goal_minutes and id only break
    exact ties so the result never depends on list order.
    """
    return (
        change.effective_from_day,
        change.effective_at,
        change.goal_minutes,
        str(change.id),
    )


def applicable_snapshot(
    changes: Iterable[TopicGoalChange], day: DayLike
) -> Optional[TopicGoalChange]:
    """
    Return the snapshot that governs `day`, or None.

    Args:
        changes: Goal snapshots of a single topic, in any order.
        day: Target day (a date, or any instant on that day).

    Returns:
        The winning TopicGoalChange, or None if none was effective yet.
    """
    target_day = normalize_day(day)
    applicable = [c for c in changes if c.effective_from_day <= target_day]
    if not applicable:
        return None
    return max(applicable, key=_snapshot_order)


def resolve_goal_from_changes(
    changes: Iterable[TopicGoalChange], day: DayLike
) -> Optional[int]:
    """Goal minutes in effect on `day` for the given snapshots, or None."""
    snapshot = applicable_snapshot(changes, day)
    return snapshot.goal_minutes if snapshot else None


def resolve_goal(topic: Topic, day: DayLike) -> Optional[int]:
    """
    Goal minutes in effect for a topic on a day.

    Returns None (unknown, not zero) when the topic has no snapshot
    effective on or before that day.
    """
    return resolve_goal_from_changes(topic.goal_changes, day)


def current_goal(topic: Topic, now: Optional[datetime] = None) -> Optional[int]:
    """Goal minutes in effect today."""
    return resolve_goal(topic, today(now))
