"""
Daily Aggregation

Turns a batch of study sessions into per-topic completion facts for a day.

compute_daily_status() expects every session in the batch to fall on the same
calendar day; it anchors the day to the first session and does not re-check
the rest unless settings.STRICT_DAY_CHECKS is enabled. group_sessions_by_day()
produces such batches from an arbitrary session list.

Goals are resolved on every call: snapshots may be added after sessions
exist, so nothing here is cached.

Usage:
    from goals.services.tracking.daily_status import compute_daily_status

    status = compute_daily_status(sessions_for_one_day)
    if status and status.any_met:
        ...
"""

import logging
from collections.abc import Iterable, Sequence
from datetime import date
from typing import Optional
from uuid import UUID

from goals.config import settings
from goals.db.models import StudySession, Topic
from goals.exceptions import MixedDayBatchError
from goals.models.tracking import DailyStatus, TopicDayStatus
from goals.services.tracking.goal_resolution import resolve_goal

logger = logging.getLogger(__name__)


def summarize_topic_day(
    topic: Topic, sessions: Iterable[StudySession], day: date
) -> TopicDayStatus:
    """
    Aggregate one topic's sessions for one day.

    Args:
        topic: Topic with its goal snapshots loaded.
        sessions: That topic's sessions for the day.
        day: Day used to resolve the goal snapshot.

    Returns:
        TopicDayStatus; an unknown goal is never met, whatever the total.
    """
    total = sum(session.duration_minutes for session in sessions)
    goal = resolve_goal(topic, day)
    return TopicDayStatus(
        topic_id=topic.id,
        topic_name=topic.name,
        total_minutes=total,
        goal_minutes=goal,
        is_met=goal is not None and total >= goal,
    )


def compute_daily_status(sessions: Sequence[StudySession]) -> Optional[DailyStatus]:
    """
    Compute the DailyStatus for a batch of same-day sessions.

    Sessions are grouped by topic in first-seen order and their durations
    summed; each topic's goal is resolved for the anchor day (the first
    session's normalized day).

    Args:
        sessions: Sessions from one calendar day, each with its topic (and the
            topic's goal snapshots) loaded.

    Returns:
        DailyStatus, or None for an empty batch.

    Raises:
        MixedDayBatchError: Only with STRICT_DAY_CHECKS, if the batch spans days.
    """
    if not sessions:
        return None

    day = sessions[0].normalized_day
    if settings.STRICT_DAY_CHECKS:
        _check_single_day(sessions, day)

    topics: dict[UUID, Topic] = {}
    grouped: dict[UUID, list[StudySession]] = {}
    for session in sessions:
        topic = session.topic
        if topic.id not in grouped:
            topics[topic.id] = topic
            grouped[topic.id] = []
        grouped[topic.id].append(session)

    return DailyStatus(
        day=day,
        topics=[
            summarize_topic_day(topics[topic_id], topic_sessions, day)
            for topic_id, topic_sessions in grouped.items()
        ],
    )


def group_sessions_by_day(
    sessions: Iterable[StudySession],
) -> dict[date, list[StudySession]]:
    """Group sessions by normalized day, keeping input order within a day."""
    grouped: dict[date, list[StudySession]] = {}
    for session in sessions:
        grouped.setdefault(session.normalized_day, []).append(session)
    return grouped


def daily_statuses_by_day(sessions: Iterable[StudySession]) -> list[DailyStatus]:
    """
    Compute one DailyStatus per day that has sessions.

    Returns:
        list[DailyStatus]: Ascending by day.
    """
    grouped = group_sessions_by_day(sessions)
    statuses = []
    for day in sorted(grouped):
        status = compute_daily_status(grouped[day])
        if status is not None:
            statuses.append(status)
    return statuses


def _check_single_day(sessions: Sequence[StudySession], day: date) -> None:
    """Raise if any session falls on a day other than `day`."""
    other_days = sorted({s.normalized_day for s in sessions} - {day})
    if other_days:
        logger.error(f"Daily aggregation for {day} received sessions from {other_days}")
        raise MixedDayBatchError(
            f"Sessions span multiple days: {day} and {other_days}",
            details={"day": day.isoformat(), "other_days": [d.isoformat() for d in other_days]},
        )
