"""
Time Tracking Service

Records study time and goal changes, and answers day-based questions about
them.

Responsibilities:
- Create and delete topics
- Persist completed timer sessions (zero-length sessions are discarded)
- Append goal snapshots (a goal change never edits an older snapshot)
- Resolve goals and compute daily statuses from stored data
- Topic summaries (today, rolling week) and calendar month indicators

Usage:
    from goals.services.tracking.time_tracking import TimeTrackingService

    service = TimeTrackingService(db)
    topic = await service.create_topic("Japanese", goal_minutes=30)
    await service.record_session(topic.id, elapsed_seconds=1800)
    status = await service.get_daily_status(date.today())
"""

import calendar
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from goals.config import settings
from goals.db.models import StudySession, Topic, TopicGoalChange
from goals.enums.tracking import DayIndicator
from goals.exceptions import (
    InvalidGoalError,
    InvalidSessionError,
    SessionNotFoundError,
    TopicNotFoundError,
    ValidationError,
)
from goals.models.tracking import (
    CalendarDay,
    DailyStatus,
    GoalChangeRequest,
    LogSessionRequest,
    TopicSummary,
)
from goals.services.tracking.daily_status import (
    compute_daily_status,
    daily_statuses_by_day,
    summarize_topic_day,
)
from goals.services.tracking.goal_resolution import resolve_goal, resolve_goal_from_changes
from goals.utils import date_utils

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


class TimeTrackingService:
    """
    Service for recording study time and reading it back by day.

    Write operations commit their own unit of work. Read operations load the
    records they need and recompute derived values on every call.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the time tracking service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    # ─────────────────────────────────────────────────────────────
    # Topics
    # ─────────────────────────────────────────────────────────────

    async def create_topic(
        self,
        name: str,
        goal_minutes: Optional[int] = None,
        description: Optional[str] = None,
        effective_at: Optional[datetime] = None,
    ) -> Topic:
        """
        Create a topic, optionally with its first goal snapshot.

        Args:
            name: Display name.
            goal_minutes: Initial daily goal. Without it the topic has no
                resolvable goal until change_goal() is called.
            description: Optional free text.
            effective_at: When the initial goal takes effect (default now).

        Returns:
            The persisted Topic.

        Raises:
            InvalidGoalError: If goal_minutes is not positive.
        """
        topic = Topic(name=name, description=description)
        if goal_minutes is not None:
            _validate_goal_minutes(goal_minutes)
            topic.goal_changes.append(
                TopicGoalChange(
                    goal_minutes=goal_minutes, effective_at=effective_at or _utc_now()
                )
            )

        self.db.add(topic)
        await self.db.commit()

        logger.info(f"Created topic {topic.name!r} ({topic.id}) with goal={goal_minutes}")
        return topic

    async def delete_topic(self, topic_id: UUID) -> None:
        """
        Delete a topic together with its sessions and goal snapshots.

        Raises:
            TopicNotFoundError: If the topic does not exist.
        """
        topic = await self._get_topic(topic_id)
        await self.db.delete(topic)
        await self.db.commit()
        logger.info(f"Deleted topic {topic_id}")

    # ─────────────────────────────────────────────────────────────
    # Sessions
    # ─────────────────────────────────────────────────────────────

    async def record_session(
        self,
        topic_id: UUID,
        elapsed_seconds: float,
        ended_at: Optional[datetime] = None,
        notes: Optional[str] = None,
    ) -> Optional[StudySession]:
        """
        Persist a completed timer run as a study session.

        The session ends at `ended_at` (default now) and starts
        `elapsed_seconds` earlier. A run with no elapsed time is discarded.

        Args:
            topic_id: Topic the time was spent on.
            elapsed_seconds: Accumulated timer time.
            ended_at: When the timer was stopped.
            notes: Optional free text.

        Returns:
            The new StudySession, or None if nothing was recorded.

        Raises:
            TopicNotFoundError: If the topic does not exist.
        """
        if elapsed_seconds <= 0:
            logger.debug(f"Discarding empty timer run for topic {topic_id}")
            return None

        topic = await self._get_topic(topic_id, with_history=False)
        ended_at = ended_at or _utc_now()

        return await self._add_session(
            topic, ended_at - timedelta(seconds=elapsed_seconds), ended_at, notes
        )

    async def log_session(self, request: LogSessionRequest) -> Optional[StudySession]:
        """
        Persist a session with an explicit interval.

        Args:
            request: Topic, start, end and optional notes.

        Returns:
            The new StudySession, or None for a zero-length interval.

        Raises:
            InvalidSessionError: If ended_at is before started_at.
            TopicNotFoundError: If the topic does not exist.
        """
        if request.ended_at < request.started_at:
            raise InvalidSessionError(
                "ended_at must be after started_at",
                details={
                    "started_at": request.started_at.isoformat(),
                    "ended_at": request.ended_at.isoformat(),
                },
            )
        if request.ended_at == request.started_at:
            logger.debug(f"Discarding zero-length session for topic {request.topic_id}")
            return None

        topic = await self._get_topic(request.topic_id, with_history=False)
        return await self._add_session(
            topic, request.started_at, request.ended_at, request.notes
        )

    async def update_session_notes(
        self, session_id: UUID, notes: Optional[str]
    ) -> StudySession:
        """
        Replace a session's notes, the only mutable part of a session.

        Raises:
            SessionNotFoundError: If the session does not exist.
        """
        session = await self.db.get(StudySession, session_id)
        if session is None:
            raise SessionNotFoundError(
                f"Session {session_id} not found", details={"session_id": str(session_id)}
            )

        session.notes = notes
        await self.db.commit()
        return session

    # ─────────────────────────────────────────────────────────────
    # Goals
    # ─────────────────────────────────────────────────────────────

    async def change_goal(self, request: GoalChangeRequest) -> TopicGoalChange:
        """
        Record a new goal for a topic.

        The change is a new snapshot effective from the day of
        `request.effective_at` (default now). Days before that keep resolving
        to older snapshots.

        Args:
            request: Topic, new goal minutes and optional effective instant.

        Returns:
            The new TopicGoalChange.

        Raises:
            TopicNotFoundError: If the topic does not exist.
        """
        topic = await self._get_topic(request.topic_id, with_history=False)

        change = TopicGoalChange(
            topic_id=topic.id,
            goal_minutes=request.goal_minutes,
            effective_at=request.effective_at or _utc_now(),
        )
        self.db.add(change)
        await self.db.commit()
        # Topic may already sit in the identity map with its snapshots loaded
        await self.db.refresh(topic, attribute_names=["goal_changes"])

        logger.info(
            f"Goal for topic {topic.id} set to {request.goal_minutes}m "
            f"from {change.effective_from_day}"
        )
        return change

    async def resolve_goal(self, topic_id: UUID, day: date) -> Optional[int]:
        """
        Goal minutes in effect for a topic on a day.

        Returns:
            The goal, or None when no snapshot was effective by that day.

        Raises:
            TopicNotFoundError: If the topic does not exist.
        """
        topic = await self._get_topic(topic_id, with_history=False)
        target_day = date_utils.normalize_day(day)

        result = await self.db.execute(
            select(TopicGoalChange).where(
                TopicGoalChange.topic_id == topic.id,
                TopicGoalChange.effective_from_day <= target_day,
            )
        )
        return resolve_goal_from_changes(result.scalars().all(), target_day)

    # ─────────────────────────────────────────────────────────────
    # Daily status
    # ─────────────────────────────────────────────────────────────

    async def get_daily_status(self, day: date) -> Optional[DailyStatus]:
        """
        Compute the status of one day from stored sessions.

        Returns:
            DailyStatus, or None if the day has no sessions.
        """
        sessions = await self._fetch_sessions(day, day)
        return compute_daily_status(sessions)

    async def get_daily_statuses(self, start_day: date, end_day: date) -> list[DailyStatus]:
        """
        Compute statuses for every day with sessions in [start_day, end_day].

        Returns:
            list[DailyStatus]: Ascending by day; days without sessions are omitted.
        """
        if end_day < start_day:
            raise ValidationError(
                "end_day must not be before start_day",
                details={"start_day": start_day.isoformat(), "end_day": end_day.isoformat()},
            )
        sessions = await self._fetch_sessions(start_day, end_day)
        return daily_statuses_by_day(sessions)

    # ─────────────────────────────────────────────────────────────
    # Summaries & calendar
    # ─────────────────────────────────────────────────────────────

    async def get_topic_summary(
        self, topic_id: UUID, today: Optional[date] = None
    ) -> TopicSummary:
        """
        Summarize a topic's progress as of `today`.

        Raises:
            TopicNotFoundError: If the topic does not exist.
        """
        topic = await self._get_topic(topic_id)
        return self._summarize_topic(topic, today or date_utils.today())

    async def get_calendar_month(
        self,
        topic_id: UUID,
        year: int,
        month: int,
        today: Optional[date] = None,
    ) -> list[CalendarDay]:
        """
        Per-day indicators for a topic over one calendar month.

        Raises:
            ValidationError: If month is not in 1..12.
            TopicNotFoundError: If the topic does not exist.
        """
        if not 1 <= month <= 12:
            raise ValidationError(f"Invalid month: {month}", details={"month": month})

        topic = await self._get_topic(topic_id)
        _, days_in_month = calendar.monthrange(year, month)
        days = [date(year, month, d) for d in range(1, days_in_month + 1)]
        return self._calendar_days(topic, days, today or date_utils.today())

    @staticmethod
    def _summarize_topic(topic: Topic, today: date) -> TopicSummary:
        """
        Build a TopicSummary from a topic with sessions and snapshots loaded.

        weekly_minutes covers today and the previous WEEKLY_WINDOW_DAYS - 1 days.
        """
        window_start = today - timedelta(days=settings.WEEKLY_WINDOW_DAYS - 1)
        by_day: dict[date, list[StudySession]] = {}
        for session in topic.study_sessions:
            by_day.setdefault(session.normalized_day, []).append(session)

        today_status = summarize_topic_day(topic, by_day.get(today, []), today)
        weekly_minutes = sum(
            session.duration_minutes
            for day, sessions in by_day.items()
            if window_start <= day <= today
            for session in sessions
        )

        return TopicSummary(
            topic_id=topic.id,
            name=topic.name,
            today_minutes=today_status.total_minutes,
            weekly_minutes=weekly_minutes,
            current_goal_minutes=resolve_goal(topic, today),
            is_met_today=today_status.is_met,
            first_session_day=min(by_day) if by_day else None,
        )

    @staticmethod
    def _calendar_days(topic: Topic, days: list[date], today: date) -> list[CalendarDay]:
        """
        Assign an indicator to each day.

        - No sessions at all, before the first session day, or in the future: NONE
        - Past days: MET or MISSED (days without sessions are MISSED)
        - Today: MET once the goal is reached, NONE while still open
        """
        by_day: dict[date, list[StudySession]] = {}
        for session in topic.study_sessions:
            by_day.setdefault(session.normalized_day, []).append(session)
        first_day = min(by_day) if by_day else None

        result = []
        for day in days:
            status = summarize_topic_day(topic, by_day.get(day, []), day)

            if first_day is None or day < first_day or day > today:
                indicator = DayIndicator.NONE
            elif status.is_met:
                indicator = DayIndicator.MET
            elif day < today:
                indicator = DayIndicator.MISSED
            else:
                indicator = DayIndicator.NONE

            result.append(
                CalendarDay(
                    day=day,
                    indicator=indicator,
                    total_minutes=status.total_minutes,
                    goal_minutes=status.goal_minutes,
                )
            )
        return result

    # ─────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────

    async def _get_topic(self, topic_id: UUID, with_history: bool = True) -> Topic:
        """
        Load a topic, optionally with sessions and goal snapshots.

        Raises:
            TopicNotFoundError: If the topic does not exist.
        """
        # Collections loaded earlier in this session are reloaded, not reused
        query = (
            select(Topic)
            .where(Topic.id == topic_id)
            .execution_options(populate_existing=True)
        )
        if with_history:
            query = query.options(
                selectinload(Topic.study_sessions), selectinload(Topic.goal_changes)
            )
        result = await self.db.execute(query)
        topic = result.scalar_one_or_none()
        if topic is None:
            raise TopicNotFoundError(
                f"Topic {topic_id} not found", details={"topic_id": str(topic_id)}
            )
        return topic

    async def _add_session(
        self,
        topic: Topic,
        started_at: datetime,
        ended_at: datetime,
        notes: Optional[str],
    ) -> StudySession:
        session = StudySession(
            topic_id=topic.id, started_at=started_at, ended_at=ended_at, notes=notes
        )
        self.db.add(session)
        await self.db.commit()
        await self.db.refresh(topic, attribute_names=["study_sessions"])

        logger.info(
            f"Recorded {session.duration_minutes}m session for topic {topic.id} "
            f"on {session.normalized_day}"
        )
        return session

    async def _fetch_sessions(self, start_day: date, end_day: date) -> list[StudySession]:
        """
        Fetch sessions whose normalized day is within [start_day, end_day].

        Queries by local-midnight bounds, then filters on normalized_day so a
        session is never attributed to a neighbouring day.

        Returns:
            list[StudySession]: Sessions with topics and snapshots loaded,
            ordered by start time.
        """
        lower = date_utils.start_of_day(start_day)
        upper = date_utils.start_of_day(end_day + timedelta(days=1))
        query = (
            select(StudySession)
            .options(selectinload(StudySession.topic).selectinload(Topic.goal_changes))
            .where(StudySession.started_at >= lower, StudySession.started_at < upper)
            .order_by(StudySession.started_at)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return [
            s for s in result.scalars().all() if start_day <= s.normalized_day <= end_day
        ]


def _validate_goal_minutes(goal_minutes: int) -> None:
    """Raise InvalidGoalError unless goal_minutes is a positive integer."""
    if isinstance(goal_minutes, bool) or not isinstance(goal_minutes, int) or goal_minutes <= 0:
        raise InvalidGoalError(
            f"Goal must be a positive number of minutes, got {goal_minutes!r}",
            details={"goal_minutes": goal_minutes},
        )
