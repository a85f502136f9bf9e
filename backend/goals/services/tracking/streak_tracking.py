"""
Streak Tracking Service

Computes day streaks from study sessions, globally and per topic.

Responsibilities:
- Build a day -> met map from daily aggregation
- Calculate current and longest streaks
- Track streak milestones

Rules:
- Only days that have at least one session (for any topic) appear in the
  map. A missing day breaks a streak; there are no stored failure records.
- Global mode: a day is met if ANY topic met its goal that day.
- Topic mode: a day is met only if THAT topic met its goal; a day with
  sessions for other topics only is present but unmet.
- The current streak anchors on today if today is met, otherwise on
  yesterday, and walks backwards while days are present and met.

Usage:
    from goals.services.tracking.streak_tracking import StreakTrackingService

    service = StreakTrackingService(db)
    overview = await service.get_streak_overview()
"""

import logging
from collections.abc import Iterable
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from goals.config import settings
from goals.db.models import StudySession, Topic
from goals.models.tracking import StreakData, StreakOverview
from goals.services.tracking.daily_status import daily_statuses_by_day
from goals.utils import date_utils

logger = logging.getLogger(__name__)


class StreakCalculator:
    """
    Streak metrics over an in-memory list of sessions.

    Every call recomputes from the session list; sessions must have their
    topic and the topic's goal snapshots loaded.
    """

    def __init__(self, sessions: Iterable[StudySession]):
        self.sessions = list(sessions)

    def met_by_day(self, topic_id: Optional[UUID] = None) -> dict[date, bool]:
        """
        Build the day -> met map.

        Args:
            topic_id: Restrict "met" to one topic; None for the global map.

        Returns:
            dict[date, bool]: One entry per day with at least one session.
        """
        statuses = daily_statuses_by_day(self.sessions)
        if topic_id is None:
            return {status.day: status.any_met for status in statuses}
        return {status.day: status.is_topic_met(topic_id) for status in statuses}

    def current_streak(
        self, topic_id: Optional[UUID] = None, today: Optional[date] = None
    ) -> int:
        """Consecutive met days ending today (if met) or yesterday."""
        return self._calculate_current_streak(
            self.met_by_day(topic_id), today or date_utils.today()
        )

    def longest_streak(self, topic_id: Optional[UUID] = None) -> int:
        """Longest run of consecutive met days ever."""
        return self._calculate_longest_streak(self.met_by_day(topic_id))

    def last_met_day(self, topic_id: Optional[UUID] = None) -> Optional[date]:
        return self._latest_met_day(self.met_by_day(topic_id))

    def streak_data(
        self, topic_id: Optional[UUID] = None, today: Optional[date] = None
    ) -> StreakData:
        """
        Package streak numbers with milestone information.

        The day map is built once and shared by every figure.

        Args:
            topic_id: Topic to scope to, or None for the global streak.
            today: Reference day (defaults to the current day).

        Returns:
            StreakData for the requested scope.
        """
        today = today or date_utils.today()
        met_by_day = self.met_by_day(topic_id)

        current = self._calculate_current_streak(met_by_day, today)
        longest = self._calculate_longest_streak(met_by_day)

        # Milestones
        milestones = settings.STREAK_MILESTONES
        reached = [m for m in milestones if longest >= m]
        next_milestone = next((m for m in milestones if m > current), None)

        return StreakData(
            topic_id=topic_id,
            current_streak=current,
            longest_streak=longest,
            last_met_day=self._latest_met_day(met_by_day),
            is_active_today=met_by_day.get(today) is True,
            milestones_reached=reached,
            next_milestone=next_milestone,
        )

    @staticmethod
    def _latest_met_day(met_by_day: dict[date, bool]) -> Optional[date]:
        met_days = [day for day, met in met_by_day.items() if met]
        return max(met_days) if met_days else None

    @staticmethod
    def _calculate_current_streak(met_by_day: dict[date, bool], today: date) -> int:
        """
        Calculate current consecutive streak.

        The anchor is today when today is present and met; otherwise it is
        yesterday, so an open day does not break a streak that is still
        achievable. From the anchor, walk back one day at a time while the
        day is present in the map and met.

        Args:
            met_by_day: Day -> met map.
            today: Current date for the anchor decision.

        Returns:
            int: Number of consecutive met days.
        """
        anchor = today if met_by_day.get(today) is True else date_utils.previous_day(today)

        streak = 0
        day = anchor
        # Absent days count as failures, not as neutral days
        while met_by_day.get(day) is True:
            streak += 1
            day = date_utils.previous_day(day)

        return streak

    @staticmethod
    def _calculate_longest_streak(met_by_day: dict[date, bool]) -> int:
        """
        Calculate the longest streak ever achieved.

        Scans the days in ascending order with a running counter:
        - next calendar day: counter + 1 if met, else 0
        - gap of more than one day: 1 if met, else 0
        - same or earlier day (defensive): never resets, at least 1 if met

        Args:
            met_by_day: Day -> met map.

        Returns:
            int: Length of the longest consecutive met run.
        """
        longest = 0
        current = 0
        previous: Optional[date] = None

        for day in sorted(met_by_day):
            met = met_by_day[day]

            if previous is None:
                current = 1 if met else 0
            else:
                gap = date_utils.days_between(previous, day)
                if gap == 1:
                    current = current + 1 if met else 0
                elif gap > 1:
                    current = 1 if met else 0
                elif met:
                    current = max(current, 1)

            longest = max(longest, current)
            previous = day

        return longest


def current_streak(
    sessions: Iterable[StudySession],
    topic_id: Optional[UUID] = None,
    today: Optional[date] = None,
) -> int:
    """Current streak over `sessions`, globally or for one topic."""
    return StreakCalculator(sessions).current_streak(topic_id, today)


def longest_streak(
    sessions: Iterable[StudySession], topic_id: Optional[UUID] = None
) -> int:
    """Longest streak over `sessions`, globally or for one topic."""
    return StreakCalculator(sessions).longest_streak(topic_id)


class StreakTrackingService:
    """
    Service for streak metrics backed by the database.

    Loads every session (with topics and goal snapshots) and delegates to
    StreakCalculator. Nothing is cached between calls.
    """

    def __init__(self, db: AsyncSession):
        """
        Initialize the streak tracking service.

        Args:
            db: SQLAlchemy async database session.
        """
        self.db = db

    async def get_streak_data(
        self, topic_id: Optional[UUID] = None, today: Optional[date] = None
    ) -> StreakData:
        """
        Get streak information globally or for one topic.

        Args:
            topic_id: Topic to scope to, or None for the global streak.
            today: Reference day (defaults to the current day).

        Returns:
            StreakData; a topic without history has zero streaks.
        """
        sessions = await self._fetch_sessions()
        return StreakCalculator(sessions).streak_data(topic_id, today)

    async def get_streak_overview(self, today: Optional[date] = None) -> StreakOverview:
        """
        Get the global streak plus one streak entry per topic.

        Returns:
            StreakOverview with topics in name order.
        """
        sessions = await self._fetch_sessions()
        topic_ids = await self._fetch_topic_ids()
        calculator = StreakCalculator(sessions)

        overall = calculator.streak_data(None, today)
        by_topic = [calculator.streak_data(topic_id, today) for topic_id in topic_ids]

        logger.debug(
            f"Streak overview: current={overall.current_streak}, "
            f"longest={overall.longest_streak}, topics={len(by_topic)}"
        )
        return StreakOverview(overall=overall, by_topic=by_topic)

    async def _fetch_sessions(self) -> list[StudySession]:
        """
        Fetch all sessions with their topics and goal snapshots.

        Returns:
            list[StudySession]: Sessions ordered by start time.
        """
        query = (
            select(StudySession)
            .options(selectinload(StudySession.topic).selectinload(Topic.goal_changes))
            .order_by(StudySession.started_at)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _fetch_topic_ids(self) -> list[UUID]:
        result = await self.db.execute(select(Topic.id).order_by(Topic.name))
        return list(result.scalars().all())
