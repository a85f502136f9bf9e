"""
Tracking Models (Pydantic)

Derived results and inputs for goal tracking:
- Daily status per topic
- Streak metrics
- Topic summaries and calendar indicators
- Session and goal change inputs

ARCHITECTURE NOTE:
    This file contains PYDANTIC models. The persisted records are the
    SQLAlchemy models in goals/db/models.py.

    Data flows: StudySession/TopicGoalChange (SQLAlchemy) → tracking services
    → DailyStatus / StreakData (Pydantic). Derived models are recomputed on
    every call and never stored.
"""

from __future__ import annotations

from datetime import date
from typing import Optional
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, Field, StrictInt

from goals.enums.tracking import DayIndicator
from goals.models.base import StrictRequest, StrictResponse


# ===========================================
# Daily Status Models
# ===========================================


class TopicDayStatus(StrictResponse):
    """
    One topic's aggregate for one day.

    goal_minutes is None when the topic had no goal snapshot applicable to
    the day; such a topic is never met, whatever its total.
    """

    topic_id: UUID
    topic_name: str
    total_minutes: int = Field(..., ge=0)
    goal_minutes: Optional[int] = None
    is_met: bool


class DailyStatus(StrictResponse):
    """
    Per-topic completion facts for one calendar day.

    Topics appear in the order their first session appeared in the batch
    the status was computed from.
    """

    day: date
    topics: list[TopicDayStatus] = Field(default_factory=list)

    @property
    def any_met(self) -> bool:
        """True if at least one topic met its goal that day."""
        return any(entry.is_met for entry in self.topics)

    @property
    def total_minutes(self) -> int:
        return sum(entry.total_minutes for entry in self.topics)

    def for_topic(self, topic_id: UUID) -> Optional[TopicDayStatus]:
        """Return the entry for a topic, or None if it had no sessions that day."""
        return next((entry for entry in self.topics if entry.topic_id == topic_id), None)

    def is_topic_met(self, topic_id: UUID) -> bool:
        """Whether a topic met its goal that day; absent topics are not met."""
        entry = self.for_topic(topic_id)
        return entry.is_met if entry else False


# ===========================================
# Streak Models
# ===========================================


class StreakData(BaseModel):
    """
    Streak information, either global or for one topic.

    Global streaks count a day as met when any topic met its goal; topic
    streaks only when that topic did.
    """

    topic_id: Optional[UUID] = None  # None for the global streak
    current_streak: int = 0  # Days
    longest_streak: int = 0
    last_met_day: Optional[date] = None
    is_active_today: bool = False
    # Milestones
    milestones_reached: list[int] = Field(default_factory=list)  # e.g., [3, 7, 14]
    next_milestone: Optional[int] = None


class StreakOverview(BaseModel):
    """Global streak plus one entry per topic."""

    overall: StreakData
    by_topic: list[StreakData] = Field(default_factory=list)


# ===========================================
# Topic Summary & Calendar Models
# ===========================================


class TopicSummary(StrictResponse):
    """
    Snapshot of a topic's progress as of a given day.

    weekly_minutes covers the rolling window ending today
    (settings.WEEKLY_WINDOW_DAYS days including today).
    """

    topic_id: UUID
    name: str
    today_minutes: int = 0
    weekly_minutes: int = 0
    current_goal_minutes: Optional[int] = None
    is_met_today: bool = False
    first_session_day: Optional[date] = None


class CalendarDay(StrictResponse):
    """Indicator for one topic on one calendar day."""

    day: date
    indicator: DayIndicator
    total_minutes: int = 0
    goal_minutes: Optional[int] = None


# ===========================================
# Inputs
# ===========================================


class LogSessionRequest(StrictRequest):
    """
    Request to log a study session with explicit start and end.

    Note: Uses StrictRequest - unknown fields are rejected.
    """

    topic_id: UUID
    started_at: AwareDatetime
    ended_at: AwareDatetime
    notes: Optional[str] = None


class GoalChangeRequest(StrictRequest):
    """
    Request to change a topic's daily goal.

    The change becomes a new snapshot effective from the day of
    effective_at (defaults to now); older snapshots are untouched.
    """

    topic_id: UUID
    goal_minutes: StrictInt = Field(..., gt=0)
    effective_at: Optional[AwareDatetime] = None
