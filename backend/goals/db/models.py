"""
SQLAlchemy Database Models

These models define the current (snapshot-based) schema for study goal
tracking.

Tables:
- topics: User-defined study topics
- study_sessions: Timed study sessions, the source of truth for tracked time
- topic_goal_changes: Immutable goal snapshots per topic
- system_meta: Key/value system state (schema version, migration marker)

ARCHITECTURE NOTE:
    This file contains SQLALCHEMY models for database persistence.
    Derived results (daily status, streaks) are PYDANTIC models in
    goals/models/tracking.py and are never persisted.

    The pre-snapshot schema lives in goals/db/models_legacy.py on its own
    declarative base and is only read by the legacy migration.
"""

import uuid
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from goals.db.base import Base
from goals.utils.date_utils import normalize_day


def _utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# ===========================================
# Topics
# ===========================================


class Topic(Base):
    """
    A study topic the user tracks time against.

    Attributes:
        id: Stable UUID identity. Preserved across the legacy migration.
        name: Display name.
        description: Optional free text.
        created_at: When the topic was created.
        goal_changes: Goal snapshots ordered by (effective_from_day, effective_at).
            A topic with no snapshots has no resolvable goal on any day.
        study_sessions: Sessions ordered by start time.
    """

    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )

    # Relationships
    goal_changes: Mapped[List["TopicGoalChange"]] = relationship(
        back_populates="topic",
        cascade="all, delete-orphan",
        order_by=lambda: [
            TopicGoalChange.effective_from_day,
            TopicGoalChange.effective_at,
        ],
    )
    study_sessions: Mapped[List["StudySession"]] = relationship(
        back_populates="topic",
        cascade="all, delete-orphan",
        order_by=lambda: StudySession.started_at,
    )

    def __init__(self, **kwargs):
        # Assign identity up front so unsaved topics can be grouped by id
        kwargs.setdefault("id", uuid.uuid4())
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return f"<Topic {self.name!r} ({self.id})>"


# ===========================================
# Study Sessions
# ===========================================


class StudySession(Base):
    """
    A completed, timed study session for one topic.

    Sessions are created when a timer completes with positive elapsed time
    and are immutable afterwards, except for their notes.

    Attributes:
        id: UUID identity.
        topic_id: Owning topic (cascade-deleted with it).
        started_at: Session start instant.
        ended_at: Session end instant.
        notes: Optional free text; the only mutable field.
        created_at: Row creation time.
        modified_at: Last notes edit.
    """

    __tablename__ = "study_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"), index=True
    )

    # Timing
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    ended_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))

    notes: Mapped[Optional[str]] = mapped_column(Text)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )

    # Relationships
    topic: Mapped["Topic"] = relationship(back_populates="study_sessions")

    def __init__(self, **kwargs):
        kwargs.setdefault("id", uuid.uuid4())
        super().__init__(**kwargs)

    @property
    def duration_minutes(self) -> int:
        """Whole minutes between start and end; fractions truncate, never negative."""
        seconds = (self.ended_at - self.started_at).total_seconds()
        if seconds <= 0:
            return 0
        return int(seconds // 60)

    @property
    def normalized_day(self) -> date:
        """Calendar day the session started on, in the configured zone."""
        return normalize_day(self.started_at)

    def __repr__(self) -> str:
        return f"<StudySession {self.id} topic={self.topic_id} {self.started_at.isoformat()}>"


# ===========================================
# Goal Snapshots
# ===========================================


class TopicGoalChange(Base):
    """
    Immutable goal snapshot for a topic.

    A goal change is always a new row; old rows are never edited, which is
    what keeps past days resolving against the goal that applied then.

    Attributes:
        id: UUID identity.
        topic_id: Owning topic.
        goal_minutes: Daily goal in minutes (positive).
        effective_at: Exact instant the change was made. Breaks ties between
            snapshots that share a day: the later one wins.
        effective_from_day: Calendar day of effective_at; the snapshot applies
            to this day and every later day until superseded.
    """

    __tablename__ = "topic_goal_changes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    topic_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("topics.id", ondelete="CASCADE"), index=True
    )

    goal_minutes: Mapped[int] = mapped_column(Integer)
    effective_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    effective_from_day: Mapped[date] = mapped_column(Date, index=True)

    # Relationships
    topic: Mapped["Topic"] = relationship(back_populates="goal_changes")

    def __init__(self, **kwargs):
        kwargs.setdefault("id", uuid.uuid4())
        kwargs.setdefault("effective_at", _utc_now())
        kwargs["effective_from_day"] = normalize_day(kwargs["effective_at"])
        super().__init__(**kwargs)

    def __repr__(self) -> str:
        return (
            f"<TopicGoalChange {self.goal_minutes}m from {self.effective_from_day} "
            f"topic={self.topic_id}>"
        )


# ===========================================
# System State
# ===========================================


class SystemMeta(Base):
    """
    Key/value storage for system state.

    Keys:
        schema_version: Shape of this store ("current" once created or migrated).
        legacy_migrated_at: ISO timestamp of the completed legacy migration.
    """

    __tablename__ = "system_meta"

    id: Mapped[int] = mapped_column(primary_key=True)
    key: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    value: Mapped[Optional[str]] = mapped_column(Text)
    description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utc_now, onupdate=_utc_now
    )
