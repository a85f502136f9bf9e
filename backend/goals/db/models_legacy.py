"""
SQLAlchemy Models for the Legacy (Version 1) Store

The first schema stored one goal object per session: every study session
referenced a row in `goals`, whose `created_at` was already normalized to the
start of the day it was created. There were no per-topic goal snapshots.

These models sit on their own declarative base so they never register with
the current metadata; the two shapes share table names (`topics`,
`study_sessions`) and must never be opened through the same mapping.

Tables:
- topics: Topics (same ids as in the current store)
- goals: Goal objects referenced by sessions
- study_sessions: Sessions, each pointing at one goal
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class LegacyBase(DeclarativeBase):
    """Base class for the version 1 schema."""

    pass


class LegacyTopic(LegacyBase):
    """Version 1 topic. Has no goal of its own; goals hang off sessions."""

    __tablename__ = "topics"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200))

    study_sessions: Mapped[List["LegacyStudySession"]] = relationship(
        back_populates="topic", cascade="all, delete-orphan"
    )


class LegacyGoal(LegacyBase):
    """Version 1 goal. created_at is the start of the creation day."""

    __tablename__ = "goals"

    id: Mapped[int] = mapped_column(primary_key=True)
    goal_minutes: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class LegacyStudySession(LegacyBase):
    """Version 1 session referencing exactly one goal."""

    __tablename__ = "study_sessions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    topic_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("topics.id"))
    goal_id: Mapped[int] = mapped_column(ForeignKey("goals.id"))
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    ended_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    notes: Mapped[Optional[str]] = mapped_column(Text)

    topic: Mapped["LegacyTopic"] = relationship(back_populates="study_sessions")
    goal: Mapped["LegacyGoal"] = relationship()
