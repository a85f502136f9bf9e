"""
Legacy Store Migration

Moves data from the version 1 store (one goal object per session) into the
current store (per-topic goal snapshots).

The migration is a two-phase extract/load:

1. extract_legacy_data() reads only legacy records and produces a
   LegacyExtract: topic and session records plus the goal seeds for each
   topic, reconstructed from the goals its sessions referenced.
2. load_into_current() writes only current-shape records: missing topics and
   sessions are carried over, then one TopicGoalChange is added per seed.

The extract is an ordinary value returned by phase 1 and handed to phase 2.
The legacy session is closed before phase 2 opens any write, so the two
shapes are never open at the same time.

Usage:
    from goals.services.migration import migrate_legacy_store_if_needed

    report = await migrate_legacy_store_if_needed()
    if report:
        print(report.snapshots_created)
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import inspect, select
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import selectinload

from goals.config import settings
from goals.db.base import async_session_maker, create_session_maker
from goals.db.models import StudySession, SystemMeta, Topic, TopicGoalChange
from goals.db.models_legacy import LegacyStudySession, LegacyTopic
from goals.enums.tracking import SchemaVersion
from goals.exceptions import MigrationError
from goals.models.migration import MigrationReport
from goals.utils.date_utils import normalize_day, start_of_day

logger = logging.getLogger(__name__)

SCHEMA_VERSION_KEY = "schema_version"
MIGRATED_AT_KEY = "legacy_migrated_at"


# ===========================================
# Intermediate records
# ===========================================


@dataclass(frozen=True)
class GoalSeed:
    """A goal value and the instant it takes effect, staged for one topic."""

    goal_minutes: int
    effective_at: datetime

    @property
    def effective_day(self) -> date:
        return normalize_day(self.effective_at)


@dataclass(frozen=True)
class LegacyTopicRecord:
    id: UUID
    name: str


@dataclass(frozen=True)
class LegacySessionRecord:
    id: UUID
    topic_id: UUID
    started_at: datetime
    ended_at: datetime
    notes: Optional[str] = None


@dataclass
class LegacyExtract:
    """
    Everything phase 2 needs from the legacy store, detached from it.

    goal_seeds maps topic id -> seeds in ascending effective order. Phase 2
    clears it once the seeds have been written.
    """

    topics: list[LegacyTopicRecord] = field(default_factory=list)
    sessions: list[LegacySessionRecord] = field(default_factory=list)
    goal_seeds: dict[UUID, list[GoalSeed]] = field(default_factory=dict)


# ===========================================
# Phase 1: extract (legacy records only)
# ===========================================


def collect_goal_seeds(
    goal_refs: Iterable[tuple[int, datetime]],
    now: Optional[datetime] = None,
) -> list[GoalSeed]:
    """
    Turn the goals referenced by a topic's sessions into snapshot seeds.

    Args:
        goal_refs: (goal_minutes, created_at) pairs, one per legacy session.
        now: Reference instant for topics without sessions (default now).

    Returns:
        Seeds deduplicated by (minutes, day), keeping the earliest instant,
        sorted by effective day. A topic without sessions gets a single
        default-goal seed at the start of today.
    """
    unique: dict[tuple[int, date], GoalSeed] = {}
    for goal_minutes, created_at in goal_refs:
        seed = GoalSeed(goal_minutes=goal_minutes, effective_at=created_at)
        key = (goal_minutes, seed.effective_day)
        existing = unique.get(key)
        if existing is None or created_at < existing.effective_at:
            unique[key] = seed

    if not unique:
        now = now or datetime.now(timezone.utc)
        return [
            GoalSeed(
                goal_minutes=settings.DEFAULT_GOAL_MINUTES,
                effective_at=start_of_day(now),
            )
        ]

    return sorted(
        unique.values(),
        key=lambda s: (s.effective_day, s.effective_at, s.goal_minutes),
    )


def extract_legacy_data(
    legacy_topics: Iterable[LegacyTopic], now: Optional[datetime] = None
) -> LegacyExtract:
    """
    Build the extract from loaded legacy topics.

    Topics must have their sessions and each session's goal loaded.

    Args:
        legacy_topics: Version 1 topics.
        now: Reference instant for default seeds.

    Returns:
        LegacyExtract holding plain records only.
    """
    extract = LegacyExtract()

    for topic in legacy_topics:
        extract.topics.append(LegacyTopicRecord(id=topic.id, name=topic.name))

        goal_refs = []
        for session in topic.study_sessions:
            extract.sessions.append(
                LegacySessionRecord(
                    id=session.id,
                    topic_id=topic.id,
                    started_at=session.started_at,
                    ended_at=session.ended_at,
                    notes=session.notes,
                )
            )
            goal_refs.append((session.goal.goal_minutes, session.goal.created_at))

        extract.goal_seeds[topic.id] = collect_goal_seeds(goal_refs, now)

    logger.info(
        f"Extracted {len(extract.topics)} topics and {len(extract.sessions)} sessions "
        f"from legacy store"
    )
    return extract


async def read_legacy_store(
    legacy_db: AsyncSession, now: Optional[datetime] = None
) -> LegacyExtract:
    """Load every legacy topic with sessions and goals, then extract."""
    query = select(LegacyTopic).options(
        selectinload(LegacyTopic.study_sessions).selectinload(LegacyStudySession.goal)
    )
    result = await legacy_db.execute(query)
    return extract_legacy_data(result.scalars().all(), now)


# ===========================================
# Phase 2: load (current records only)
# ===========================================


def build_goal_changes(topic_id: UUID, seeds: Iterable[GoalSeed]) -> list[TopicGoalChange]:
    """One snapshot per seed, in seed order."""
    return [
        TopicGoalChange(
            topic_id=topic_id,
            goal_minutes=seed.goal_minutes,
            effective_at=seed.effective_at,
        )
        for seed in seeds
    ]


async def load_into_current(
    db: AsyncSession, extract: LegacyExtract, dry_run: bool = False
) -> MigrationReport:
    """
    Write the extract into the current store in one transaction.

    Topics and sessions already present (same id) are left alone. Every
    current topic then receives the snapshots staged for it; a topic with no
    staged seeds is logged and skipped.

    Args:
        db: Session on the current store.
        extract: Output of phase 1. Its goal_seeds are cleared afterwards.
        dry_run: Roll back instead of committing.

    Returns:
        MigrationReport with counts of what was (or would be) written.
    """
    report = MigrationReport(dry_run=dry_run)

    try:
        existing_topics = set(
            (await db.execute(select(Topic.id))).scalars().all()
        )
        for record in extract.topics:
            if record.id not in existing_topics:
                db.add(Topic(id=record.id, name=record.name))
                report.topics_created += 1

        existing_sessions = set(
            (await db.execute(select(StudySession.id))).scalars().all()
        )
        for record in extract.sessions:
            if record.id not in existing_sessions:
                db.add(
                    StudySession(
                        id=record.id,
                        topic_id=record.topic_id,
                        started_at=record.started_at,
                        ended_at=record.ended_at,
                        notes=record.notes,
                    )
                )
                report.sessions_created += 1

        await db.flush()

        topic_ids = (await db.execute(select(Topic.id))).scalars().all()
        for topic_id in topic_ids:
            seeds = extract.goal_seeds.get(topic_id)
            if seeds is None:
                logger.warning(f"No staged goal seeds for topic {topic_id}; skipping")
                report.skipped_topic_ids.append(topic_id)
                continue

            for change in build_goal_changes(topic_id, seeds):
                db.add(change)
                report.snapshots_created += 1

        await _set_meta(db, SCHEMA_VERSION_KEY, SchemaVersion.CURRENT.value)
        await _set_meta(db, MIGRATED_AT_KEY, datetime.now(timezone.utc).isoformat())

        if dry_run:
            await db.rollback()
        else:
            await db.commit()
    except Exception:
        await db.rollback()
        raise
    finally:
        extract.goal_seeds.clear()

    logger.info(
        f"Legacy migration {'(dry run) ' if dry_run else ''}wrote "
        f"{report.topics_created} topics, {report.sessions_created} sessions, "
        f"{report.snapshots_created} goal snapshots"
    )
    return report


async def _set_meta(db: AsyncSession, key: str, value: str) -> None:
    result = await db.execute(select(SystemMeta).where(SystemMeta.key == key))
    meta = result.scalar_one_or_none()
    if meta is None:
        db.add(SystemMeta(key=key, value=value))
    else:
        meta.value = value


async def get_meta(db: AsyncSession, key: str) -> Optional[str]:
    """Return a system_meta value, or None if the key is unset."""
    result = await db.execute(select(SystemMeta.value).where(SystemMeta.key == key))
    return result.scalar_one_or_none()


# ===========================================
# Orchestration
# ===========================================


async def run_legacy_migration(
    legacy_db: AsyncSession,
    db: AsyncSession,
    now: Optional[datetime] = None,
    dry_run: bool = False,
) -> MigrationReport:
    """
    Run both phases.

    The legacy session is closed after phase 1, whatever happens, so that
    phase 2 only ever touches current-shape records.
    """
    try:
        extract = await read_legacy_store(legacy_db, now)
    finally:
        await legacy_db.close()

    return await load_into_current(db, extract, dry_run=dry_run)


def _inspect_schema_version(connection: Connection) -> SchemaVersion:
    inspector = inspect(connection)
    tables = set(inspector.get_table_names())

    if "topic_goal_changes" in tables:
        return SchemaVersion.CURRENT
    if "goals" in tables and "study_sessions" in tables:
        columns = {column["name"] for column in inspector.get_columns("study_sessions")}
        if "goal_id" in columns:
            return SchemaVersion.LEGACY
    return SchemaVersion.EMPTY


async def detect_schema_version(engine: AsyncEngine) -> SchemaVersion:
    """Inspect a store's tables to tell which data shape it holds."""
    async with engine.connect() as conn:
        return await conn.run_sync(_inspect_schema_version)


async def migrate_legacy_store_if_needed(
    legacy_url: Optional[str] = None, dry_run: bool = False
) -> Optional[MigrationReport]:
    """
    Migrate the legacy store once.

    Does nothing when no legacy URL is configured, when the current store
    already carries the migration marker, or when the legacy store does not
    hold the version 1 shape.

    Args:
        legacy_url: Legacy store URL (default settings.LEGACY_DATABASE_URL).
        dry_run: Run everything but roll back the writes.

    Returns:
        MigrationReport, or None if nothing ran.

    Raises:
        MigrationError: If the migration fails.
    """
    legacy_url = legacy_url or settings.LEGACY_DATABASE_URL
    if not legacy_url:
        logger.debug("No legacy store configured")
        return None

    async with async_session_maker() as db:
        migrated_at = await get_meta(db, MIGRATED_AT_KEY)
    if migrated_at:
        logger.info(f"Legacy store already migrated at {migrated_at}")
        return None

    legacy_engine, legacy_session_maker = create_session_maker(legacy_url)
    try:
        version = await detect_schema_version(legacy_engine)
        if version != SchemaVersion.LEGACY:
            logger.info(f"Legacy store holds schema {version.value!r}; nothing to migrate")
            return None

        logger.info("Migrating legacy store")
        async with async_session_maker() as db:
            return await run_legacy_migration(legacy_session_maker(), db, dry_run=dry_run)
    except MigrationError:
        raise
    except Exception as e:
        logger.error(f"Legacy migration failed: {e}")
        raise MigrationError(f"Legacy migration failed: {e}") from e
    finally:
        await legacy_engine.dispose()
