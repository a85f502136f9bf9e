#!/usr/bin/env python3
"""
Study Goals Admin Script

Operator commands for the study goals store.

Setup:
    1. Ensure PostgreSQL is running
    2. Copy .env.example to .env in the project root and set POSTGRES_* values
    3. Run any command below

Usage:
    # Create missing tables
    python scripts/goals_admin.py init-db

    # Migrate the legacy store (LEGACY_DATABASE_URL or --legacy-url)
    python scripts/goals_admin.py migrate
    python scripts/goals_admin.py migrate --legacy-url postgresql+asyncpg://u:p@host/old --dry-run

    # Show streaks (global plus every topic, or one topic)
    python scripts/goals_admin.py streaks
    python scripts/goals_admin.py streaks --topic <topic_uuid>

    # Show the daily status for a day (default today)
    python scripts/goals_admin.py daily --day 2024-03-01

Environment Variables (set in .env or environment):
    - POSTGRES_HOST, POSTGRES_PORT, POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB
    - DATABASE_URL_OVERRIDE: Full async URL instead of the POSTGRES_* parts
    - LEGACY_DATABASE_URL: Store holding the legacy data shape
    - TIMEZONE: IANA zone for day boundaries (default: host local time)
    - DEBUG: Enable SQL echo
"""

import argparse
import asyncio
import logging
import os
import sys
from datetime import date
from pathlib import Path
from typing import Optional
from uuid import UUID

# Add backend to path for imports (must be before goals.* imports)
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from dotenv import load_dotenv

# Load environment variables from project root .env
project_root = Path(__file__).parent.parent
if (project_root / ".env").exists():
    load_dotenv(project_root / ".env")
else:
    load_dotenv(project_root / "backend" / ".env")

# Default DEBUG off to suppress SQLAlchemy echo (engine uses echo=settings.DEBUG)
os.environ.setdefault("DEBUG", "false")

# App imports (after sys.path setup and env loading)
from goals.db.base import get_db, init_db
from goals.exceptions import ServiceError
from goals.models.tracking import StreakData
from goals.services.migration import migrate_legacy_store_if_needed
from goals.services.tracking import StreakTrackingService, TimeTrackingService
from goals.utils.date_utils import today


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    if not debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


# =============================================================================
# Commands
# =============================================================================


async def cmd_init_db() -> None:
    await init_db()
    print("✅ Tables created")


async def cmd_migrate(legacy_url: Optional[str], dry_run: bool) -> None:
    """Run the one-time legacy migration and print its report."""
    report = await migrate_legacy_store_if_needed(legacy_url=legacy_url, dry_run=dry_run)
    if report is None:
        print("📭 Nothing to migrate")
        return

    label = "DRY RUN" if report.dry_run else "MIGRATED"
    print(f"\n{'=' * 60}")
    print(f"🔄 LEGACY MIGRATION ({label})")
    print(f"{'=' * 60}")
    print(f"  Topics created:    {report.topics_created}")
    print(f"  Sessions created:  {report.sessions_created}")
    print(f"  Goal snapshots:    {report.snapshots_created}")
    if report.skipped_topic_ids:
        print(f"  ⚠️  Skipped topics: {len(report.skipped_topic_ids)}")
        for topic_id in report.skipped_topic_ids:
            print(f"     - {topic_id}")


def _print_streak(label: str, streak: StreakData) -> None:
    flame = "🔥" if streak.is_active_today else "  "
    next_milestone = streak.next_milestone if streak.next_milestone else "-"
    print(
        f"{flame} {label:<38} current={streak.current_streak:<4} "
        f"longest={streak.longest_streak:<4} next={next_milestone}"
    )


async def cmd_streaks(topic_id: Optional[UUID]) -> None:
    async for db in get_db():
        service = StreakTrackingService(db)
        if topic_id:
            _print_streak(str(topic_id), await service.get_streak_data(topic_id))
        else:
            overview = await service.get_streak_overview()
            _print_streak("All topics", overview.overall)
            for streak in overview.by_topic:
                _print_streak(str(streak.topic_id), streak)


async def cmd_daily(day: date) -> None:
    status = None
    async for db in get_db():
        status = await TimeTrackingService(db).get_daily_status(day)

    if status is None:
        print(f"📭 No sessions on {day.isoformat()}")
        return

    print(f"\n📅 {status.day.isoformat()}  total={status.total_minutes}m")
    print(f"{'─' * 60}")
    for entry in status.topics:
        mark = "✅" if entry.is_met else "❌"
        goal = f"{entry.goal_minutes}m" if entry.goal_minutes is not None else "unknown"
        print(f"  {mark} {entry.topic_name:<30} {entry.total_minutes:>4}m / {goal}")


# =============================================================================
# Main
# =============================================================================


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Study goals administration",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("init-db", help="Create missing tables")

    migrate_parser = subparsers.add_parser("migrate", help="Migrate the legacy store")
    migrate_parser.add_argument("--legacy-url", help="Legacy store URL")
    migrate_parser.add_argument(
        "--dry-run", action="store_true", help="Roll back instead of committing"
    )

    streaks_parser = subparsers.add_parser("streaks", help="Show streaks")
    streaks_parser.add_argument("--topic", type=UUID, help="Only this topic")

    daily_parser = subparsers.add_parser("daily", help="Show the status of one day")
    daily_parser.add_argument(
        "--day", type=date.fromisoformat, help="Day as YYYY-MM-DD (default today)"
    )

    args = parser.parse_args()
    setup_logging(args.debug)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        if args.command == "init-db":
            asyncio.run(cmd_init_db())
        elif args.command == "migrate":
            asyncio.run(cmd_migrate(args.legacy_url, args.dry_run))
        elif args.command == "streaks":
            asyncio.run(cmd_streaks(args.topic))
        elif args.command == "daily":
            asyncio.run(cmd_daily(args.day or today()))
    except ServiceError as e:
        print(f"❌ {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
