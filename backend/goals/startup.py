"""
Startup Orchestration

Brings the store to the current shape before anything reads from it:
tables are created if missing, then the legacy store is migrated once.

Usage:
    import asyncio
    from goals.startup import startup

    asyncio.run(startup())
"""

import logging
from typing import Optional

from goals.config import settings
from goals.db import init_db
from goals.models.migration import MigrationReport
from goals.services.migration import migrate_legacy_store_if_needed

logger = logging.getLogger(__name__)


async def startup() -> Optional[MigrationReport]:
    """
    Prepare the current store.

    Returns:
        The migration report if a legacy migration ran, else None.
    """
    logger.info(f"Starting {settings.APP_NAME}")
    await init_db()
    logger.info("Database initialized")

    report = await migrate_legacy_store_if_needed()
    if report:
        logger.info(
            f"Legacy data migrated: {report.topics_created} topics, "
            f"{report.snapshots_created} goal snapshots"
        )
    return report
