"""
Legacy Migration Models (Pydantic)

Report returned by the legacy migration so callers and the CLI can show
what was carried over.
"""

from uuid import UUID

from pydantic import BaseModel, Field


class MigrationReport(BaseModel):
    """
    Outcome of one legacy migration run.

    skipped_topic_ids lists current-shape topics that had no staged goal
    seeds (identity mismatch); they keep whatever snapshots they had.
    """

    topics_created: int = 0
    sessions_created: int = 0
    snapshots_created: int = 0
    skipped_topic_ids: list[UUID] = Field(default_factory=list)
    dry_run: bool = False
