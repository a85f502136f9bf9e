"""One-time migration from the legacy (per-session goal) store."""

from goals.services.migration.legacy import (
    GoalSeed,
    LegacyExtract,
    collect_goal_seeds,
    detect_schema_version,
    extract_legacy_data,
    load_into_current,
    migrate_legacy_store_if_needed,
    run_legacy_migration,
)

__all__ = [
    "GoalSeed",
    "LegacyExtract",
    "collect_goal_seeds",
    "detect_schema_version",
    "extract_legacy_data",
    "load_into_current",
    "migrate_legacy_store_if_needed",
    "run_legacy_migration",
]
