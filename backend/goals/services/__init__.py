"""Services package for goal tracking and legacy store migration."""

from goals.services.migration import migrate_legacy_store_if_needed
from goals.services.tracking import StreakTrackingService, TimeTrackingService

__all__ = [
    "StreakTrackingService",
    "TimeTrackingService",
    "migrate_legacy_store_if_needed",
]
