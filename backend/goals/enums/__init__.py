"""
Centralized enum definitions for the application.

Usage:
    from goals.enums import DayIndicator, SchemaVersion

    # Or import from the specific module
    from goals.enums.tracking import DayIndicator
"""

from goals.enums.tracking import DayIndicator, SchemaVersion

__all__ = [
    "DayIndicator",
    "SchemaVersion",
]
