"""Shared utilities."""

from goals.utils.date_utils import (
    days_between,
    get_timezone,
    normalize_day,
    previous_day,
    start_of_day,
    to_local,
    today,
)

__all__ = [
    "days_between",
    "get_timezone",
    "normalize_day",
    "previous_day",
    "start_of_day",
    "to_local",
    "today",
]
