"""
Day Normalization Utilities

Converts timestamps to calendar days in the user's configured time zone.
Every day-based computation (session grouping, goal snapshot resolution,
streak walks) goes through these helpers so that a timestamp always lands
on the same day no matter which component looks at it.

Timestamps are stored as UTC. Naive datetimes are therefore interpreted as
UTC before conversion; aware datetimes are converted directly.

Usage:
    from goals.utils.date_utils import normalize_day, start_of_day

    day = normalize_day(session.started_at)      # datetime.date
    midnight = start_of_day(session.started_at)  # aware local midnight
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo

from goals.config import settings

DayLike = Union[date, datetime]


def get_timezone() -> tzinfo:
    """
    Return the zone used for day boundaries.

    Uses settings.TIMEZONE when set, otherwise the host's local zone.
    Raises zoneinfo.ZoneInfoNotFoundError for an unknown zone name.
    """
    if settings.TIMEZONE:
        return ZoneInfo(settings.TIMEZONE)
    return datetime.now().astimezone().tzinfo


def to_local(ts: datetime) -> datetime:
    """Convert a timestamp to the configured zone (naive values are UTC)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(get_timezone())


def normalize_day(value: DayLike) -> date:
    """
    Return the calendar day a timestamp falls on.

    Dates pass through unchanged, so callers may hand in either a day
    or an instant.
    """
    if isinstance(value, datetime):
        return to_local(value).date()
    return value


def start_of_day(value: DayLike) -> datetime:
    """Return the aware local midnight that starts the given day."""
    day = normalize_day(value)
    return datetime.combine(day, time.min, tzinfo=get_timezone())


def today(now: Optional[datetime] = None) -> date:
    """Return the current calendar day (or the day of `now`)."""
    return normalize_day(now or datetime.now(timezone.utc))


def days_between(earlier: date, later: date) -> int:
    """Number of calendar days from `earlier` to `later` (negative if reversed)."""
    return (later - earlier).days


def previous_day(day: date) -> date:
    return day - timedelta(days=1)
