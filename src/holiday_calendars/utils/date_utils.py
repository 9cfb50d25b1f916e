"""Date and time utilities for Holiday Calendars application."""

from datetime import date, datetime, time
from typing import Optional

import pytz


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(pytz.utc)


def ensure_utc(value) -> datetime:
    """
    Ensure a date or datetime is an aware UTC datetime.

    Plain dates are taken as midnight UTC, naive datetimes are assumed
    to already be in UTC.

    Args:
        value: date or datetime to convert

    Returns:
        UTC datetime
    """
    if not isinstance(value, datetime):
        value = datetime.combine(value, time.min)
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


def shift_years(dt: datetime, years: int) -> datetime:
    """Move ``dt`` by whole calendar years, clamping Feb 29 to Feb 28."""
    try:
        return dt.replace(year=dt.year + years)
    except ValueError:
        return dt.replace(year=dt.year + years, day=28)


def get_holiday_window(
    now: Optional[datetime] = None,
    lookback_years: int = 1,
    lookahead_years: int = 3,
) -> tuple[datetime, datetime]:
    """
    Get the window (start, end) in UTC in which feed events are kept.

    Args:
        now: Reference time (defaults to the current time)
        lookback_years: Years to look back from now
        lookahead_years: Years to look ahead from now

    Returns:
        Tuple of (start, end) in UTC
    """
    now = ensure_utc(now or utc_now())
    return shift_years(now, -lookback_years), shift_years(now, lookahead_years)


def format_day(value) -> str:
    """Format the calendar date of ``value`` as ``YYYY-MM-DD``."""
    if isinstance(value, datetime):
        value = value.date()
    if not isinstance(value, date):
        raise TypeError(f"Expected date or datetime, got {type(value).__name__}")
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
