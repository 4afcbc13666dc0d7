"""
timezone_utils.py: UTC handling shared by the schedulers and the picker.

Calendar times, fire times and idempotency-key dates are all expressed in
UTC, so every datetime entering the core passes through `to_utc` first.
"""

from datetime import datetime, date, timezone
from typing import Optional, Union

UTC = timezone.utc


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def to_utc(value: Union[datetime, date]) -> datetime:
    """
    Normalize a datetime or date into an aware UTC datetime.

    Naive datetimes are treated as already being in UTC, and plain dates
    (all-day calendar entries) map to UTC midnight.
    """
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def iso_date_utc(value: datetime) -> str:
    """YYYY-MM-DD of the UTC calendar day containing `value`."""
    return to_utc(value).date().isoformat()


def parse_utc(dt_str: Optional[str]) -> Optional[datetime]:
    """
    Parse a persisted ISO-8601 timestamp back into an aware UTC datetime.

    Returns None for empty or malformed values instead of raising, since the
    input comes from a state file that may have been edited by hand.
    """
    if not dt_str:
        return None
    dt_str = dt_str.strip()
    if dt_str.endswith("Z"):
        dt_str = dt_str[:-1] + "+00:00"
    try:
        return to_utc(datetime.fromisoformat(dt_str))
    except (ValueError, TypeError):
        return None


def format_utc(value: datetime) -> str:
    """Human readable UTC time used in messages, e.g. 'Sat 01 Mar 14:00 UTC'."""
    return to_utc(value).strftime("%a %d %b %H:%M UTC")
