"""DateTime utilities.

This module provides timezone handling and parsing helpers shared by the
configuration stores, the SQL formatter and the result transformer.
"""

from datetime import date, datetime, timezone
from typing import Any, Optional


def get_current_timestamp() -> datetime:
    """Get current UTC timestamp.

    Returns:
        Current timezone-aware UTC datetime
    """
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return ``value`` as an aware UTC datetime.

    Naive values are assumed to already be UTC, which is how every store
    backend writes them.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_sql_datetime(value: Any) -> Optional[datetime]:
    """Parse a date-like value coming back from a driver or a JSON payload.

    Args:
        value: ``datetime``, ``date`` or ISO-8601 string (a trailing ``Z``
            is accepted)

    Returns:
        Parsed datetime, or None when the value is not date-like
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = f"{text[:-1]}+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None
