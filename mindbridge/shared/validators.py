"""Shared validation and datetime utilities"""

from datetime import datetime, timezone
from typing import Optional


def ensure_utc(value: datetime) -> datetime:
    """
    Normalize a datetime to an aware UTC datetime.

    Naive values are assumed to already be UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_db_datetime(value: datetime) -> datetime:
    """Convert to the naive UTC representation stored in the database"""
    return ensure_utc(value).replace(tzinfo=None)


def from_db_datetime(value: Optional[datetime]) -> Optional[datetime]:
    """Convert a stored naive UTC datetime back to an aware one"""
    if value is None:
        return None
    return ensure_utc(value)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 timestamp (a trailing ``Z`` is accepted).

    Args:
        value: Timestamp string

    Returns:
        Aware UTC datetime, or None when value is empty

    Raises:
        ValueError: If the string is not a valid timestamp
    """
    if not value:
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    return ensure_utc(datetime.fromisoformat(raw))
