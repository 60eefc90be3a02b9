"""
Utility functions for date and time handling.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

Clock = Callable[[], datetime]


def get_utc_now() -> datetime:
    """
    Get current datetime in UTC.
    Returns:
        Current timezone-aware datetime object
    """
    return datetime.now(timezone.utc)


def as_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Attach UTC to naive datetimes read back from the database.

    SQLite drops tzinfo on TIMESTAMP columns, so every comparison against
    stored instants goes through this helper.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def to_epoch_seconds(dt: datetime) -> int:
    return int(as_utc(dt).timestamp())


def from_epoch_seconds(value) -> datetime:
    return datetime.fromtimestamp(float(value), tz=timezone.utc)
