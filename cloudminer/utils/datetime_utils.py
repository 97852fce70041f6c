"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

import math
from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_aware(value: datetime) -> datetime:
    """
    Attach UTC to naive datetimes.

    SQLite hands back naive values even for timezone-aware columns.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def hours_until(remaining: timedelta) -> int:
    """Round a remaining interval up to whole hours."""
    return math.ceil(remaining.total_seconds() / 3600)
