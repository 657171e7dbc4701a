"""
Timezone utilities for FeelFlick.
Provides consistent UTC datetime handling for persisted score timestamps.
"""
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.
    Replacement for deprecated datetime.utcnow().
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Ensure a datetime is UTC and timezone-aware.
    If timezone-naive, assumes it's already UTC and adds UTC timezone
    (SQLite hands back naive datetimes even for values written as aware).
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
