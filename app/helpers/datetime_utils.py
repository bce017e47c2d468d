"""
Timezone helpers.

SQLite hands back naive datetimes for ``DateTime(timezone=True)`` columns, so
everything read from the database goes through ``ensure_aware`` before being
compared against ``utcnow()``.
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_aware(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes, leave aware ones untouched."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_past(value: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if value is None:
        return False
    return ensure_aware(value) < (now or utcnow())
