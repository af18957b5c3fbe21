"""
Time helpers.

All persisted timestamps are UTC. SQLite hands back naive datetimes, so
readers normalise through ``as_utc`` before comparing.
"""

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
