from __future__ import annotations

from datetime import datetime, timezone


class SystemClock:
    """Wall clock. Components take a clock so tests can freeze time."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes; everything we store is UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
