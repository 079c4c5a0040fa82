# app/utils/time_utils.py
"""
Datetime helpers. Everything is stored as naive UTC, like datetime.utcnow().
"""

from datetime import date, datetime, time, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current naive-UTC time. Wrapped so tests can patch it."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive UTC. Naive values are assumed UTC already."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, time.max)
