"""Date manipulation utilities"""

from datetime import date, datetime, timedelta, timezone


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> int:
    """Whole days elapsed from start to end, never negative"""
    return max((ensure_utc(end) - ensure_utc(start)).days, 0)


def previous_day(day: date) -> date:
    return day - timedelta(days=1)


def start_of_day_utc(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)
