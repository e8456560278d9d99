"""Datetime utilities for common operations."""

from datetime import datetime, date, timedelta, timezone


def now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(timezone.utc)


def ensure_aware(dt: datetime) -> datetime:
    """
    Treat naive datetimes as UTC.

    Some database drivers hand back naive values for timezone-aware columns.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def days_ago(days: int) -> datetime:
    """Start of the window covering the last `days` days, in UTC."""
    return now() - timedelta(days=days)


def date_key(value: datetime | date | str) -> str:
    """
    Normalise a grouped date value to `YYYY-MM-DD`.

    `func.date()` yields `date` objects on PostgreSQL and strings on SQLite.
    """
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]
