"""
Common date/time utility functions for consistent date/time handling across the application

Storage: All timestamps are stored in UTC. SQLite hands them back naive, Postgres
hands them back aware; everything that compares or buckets timestamps goes through
`as_utc` first.
"""

from datetime import date, datetime, time, timedelta, timezone


def as_utc(dt: datetime) -> datetime:
    """
    Convert dt to tz-aware UTC.
    If dt is naive, we treat it as UTC (consistent with existing behavior).

    Args:
        dt: datetime object (naive or timezone-aware)

    Returns:
        datetime object in UTC timezone
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    """
    Get current UTC datetime.

    Returns:
        Current datetime in UTC timezone
    """
    return datetime.now(timezone.utc)


def parse_iso_string(iso_string: str) -> datetime:
    """
    Parse an ISO 8601 string to UTC datetime.
    Handles both with and without 'Z' suffix.

    Args:
        iso_string: ISO 8601 string (e.g., "2024-12-28T10:30:00.000Z" or "2024-12-28T10:30:00+00:00")

    Returns:
        datetime object in UTC timezone

    Raises:
        ValueError: if the string is not a valid ISO 8601 timestamp
    """
    # Replace 'Z' with '+00:00' for consistent parsing
    if iso_string.endswith("Z"):
        iso_string = iso_string[:-1] + "+00:00"

    dt = datetime.fromisoformat(iso_string)
    return as_utc(dt)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def start_of_week(day: date) -> date:
    """Sunday on or before `day` (weeks start on Sunday)."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def start_of_month(day: date) -> date:
    return day.replace(day=1)


def minutes_between(start: datetime, end: datetime) -> float:
    return (as_utc(end) - as_utc(start)).total_seconds() / 60
