"""
Datetime utilities.

Provides timezone-aware datetime functions, calendar-month arithmetic and
the clock abstraction the engine reads "now" from.
"""

import calendar
from datetime import UTC, date, datetime, timedelta
from typing import Protocol


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive datetime.

    SQLite returns ``DateTime(timezone=True)`` columns without tzinfo; values
    are always written in UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def month_start(value: datetime) -> datetime:
    """Get midnight of the first day of the value's month (UTC)."""
    value = ensure_utc(value)
    return value.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def add_months(value: datetime, months: int) -> datetime:
    """
    Add calendar months, clamping the day to the target month's length.

    Args:
        value: Start datetime
        months: Months to add (may be negative)

    Returns:
        Shifted datetime with the same time of day
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def months_between(start: datetime, end: datetime) -> int:
    """Whole calendar months from start's month to end's month."""
    start = ensure_utc(start)
    end = ensure_utc(end)
    return (end.year - start.year) * 12 + (end.month - start.month)


def period_key(value: datetime) -> str:
    """Settlement period key (``YYYY-MM``) for a datetime."""
    return ensure_utc(value).strftime("%Y-%m")


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        ...

    def today(self) -> date:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return utc_now()

    def today(self) -> date:
        return utc_now().date()


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, current: datetime) -> None:
        self.current = ensure_utc(current)

    def now(self) -> datetime:
        return self.current

    def today(self) -> date:
        return self.current.date()

    def advance(self, **kwargs: float) -> None:
        """Move the clock by a timedelta given as keyword arguments."""
        self.current = self.current + timedelta(**kwargs)

    def advance_months(self, months: int) -> None:
        """Move the clock by whole calendar months."""
        self.current = add_months(self.current, months)
