"""Tests for calendar-month arithmetic and the clock abstraction."""

from datetime import UTC, date, datetime

from payout_engine.utils.datetime_utils import (
    FixedClock,
    add_months,
    ensure_utc,
    month_start,
    months_between,
    period_key,
)


class TestMonthArithmetic:
    """Test month helpers."""

    def test_add_months_clamps_day(self):
        """Jan 31 + 1 month is the last day of February."""
        result = add_months(datetime(2026, 1, 31, tzinfo=UTC), 1)

        assert result == datetime(2026, 2, 28, tzinfo=UTC)

    def test_add_months_crosses_year(self):
        """Lock-in end is 24 calendar months later."""
        result = add_months(datetime(2026, 11, 15, 10, tzinfo=UTC), 24)

        assert result == datetime(2028, 11, 15, 10, tzinfo=UTC)

    def test_month_start(self):
        """Month start is midnight of the first day."""
        result = month_start(datetime(2026, 3, 17, 13, 45, tzinfo=UTC))

        assert result == datetime(2026, 3, 1, tzinfo=UTC)

    def test_months_between_ignores_day(self):
        """Only calendar months count."""
        start = datetime(2026, 1, 31, 23, 59, tzinfo=UTC)
        end = datetime(2026, 2, 1, 0, 0, tzinfo=UTC)

        assert months_between(start, end) == 1

    def test_months_between_across_years(self):
        """(Y - Yc) * 12 + (M - Mc)."""
        start = datetime(2025, 11, 1, tzinfo=UTC)
        end = datetime(2026, 2, 1, tzinfo=UTC)

        assert months_between(start, end) == 3

    def test_period_key(self):
        """Period key is YYYY-MM."""
        assert period_key(datetime(2026, 2, 1, tzinfo=UTC)) == "2026-02"

    def test_ensure_utc_naive(self):
        """Naive values read back from SQLite are treated as UTC."""
        result = ensure_utc(datetime(2026, 1, 15, 10, 0))

        assert result.tzinfo is UTC


class TestFixedClock:
    """Test the deterministic clock."""

    def test_now_and_today(self):
        clock = FixedClock(datetime(2026, 1, 15, 10, 0, tzinfo=UTC))

        assert clock.now() == datetime(2026, 1, 15, 10, 0, tzinfo=UTC)
        assert clock.today() == date(2026, 1, 15)

    def test_advance(self):
        """advance() crosses the UTC day boundary."""
        clock = FixedClock(datetime(2026, 1, 15, 23, 30, tzinfo=UTC))

        clock.advance(hours=1)

        assert clock.today() == date(2026, 1, 16)

    def test_advance_months(self):
        clock = FixedClock(datetime(2026, 1, 15, tzinfo=UTC))

        clock.advance_months(2)

        assert clock.now() == datetime(2026, 3, 15, tzinfo=UTC)
