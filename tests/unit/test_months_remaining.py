"""Tests for lock-in month estimates."""

from datetime import UTC, datetime

from payout_engine.services.investment_status_service import (
    InvestmentStatusService,
)
from payout_engine.utils.datetime_utils import add_months


class TestMonthsRemaining:
    """Test calculate_months_remaining."""

    def test_full_lock_in(self, mock_session, clock):
        service = InvestmentStatusService(mock_session, clock)

        result = service.calculate_months_remaining(add_months(clock.now(), 24))

        assert result == 24

    def test_partial_month_rounds_up(self, mock_session, clock):
        service = InvestmentStatusService(mock_session, clock)
        clock.advance(days=10)

        result = service.calculate_months_remaining(
            datetime(2026, 2, 15, 10, 0, tzinfo=UTC)
        )

        assert result == 1

    def test_past_end_date(self, mock_session, clock):
        service = InvestmentStatusService(mock_session, clock)

        result = service.calculate_months_remaining(
            datetime(2025, 1, 1, tzinfo=UTC)
        )

        assert result == 0

    def test_naive_end_date(self, mock_session, clock):
        """End dates read back from SQLite are naive UTC."""
        service = InvestmentStatusService(mock_session, clock)

        result = service.calculate_months_remaining(datetime(2026, 3, 15, 10, 0))

        assert result == 2
