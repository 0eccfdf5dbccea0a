"""
Integration tests for investment bonuses and monthly settlement.

Tests cover:
- One-time upline bonuses and the six-month schedule
- Pending bonus release order
- Monthly ROI payout and retirement
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from payout_engine.models import HistoryType, LegPosition
from payout_engine.repositories.history_repository import HistoryRepository
from payout_engine.repositories.investment_repository import (
    InvestmentRepository,
)
from payout_engine.repositories.pending_bonus_repository import (
    PendingBonusRepository,
)
from payout_engine.services.history_service import HistoryService
from payout_engine.utils.exceptions import InvalidAmountError, NotFoundError

LEFT = LegPosition.LEFT
RIGHT = LegPosition.RIGHT


@pytest.fixture
def investor_tree(make_participant):
    """
    top -> sponsor -> investor; top has two directs (eligible at level 2).

    Returns:
        async callable() -> (top, sponsor, investor)
    """

    async def _build():
        top = await make_participant()
        sponsor = await make_participant(top, LEFT)
        await make_participant(top, RIGHT)
        investor = await make_participant(sponsor, LEFT)
        return top, sponsor, investor

    return _build


class TestInvestmentDistribution:
    """One-time bonuses and the schedule."""

    @pytest.mark.asyncio
    async def test_one_time_and_schedule(
        self, session, investor_tree, engine, fresh
    ):
        top, sponsor, investor = await investor_tree()

        result = await engine.distribute_investment_bonuses(
            investor.id, Decimal("10000")
        )

        assert result.success is True
        assert result.one_time_count == 2
        assert result.scheduled_count == 12
        assert result.redirected_count == 0

        sponsor = await fresh(sponsor)
        top = await fresh(top)
        investor = await fresh(investor)
        assert sponsor.investment_referral_income == Decimal("300")
        assert sponsor.investment_referral_principal_income == Decimal("300")
        assert sponsor.referral_investment_principal == Decimal("10000")
        assert sponsor.wallet_balance == Decimal("300")
        assert top.investment_referral_income == Decimal("200")
        assert investor.total_investment == Decimal("10000")

        pending = await PendingBonusRepository(session).get_unawarded_for_owner(
            sponsor.id
        )
        assert [p.month for p in pending] == [1, 2, 3, 4, 5, 6]
        assert all(p.amount == Decimal("40") for p in pending)
        assert all(p.investment_id == result.investment_id for p in pending)

        top_pending = await PendingBonusRepository(session).get_unawarded_for_owner(
            top.id
        )
        assert all(p.amount == Decimal("12") for p in top_pending)

        investment = await InvestmentRepository(session).get_by_id(
            result.investment_id
        )
        assert investment.is_locked is True
        assert investment.withdrawal_restriction == Decimal("10000")
        assert investment.lock_in_months == 24

    @pytest.mark.asyncio
    async def test_ineligible_level_redirects_both_bonuses(
        self, session, company, make_participant, engine, fresh
    ):
        """An ineligible ancestor's one-time and six monthly bonuses go to
        the fallback participant immediately."""
        top = await make_participant()
        sponsor = await make_participant(top, LEFT)
        investor = await make_participant(sponsor, LEFT)

        result = await engine.distribute_investment_bonuses(
            investor.id, Decimal("10000")
        )

        assert result.one_time_count == 1
        assert result.scheduled_count == 6
        assert result.redirected_count == 2

        company = await fresh(company)
        assert company.investment_referral_income == Decimal("200")
        assert company.investment_referral_return_income == Decimal("72")
        assert company.wallet_balance == Decimal("272")

        pending = await PendingBonusRepository(session).get_unawarded_for_owner(
            top.id
        )
        assert pending == []

        history = HistoryRepository(session)
        one_time = await history.find_by(
            participant_id=company.id,
            type=HistoryType.EXTRA_INVESTMENT_REFERRAL,
        )
        monthly = await history.find_by(
            participant_id=company.id,
            type=HistoryType.EXTRA_MONTHLY_INVESTMENT_BONUS,
        )
        assert [e.amount for e in one_time] == [Decimal("200")]
        assert [e.amount for e in monthly] == [Decimal("72")]

    @pytest.mark.asyncio
    async def test_amount_below_minimum(self, session, investor_tree, engine):
        _, _, investor = await investor_tree()

        with pytest.raises(InvalidAmountError):
            await engine.distribute_investment_bonuses(investor.id, Decimal("9999"))

        assert await InvestmentRepository(session).count() == 0
        assert await PendingBonusRepository(session).count() == 0

    @pytest.mark.asyncio
    async def test_amount_floored(self, session, investor_tree, engine):
        _, _, investor = await investor_tree()

        result = await engine.distribute_investment_bonuses(
            investor.id, Decimal("10000.75")
        )

        investment = await InvestmentRepository(session).get_by_id(
            result.investment_id
        )
        assert investment.amount == Decimal("10000")

    @pytest.mark.asyncio
    async def test_unknown_investor(self, engine):
        with pytest.raises(NotFoundError):
            await engine.distribute_investment_bonuses(9999, Decimal("10000"))


class TestPendingBonusSettlement:
    """Monthly release of scheduled bonuses."""

    @pytest.mark.asyncio
    async def test_nothing_released_in_approval_month(
        self, investor_tree, engine, clock
    ):
        _, _, investor = await investor_tree()
        await engine.distribute_investment_bonuses(investor.id, Decimal("10000"))

        clock.advance(days=10)
        result = await engine.settle_pending_bonuses()

        assert result.processed_count == 0
        assert result.skipped_count == 2

    @pytest.mark.asyncio
    async def test_one_release_per_group_per_run(
        self, session, investor_tree, engine, clock, fresh
    ):
        top, sponsor, investor = await investor_tree()
        await engine.distribute_investment_bonuses(investor.id, Decimal("10000"))

        clock.current = datetime(2026, 2, 1, 0, 5, tzinfo=UTC)
        first = await engine.settle_pending_bonuses()
        again = await engine.settle_pending_bonuses()

        assert first.processed_count == 2
        assert first.failed_count == 0
        assert again.processed_count == 0

        sponsor = await fresh(sponsor)
        assert sponsor.investment_referral_return_income == Decimal("40")
        assert sponsor.wallet_balance == Decimal("340")

        pending = await PendingBonusRepository(session).get_unawarded_for_owner(
            sponsor.id
        )
        assert [p.month for p in pending] == [2, 3, 4, 5, 6]
        # Awarded rows are purged
        assert await PendingBonusRepository(session).count(owner_id=sponsor.id) == 5

    @pytest.mark.asyncio
    async def test_repeated_runs_in_late_period_release_once(
        self, session, investor_tree, engine, clock, fresh
    ):
        """A group behind schedule still releases one month per period."""
        _, sponsor, investor = await investor_tree()
        await engine.distribute_investment_bonuses(investor.id, Decimal("10000"))

        clock.current = datetime(2026, 4, 10, tzinfo=UTC)
        april = [await engine.settle_pending_bonuses() for _ in range(3)]

        assert [r.processed_count for r in april] == [2, 0, 0]
        sponsor = await fresh(sponsor)
        assert sponsor.investment_referral_return_income == Decimal("40")

        clock.current = datetime(2026, 5, 2, tzinfo=UTC)
        may = [await engine.settle_pending_bonuses() for _ in range(2)]

        assert [r.processed_count for r in may] == [2, 0]

        entries = await HistoryRepository(session).find_by(
            participant_id=sponsor.id,
            type=HistoryType.MONTHLY_INVESTMENT_BONUS,
        )
        assert [e.remarks.split()[1] for e in entries] == ["1", "2"]

        sponsor = await fresh(sponsor)
        assert sponsor.investment_referral_return_income == Decimal("80")
        assert sponsor.wallet_balance == Decimal("380")

    @pytest.mark.asyncio
    async def test_full_schedule_then_nothing(
        self, session, investor_tree, engine, clock, fresh
    ):
        _, sponsor, investor = await investor_tree()
        await engine.distribute_investment_bonuses(investor.id, Decimal("10000"))

        clock.current = datetime(2026, 2, 1, tzinfo=UTC)
        for _ in range(8):
            await engine.settle_pending_bonuses()
            clock.advance_months(1)

        sponsor = await fresh(sponsor)
        assert sponsor.investment_referral_return_income == Decimal("240")
        assert await PendingBonusRepository(session).count() == 0


class TestRoiSettlement:
    """Monthly ROI on investments."""

    @pytest.mark.asyncio
    async def test_first_payout_next_month(
        self, make_participant, engine, clock, fresh
    ):
        investor = await make_participant()
        await engine.distribute_investment_bonuses(investor.id, Decimal("10000"))

        clock.advance(days=5)
        same_month = await engine.settle_monthly_roi()
        assert same_month.processed_count == 0

        clock.current = datetime(2026, 2, 1, 0, 30, tzinfo=UTC)
        result = await engine.settle_monthly_roi()

        investor = await fresh(investor)
        assert result.processed_count == 1
        assert investor.investment_income == Decimal("400")
        assert investor.wallet_balance == Decimal("400")

    @pytest.mark.asyncio
    async def test_idempotent_within_period(
        self, make_participant, engine, clock, fresh
    ):
        investor = await make_participant()
        await engine.distribute_investment_bonuses(investor.id, Decimal("10000"))

        clock.current = datetime(2026, 2, 1, tzinfo=UTC)
        first = await engine.settle_monthly_roi()
        clock.advance(days=3)
        second = await engine.settle_monthly_roi()

        investor = await fresh(investor)
        assert first.processed_count == 1
        assert second.processed_count == 0
        assert investor.investment_income == Decimal("400")

    @pytest.mark.asyncio
    async def test_retired_after_lock_in(
        self, session, make_participant, engine, clock, fresh
    ):
        investor = await make_participant()
        result = await engine.distribute_investment_bonuses(
            investor.id, Decimal("10000")
        )

        clock.current = datetime(2026, 2, 1, tzinfo=UTC)
        for _ in range(26):
            await engine.settle_monthly_roi()
            clock.advance_months(1)

        investment = await InvestmentRepository(session).get_fresh(
            result.investment_id
        )
        investor = await fresh(investor)
        assert investment.months_paid == 24
        assert investment.active is False
        assert investment.is_locked is False
        assert investment.withdrawal_restriction == Decimal("0")
        assert investor.investment_income == Decimal("9600")

        reconciliation = await HistoryService(session).reconcile_wallet(investor.id)
        assert reconciliation.is_consistent
