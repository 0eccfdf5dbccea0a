"""
Integration tests for the settlement and reset tasks.

Redis is replaced by the process-local lock and the task session by the
test session.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from apscheduler.triggers.cron import CronTrigger

from jobs.scheduler import create_scheduler
from jobs.tasks import daily_pair_reset, monthly_settlement
from payout_engine.config.settings import settings
from payout_engine.models import DailyPairCount, LegPosition, PendingBonus
from payout_engine.repositories.daily_pair_count_repository import (
    DailyPairCountRepository,
)
from payout_engine.repositories.investment_repository import (
    InvestmentRepository,
)
from payout_engine.utils.datetime_utils import add_months, month_start, utc_now
from payout_engine.utils.distributed_lock import DistributedLock


async def _no_redis():
    raise ConnectionError("Redis unavailable")


@pytest.fixture
def task_session(monkeypatch, session, company):
    """Route task sessions to the test session and locks to local locks."""

    @asynccontextmanager
    async def _local_session():
        yield session

    for module in (monthly_settlement, daily_pair_reset):
        monkeypatch.setattr(module, "get_redis_client", _no_redis)
        monkeypatch.setattr(module, "create_local_session", _local_session)
    return session


class TestMonthlySettlementTasks:
    """Settlement under the distributed lock."""

    @pytest.mark.asyncio
    async def test_roi_task_pays_due_investment(
        self, task_session, make_participant, fresh
    ):
        investor = await make_participant()
        start = add_months(utc_now(), -2)
        await InvestmentRepository(task_session).create(
            participant_id=investor.id,
            amount=Decimal("10000"),
            start_date=start,
            end_date=add_months(start, 24),
            withdrawal_restriction=Decimal("10000"),
        )
        await task_session.commit()

        result = await monthly_settlement._settle_async(
            monthly_settlement.ROI_LOCK_KEY
        )

        investor = await fresh(investor)
        assert result.processed_count == 1
        assert investor.investment_income == Decimal("400")

    @pytest.mark.asyncio
    async def test_pending_bonus_task_releases_legacy_group(
        self, task_session, make_participant, fresh
    ):
        """Rows without an investment are grouped by investor and day."""
        owner = await make_participant()
        investor = await make_participant(owner, LegPosition.LEFT)
        task_session.add(
            PendingBonus(
                owner_id=owner.id,
                investor_id=investor.id,
                investment_id=None,
                amount=Decimal("40"),
                month=1,
                created_at=month_start(add_months(utc_now(), -1)),
            )
        )
        await task_session.commit()

        result = await monthly_settlement._settle_async(
            monthly_settlement.PENDING_BONUS_LOCK_KEY
        )

        owner = await fresh(owner)
        assert result.processed_count == 1
        assert owner.investment_referral_return_income == Decimal("40")

    @pytest.mark.asyncio
    async def test_skipped_when_lock_held(self, task_session):
        lock = DistributedLock()

        async with lock.lock(monthly_settlement.ROI_LOCK_KEY, blocking=False) as held:
            assert held is True
            result = await monthly_settlement._settle_async(
                monthly_settlement.ROI_LOCK_KEY
            )

        assert result is None


class TestSettlementActors:
    """Actor wrappers."""

    def test_emergency_stop_skips_roi(self, monkeypatch):
        run_async = MagicMock()
        monkeypatch.setattr(monthly_settlement, "run_async", run_async)
        monkeypatch.setattr(settings, "emergency_stop_roi", True)

        monthly_settlement.settle_monthly_roi.fn()

        run_async.assert_not_called()

    def test_emergency_stop_skips_bonus_release(self, monkeypatch):
        run_async = MagicMock()
        monkeypatch.setattr(monthly_settlement, "run_async", run_async)
        monkeypatch.setattr(settings, "emergency_stop_bonus_release", True)

        monthly_settlement.settle_pending_bonuses.fn()

        run_async.assert_not_called()

    def test_failure_reraised_for_retries(self, monkeypatch):
        monkeypatch.setattr(
            monthly_settlement, "_settle_async", MagicMock(return_value=None)
        )
        monkeypatch.setattr(
            monthly_settlement,
            "run_async",
            MagicMock(side_effect=RuntimeError("database down")),
        )
        monkeypatch.setattr(settings, "emergency_stop_bonus_release", False)

        with pytest.raises(RuntimeError):
            monthly_settlement.settle_pending_bonuses.fn()


class TestDailyPairReset:
    """Daily counter purge."""

    @pytest.mark.asyncio
    async def test_old_counters_deleted(self, task_session, make_participant):
        participant = await make_participant()
        today = utc_now().date()
        task_session.add_all(
            [
                DailyPairCount(
                    participant_id=participant.id,
                    day=today - timedelta(days=settings.daily_pair_retention_days + 3),
                    count=12,
                ),
                DailyPairCount(participant_id=participant.id, day=today, count=4),
            ]
        )
        await task_session.commit()

        purged = await daily_pair_reset._reset_daily_pair_counts_async()

        assert purged == 1
        assert await DailyPairCountRepository(task_session).get_count(
            participant.id, today
        ) == 4
        assert await DailyPairCountRepository(task_session).count() == 1


class TestScheduler:
    """Cron registration."""

    def test_jobs_registered(self):
        scheduler = create_scheduler()

        jobs = {job.id: job for job in scheduler.get_jobs()}

        assert set(jobs) == {
            "settle_pending_bonuses",
            "settle_monthly_roi",
            "reset_daily_pair_counts",
        }
        assert all(isinstance(job.trigger, CronTrigger) for job in jobs.values())
