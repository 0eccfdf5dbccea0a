"""
Monthly investment ROI payout.

Pays ``floor(amount × MONTHLY_ROI_PERCENT)`` once per calendar month on every
active investment and retires the investment after its lock-in months.
``last_roi_period`` makes a repeated run within a month a no-op.
"""

from datetime import datetime
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import (
    MONTHLY_ROI_PERCENT,
    floor_amount,
)
from payout_engine.models.history_entry import HistoryType
from payout_engine.repositories.investment_repository import (
    InvestmentRepository,
)
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.services.history_service import HistoryService
from payout_engine.services.settlement.result import SettlementResult
from payout_engine.utils.datetime_utils import Clock, period_key


class RoiSettlement:
    """Recurring ROI on active investments."""

    def __init__(self, session: AsyncSession, clock: Clock) -> None:
        """
        Initialize settlement.

        Args:
            session: Async database session (committed per investment)
            clock: Source of the settlement time
        """
        self.session = session
        self.clock = clock
        self.investment_repo = InvestmentRepository(session)
        self.participant_repo = ParticipantRepository(session)
        self.history_service = HistoryService(session)

    async def settle(self) -> SettlementResult:
        """
        Pay the current period's ROI on every due investment.

        Each investment is its own transaction; a failing investment is
        rolled back, logged and skipped.

        Returns:
            SettlementResult with paid and failed investment counts
        """
        now = self.clock.now()
        period = period_key(now)
        result = SettlementResult()

        investment_ids = await self.investment_repo.get_ids_due_for_roi(period)
        logger.info(
            f"ROI settlement for {period}: {len(investment_ids)} investments due"
        )

        for investment_id in investment_ids:
            try:
                paid = await self._pay(investment_id, now, period)
                await self.session.commit()
            except Exception as e:
                await self.session.rollback()
                result.failed_count += 1
                logger.exception(
                    f"Failed to pay ROI for investment {investment_id}: {e}"
                )
                continue

            if paid:
                result.processed_count += 1
            else:
                result.skipped_count += 1

        logger.info(
            "ROI settlement complete",
            extra={
                "period": period,
                "paid": result.processed_count,
                "failed": result.failed_count,
                "skipped": result.skipped_count,
            },
        )
        return result

    async def _pay(self, investment_id: int, now: datetime, period: str) -> bool:
        """Pay one investment for a period; returns True if paid."""
        investment = await self.investment_repo.get_fresh(
            investment_id, for_update=True
        )
        if investment is None or not investment.active:
            return False
        if investment.last_roi_period == period:
            return False
        # First payout is in the month after approval
        if period_key(investment.start_date) >= period:
            return False

        participant_id = investment.participant_id
        roi = floor_amount(investment.amount * MONTHLY_ROI_PERCENT)
        months_paid = investment.months_paid + 1

        await self.participant_repo.increment_many(
            {
                participant_id: {
                    "investment_income": roi,
                    "wallet_balance": roi,
                }
            }
        )
        await self.history_service.record(
            participant_id,
            HistoryType.INVESTMENT_ROI,
            roi,
            remarks=(
                f"Monthly ROI {months_paid}/{investment.lock_in_months} "
                f"on investment {investment_id}"
            ),
            created_at=now,
        )

        investment.months_paid = months_paid
        investment.last_roi_period = period
        if months_paid >= investment.lock_in_months:
            investment.active = False
            investment.is_locked = False
            investment.withdrawal_restriction = Decimal("0")
            logger.info(
                "Investment fully amortised",
                extra={"investment_id": investment_id, "months_paid": months_paid},
            )
        await self.session.flush()
        return True
