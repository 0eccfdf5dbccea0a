"""
Investment status service.

Lock-in status of a participant's investments and the part of the wallet
that can be withdrawn while principal is locked.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import (
    MIN_WITHDRAWAL_AMOUNT,
    MONTHLY_ROI_PERCENT,
    floor_amount,
)
from payout_engine.repositories.investment_repository import (
    InvestmentRepository,
)
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.utils.datetime_utils import Clock, SystemClock, ensure_utc
from payout_engine.utils.db_decorators import with_rollback_on_error
from payout_engine.utils.exceptions import NotFoundError

# Average month length used for the "months remaining" estimate
AVERAGE_MONTH = timedelta(days=30.44)


@dataclass
class InvestmentLockStatus:
    """Lock-in status of one investment."""

    investment_id: int
    amount: Decimal
    start_date: datetime
    end_date: datetime
    is_locked: bool
    withdrawal_restriction: Decimal
    months_remaining: int


@dataclass
class InvestmentStatus:
    """Lock-in status of all active investments of a participant."""

    is_locked: bool
    locked_amount: Decimal
    available_amount: Decimal
    wallet_balance: Decimal
    available_for_withdrawal: Decimal
    investments: list[InvestmentLockStatus] = field(default_factory=list)


@dataclass
class InvestmentSummary:
    """Investment totals and income overview of a participant."""

    total_investment: Decimal
    status: InvestmentStatus
    investment_income: Decimal
    referral_income: Decimal
    roi_earned: Decimal
    investment_count: int


@dataclass
class WithdrawalCheck:
    """Whether a withdrawal amount is allowed."""

    can_withdraw: bool
    available_amount: Decimal
    reason: str | None = None


class InvestmentStatusService:
    """Lock-in and withdrawal availability."""

    def __init__(self, session: AsyncSession, clock: Clock | None = None) -> None:
        """Initialize service."""
        self.session = session
        self.clock = clock or SystemClock()
        self.participant_repo = ParticipantRepository(session)
        self.investment_repo = InvestmentRepository(session)

    def calculate_months_remaining(self, end_date: datetime) -> int:
        """
        Estimate months until an investment unlocks.

        Args:
            end_date: Lock-in end

        Returns:
            Whole months remaining, rounded up (0 once unlocked)
        """
        remaining = ensure_utc(end_date) - self.clock.now()
        return max(0, math.ceil(remaining / AVERAGE_MONTH))

    @with_rollback_on_error
    async def calculate_investment_status(
        self, participant_id: int
    ) -> InvestmentStatus:
        """
        Recompute lock-in status of a participant's active investments.

        The derived ``is_locked`` and ``withdrawal_restriction`` columns are
        written back.

        Args:
            participant_id: Participant ID

        Returns:
            InvestmentStatus

        Raises:
            NotFoundError: Participant not found
        """
        participant = await self.participant_repo.get_fresh(participant_id)
        if participant is None:
            raise NotFoundError(f"Participant {participant_id} not found")

        now = self.clock.now()
        investments = await self.investment_repo.get_by_participant(
            participant_id, active_only=True
        )

        locked_amount = Decimal("0")
        available_amount = Decimal("0")
        statuses: list[InvestmentLockStatus] = []

        for investment in investments:
            end_date = ensure_utc(investment.end_date)
            is_locked = now < end_date

            if is_locked:
                locked_amount += investment.amount
                investment.is_locked = True
                investment.withdrawal_restriction = investment.amount
            else:
                available_amount += investment.amount
                investment.is_locked = False
                investment.withdrawal_restriction = Decimal("0")

            statuses.append(
                InvestmentLockStatus(
                    investment_id=investment.id,
                    amount=investment.amount,
                    start_date=ensure_utc(investment.start_date),
                    end_date=end_date,
                    is_locked=is_locked,
                    withdrawal_restriction=investment.withdrawal_restriction,
                    months_remaining=(
                        self.calculate_months_remaining(end_date) if is_locked else 0
                    ),
                )
            )

        await self.session.commit()

        wallet_balance = participant.wallet_balance
        return InvestmentStatus(
            is_locked=locked_amount > 0,
            locked_amount=locked_amount,
            available_amount=available_amount,
            wallet_balance=wallet_balance,
            available_for_withdrawal=max(Decimal("0"), wallet_balance - locked_amount),
            investments=statuses,
        )

    async def get_investment_summary(
        self, participant_id: int
    ) -> InvestmentSummary:
        """
        Summarize a participant's investments and income.

        ``referral_income`` combines referral, matching and reward income;
        ``roi_earned`` is the ROI paid so far over all investments,
        retired ones included.

        Args:
            participant_id: Participant ID

        Returns:
            InvestmentSummary

        Raises:
            NotFoundError: Participant not found
        """
        status = await self.calculate_investment_status(participant_id)
        participant = await self.participant_repo.get_fresh(participant_id)
        investments = await self.investment_repo.get_by_participant(participant_id)

        roi_earned = sum(
            (
                floor_amount(inv.amount * MONTHLY_ROI_PERCENT) * inv.months_paid
                for inv in investments
            ),
            Decimal("0"),
        )

        return InvestmentSummary(
            total_investment=participant.total_investment,
            status=status,
            investment_income=participant.investment_income,
            referral_income=(
                participant.referral_income
                + participant.matching_income
                + participant.reward_income
            ),
            roi_earned=roi_earned,
            investment_count=len(investments),
        )

    async def can_withdraw_amount(
        self, participant_id: int, amount: Decimal
    ) -> WithdrawalCheck:
        """
        Check a withdrawal request against locked principal.

        Args:
            participant_id: Participant ID
            amount: Requested amount

        Returns:
            WithdrawalCheck with the reason when refused
        """
        status = await self.calculate_investment_status(participant_id)
        available = status.available_for_withdrawal

        if amount > available:
            return WithdrawalCheck(
                can_withdraw=False,
                available_amount=available,
                reason=(
                    f"Insufficient available balance. "
                    f"You can only withdraw {available:.2f}"
                ),
            )
        if amount < MIN_WITHDRAWAL_AMOUNT:
            return WithdrawalCheck(
                can_withdraw=False,
                available_amount=available,
                reason=f"Minimum withdrawal amount is {MIN_WITHDRAWAL_AMOUNT}",
            )

        logger.debug(
            "Withdrawal amount allowed",
            extra={"participant_id": participant_id, "amount": str(amount)},
        )
        return WithdrawalCheck(can_withdraw=True, available_amount=available)
