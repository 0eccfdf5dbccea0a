"""
Investment bonus distributor.

On investment approval each upline level receives a one-time bonus and a
six-month schedule of deferred monthly bonuses. Ineligible levels have both
redirected to the fallback participant immediately.
"""

from dataclasses import dataclass
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import (
    INVESTMENT_BONUS_MONTHS,
    INVESTMENT_LOCK_IN_MONTHS,
    INVESTMENT_MONTHLY_PERCENTS,
    INVESTMENT_ONE_TIME_PERCENTS,
    MIN_INVESTMENT_AMOUNT,
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
from payout_engine.repositories.pending_bonus_repository import (
    PendingBonusRepository,
)
from payout_engine.services.compensation.eligibility import (
    EligibilityEvaluator,
)
from payout_engine.services.compensation.gated_credit import GatedCreditBatch
from payout_engine.services.compensation.upline_resolver import UplineResolver
from payout_engine.utils.datetime_utils import Clock, add_months, month_start
from payout_engine.utils.db_decorators import with_rollback_on_error
from payout_engine.utils.exceptions import InvalidAmountError, NotFoundError

ONE_TIME_BUCKETS = (
    "investment_referral_income",
    "investment_referral_principal_income",
)
MONTHLY_BUCKETS = ("investment_referral_return_income",)


@dataclass
class InvestmentResult:
    """Result of investment bonus distribution."""

    success: bool
    investment_id: int | None = None
    one_time_count: int = 0
    scheduled_count: int = 0
    redirected_count: int = 0


class InvestmentDistributor:
    """One-time and scheduled upline bonuses for a new investment."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock,
        fallback_participant_id: int,
    ) -> None:
        """
        Initialize distributor.

        Args:
            session: Async database session
            clock: Source of the approval time
            fallback_participant_id: Receiver of redirected income
        """
        self.session = session
        self.clock = clock
        self.fallback_participant_id = fallback_participant_id
        self.participant_repo = ParticipantRepository(session)
        self.investment_repo = InvestmentRepository(session)
        self.pending_repo = PendingBonusRepository(session)
        self.upline_resolver = UplineResolver(session)

    @with_rollback_on_error
    async def distribute(
        self, investor_id: int, amount: Decimal
    ) -> InvestmentResult:
        """
        Create an investment and distribute its upline bonuses.

        Args:
            investor_id: Investing participant
            amount: Invested principal

        Returns:
            InvestmentResult

        Raises:
            InvalidAmountError: Amount below the minimum investment
            NotFoundError: Investor or fallback participant not found
            TransactionAbortedError: Database failure (rolled back)
        """
        amount = floor_amount(Decimal(str(amount)))
        if amount < MIN_INVESTMENT_AMOUNT:
            raise InvalidAmountError(
                f"Minimum investment amount is {MIN_INVESTMENT_AMOUNT}, got {amount}"
            )

        if not await self.participant_repo.exists(id=investor_id):
            raise NotFoundError(f"Participant {investor_id} not found")
        if not await self.participant_repo.exists(id=self.fallback_participant_id):
            raise NotFoundError(
                f"Fallback participant {self.fallback_participant_id} not found"
            )

        now = self.clock.now()
        investment = await self.investment_repo.create(
            participant_id=investor_id,
            amount=amount,
            start_date=now,
            end_date=add_months(now, INVESTMENT_LOCK_IN_MONTHS),
            lock_in_months=INVESTMENT_LOCK_IN_MONTHS,
            months_paid=0,
            active=True,
            is_locked=True,
            withdrawal_restriction=amount,
            created_at=now,
        )
        investment_id = investment.id

        chain = await self.upline_resolver.resolve(investor_id)
        eligibility = EligibilityEvaluator(self.session)
        await eligibility.prefetch(chain)
        batch = GatedCreditBatch(self.session, self.fallback_participant_id, now)
        batch.add(investor_id, "total_investment", amount)

        monthly_roi = floor_amount(amount * MONTHLY_ROI_PERCENT)
        schedule_anchor = month_start(now)
        schedule: list[dict] = []
        one_time_count = 0

        for level, ancestor in enumerate(chain, start=1):
            one_time = floor_amount(amount * INVESTMENT_ONE_TIME_PERCENTS[level])
            monthly = floor_amount(monthly_roi * INVESTMENT_MONTHLY_PERCENTS[level])
            eligible = await eligibility.is_eligible(ancestor.id, level)

            batch.credit(
                ancestor.id,
                level,
                one_time,
                ONE_TIME_BUCKETS,
                HistoryType.INVESTMENT_REFERRAL,
                f"Level {level} investment referral income on {amount} "
                f"from participant {investor_id}",
                eligible,
            )

            if not eligible:
                batch.credit(
                    ancestor.id,
                    level,
                    monthly * INVESTMENT_BONUS_MONTHS,
                    MONTHLY_BUCKETS,
                    HistoryType.MONTHLY_INVESTMENT_BONUS,
                    f"Level {level} monthly investment bonus "
                    f"({INVESTMENT_BONUS_MONTHS} x {monthly}) "
                    f"from participant {investor_id}",
                    eligible,
                )
                continue

            one_time_count += 1
            batch.add(ancestor.id, "referral_investment_principal", amount)
            schedule.extend(
                {
                    "owner_id": ancestor.id,
                    "investor_id": investor_id,
                    "investment_id": investment_id,
                    "amount": monthly,
                    "month": month,
                    "awarded": False,
                    "created_at": schedule_anchor,
                }
                for month in range(1, INVESTMENT_BONUS_MONTHS + 1)
            )

        await batch.apply()
        await self.pending_repo.bulk_create(schedule)
        await self.session.commit()

        logger.info(
            "Investment bonuses distributed",
            extra={
                "investor_id": investor_id,
                "investment_id": investment_id,
                "amount": str(amount),
                "chain_length": len(chain),
                "one_time": one_time_count,
                "scheduled": len(schedule),
                "redirected": batch.redirected_count,
            },
        )

        return InvestmentResult(
            success=True,
            investment_id=investment_id,
            one_time_count=one_time_count,
            scheduled_count=len(schedule),
            redirected_count=batch.redirected_count,
        )
