"""
Compensation engine.

Entry point used by request handlers (registration and investment approval)
and by the scheduled settlement jobs.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.settings import settings
from payout_engine.models.participant import Participant
from payout_engine.services.compensation.investment_distributor import (
    InvestmentDistributor,
    InvestmentResult,
)
from payout_engine.services.compensation.registration_distributor import (
    RegistrationDistributor,
    RegistrationResult,
)
from payout_engine.services.compensation.reward_evaluator import RewardEvaluator
from payout_engine.services.settlement import (
    PendingBonusSettlement,
    RoiSettlement,
    SettlementResult,
)
from payout_engine.utils.datetime_utils import Clock, SystemClock
from payout_engine.utils.exceptions import TransactionAbortedError


class CompensationEngine:
    """
    Compensation and bonus distribution engine.

    Request-driven methods apply one event in one transaction on the given
    session; settlement methods commit per group or investment.

    Example:
        async with async_session_maker() as session:
            engine = CompensationEngine(session)
            result = await engine.distribute_registration_income(user_id)
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock | None = None,
        fallback_participant_id: int | None = None,
    ) -> None:
        """
        Initialize engine.

        Args:
            session: Async database session
            clock: Time source (system UTC clock by default)
            fallback_participant_id: Receiver of redirected income
                (settings.fallback_participant_id by default)
        """
        self.session = session
        self.clock = clock or SystemClock()
        self.fallback_participant_id = (
            fallback_participant_id
            if fallback_participant_id is not None
            else settings.fallback_participant_id
        )

        self.registration_distributor = RegistrationDistributor(
            session, self.clock, self.fallback_participant_id
        )
        self.investment_distributor = InvestmentDistributor(
            session, self.clock, self.fallback_participant_id
        )
        self.reward_evaluator = RewardEvaluator(session, self.clock)
        self.pending_bonus_settlement = PendingBonusSettlement(session, self.clock)
        self.roi_settlement = RoiSettlement(session, self.clock)

    async def distribute_registration_income(
        self, participant_id: int
    ) -> RegistrationResult:
        """
        Distribute referral and matching income for a registration.

        Idempotent: a second call returns ``already_processed=True``.
        Milestones of every matching recipient are evaluated after commit.

        Args:
            participant_id: Registering participant

        Returns:
            RegistrationResult
        """
        result = await self.registration_distributor.distribute(participant_id)

        for recipient_id in result.matching_recipients:
            try:
                await self.reward_evaluator.check_and_award(recipient_id)
            except TransactionAbortedError as e:
                # Re-evaluated on the recipient's next matching credit
                logger.error(
                    f"Milestone evaluation failed for participant "
                    f"{recipient_id}: {e}"
                )

        return result

    async def distribute_investment_bonuses(
        self, investor_id: int, amount: Decimal
    ) -> InvestmentResult:
        """
        Create an investment and distribute its upline bonuses.

        Args:
            investor_id: Investing participant
            amount: Invested principal (>= MIN_INVESTMENT_AMOUNT)

        Returns:
            InvestmentResult
        """
        return await self.investment_distributor.distribute(investor_id, amount)

    async def settle_pending_bonuses(self) -> SettlementResult:
        """Release due monthly investment bonuses."""
        return await self.pending_bonus_settlement.settle()

    async def settle_monthly_roi(self) -> SettlementResult:
        """Pay monthly ROI on active investments."""
        return await self.roi_settlement.settle()

    async def check_and_award_rewards(
        self, participant: Participant | int
    ) -> list[str]:
        """
        Award milestones reached by a participant.

        Args:
            participant: Participant or its ID

        Returns:
            Names awarded by this call
        """
        participant_id = (
            participant.id if isinstance(participant, Participant) else participant
        )
        return await self.reward_evaluator.check_and_award(participant_id)
