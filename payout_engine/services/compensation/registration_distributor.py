"""
Registration income distributor.

Splits the fixed registration amount over up to ten upline levels and
evaluates matching income for the same event. Runs once per participant:
the first approved registration slip carries an ``income_processed`` flag
that is set in the distribution transaction.
"""

from dataclasses import dataclass, field

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import (
    REFERRAL_PERCENTS,
    REGISTRATION_AMOUNT,
    floor_amount,
)
from payout_engine.models.history_entry import HistoryType
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.repositories.payment_slip_repository import (
    PaymentSlipRepository,
)
from payout_engine.services.compensation.eligibility import (
    EligibilityEvaluator,
)
from payout_engine.services.compensation.gated_credit import GatedCreditBatch
from payout_engine.services.compensation.matching_distributor import (
    MatchingDistributor,
)
from payout_engine.services.compensation.upline_resolver import UplineResolver
from payout_engine.utils.datetime_utils import Clock
from payout_engine.utils.db_decorators import with_rollback_on_error
from payout_engine.utils.exceptions import NotFoundError

REFERRAL_BUCKETS = ("referral_income",)


@dataclass
class RegistrationResult:
    """Result of registration income distribution."""

    success: bool
    levels_credited: int = 0
    redirected_count: int = 0
    already_processed: bool = False
    message: str = ""
    matching_recipients: list[int] = field(default_factory=list)


class RegistrationDistributor:
    """Referral and matching income for an approved registration."""

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
            clock: Source of the event time
            fallback_participant_id: Receiver of redirected income
        """
        self.session = session
        self.clock = clock
        self.fallback_participant_id = fallback_participant_id
        self.participant_repo = ParticipantRepository(session)
        self.slip_repo = PaymentSlipRepository(session)
        self.upline_resolver = UplineResolver(session)
        self.matching_distributor = MatchingDistributor(session)

    @with_rollback_on_error
    async def distribute(self, participant_id: int) -> RegistrationResult:
        """
        Distribute registration income for a participant.

        Referral credits, matching credits and the slip flag commit in one
        transaction. Milestone rewards are evaluated by the caller after the
        commit, for ``matching_recipients``.

        Args:
            participant_id: Registering participant

        Returns:
            RegistrationResult; ``success`` is False when no unprocessed
            approved registration slip exists

        Raises:
            NotFoundError: Participant or fallback participant not found
            TransactionAbortedError: Database failure (rolled back)
        """
        participant = await self.participant_repo.get_by_id(participant_id)
        if participant is None:
            raise NotFoundError(f"Participant {participant_id} not found")

        slips = await self.slip_repo.get_approved_registration_slips(
            participant_id, REGISTRATION_AMOUNT
        )
        if not slips:
            return RegistrationResult(
                success=False, message="No approved registration payment"
            )
        if any(slip.income_processed for slip in slips):
            logger.info(
                "Registration income already processed",
                extra={"participant_id": participant_id},
            )
            return RegistrationResult(
                success=False,
                already_processed=True,
                message="Registration already processed",
            )
        slip_id = slips[0].id

        if not await self.participant_repo.exists(id=self.fallback_participant_id):
            raise NotFoundError(
                f"Fallback participant {self.fallback_participant_id} not found"
            )

        now = self.clock.now()
        chain = await self.upline_resolver.resolve(participant_id)
        eligibility = EligibilityEvaluator(self.session)
        await eligibility.prefetch(chain)
        batch = GatedCreditBatch(self.session, self.fallback_participant_id, now)

        for level, ancestor in enumerate(chain, start=1):
            amount = floor_amount(REGISTRATION_AMOUNT * REFERRAL_PERCENTS[level])
            eligible = await eligibility.is_eligible(ancestor.id, level)
            credited = batch.credit(
                ancestor.id,
                level,
                amount,
                REFERRAL_BUCKETS,
                HistoryType.REFERRAL,
                f"Level {level} referral income from participant {participant_id}",
                eligible,
            )
            if credited and level == 1:
                batch.add(ancestor.id, "direct_referral_count", 1)

        levels_credited = batch.credited_count
        referral_redirects = batch.redirected_count

        matching = await self.matching_distributor.distribute(
            chain, eligibility, batch, self.clock.today()
        )

        await batch.apply()
        await self.slip_repo.mark_income_processed(slip_id)
        await self.session.commit()

        logger.info(
            "Registration income processed",
            extra={
                "participant_id": participant_id,
                "chain_length": len(chain),
                "levels_credited": levels_credited,
                "redirected": referral_redirects + matching.redirected_count,
                "pair_formed": matching.pair_formed,
            },
        )

        return RegistrationResult(
            success=True,
            levels_credited=levels_credited,
            redirected_count=referral_redirects + matching.redirected_count,
            message="Registration income processed successfully",
            matching_recipients=matching.credited_ids,
        )
