"""
Payment approval service.

Approves uploaded payment slips and triggers the matching distribution:
the first approved slip of a participant must be the registration payment,
every later slip is an investment.
"""

from dataclasses import dataclass

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import (
    MIN_INVESTMENT_AMOUNT,
    REGISTRATION_AMOUNT,
)
from payout_engine.models.payment_slip import PaymentSlipStatus
from payout_engine.repositories.payment_slip_repository import (
    PaymentSlipRepository,
)
from payout_engine.services.compensation.investment_distributor import (
    InvestmentResult,
)
from payout_engine.services.compensation.registration_distributor import (
    RegistrationResult,
)
from payout_engine.services.compensation_engine import CompensationEngine
from payout_engine.utils.db_decorators import with_rollback_on_error
from payout_engine.utils.exceptions import (
    AlreadyProcessedError,
    InvalidAmountError,
    NotFoundError,
)


class ApprovalKind:
    """What an approved slip paid for."""

    REGISTRATION = "registration"
    INVESTMENT = "investment"


@dataclass
class ApprovalResult:
    """Result of a slip approval."""

    slip_id: int
    kind: str
    registration: RegistrationResult | None = None
    investment: InvestmentResult | None = None


class PaymentApprovalService:
    """Slip approval that commits together with its distribution."""

    def __init__(
        self,
        session: AsyncSession,
        engine: CompensationEngine | None = None,
    ) -> None:
        """
        Initialize service.

        Args:
            session: Async database session
            engine: Compensation engine bound to the same session
        """
        self.session = session
        self.engine = engine or CompensationEngine(session)
        self.slip_repo = PaymentSlipRepository(session)

    @with_rollback_on_error
    async def approve_slip(self, slip_id: int) -> ApprovalResult:
        """
        Approve a slip and distribute its income.

        The approval is flushed, not committed: the distribution commits
        both, or a failure rolls both back.

        Args:
            slip_id: Payment slip ID

        Returns:
            ApprovalResult with the distribution result

        Raises:
            NotFoundError: Slip not found
            AlreadyProcessedError: Slip already approved
            InvalidAmountError: Slip amount does not fit the participant's
                payment sequence
        """
        slip = await self.slip_repo.get_fresh(slip_id, for_update=True)
        if slip is None:
            raise NotFoundError(f"Payment slip {slip_id} not found")
        if slip.status == PaymentSlipStatus.APPROVED:
            raise AlreadyProcessedError(f"Payment slip {slip_id} already approved")

        participant_id = slip.participant_id
        amount = slip.amount
        registered = await self.slip_repo.exists(
            participant_id=participant_id,
            status=PaymentSlipStatus.APPROVED,
            amount=REGISTRATION_AMOUNT,
        )

        if not registered and amount != REGISTRATION_AMOUNT:
            raise InvalidAmountError(
                f"The first payment slip must be for {REGISTRATION_AMOUNT}"
            )
        if registered and amount < MIN_INVESTMENT_AMOUNT:
            raise InvalidAmountError(
                f"Minimum investment amount is {MIN_INVESTMENT_AMOUNT}"
            )

        slip.status = PaymentSlipStatus.APPROVED
        slip.approved_at = self.engine.clock.now()
        await self.session.flush()

        logger.info(
            "Payment slip approved",
            extra={
                "slip_id": slip_id,
                "participant_id": participant_id,
                "amount": str(amount),
            },
        )

        if not registered:
            registration = await self.engine.distribute_registration_income(
                participant_id
            )
            await self.session.commit()
            return ApprovalResult(
                slip_id=slip_id,
                kind=ApprovalKind.REGISTRATION,
                registration=registration,
            )

        investment = await self.engine.distribute_investment_bonuses(
            participant_id, amount
        )
        await self.session.commit()
        return ApprovalResult(
            slip_id=slip_id,
            kind=ApprovalKind.INVESTMENT,
            investment=investment,
        )
