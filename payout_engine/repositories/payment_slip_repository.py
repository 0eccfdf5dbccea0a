"""
PaymentSlip repository.

Data access layer for PaymentSlip model.
"""

from decimal import Decimal

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.payment_slip import PaymentSlip, PaymentSlipStatus
from payout_engine.repositories.base import BaseRepository


class PaymentSlipRepository(BaseRepository[PaymentSlip]):
    """PaymentSlip repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize payment slip repository."""
        super().__init__(PaymentSlip, session)

    async def get_approved_registration_slips(
        self, participant_id: int, amount: Decimal
    ) -> list[PaymentSlip]:
        """
        Get approved registration slips of a participant.

        Args:
            participant_id: Participant ID
            amount: Registration amount

        Returns:
            Slips in approval order
        """
        stmt = (
            select(PaymentSlip)
            .where(
                PaymentSlip.participant_id == participant_id,
                PaymentSlip.status == PaymentSlipStatus.APPROVED,
                PaymentSlip.amount == amount,
            )
            .order_by(PaymentSlip.approved_at, PaymentSlip.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_income_processed(self, slip_id: int) -> bool:
        """
        Set the income_processed flag once.

        Returns:
            True if this call set it
        """
        stmt = (
            update(PaymentSlip)
            .where(
                PaymentSlip.id == slip_id,
                PaymentSlip.income_processed.is_(False),
            )
            .values(income_processed=True)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1
