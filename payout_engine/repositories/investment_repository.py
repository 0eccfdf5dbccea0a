"""
Investment repository.

Data access layer for Investment model.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.investment import Investment
from payout_engine.repositories.base import BaseRepository


class InvestmentRepository(BaseRepository[Investment]):
    """Investment repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize investment repository."""
        super().__init__(Investment, session)

    async def get_by_participant(
        self, participant_id: int, active_only: bool = False
    ) -> list[Investment]:
        """
        Get investments of a participant.

        Args:
            participant_id: Owner ID
            active_only: Only investments still earning ROI

        Returns:
            Investments ordered by start date
        """
        stmt = select(Investment).where(
            Investment.participant_id == participant_id
        )
        if active_only:
            stmt = stmt.where(Investment.active.is_(True))
        stmt = stmt.order_by(Investment.start_date, Investment.id)

        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_ids_due_for_roi(self, period: str) -> list[int]:
        """
        Get active investments not yet paid for a period.

        Args:
            period: Settlement period key (YYYY-MM)

        Returns:
            Investment IDs in ascending order
        """
        stmt = (
            select(Investment.id)
            .where(
                Investment.active.is_(True),
                or_(
                    Investment.last_roi_period.is_(None),
                    Investment.last_roi_period != period,
                ),
            )
            .order_by(Investment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
