"""
History repository.

Data access layer for HistoryEntry model.
"""

from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.history_entry import HistoryEntry, HistoryStatus
from payout_engine.repositories.base import BaseRepository


class HistoryRepository(BaseRepository[HistoryEntry]):
    """History repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize history repository."""
        super().__init__(HistoryEntry, session)

    async def sum_completed(
        self, participant_id: int, types: list[str] | None = None
    ) -> Decimal:
        """
        Sum completed entry amounts of a participant.

        Args:
            participant_id: Participant ID
            types: Optional type filter

        Returns:
            Total amount (0 when no entries)
        """
        stmt = select(func.coalesce(func.sum(HistoryEntry.amount), 0)).where(
            HistoryEntry.participant_id == participant_id,
            HistoryEntry.status == HistoryStatus.COMPLETED,
        )
        if types:
            stmt = stmt.where(HistoryEntry.type.in_(types))

        result = await self.session.execute(stmt)
        return Decimal(str(result.scalar() or 0))
