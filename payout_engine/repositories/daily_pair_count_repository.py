"""
DailyPairCount repository.

Data access layer for per-day matching pair counters.
"""

from datetime import date

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.daily_pair_count import DailyPairCount
from payout_engine.repositories.base import BaseRepository


class DailyPairCountRepository(BaseRepository[DailyPairCount]):
    """DailyPairCount repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize daily pair count repository."""
        super().__init__(DailyPairCount, session)

    async def get_count(self, participant_id: int, day: date) -> int:
        """Get pairs paid to a participant on a day."""
        stmt = select(DailyPairCount.count).where(
            DailyPairCount.participant_id == participant_id,
            DailyPairCount.day == day,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none() or 0

    async def increment(
        self, participant_id: int, day: date, by: int = 1
    ) -> None:
        """
        Add pairs to a participant's counter for a day.

        Callers hold the participant row lock, so the read-then-write
        cannot race with another event for the same participant.
        """
        stmt = (
            update(DailyPairCount)
            .where(
                DailyPairCount.participant_id == participant_id,
                DailyPairCount.day == day,
            )
            .values(count=DailyPairCount.count + by)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            await self.create(participant_id=participant_id, day=day, count=by)

    async def purge_before(self, day: date) -> int:
        """
        Delete counters older than a day.

        Args:
            day: First day to keep

        Returns:
            Number of deleted rows
        """
        stmt = (
            delete(DailyPairCount)
            .where(DailyPairCount.day < day)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
