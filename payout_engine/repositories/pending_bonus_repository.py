"""
PendingBonus repository.

Data access layer for the deferred monthly bonus schedule.
"""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.pending_bonus import PendingBonus
from payout_engine.repositories.base import BaseRepository


class PendingBonusRepository(BaseRepository[PendingBonus]):
    """PendingBonus repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize pending bonus repository."""
        super().__init__(PendingBonus, session)

    async def get_owner_ids_with_unawarded(self) -> list[int]:
        """Get owners holding at least one unawarded entry."""
        stmt = (
            select(PendingBonus.owner_id)
            .where(PendingBonus.awarded.is_(False))
            .distinct()
            .order_by(PendingBonus.owner_id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_unawarded_for_owner(
        self, owner_id: int
    ) -> list[PendingBonus]:
        """
        Get an owner's unawarded entries.

        Args:
            owner_id: Ancestor ID

        Returns:
            Entries ordered by group then month
        """
        stmt = (
            select(PendingBonus)
            .where(
                PendingBonus.owner_id == owner_id,
                PendingBonus.awarded.is_(False),
            )
            .order_by(
                PendingBonus.investment_id,
                PendingBonus.created_at,
                PendingBonus.month,
                PendingBonus.id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_awarded(self, bonus_id: int, awarded_at: datetime) -> bool:
        """
        Flip an entry to awarded.

        Args:
            bonus_id: Entry ID
            awarded_at: Release time

        Returns:
            True if this call awarded it, False if it was already awarded
        """
        stmt = (
            update(PendingBonus)
            .where(PendingBonus.id == bonus_id, PendingBonus.awarded.is_(False))
            .values(awarded=True, awarded_at=awarded_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def mark_group_released(
        self, bonus_ids: list[int], period: str
    ) -> None:
        """
        Stamp the release period on the remaining entries of a group.

        Args:
            bonus_ids: Unawarded entries of the group
            period: Settlement period (``YYYY-MM``)
        """
        if not bonus_ids:
            return

        stmt = (
            update(PendingBonus)
            .where(PendingBonus.id.in_(bonus_ids))
            .values(last_release_period=period)
            .execution_options(synchronize_session=False)
        )
        await self.session.execute(stmt)

    async def purge_awarded(self, owner_id: int) -> int:
        """
        Delete an owner's awarded entries.

        Args:
            owner_id: Ancestor ID

        Returns:
            Number of deleted rows
        """
        stmt = (
            delete(PendingBonus)
            .where(
                PendingBonus.owner_id == owner_id,
                PendingBonus.awarded.is_(True),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount
