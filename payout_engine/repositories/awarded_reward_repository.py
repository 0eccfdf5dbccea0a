"""
AwardedReward repository.

Data access layer for milestone awards.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.models.awarded_reward import AwardedReward
from payout_engine.repositories.base import BaseRepository


class AwardedRewardRepository(BaseRepository[AwardedReward]):
    """AwardedReward repository with specific queries."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize awarded reward repository."""
        super().__init__(AwardedReward, session)

    async def get_names(self, participant_id: int) -> set[str]:
        """Get milestone names already awarded to a participant."""
        stmt = select(AwardedReward.name).where(
            AwardedReward.participant_id == participant_id
        )
        result = await self.session.execute(stmt)
        return set(result.scalars().all())
