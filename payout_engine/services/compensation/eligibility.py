"""
Eligibility evaluator.

An ancestor may earn level-scoped income at level L only if it has at least
``DIRECT_REQS[L]`` direct children. Children are counted from the tree, not
from the denormalised ``direct_referral_count``.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import direct_requirement
from payout_engine.models.participant import Participant
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)


def meets_requirement(direct_children: int, level: int) -> bool:
    """Check a child count against the level requirement."""
    return direct_children >= direct_requirement(level)


class EligibilityEvaluator:
    """
    Level eligibility for upline participants.

    Counts are cached per evaluator; create one per distribution event.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize evaluator."""
        self.participant_repo = ParticipantRepository(session)
        self._children: dict[int, int] = {}

    async def prefetch(self, chain: list[Participant]) -> None:
        """Count children of a whole chain with one grouped query."""
        missing = [p.id for p in chain if p.id not in self._children]
        if missing:
            self._children.update(
                await self.participant_repo.count_direct_children(missing)
            )

    async def direct_children(self, participant_id: int) -> int:
        """Get the direct child count of a participant."""
        if participant_id not in self._children:
            counts = await self.participant_repo.count_direct_children(
                [participant_id]
            )
            self._children[participant_id] = counts[participant_id]
        return self._children[participant_id]

    async def is_eligible(self, participant_id: int, level: int) -> bool:
        """
        Check whether a participant may earn at a level.

        Args:
            participant_id: Ancestor ID
            level: 1-based upline level

        Returns:
            True if the ancestor meets the level's direct referral requirement
        """
        return meets_requirement(await self.direct_children(participant_id), level)
