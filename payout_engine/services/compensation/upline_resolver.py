"""
Upline resolver.

Ordered ancestor chain of a participant, loaded in two queries: one
recursive CTE for the IDs and one locking SELECT for the rows.
"""

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import MAX_UPLINE_DEPTH
from payout_engine.models.participant import Participant
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)


class UplineResolver:
    """Resolves and row-locks the upline chain."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize resolver."""
        self.session = session
        self.participant_repo = ParticipantRepository(session)

    async def resolve(
        self, participant_id: int, max_depth: int = MAX_UPLINE_DEPTH
    ) -> list[Participant]:
        """
        Get ancestors of a participant.

        Args:
            participant_id: Participant whose upline is resolved
            max_depth: Maximum number of ancestors

        Returns:
            Ancestors nearest first; ``chain[0]`` is the sponsor (level 1).
            The chain stops at the first missing sponsor or at max_depth.
        """
        ids = await self.participant_repo.get_upline_ids(participant_id, max_depth)
        rows = await self.participant_repo.get_many_for_update(ids)

        chain: list[Participant] = []
        for ancestor_id in ids:
            ancestor = rows.get(ancestor_id)
            if ancestor is None:
                break
            chain.append(ancestor)

        logger.debug(
            "Upline chain resolved",
            extra={
                "participant_id": participant_id,
                "depth": max_depth,
                "chain_length": len(chain),
            },
        )
        return chain
