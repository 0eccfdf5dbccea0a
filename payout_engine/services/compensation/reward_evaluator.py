"""
Reward milestone evaluator.

Awards every milestone whose pair threshold a participant's lifetime
``total_pairs`` has reached and that it has not been awarded yet.
"""

from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import REWARD_MILESTONES
from payout_engine.models.history_entry import HistoryType
from payout_engine.repositories.awarded_reward_repository import (
    AwardedRewardRepository,
)
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.services.history_service import HistoryService
from payout_engine.utils.datetime_utils import Clock
from payout_engine.utils.db_decorators import with_rollback_on_error
from payout_engine.utils.exceptions import NotFoundError


class RewardEvaluator:
    """Milestone awards based on lifetime pairs."""

    def __init__(self, session: AsyncSession, clock: Clock) -> None:
        """Initialize evaluator."""
        self.session = session
        self.clock = clock
        self.participant_repo = ParticipantRepository(session)
        self.reward_repo = AwardedRewardRepository(session)
        self.history_service = HistoryService(session)

    @with_rollback_on_error
    async def check_and_award(self, participant_id: int) -> list[str]:
        """
        Award reached milestones.

        All milestones are checked on every call so a skipped level is
        caught up; already awarded names are never awarded again.

        Args:
            participant_id: Participant to evaluate

        Returns:
            Names awarded by this call, in threshold order

        Raises:
            NotFoundError: Participant not found
        """
        participant = await self.participant_repo.get_fresh(
            participant_id, for_update=True
        )
        if participant is None:
            raise NotFoundError(f"Participant {participant_id} not found")

        total_pairs = participant.total_pairs
        awarded = await self.reward_repo.get_names(participant_id)
        now = self.clock.now()

        new_awards: list[str] = []
        cash_total = Decimal("0")

        for milestone in REWARD_MILESTONES:
            if total_pairs < milestone.pairs or milestone.name in awarded:
                continue

            await self.reward_repo.create(
                participant_id=participant_id,
                name=milestone.name,
                pairs_threshold=milestone.pairs,
                amount=milestone.reward if milestone.is_cash else None,
                prize=milestone.reward if isinstance(milestone.reward, str) else None,
                awarded_at=now,
            )
            new_awards.append(milestone.name)

            if milestone.is_cash:
                cash_total += milestone.reward
                await self.history_service.record(
                    participant_id,
                    HistoryType.REWARD,
                    milestone.reward,
                    remarks=f"{milestone.name} reward for {milestone.pairs} pairs",
                    created_at=now,
                )

        if not new_awards:
            return []

        if cash_total > 0:
            await self.participant_repo.increment_many(
                {
                    participant_id: {
                        "reward_income": cash_total,
                        "wallet_balance": cash_total,
                    }
                }
            )
        await self.session.commit()

        logger.info(
            "Milestone rewards awarded",
            extra={
                "participant_id": participant_id,
                "total_pairs": total_pairs,
                "rewards": new_awards,
                "cash_total": str(cash_total),
            },
        )
        return new_awards
