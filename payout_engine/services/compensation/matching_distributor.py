"""
Matching (pair) income distributor.

A registration adds one child to one leg of its sponsor. When that raises
``min(left, right)`` above the sponsor's consumed ``pairs`` a new pair is
formed and one pair unit is paid to the sponsor. The payout then cascades
one level at a time up the chain while each level is credited; pair
formation is not re-evaluated above the sponsor. Each participant is paid
at most ``MAX_PAIRS_PER_DAY`` units per UTC day; a unit above the cap goes
to the fallback participant and stops the cascade.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from payout_engine.config.business_constants import (
    MAX_PAIRS_PER_DAY,
    pair_unit_amount,
)
from payout_engine.models.history_entry import HistoryType
from payout_engine.models.participant import Participant
from payout_engine.repositories.daily_pair_count_repository import (
    DailyPairCountRepository,
)
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.services.compensation.eligibility import (
    EligibilityEvaluator,
)
from payout_engine.services.compensation.gated_credit import GatedCreditBatch

MATCHING_BUCKETS = ("matching_income",)


@dataclass
class MatchingOutcome:
    """Result of matching evaluation for one registration."""

    pair_formed: bool = False
    new_pair_count: int = 0
    credited_ids: list[int] = field(default_factory=list)
    redirected_count: int = 0


class MatchingDistributor:
    """Pair detection and cascading matching credits."""

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize distributor.

        Args:
            session: Async database session
        """
        self.session = session
        self.participant_repo = ParticipantRepository(session)
        self.daily_repo = DailyPairCountRepository(session)

    async def distribute(
        self,
        chain: list[Participant],
        eligibility: EligibilityEvaluator,
        batch: GatedCreditBatch,
        today: date,
    ) -> MatchingOutcome:
        """
        Evaluate pair formation at the sponsor and cascade the bonus.

        Counter changes (``pairs``, daily counts) are written immediately;
        income credits are queued on the batch. Both belong to the caller's
        transaction.

        Args:
            chain: Upline of the registering participant (locked rows)
            eligibility: Evaluator for the same event
            batch: Credit batch of the event
            today: UTC day used for the daily cap

        Returns:
            MatchingOutcome with the credited participant IDs
        """
        outcome = MatchingOutcome()
        if not chain:
            return outcome

        unit = pair_unit_amount()
        sponsor = chain[0]

        if not await eligibility.is_eligible(sponsor.id, 1):
            batch.credit(
                sponsor.id, 1, unit, MATCHING_BUCKETS, HistoryType.MATCHING,
                "Matching income", eligible=False,
            )
            outcome.redirected_count += 1
            return outcome

        left, right = await self.participant_repo.count_legs(sponsor.id)
        new_pair_count = min(left, right)
        if new_pair_count <= sponsor.pairs:
            return outcome

        outcome.pair_formed = True
        outcome.new_pair_count = new_pair_count

        cascade = await self._award_unit(sponsor, 1, unit, batch, today, outcome)
        # The pair is consumed even when its unit was redirected by the cap
        await self.participant_repo.set_pairs(sponsor.id, new_pair_count)

        level = 2
        while cascade and level <= len(chain):
            ancestor = chain[level - 1]
            if not await eligibility.is_eligible(ancestor.id, level):
                batch.credit(
                    ancestor.id, level, unit, MATCHING_BUCKETS,
                    HistoryType.MATCHING, f"Level {level} matching income",
                    eligible=False,
                )
                outcome.redirected_count += 1
                break
            cascade = await self._award_unit(
                ancestor, level, unit, batch, today, outcome
            )
            level += 1

        logger.info(
            "Matching income evaluated",
            extra={
                "sponsor_id": sponsor.id,
                "new_pair_count": new_pair_count,
                "credited": len(outcome.credited_ids),
                "redirected": outcome.redirected_count,
            },
        )
        return outcome

    async def _award_unit(
        self,
        participant: Participant,
        level: int,
        unit: Decimal,
        batch: GatedCreditBatch,
        today: date,
        outcome: MatchingOutcome,
    ) -> bool:
        """Pay one unit within the daily cap; returns True if credited."""
        paid_today = await self.daily_repo.get_count(participant.id, today)
        to_award = min(1, MAX_PAIRS_PER_DAY - paid_today)

        if to_award <= 0:
            batch.credit(
                participant.id, level, unit, MATCHING_BUCKETS,
                HistoryType.MATCHING, f"Level {level} matching income",
                eligible=False, reason="daily pair cap reached",
            )
            outcome.redirected_count += 1
            return False

        batch.credit(
            participant.id, level, unit * to_award, MATCHING_BUCKETS,
            HistoryType.MATCHING, f"Level {level} matching income",
            eligible=True,
        )
        batch.add(participant.id, "total_pairs", to_award)
        await self.daily_repo.increment(participant.id, today, to_award)
        outcome.credited_ids.append(participant.id)
        return True
