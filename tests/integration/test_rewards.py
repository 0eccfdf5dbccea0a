"""Integration tests for milestone rewards."""

from decimal import Decimal

import pytest
from sqlalchemy import update

from payout_engine.models import Participant
from payout_engine.repositories.awarded_reward_repository import (
    AwardedRewardRepository,
)
from payout_engine.repositories.history_repository import HistoryRepository
from payout_engine.utils.exceptions import NotFoundError


class TestCheckAndAwardRewards:
    """Test milestone evaluation."""

    @pytest.mark.asyncio
    async def test_supervisor_has_no_cash(self, make_participant, engine, fresh):
        participant = await make_participant(total_pairs=25)

        awarded = await engine.check_and_award_rewards(participant)

        participant = await fresh(participant)
        assert awarded == ["Supervisor"]
        assert participant.reward_income == Decimal("0")
        assert participant.wallet_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_no_duplicate_awards(self, make_participant, engine):
        participant = await make_participant(total_pairs=25)

        first = await engine.check_and_award_rewards(participant.id)
        second = await engine.check_and_award_rewards(participant.id)

        assert first == ["Supervisor"]
        assert second == []

    @pytest.mark.asyncio
    async def test_skipped_levels_caught_up(
        self, session, make_participant, engine, fresh
    ):
        """Reaching 175 pairs awards the tour and the Manager cash reward."""
        participant = await make_participant(total_pairs=25)
        await engine.check_and_award_rewards(participant.id)

        await session.execute(
            update(Participant)
            .where(Participant.id == participant.id)
            .values(total_pairs=175)
        )
        await session.commit()

        awarded = await engine.check_and_award_rewards(participant.id)

        participant = await fresh(participant)
        assert awarded == ["Senior Supervisor", "Manager"]
        assert participant.reward_income == Decimal("40000")
        assert participant.wallet_balance == Decimal("40000")

        rewards = await AwardedRewardRepository(session).find_by(
            participant_id=participant.id
        )
        prizes = {r.name: r.prize for r in rewards}
        amounts = {r.name: r.amount for r in rewards}
        assert prizes["Senior Supervisor"] == "Goa Tour"
        assert amounts["Manager"] == Decimal("40000")
        assert amounts["Supervisor"] is None

        entries = await HistoryRepository(session).find_by(
            participant_id=participant.id, type="reward"
        )
        assert len(entries) == 1
        assert entries[0].amount == Decimal("40000")

    @pytest.mark.asyncio
    async def test_below_first_threshold(self, make_participant, engine):
        participant = await make_participant(total_pairs=24)

        assert await engine.check_and_award_rewards(participant) == []

    @pytest.mark.asyncio
    async def test_unknown_participant(self, engine):
        with pytest.raises(NotFoundError):
            await engine.check_and_award_rewards(9999)
