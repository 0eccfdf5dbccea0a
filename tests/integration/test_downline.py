"""Integration tests for downline traversal."""

import pytest

from payout_engine.config.business_constants import MAX_UPLINE_DEPTH
from payout_engine.models import LegPosition
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)

LEFT = LegPosition.LEFT
RIGHT = LegPosition.RIGHT


@pytest.fixture
def downline_tree(make_participant):
    """
    root -> (left, right); left -> child; child -> grandchild.

    Returns:
        async callable() -> dict of participants by name
    """

    async def _build():
        root = await make_participant()
        left = await make_participant(root, LEFT)
        right = await make_participant(root, RIGHT)
        child = await make_participant(left, LEFT)
        grandchild = await make_participant(child, RIGHT)
        return {
            "root": root,
            "left": left,
            "right": right,
            "child": child,
            "grandchild": grandchild,
        }

    return _build


class TestDownline:
    """Direct and indirect referrals."""

    @pytest.mark.asyncio
    async def test_direct_referrals(self, session, downline_tree):
        tree = await downline_tree()

        directs = await ParticipantRepository(session).get_direct_referrals(
            tree["root"].id
        )

        assert [p.id for p in directs] == [tree["left"].id, tree["right"].id]

    @pytest.mark.asyncio
    async def test_full_downline_ordered_by_level(self, session, downline_tree):
        tree = await downline_tree()

        ids = await ParticipantRepository(session).get_downline_ids(
            tree["root"].id, MAX_UPLINE_DEPTH
        )

        assert ids == [
            tree["left"].id,
            tree["right"].id,
            tree["child"].id,
            tree["grandchild"].id,
        ]

    @pytest.mark.asyncio
    async def test_indirect_referrals_skip_directs(self, session, downline_tree):
        tree = await downline_tree()

        ids = await ParticipantRepository(session).get_downline_ids(
            tree["root"].id, MAX_UPLINE_DEPTH, min_level=2
        )

        assert ids == [tree["child"].id, tree["grandchild"].id]

    @pytest.mark.asyncio
    async def test_depth_limit(self, session, downline_tree):
        tree = await downline_tree()

        ids = await ParticipantRepository(session).get_downline_ids(
            tree["root"].id, 2
        )

        assert tree["grandchild"].id not in ids
        assert len(ids) == 3

    @pytest.mark.asyncio
    async def test_leaf_has_no_downline(self, session, downline_tree):
        tree = await downline_tree()

        ids = await ParticipantRepository(session).get_downline_ids(
            tree["grandchild"].id, MAX_UPLINE_DEPTH
        )

        assert ids == []
