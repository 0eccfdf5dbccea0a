"""
Tests for compensation business constants and amount helpers.

Tests cover:
- Floor rounding of computed amounts
- Level tables and direct referral requirements
- Reward milestone table
"""

from decimal import Decimal

import pytest

from payout_engine.config.business_constants import (
    DIRECT_REQS,
    INVESTMENT_MONTHLY_PERCENTS,
    INVESTMENT_ONE_TIME_PERCENTS,
    MAX_UPLINE_DEPTH,
    MONTHLY_ROI_PERCENT,
    REFERRAL_PERCENTS,
    REGISTRATION_AMOUNT,
    REWARD_MILESTONES,
    direct_requirement,
    floor_amount,
    pair_unit_amount,
)


class TestFloorAmount:
    """Test floor rounding."""

    def test_floor_drops_fraction(self):
        """Fractions are dropped, never rounded up."""
        assert floor_amount(Decimal("107.99")) == Decimal("107")

    def test_floor_whole_amount_unchanged(self):
        """Whole amounts pass through."""
        assert floor_amount(Decimal("360")) == Decimal("360")

    def test_floor_small_amount(self):
        """Amounts below one unit floor to zero."""
        assert floor_amount(Decimal("0.72")) == Decimal("0")

    def test_registration_level_amounts(self):
        """Registration split is 360 / 108 / 72."""
        amounts = [
            floor_amount(REGISTRATION_AMOUNT * REFERRAL_PERCENTS[level])
            for level in range(1, 4)
        ]

        assert amounts == [Decimal("360"), Decimal("108"), Decimal("72")]

    def test_investment_level_amounts(self):
        """10000 investment: one-time 300/200/100, monthly 40/12/8."""
        amount = Decimal("10000")
        monthly_roi = floor_amount(amount * MONTHLY_ROI_PERCENT)

        assert monthly_roi == Decimal("400")
        assert floor_amount(amount * INVESTMENT_ONE_TIME_PERCENTS[1]) == 300
        assert floor_amount(amount * INVESTMENT_ONE_TIME_PERCENTS[2]) == 200
        assert floor_amount(amount * INVESTMENT_ONE_TIME_PERCENTS[3]) == 100
        assert floor_amount(monthly_roi * INVESTMENT_MONTHLY_PERCENTS[1]) == 40
        assert floor_amount(monthly_roi * INVESTMENT_MONTHLY_PERCENTS[2]) == 12
        assert floor_amount(monthly_roi * INVESTMENT_MONTHLY_PERCENTS[3]) == 8


class TestLevelTables:
    """Test level-indexed tables."""

    def test_tables_cover_max_depth(self):
        """Every table has an entry for each level up to the max depth."""
        for table in (
            REFERRAL_PERCENTS,
            INVESTMENT_ONE_TIME_PERCENTS,
            INVESTMENT_MONTHLY_PERCENTS,
            DIRECT_REQS,
        ):
            assert len(table) == MAX_UPLINE_DEPTH + 1

    def test_pair_unit_amount(self):
        """One pair pays 10% of the registration amount."""
        assert pair_unit_amount() == Decimal("360")

    def test_direct_requirement_levels(self):
        """Level 1 is open, deeper levels need more direct referrals."""
        assert direct_requirement(1) == 0
        assert direct_requirement(2) == 2
        assert direct_requirement(3) == 3
        assert direct_requirement(10) == 6

    def test_direct_requirement_beyond_table(self):
        """Levels beyond the table reuse the last requirement."""
        assert direct_requirement(15) == 6

    def test_direct_requirement_invalid_level(self):
        """Level 0 is rejected."""
        with pytest.raises(ValueError):
            direct_requirement(0)


class TestRewardMilestones:
    """Test the milestone table."""

    def test_thresholds_ascending(self):
        """Milestones are evaluated in ascending threshold order."""
        thresholds = [m.pairs for m in REWARD_MILESTONES]

        assert thresholds == sorted(thresholds)
        assert len(set(m.name for m in REWARD_MILESTONES)) == len(REWARD_MILESTONES)

    def test_cash_and_prize_rewards(self):
        """Only numeric rewards are cash."""
        by_name = {m.name: m for m in REWARD_MILESTONES}

        assert by_name["Supervisor"].is_cash is False
        assert by_name["Senior Supervisor"].is_cash is False
        assert by_name["Senior Supervisor"].reward == "Goa Tour"
        assert by_name["Manager"].is_cash is True
        assert by_name["Manager"].reward == Decimal("40000")
        assert by_name["Universal King"].pairs == 444425
