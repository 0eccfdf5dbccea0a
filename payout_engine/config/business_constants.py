"""
Business logic constants for the compensation engine.

Central location for payout percentages, eligibility gates and milestones.
Tables indexed by level are 1-based: index 0 is an unused placeholder so that
``REFERRAL_PERCENTS[level]`` reads naturally.
"""

from dataclasses import dataclass
from decimal import Decimal


# Registration
REGISTRATION_AMOUNT = Decimal("3600")

# Investments
MIN_INVESTMENT_AMOUNT = Decimal("10000")
MONTHLY_ROI_PERCENT = Decimal("0.04")  # 4% per month
INVESTMENT_LOCK_IN_MONTHS = 24
INVESTMENT_BONUS_MONTHS = 6

# Withdrawals (used by the lock-in status service)
MIN_WITHDRAWAL_AMOUNT = Decimal("100")

# Upline depth for every level-based distribution
MAX_UPLINE_DEPTH = 10

REFERRAL_PERCENTS = [
    Decimal("0"),
    Decimal("0.10"),
    Decimal("0.03"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
]

INVESTMENT_ONE_TIME_PERCENTS = [
    Decimal("0"),
    Decimal("0.03"),
    Decimal("0.02"),
    Decimal("0.01"),
    Decimal("0.01"),
    Decimal("0.01"),
    Decimal("0.01"),
    Decimal("0.01"),
    Decimal("0.01"),
    Decimal("0.01"),
    Decimal("0.01"),
]

INVESTMENT_MONTHLY_PERCENTS = [
    Decimal("0"),
    Decimal("0.10"),
    Decimal("0.03"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
    Decimal("0.02"),
]

# Minimum direct referrals an ancestor needs to earn at a given level
DIRECT_REQS = [0, 0, 2, 3, 4, 5, 5, 5, 6, 6, 6]

# Binary matching
MATCHING_PERCENT = Decimal("0.10")
MAX_PAIRS_PER_DAY = 60


@dataclass(frozen=True)
class RewardMilestone:
    """Lifetime pair milestone with its cash amount or physical prize."""

    name: str
    pairs: int
    reward: Decimal | str | None

    @property
    def is_cash(self) -> bool:
        """True when the reward is credited to the wallet."""
        return isinstance(self.reward, Decimal)


# Ascending pair-threshold order
REWARD_MILESTONES = (
    RewardMilestone("Supervisor", 25, None),
    RewardMilestone("Senior Supervisor", 75, "Goa Tour"),
    RewardMilestone("Manager", 175, Decimal("40000")),
    RewardMilestone("Executive Manager", 425, "Thailand Tour"),
    RewardMilestone("Eagle", 925, Decimal("180000")),
    RewardMilestone("Eagle Executive", 1925, Decimal("400000")),
    RewardMilestone("Silver", 4425, Decimal("800000")),
    RewardMilestone("Gold", 9425, Decimal("1500000")),
    RewardMilestone("Pearl", 19425, Decimal("3000000")),
    RewardMilestone("Diamond", 44425, Decimal("5000000")),
    RewardMilestone("Ambassador", 94425, Decimal("7500000")),
    RewardMilestone("King", 194425, Decimal("12500000")),
    RewardMilestone("Universal King", 444425, Decimal("22500000")),
)


def floor_amount(value: Decimal) -> Decimal:
    """
    Floor a computed amount to a whole currency unit.

    Args:
        value: Raw product of an amount and a percentage

    Returns:
        Largest whole amount not exceeding value
    """
    return Decimal(int(value // 1))


def pair_unit_amount() -> Decimal:
    """Matching bonus paid for one pair."""
    return floor_amount(REGISTRATION_AMOUNT * MATCHING_PERCENT)


def direct_requirement(level: int) -> int:
    """
    Get the direct referral requirement for a level.

    Levels beyond the table reuse its last (capped) value.
    """
    if level < 1:
        raise ValueError(f"Level must be >= 1, got {level}")
    return DIRECT_REQS[min(level, len(DIRECT_REQS) - 1)]
