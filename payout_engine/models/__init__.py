"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from payout_engine.models.awarded_reward import AwardedReward
from payout_engine.models.base import Base
from payout_engine.models.daily_pair_count import DailyPairCount
from payout_engine.models.history_entry import (
    HistoryEntry,
    HistoryStatus,
    HistoryType,
)
from payout_engine.models.investment import Investment
from payout_engine.models.participant import (
    INCOME_BUCKETS,
    LegPosition,
    Participant,
)
from payout_engine.models.payment_slip import PaymentSlip, PaymentSlipStatus
from payout_engine.models.pending_bonus import PendingBonus


__all__ = [
    "AwardedReward",
    "Base",
    "DailyPairCount",
    "HistoryEntry",
    "HistoryStatus",
    "HistoryType",
    "INCOME_BUCKETS",
    "Investment",
    "LegPosition",
    "Participant",
    "PaymentSlip",
    "PaymentSlipStatus",
    "PendingBonus",
]
