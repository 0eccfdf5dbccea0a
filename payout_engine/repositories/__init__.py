"""
Repositories.

Data access layer over the SQLAlchemy models.
"""

from payout_engine.repositories.awarded_reward_repository import (
    AwardedRewardRepository,
)
from payout_engine.repositories.base import BaseRepository
from payout_engine.repositories.daily_pair_count_repository import (
    DailyPairCountRepository,
)
from payout_engine.repositories.history_repository import HistoryRepository
from payout_engine.repositories.investment_repository import (
    InvestmentRepository,
)
from payout_engine.repositories.participant_repository import (
    ParticipantRepository,
)
from payout_engine.repositories.payment_slip_repository import (
    PaymentSlipRepository,
)
from payout_engine.repositories.pending_bonus_repository import (
    PendingBonusRepository,
)


__all__ = [
    "AwardedRewardRepository",
    "BaseRepository",
    "DailyPairCountRepository",
    "HistoryRepository",
    "InvestmentRepository",
    "ParticipantRepository",
    "PaymentSlipRepository",
    "PendingBonusRepository",
]
