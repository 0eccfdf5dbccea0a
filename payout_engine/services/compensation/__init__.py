"""
Compensation distribution.

Upline resolution, eligibility gating and the per-event distributors.
"""

from payout_engine.services.compensation.eligibility import (
    EligibilityEvaluator,
)
from payout_engine.services.compensation.gated_credit import GatedCreditBatch
from payout_engine.services.compensation.investment_distributor import (
    InvestmentDistributor,
    InvestmentResult,
)
from payout_engine.services.compensation.matching_distributor import (
    MatchingDistributor,
    MatchingOutcome,
)
from payout_engine.services.compensation.registration_distributor import (
    RegistrationDistributor,
    RegistrationResult,
)
from payout_engine.services.compensation.reward_evaluator import RewardEvaluator
from payout_engine.services.compensation.upline_resolver import UplineResolver


__all__ = [
    "EligibilityEvaluator",
    "GatedCreditBatch",
    "InvestmentDistributor",
    "InvestmentResult",
    "MatchingDistributor",
    "MatchingOutcome",
    "RegistrationDistributor",
    "RegistrationResult",
    "RewardEvaluator",
    "UplineResolver",
]
