"""
Dramatiq tasks.

The broker must be configured before any actor is declared.
"""

from jobs import broker  # noqa: F401
from jobs.tasks.daily_pair_reset import reset_daily_pair_counts
from jobs.tasks.monthly_settlement import (
    settle_monthly_roi,
    settle_pending_bonuses,
)


__all__ = [
    "reset_daily_pair_counts",
    "settle_monthly_roi",
    "settle_pending_bonuses",
]
