"""
Dramatiq worker entry module.

    dramatiq jobs.worker
"""

from payout_engine.config.logging import setup_logging

setup_logging("worker")

from jobs.tasks import (  # noqa: E402
    reset_daily_pair_counts,
    settle_monthly_roi,
    settle_pending_bonuses,
)


__all__ = [
    "reset_daily_pair_counts",
    "settle_monthly_roi",
    "settle_pending_bonuses",
]
