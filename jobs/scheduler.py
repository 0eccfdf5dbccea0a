"""
Settlement scheduler.

APScheduler cron triggers that enqueue the settlement actors. Actors run in
dramatiq workers:

    dramatiq jobs.worker
    python -m jobs.scheduler
"""

import asyncio

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from jobs.tasks import (
    reset_daily_pair_counts,
    settle_monthly_roi,
    settle_pending_bonuses,
)
from payout_engine.config.logging import setup_logging
from payout_engine.config.settings import settings


def create_scheduler() -> AsyncIOScheduler:
    """
    Create scheduler with all settlement jobs registered.

    Returns:
        AsyncIOScheduler (not started)
    """
    scheduler = AsyncIOScheduler(
        timezone="UTC",
        job_defaults={
            "coalesce": True,  # Combine missed runs into one
            "max_instances": 1,  # Only one instance of each job at a time
            "misfire_grace_time": 300,
        },
    )

    scheduler.add_job(
        settle_pending_bonuses.send,
        trigger=CronTrigger(
            day=settings.settlement_day, hour=settings.settlement_hour, minute=0
        ),
        id="settle_pending_bonuses",
        name="Pending investment bonus release",
        replace_existing=True,
    )
    scheduler.add_job(
        settle_monthly_roi.send,
        trigger=CronTrigger(
            day=settings.settlement_day, hour=settings.settlement_hour, minute=30
        ),
        id="settle_monthly_roi",
        name="Monthly investment ROI",
        replace_existing=True,
    )
    scheduler.add_job(
        reset_daily_pair_counts.send,
        trigger=CronTrigger(hour=settings.daily_reset_hour, minute=5),
        id="reset_daily_pair_counts",
        name="Daily pair counter reset",
        replace_existing=True,
    )

    for job in scheduler.get_jobs():
        logger.info(f"Job registered: {job.name} ({job.trigger})")

    return scheduler


async def main() -> None:
    """Run the scheduler until cancelled."""
    setup_logging("scheduler")

    scheduler = create_scheduler()
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")

    try:
        await asyncio.Event().wait()
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


if __name__ == "__main__":
    asyncio.run(main())
