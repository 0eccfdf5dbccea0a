"""
Daily pair counter reset task.

Matching caps are counted per UTC day, so old counters are never read by
the engine; this task deletes the ones past the retention window.
"""

from datetime import timedelta

import dramatiq
from loguru import logger

from jobs.async_runner import create_local_session, run_async
from payout_engine.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_MEDIUM,
    LOCK_TIMEOUT_MEDIUM,
)
from payout_engine.config.settings import settings
from payout_engine.repositories.daily_pair_count_repository import (
    DailyPairCountRepository,
)
from payout_engine.utils.datetime_utils import utc_now
from payout_engine.utils.distributed_lock import DistributedLock
from payout_engine.utils.redis_utils import get_redis_client


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_MEDIUM)
def reset_daily_pair_counts() -> None:
    """Delete daily pair counters older than the retention window."""
    logger.info("Starting daily pair counter reset...")
    try:
        purged = run_async(_reset_daily_pair_counts_async())
    except Exception as e:
        logger.exception(f"Daily pair counter reset failed: {e}")
        raise

    logger.info(f"Daily pair counter reset complete: {purged} rows deleted")


async def _reset_daily_pair_counts_async() -> int:
    """Async implementation of the reset."""
    redis_client = None
    try:
        redis_client = await get_redis_client()
    except Exception as e:
        logger.warning(f"Failed to create Redis client for lock: {e}")

    lock = DistributedLock(redis_client=redis_client)
    cutoff = utc_now().date() - timedelta(days=settings.daily_pair_retention_days)

    try:
        async with lock.lock(
            "daily_pair_reset", timeout=LOCK_TIMEOUT_MEDIUM, blocking=False
        ) as acquired:
            if not acquired:
                logger.warning("Daily pair counter reset already running, skipping")
                return 0

            async with create_local_session() as session:
                purged = await DailyPairCountRepository(session).purge_before(cutoff)
                await session.commit()
                return purged
    finally:
        if redis_client:
            await redis_client.aclose()
