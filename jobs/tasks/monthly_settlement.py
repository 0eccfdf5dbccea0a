"""
Monthly settlement tasks.

Release of due deferred investment bonuses and the monthly investment ROI
payout. Each run is single-flight through a distributed lock and commits
per group or investment, so a failed run resumes cleanly next time.
"""

import dramatiq
from loguru import logger

from jobs.async_runner import create_local_session, run_async
from payout_engine.config.operational_constants import (
    DRAMATIQ_TIME_LIMIT_LONG,
    LOCK_TIMEOUT_EXTENDED,
)
from payout_engine.config.settings import settings
from payout_engine.services.compensation_engine import CompensationEngine
from payout_engine.services.settlement import SettlementResult
from payout_engine.utils.distributed_lock import DistributedLock
from payout_engine.utils.redis_utils import get_redis_client

PENDING_BONUS_LOCK_KEY = "monthly_settlement:pending_bonuses"
ROI_LOCK_KEY = "monthly_settlement:roi"


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_LONG)
def settle_pending_bonuses() -> None:
    """Release one due monthly bonus per pending group."""
    if settings.emergency_stop_bonus_release:
        logger.warning("Pending bonus release skipped: emergency stop enabled")
        return

    logger.info("Starting pending bonus settlement...")
    try:
        result = run_async(_settle_async(PENDING_BONUS_LOCK_KEY))
    except Exception as e:
        logger.exception(f"Pending bonus settlement failed: {e}")
        raise

    if result is not None:
        logger.info(
            f"Pending bonus settlement complete: {result.processed_count} "
            f"released, {result.failed_count} failed"
        )


@dramatiq.actor(max_retries=3, time_limit=DRAMATIQ_TIME_LIMIT_LONG)
def settle_monthly_roi() -> None:
    """Pay the monthly ROI on active investments."""
    if settings.emergency_stop_roi:
        logger.warning("ROI settlement skipped: emergency stop enabled")
        return

    logger.info("Starting monthly ROI settlement...")
    try:
        result = run_async(_settle_async(ROI_LOCK_KEY))
    except Exception as e:
        logger.exception(f"Monthly ROI settlement failed: {e}")
        raise

    if result is not None:
        logger.info(
            f"Monthly ROI settlement complete: {result.processed_count} "
            f"paid, {result.failed_count} failed"
        )


async def _settle_async(lock_key: str) -> SettlementResult | None:
    """
    Run one settlement under its lock.

    Returns:
        SettlementResult, or None when another run holds the lock
    """
    redis_client = None
    try:
        redis_client = await get_redis_client()
    except Exception as e:
        logger.warning(f"Failed to create Redis client for lock: {e}")

    lock = DistributedLock(redis_client=redis_client)

    try:
        async with lock.lock(
            lock_key, timeout=LOCK_TIMEOUT_EXTENDED, blocking=False
        ) as acquired:
            if not acquired:
                logger.warning(f"{lock_key} already running, skipping")
                return None

            async with create_local_session() as session:
                engine = CompensationEngine(session)
                if lock_key == ROI_LOCK_KEY:
                    return await engine.settle_monthly_roi()
                return await engine.settle_pending_bonuses()
    finally:
        if redis_client:
            await redis_client.aclose()
