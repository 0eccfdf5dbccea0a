"""
Distributed lock.

Redis lock (``redis.asyncio`` ``Lock``) used to keep scheduled jobs
single-flight. Without a Redis client it degrades to a process-local
``asyncio.Lock`` per event loop.
"""

import asyncio
import weakref
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from redis.exceptions import RedisError

from payout_engine.config.operational_constants import BLOCKING_TIMEOUT_DEFAULT

# asyncio.Lock binds to the loop it is first awaited on; worker threads each
# run their own loop
_local_locks: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()


def _get_local_lock(key: str) -> asyncio.Lock:
    """Get the local lock for key on the running loop."""
    loop = asyncio.get_running_loop()
    locks = _local_locks.setdefault(loop, {})
    return locks.setdefault(key, asyncio.Lock())


class DistributedLock:
    """
    Named lock shared between workers.

    Example:
        lock = DistributedLock(redis_client=redis_client)
        async with lock.lock("monthly_settlement", timeout=300,
                             blocking=False) as acquired:
            if not acquired:
                return
            ...
    """

    def __init__(self, redis_client=None, prefix: str = "lock:") -> None:
        """
        Initialize lock.

        Args:
            redis_client: redis.asyncio client, or None for a local lock
            prefix: Key prefix for Redis keys
        """
        self.redis_client = redis_client
        self.prefix = prefix

    @asynccontextmanager
    async def lock(
        self,
        key: str,
        timeout: int = 60,
        blocking: bool = True,
        blocking_timeout: float | None = BLOCKING_TIMEOUT_DEFAULT,
    ) -> AsyncIterator[bool]:
        """
        Acquire the named lock for the duration of the block.

        Args:
            key: Lock name
            timeout: Seconds after which Redis expires the lock
            blocking: Wait for the lock instead of yielding False
            blocking_timeout: Max seconds to wait when blocking

        Yields:
            True if the lock is held, False if not acquired (non-blocking)

        Raises:
            TimeoutError: Blocking wait exceeded blocking_timeout
        """
        if self.redis_client is None:
            async with self._local_lock(key, blocking, blocking_timeout) as acquired:
                yield acquired
            return

        redis_key = f"{self.prefix}{key}"
        redis_lock = self.redis_client.lock(
            redis_key,
            timeout=timeout,
            blocking=blocking,
            blocking_timeout=blocking_timeout,
        )
        acquired = await redis_lock.acquire()
        if not acquired and blocking:
            raise TimeoutError(f"Could not acquire lock {redis_key}")
        if acquired:
            logger.debug(f"Acquired lock {redis_key}")

        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await redis_lock.release()
                except RedisError as e:
                    logger.warning(
                        f"Failed to release lock {redis_key}: {e}; "
                        f"it expires in {timeout}s"
                    )

    @asynccontextmanager
    async def _local_lock(
        self,
        key: str,
        blocking: bool,
        blocking_timeout: float | None,
    ) -> AsyncIterator[bool]:
        local = _get_local_lock(key)

        if not blocking and local.locked():
            yield False
            return

        try:
            await asyncio.wait_for(local.acquire(), timeout=blocking_timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"Could not acquire local lock {key}") from e

        try:
            yield True
        finally:
            local.release()
