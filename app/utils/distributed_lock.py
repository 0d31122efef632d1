"""
Distributed lock on Redis.

Keeps recurring jobs single-writer across worker processes.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from loguru import logger
from redis.asyncio import Redis
from redis.exceptions import LockError

from app.config.constants import DISTRIBUTED_LOCK_TIMEOUT


class LockNotAcquiredError(Exception):
    """Raised when another holder owns the lock."""

    pass


class DistributedLock:
    """
    Non-blocking Redis lock.

    Without a Redis client the lock is a no-op, which is only
    acceptable for single-process deployments and tests.
    """

    def __init__(self, redis_client: Redis | None = None) -> None:
        """
        Initialize lock.

        Args:
            redis_client: Redis client (optional)
        """
        self.redis_client = redis_client

    @asynccontextmanager
    async def lock(
        self, name: str, timeout: int = DISTRIBUTED_LOCK_TIMEOUT
    ) -> AsyncIterator[None]:
        """
        Hold the lock for the duration of the block.

        Args:
            name: Lock name
            timeout: Auto-release after this many seconds

        Raises:
            LockNotAcquiredError: If the lock is held elsewhere
        """
        if self.redis_client is None:
            logger.warning(f"Redis unavailable, running '{name}' without lock")
            yield
            return

        redis_lock = self.redis_client.lock(
            f"lock:{name}", timeout=timeout, blocking=False
        )
        acquired = await redis_lock.acquire()
        if not acquired:
            raise LockNotAcquiredError(f"Lock '{name}' is held by another worker")

        try:
            yield
        finally:
            try:
                await redis_lock.release()
            except LockError as e:
                # Expired while running; the next holder is already in.
                logger.warning(f"Lock '{name}' release failed: {e}")
