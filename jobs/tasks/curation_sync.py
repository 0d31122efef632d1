"""
Curation sync task.

Mirrors Curation events up to the safe height and reconciles on-chain
donations. Runs every 30 minutes; a Redis lock keeps a single writer
of the sync cursor across workers.
"""

import dramatiq
from loguru import logger

from app.config.constants import (
    CURATION_SYNC_LOCK_NAME,
    CURATION_SYNC_LOCK_TIMEOUT,
    DRAMATIQ_TIME_LIMIT_LONG,
)
from app.services.blockchain import get_curation_client
from app.services.curation_sync import CurationSyncService
from app.utils.distributed_lock import DistributedLock, LockNotAcquiredError
from app.utils.redis_utils import get_redis_client
from jobs.async_runner import create_local_session, run_async
from jobs.broker import broker  # noqa: F401


@dramatiq.actor(max_retries=0, time_limit=DRAMATIQ_TIME_LIMIT_LONG)
def sync_curation_events() -> None:
    """
    Run one curation sync pass.

    Not retried by the broker: a failed pass leaves the cursor
    untouched and the next scheduled run repeats the batch.
    """
    logger.info("[Curation Sync] Starting sync...")

    try:
        processed = run_async(_sync_curation_events_async())
    except LockNotAcquiredError as e:
        logger.info(f"[Curation Sync] Skipped: {e}")
        return
    except Exception as e:
        logger.exception(f"[Curation Sync] Sync failed: {e}")
        raise

    logger.info(f"[Curation Sync] Sync complete: {processed} events")


async def _sync_curation_events_async() -> int:
    """Async implementation of the curation sync."""
    redis_client = await get_redis_client()
    lock = DistributedLock(redis_client=redis_client)

    try:
        async with lock.lock(CURATION_SYNC_LOCK_NAME, timeout=CURATION_SYNC_LOCK_TIMEOUT):
            async with create_local_session() as session:
                service = CurationSyncService(session, get_curation_client())
                return await service.sync()
    finally:
        await redis_client.aclose()
