"""
Job scheduler.

Enqueues the recurring actors and serves health checks:
- curation sync every 30 minutes (first run at startup)
- overdue pay-to verification sweep every minute
"""

import asyncio
import signal
from datetime import UTC, datetime

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from loguru import logger

from app.config.constants import PAY_TO_SWEEP_INTERVAL_SECONDS
from app.config.settings import settings
from app.utils.logging import setup_logging
from jobs.health import set_scheduler, start_health_server, stop_health_server
from jobs.tasks import process_due_payment_verifications, sync_curation_events


def create_scheduler() -> AsyncIOScheduler:
    """
    Create scheduler with the recurring jobs registered.

    Returns:
        Not yet started AsyncIOScheduler
    """
    scheduler = AsyncIOScheduler(timezone=UTC)

    scheduler.add_job(
        sync_curation_events.send,
        IntervalTrigger(minutes=settings.curation_sync_interval_minutes),
        id="curation_sync",
        name="Curation event sync",
        next_run_time=datetime.now(UTC),
        max_instances=1,
        coalesce=True,
    )
    scheduler.add_job(
        process_due_payment_verifications.send,
        IntervalTrigger(seconds=PAY_TO_SWEEP_INTERVAL_SECONDS),
        id="pay_to_sweep",
        name="Overdue pay-to verification sweep",
        max_instances=1,
        coalesce=True,
    )
    return scheduler


async def main() -> None:
    """Run scheduler and health server until SIGINT/SIGTERM."""
    setup_logging("scheduler")

    scheduler = create_scheduler()
    scheduler.start()
    set_scheduler(scheduler)
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")

    runner, _ = await start_health_server(port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler.shutdown(wait=False)
        await stop_health_server(runner)


if __name__ == "__main__":
    asyncio.run(main())
