"""
Health check server for the job scheduler.

Endpoints:
- /health: scheduler state and next run of each recurring job
- /readiness: scheduler running and Redis broker reachable
- /liveness: process is alive
"""

import asyncio

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger
from redis.exceptions import RedisError

from app.utils.redis_utils import get_redis_client

# Scheduler reported by the health endpoints
_scheduler: AsyncIOScheduler | None = None


def set_scheduler(scheduler: AsyncIOScheduler) -> None:
    """
    Register the scheduler for health checks.

    Args:
        scheduler: Running AsyncIOScheduler
    """
    global _scheduler
    _scheduler = scheduler
    logger.info("Scheduler registered for health checks")


async def health_handler(request: web.Request) -> web.Response:
    """Report scheduler state and recurring jobs."""
    if _scheduler is None:
        return web.json_response(
            {"status": "unhealthy", "error": "Scheduler not initialized"},
            status=503,
        )

    jobs = [
        {
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
        }
        for job in _scheduler.get_jobs()
    ]
    running = _scheduler.running
    return web.json_response(
        {
            "status": "healthy" if running else "stopped",
            "scheduler_running": running,
            "jobs": jobs,
        },
        status=200 if running else 503,
    )


async def _redis_reachable() -> bool:
    redis_client = await get_redis_client()
    try:
        return bool(await asyncio.wait_for(redis_client.ping(), timeout=2))
    except (TimeoutError, OSError, RedisError) as e:
        logger.warning(f"Readiness: Redis ping failed: {e}")
        return False
    finally:
        await redis_client.aclose()


async def readiness_handler(request: web.Request) -> web.Response:
    """Ready when the scheduler runs and the broker accepts messages."""
    scheduler_running = _scheduler is not None and _scheduler.running
    broker_reachable = await _redis_reachable()
    ready = scheduler_running and broker_reachable

    return web.json_response(
        {
            "ready": ready,
            "scheduler_running": scheduler_running,
            "broker_reachable": broker_reachable,
        },
        status=200 if ready else 503,
    )


async def liveness_handler(request: web.Request) -> web.Response:
    """Process is alive."""
    return web.json_response({"alive": True})


def create_health_app() -> web.Application:
    """Build the health check application."""
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    host: str = "0.0.0.0",
    port: int = 8080,
) -> tuple[web.AppRunner, web.TCPSite]:
    """
    Start health check server.

    Args:
        host: Host to bind to
        port: Port to bind to

    Returns:
        Tuple of (AppRunner, TCPSite) for cleanup
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Health check server started on {host}:{port}")
    return runner, site


async def stop_health_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """
    Stop health check server.

    Args:
        runner: AppRunner to clean up
        timeout: Maximum time to wait in seconds
    """
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
        logger.info("Health check server stopped")
    except TimeoutError:
        logger.warning(f"Health check server cleanup timed out after {timeout}s")
