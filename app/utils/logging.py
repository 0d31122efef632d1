"""
Logging configuration.

Configures loguru sinks for workers and the scheduler.
"""

import sys

from loguru import logger

from app.config.settings import settings


def setup_logging(component: str) -> None:
    """
    Configure stderr and rotating file sinks.

    Args:
        component: Process name used for the log file (e.g. "worker")
    """
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level)
    logger.add(
        f"logs/{component}.log",
        rotation="1 day",
        retention="7 days",
        level=settings.log_level,
        encoding="utf-8",
    )
