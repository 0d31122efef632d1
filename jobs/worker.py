"""
Dramatiq worker entry point.

Usage:
    dramatiq jobs.worker --processes 2 --threads 4
"""

from app.utils.logging import setup_logging
from jobs.broker import broker
from jobs.tasks import (
    process_due_payment_verifications,
    sync_curation_events,
    verify_payment,
)

setup_logging("worker")

__all__ = [
    "broker",
    "process_due_payment_verifications",
    "sync_curation_events",
    "verify_payment",
]
