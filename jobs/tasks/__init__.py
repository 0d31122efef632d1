"""
Dramatiq actors.

Importing this package registers every actor with the broker.
"""

from jobs.tasks.curation_sync import sync_curation_events
from jobs.tasks.pay_to import (
    enqueue_payment_verification,
    process_due_payment_verifications,
    verify_payment,
)

__all__ = [
    "enqueue_payment_verification",
    "process_due_payment_verifications",
    "sync_curation_events",
    "verify_payment",
]
