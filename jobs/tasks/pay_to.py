"""
Pay-to verification tasks.

A pending on-chain donation is verified once its transaction is
mined. Retry state lives on the payment_verification_job row; the
broker only carries delayed wake-ups, and a sweep re-dispatches jobs
whose wake-up message was lost.
"""

import math
from datetime import UTC, datetime

import dramatiq
from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.constants import DRAMATIQ_TIME_LIMIT_STANDARD
from app.models.payment_verification_job import PaymentVerificationJob
from app.services.blockchain import get_curation_client
from app.services.bot_provider import close_bot, create_bot
from app.services.notification import NotificationService
from app.services.pay_to import PaymentVerificationRunner, PayToVerifier
from app.utils.redis_utils import get_redis_client
from jobs.async_runner import create_local_session, run_async
from jobs.broker import broker  # noqa: F401


def _delay_ms(job: PaymentVerificationJob) -> int:
    """Milliseconds until the job's next attempt."""
    remaining = job.next_attempt_at - datetime.now(UTC)
    return max(0, math.ceil(remaining.total_seconds() * 1000))


async def enqueue_payment_verification(
    session: AsyncSession, transaction_id: int
) -> PaymentVerificationJob:
    """
    Schedule verification of a pending on-chain donation.

    Persists the job first, then sends the delayed wake-up message.
    Calling it twice for one transaction keeps a single job.

    Args:
        session: Database session
        transaction_id: Ledger transaction ID

    Returns:
        Verification job
    """
    runner = PaymentVerificationRunner(
        session, PayToVerifier(session, get_curation_client())
    )
    job = await runner.schedule(transaction_id)

    verify_payment.send_with_options(args=(transaction_id,), delay=_delay_ms(job))
    return job


@dramatiq.actor(max_retries=0, time_limit=DRAMATIQ_TIME_LIMIT_STANDARD)
def verify_payment(transaction_id: int) -> None:
    """
    Run one verification attempt for a ledger transaction.

    Args:
        transaction_id: Ledger transaction ID
    """
    logger.info(f"[PayTo] Verifying transaction {transaction_id}...")

    try:
        job = run_async(_verify_payment_async(transaction_id))
    except Exception as e:
        logger.exception(f"[PayTo] Verification of transaction {transaction_id} crashed: {e}")
        raise

    # Only the delivery that recorded an attempt re-arms the wake-up
    if job is not None and job.is_pending:
        verify_payment.send_with_options(args=(transaction_id,), delay=_delay_ms(job))


async def _verify_payment_async(transaction_id: int) -> PaymentVerificationJob | None:
    """Async implementation of one verification attempt."""
    bot = create_bot()
    redis_client = await get_redis_client()

    try:
        async with create_local_session() as session:
            verifier = PayToVerifier(
                session,
                get_curation_client(),
                notification_service=NotificationService(bot),
                redis_client=redis_client,
            )
            runner = PaymentVerificationRunner(session, verifier)
            return await runner.run(transaction_id)
    finally:
        await redis_client.aclose()
        await close_bot(bot)


@dramatiq.actor(max_retries=0, time_limit=DRAMATIQ_TIME_LIMIT_STANDARD)
def process_due_payment_verifications() -> None:
    """Re-dispatch pending verification jobs that are overdue."""
    try:
        transaction_ids = run_async(_get_due_transaction_ids_async())
    except Exception as e:
        logger.exception(f"[PayTo] Sweep failed: {e}")
        raise

    for transaction_id in transaction_ids:
        verify_payment.send(transaction_id)

    if transaction_ids:
        logger.warning(
            f"[PayTo] Sweep re-dispatched {len(transaction_ids)} overdue verifications"
        )


async def _get_due_transaction_ids_async() -> list[int]:
    """Async implementation of the overdue job query."""
    async with create_local_session() as session:
        runner = PaymentVerificationRunner(
            session, PayToVerifier(session, get_curation_client())
        )
        return await runner.get_due_transaction_ids()
