"""
Pay-To Verification - Runner Module.

Module: runner.py
Records verification attempts on the persisted job row: completes,
discards, reschedules with backoff, or exhausts the job.
"""

from datetime import UTC, datetime, timedelta

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PaymentVerificationStatus
from app.models.payment_verification_job import PaymentVerificationJob
from app.repositories.payment_verification_job_repository import (
    PaymentVerificationJobRepository,
)
from app.services.base_service import BaseService, transaction
from app.utils.exceptions import is_permanent, is_retryable

from .constants import (
    ATTEMPT_DUE_TOLERANCE_SECONDS,
    MAX_ERROR_LENGTH,
    SWEEP_BATCH_LIMIT,
    SWEEP_GRACE_SECONDS,
    VerificationOutcome,
)
from .retry_policy import RetryPolicy
from .verifier import PayToVerifier


class PaymentVerificationRunner(BaseService):
    """
    Persisted retry loop around PayToVerifier.

    Only failed attempts are retried. Terminal outcomes complete the
    job, malformed data discards it.
    """

    def __init__(
        self,
        session: AsyncSession,
        verifier: PayToVerifier,
        policy: RetryPolicy | None = None,
    ) -> None:
        """
        Initialize runner.

        Args:
            session: Database session
            verifier: Verifier bound to the same session
            policy: Retry policy (default: from settings)
        """
        super().__init__(session)
        self.verifier = verifier
        self.policy = policy or RetryPolicy.from_settings()
        self.job_repo = PaymentVerificationJobRepository(session)

    @transaction
    async def schedule(self, transaction_id: int) -> PaymentVerificationJob:
        """
        Persist the verification job of a pending donation.

        Idempotent per transaction: an existing job is returned as is.

        Args:
            transaction_id: Ledger transaction ID

        Returns:
            Verification job
        """
        job = await self.job_repo.create_if_missing(
            transaction_id,
            max_attempts=self.policy.max_attempts,
            next_attempt_at=datetime.now(UTC) + self.policy.initial_delay,
        )
        logger.info(
            f"[PayTo] Verification of transaction {transaction_id} scheduled "
            f"for {job.next_attempt_at.isoformat()}"
        )
        return job

    async def run(self, transaction_id: int) -> PaymentVerificationJob | None:
        """
        Run one attempt and record its result.

        Deliveries arriving before the job's next attempt time, and
        deliveries racing one that already recorded the same attempt,
        leave the job untouched. A SUCCEEDED completion sends the
        settlement notices, exactly once per job.

        Args:
            transaction_id: Ledger transaction ID

        Returns:
            Job as recorded by this delivery, the finished job when it
            was already finished, or None when this delivery recorded
            nothing
        """
        job = await self.job_repo.get_by_transaction_id(transaction_id)
        if job is None:
            logger.warning(
                f"[PayTo] No verification job for transaction {transaction_id}"
            )
            return None

        if not job.is_pending:
            logger.debug(
                f"[PayTo] Verification of transaction {transaction_id} "
                f"already {job.status}"
            )
            return job

        if not self.is_due(job):
            logger.debug(
                f"[PayTo] Verification of transaction {transaction_id} not due "
                f"until {job.next_attempt_at.isoformat()}"
            )
            return None

        attempt = job.attempt_count
        try:
            outcome = await self.verifier.verify(transaction_id)
        except Exception as e:
            if is_permanent(e):
                return await self._discard(transaction_id, e)
            return await self._record_failure(transaction_id, attempt, e)

        job = await self._complete(transaction_id, outcome)
        if job is not None and outcome == VerificationOutcome.SUCCEEDED:
            await self.verifier.notify_settled(transaction_id)
        return job

    def is_due(
        self, job: PaymentVerificationJob, now: datetime | None = None
    ) -> bool:
        """Check whether the job's backoff has elapsed."""
        now = now or datetime.now(UTC)
        tolerance = timedelta(seconds=ATTEMPT_DUE_TOLERANCE_SECONDS)
        return now + tolerance >= job.next_attempt_at

    @transaction
    async def _complete(
        self, transaction_id: int, outcome: str
    ) -> PaymentVerificationJob | None:
        job = await self._lock_job(transaction_id)
        if not job.is_pending:
            logger.debug(
                f"[PayTo] Verification of transaction {transaction_id} "
                f"finished concurrently as {job.status}"
            )
            return None

        job.attempt_count += 1
        job.status = PaymentVerificationStatus.COMPLETED
        job.outcome = outcome
        job.completed_at = datetime.now(UTC)
        await self.session.flush()

        logger.info(
            f"[PayTo] Verification of transaction {transaction_id} completed: "
            f"{outcome} (attempt {job.attempt_count})"
        )
        return job

    @transaction
    async def _discard(
        self, transaction_id: int, error: Exception
    ) -> PaymentVerificationJob | None:
        job = await self._lock_job(transaction_id)
        if not job.is_pending:
            return None

        job.attempt_count += 1
        job.status = PaymentVerificationStatus.DISCARDED
        job.last_error = str(error)[:MAX_ERROR_LENGTH]
        job.completed_at = datetime.now(UTC)
        await self.session.flush()

        logger.error(
            f"[PayTo] Verification job of transaction {transaction_id} "
            f"discarded: {error}"
        )
        return job

    @transaction
    async def _record_failure(
        self, transaction_id: int, attempt: int, error: Exception
    ) -> PaymentVerificationJob | None:
        job = await self._lock_job(transaction_id)
        if not job.is_pending or job.attempt_count != attempt:
            logger.debug(
                f"[PayTo] Attempt {attempt + 1} for transaction {transaction_id} "
                f"already recorded by another delivery"
            )
            return None

        job.attempt_count += 1
        job.last_error = str(error)[:MAX_ERROR_LENGTH]

        if self.policy.should_retry(job.attempt_count):
            delay = self.policy.backoff(job.attempt_count)
            job.next_attempt_at = datetime.now(UTC) + delay
            log = logger.info if is_retryable(error) else logger.warning
            log(
                f"[PayTo] Attempt {job.attempt_count}/{job.max_attempts} for "
                f"transaction {transaction_id} failed ({error}), "
                f"retrying in {delay.total_seconds():.0f}s"
            )
        else:
            job.status = PaymentVerificationStatus.EXHAUSTED
            job.completed_at = datetime.now(UTC)
            logger.error(
                f"[PayTo] Verification of transaction {transaction_id} exhausted "
                f"after {job.attempt_count} attempts: {error}"
            )

        await self.session.flush()
        return job

    async def _lock_job(self, transaction_id: int) -> PaymentVerificationJob:
        job = await self.job_repo.get_by_transaction_id(
            transaction_id, for_update=True
        )
        if job is None:
            raise ValueError(
                f"Verification job of transaction {transaction_id} disappeared"
            )
        return job

    async def get_due_transaction_ids(
        self, now: datetime | None = None
    ) -> list[int]:
        """
        Get transactions whose pending job is overdue.

        Jobs are only considered overdue a grace period after their
        next attempt time, so delayed messages in flight run first.

        Args:
            now: Reference time (default: current UTC time)

        Returns:
            Ledger transaction IDs
        """
        now = now or datetime.now(UTC)
        jobs = await self.job_repo.get_due_jobs(
            now=now - timedelta(seconds=SWEEP_GRACE_SECONDS),
            limit=SWEEP_BATCH_LIMIT,
        )
        return [job.transaction_id for job in jobs]
