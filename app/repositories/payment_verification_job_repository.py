"""
Payment verification job repository.

Data access layer for persisted pay-to retry state.
"""

from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import PaymentVerificationStatus
from app.models.payment_verification_job import PaymentVerificationJob
from app.repositories.base import BaseRepository


class PaymentVerificationJobRepository(BaseRepository[PaymentVerificationJob]):
    """Repository for payment verification jobs."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(PaymentVerificationJob, session)

    async def get_by_transaction_id(
        self, transaction_id: int, for_update: bool = False
    ) -> PaymentVerificationJob | None:
        """
        Get job of a ledger transaction.

        Args:
            transaction_id: Ledger transaction ID
            for_update: Lock the row

        Returns:
            Job or None
        """
        stmt = select(PaymentVerificationJob).where(
            PaymentVerificationJob.transaction_id == transaction_id
        )
        if for_update:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_if_missing(
        self,
        transaction_id: int,
        max_attempts: int,
        next_attempt_at: datetime,
    ) -> PaymentVerificationJob:
        """
        Create the job unless one already exists for the transaction.

        Args:
            transaction_id: Ledger transaction ID
            max_attempts: Attempt budget
            next_attempt_at: First eligible attempt time

        Returns:
            Existing or created job
        """
        stmt = (
            insert(PaymentVerificationJob)
            .values(
                transaction_id=transaction_id,
                status=PaymentVerificationStatus.PENDING,
                attempt_count=0,
                max_attempts=max_attempts,
                next_attempt_at=next_attempt_at,
            )
            .on_conflict_do_nothing(
                index_elements=[PaymentVerificationJob.transaction_id]
            )
        )
        await self.session.execute(stmt)
        await self.session.flush()

        job = await self.get_by_transaction_id(transaction_id)
        if job is None:
            raise RuntimeError(
                f"Failed to create verification job for transaction {transaction_id}"
            )
        return job

    async def get_due_jobs(
        self, now: datetime | None = None, limit: int = 100
    ) -> list[PaymentVerificationJob]:
        """
        Get pending jobs whose next attempt time has passed.

        Args:
            now: Reference time (default: current UTC time)
            limit: Max results

        Returns:
            Jobs ordered by next_attempt_at
        """
        now = now or datetime.now(UTC)
        stmt = (
            select(PaymentVerificationJob)
            .where(
                PaymentVerificationJob.status == PaymentVerificationStatus.PENDING,
                PaymentVerificationJob.next_attempt_at <= now,
            )
            .order_by(PaymentVerificationJob.next_attempt_at.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
