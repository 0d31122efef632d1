"""
Payment verification job model.

Persisted retry state of a pay-to verification, so retry semantics
do not depend on the message broker.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import PaymentVerificationStatus


class PaymentVerificationJob(Base):
    """
    One verification job per pending on-chain donation.

    Timeline:
    - enqueue: next_attempt_at = now + delay
    - not mined: attempt_count += 1, next_attempt_at = now + backoff
    - terminal outcome: status = completed
    - bad job data: status = discarded
    - attempt budget spent: status = exhausted
    """

    __tablename__ = "payment_verification_job"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    transaction_id: Mapped[int] = mapped_column(
        ForeignKey("transaction.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentVerificationStatus.PENDING,
        index=True,
    )

    attempt_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False)
    next_attempt_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )

    last_error: Mapped[str | None] = mapped_column(Text, nullable=True)
    outcome: Mapped[str | None] = mapped_column(String(20), nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    @property
    def is_pending(self) -> bool:
        """Check if the job still expects attempts."""
        return self.status == PaymentVerificationStatus.PENDING

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<PaymentVerificationJob(id={self.id}, transaction_id={self.transaction_id}, "
            f"status={self.status}, attempts={self.attempt_count}/{self.max_attempts})>"
        )
