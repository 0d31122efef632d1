"""
Ledger transaction model.

The platform's internal record of a monetary transfer, independent of
its settlement mechanism. For on-chain donations ``provider_tx_id``
points to the ``blockchain_transaction`` row carrying the tx hash.
"""

from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import (
    PaymentCurrency,
    PaymentProvider,
    TransactionPurpose,
    TransactionState,
    TransactionTargetType,
)
from app.models.types import MoneyType


class Transaction(Base):
    """
    Ledger transaction.

    Attributes:
        id: Primary key
        state: pending/succeeded/failed/canceled
        remark: Reason code (e.g. "invalid" when superseded)
        purpose: Transaction purpose (donation)
        currency: Ledger currency
        provider: Settlement provider ("blockchain" for on-chain)
        provider_tx_id: Settlement record id (blockchain_transaction.id)
        sender_id: Paying user (curator)
        recipient_id: Receiving user (creator)
        target_id: Donated article
        target_type: Entity type of the target
        amount: Human-readable amount in currency units
        supersedes_id: Ledger row this one replaced after a mismatch
    """

    __tablename__ = "transaction"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True
    )

    state: Mapped[str] = mapped_column(
        String(20), nullable=False, default=TransactionState.PENDING, index=True
    )
    remark: Mapped[str | None] = mapped_column(String(255), nullable=True)

    purpose: Mapped[str] = mapped_column(
        String(50), nullable=False, default=TransactionPurpose.DONATION
    )
    currency: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PaymentCurrency.USDT
    )
    provider: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentProvider.BLOCKCHAIN
    )
    provider_tx_id: Mapped[str | None] = mapped_column(
        String(255), nullable=True, index=True
    )

    sender_id: Mapped[int | None] = mapped_column(
        ForeignKey("user.id"), nullable=True, index=True
    )
    recipient_id: Mapped[int] = mapped_column(
        ForeignKey("user.id"), nullable=False, index=True
    )
    target_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    target_type: Mapped[str | None] = mapped_column(
        String(50), nullable=True, default=TransactionTargetType.ARTICLE
    )

    amount: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)

    # Audit pointer set on the replacement row of a superseded donation
    supersedes_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction.id"), nullable=True
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

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Transaction(id={self.id}, state={self.state}, "
            f"amount={self.amount} {self.currency})>"
        )
