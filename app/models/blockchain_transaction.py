"""
Blockchain transaction model.

Maps an on-chain transaction hash to at most one ledger transaction
and tracks its confirmation state.
"""

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.enums import BlockchainTransactionState


class BlockchainTransaction(Base):
    """
    On-chain transaction record.

    Created lazily the first time a hash is observed, either by the
    curation event sync or by pay-to verification. ``transaction_id``
    is repointed when a stale ledger row is superseded.
    """

    __tablename__ = "blockchain_transaction"
    __table_args__ = (
        UniqueConstraint("chain", "tx_hash", name="uq_blockchain_transaction_chain_tx_hash"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    chain: Mapped[str] = mapped_column(String(20), nullable=False)
    tx_hash: Mapped[str] = mapped_column(String(66), nullable=False, index=True)

    # Addresses (normalized to lowercase), known once mined
    from_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    to_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    block_number: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    state: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=BlockchainTransactionState.PENDING,
    )

    transaction_id: Mapped[int | None] = mapped_column(
        ForeignKey("transaction.id"), nullable=True, index=True
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
            f"<BlockchainTransaction(id={self.id}, tx_hash={self.tx_hash[:16]}..., "
            f"state={self.state}, transaction_id={self.transaction_id})>"
        )
