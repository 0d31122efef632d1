"""
Blockchain sync record model.

Cursor of the curation event synchronization.
"""

from datetime import UTC, datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base


class BlockchainSyncRecord(Base):
    """
    Last fully processed block per (chain_id, contract_address).

    Used to:
    - Resume sync after restart
    - Bound the next log query to blocks strictly after the cursor
    """

    __tablename__ = "blockchain_sync_record"
    __table_args__ = (
        UniqueConstraint(
            "chain_id", "contract_address",
            name="uq_blockchain_sync_record_chain_contract",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    chain_id: Mapped[int] = mapped_column(Integer, nullable=False)
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False)

    block_number: Mapped[int] = mapped_column(BigInteger, nullable=False)

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
