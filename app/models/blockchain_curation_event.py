"""
Blockchain curation event model.

Local mirror of ``Curation`` events emitted by the curation contract.
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base
from app.models.types import BASE_UNIT_STRING_LENGTH


class BlockchainCurationEvent(Base):
    """
    Mirrored curation event.

    One row per emitting transaction; reprocessing the same hash
    (e.g. a reorg replay) upserts the row instead of duplicating it.
    """

    __tablename__ = "blockchain_curation_event"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    blockchain_transaction_id: Mapped[int] = mapped_column(
        ForeignKey("blockchain_transaction.id"),
        nullable=False,
        unique=True,
    )

    # Addresses (normalized to lowercase)
    contract_address: Mapped[str] = mapped_column(String(42), nullable=False)
    curator_address: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True
    )
    creator_address: Mapped[str] = mapped_column(
        String(42), nullable=False, index=True
    )
    token_address: Mapped[str] = mapped_column(String(42), nullable=False)

    # Raw amount in token base units
    amount: Mapped[str] = mapped_column(
        String(BASE_UNIT_STRING_LENGTH), nullable=False
    )
    uri: Mapped[str] = mapped_column(Text, nullable=False)

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
