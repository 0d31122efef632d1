"""
Transaction repository.

Data access layer for ledger transactions.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.enums import (
    PaymentCurrency,
    PaymentProvider,
    TransactionPurpose,
    TransactionState,
    TransactionTargetType,
)
from app.models.transaction import Transaction
from app.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for ledger transactions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(Transaction, session)

    async def create_donation(
        self,
        *,
        amount: Decimal,
        state: TransactionState,
        provider_tx_id: int,
        sender_id: int,
        recipient_id: int,
        target_id: int,
        supersedes_id: int | None = None,
    ) -> Transaction:
        """
        Create an on-chain USDT donation row.

        Args:
            amount: Amount in USDT
            state: Initial state
            provider_tx_id: blockchain_transaction.id settling the donation
            sender_id: Curator user ID
            recipient_id: Creator user ID
            target_id: Article ID
            supersedes_id: Ledger row replaced by this one

        Returns:
            Created transaction
        """
        return await self.create(
            amount=amount,
            state=state,
            purpose=TransactionPurpose.DONATION,
            currency=PaymentCurrency.USDT,
            provider=PaymentProvider.BLOCKCHAIN,
            provider_tx_id=str(provider_tx_id),
            sender_id=sender_id,
            recipient_id=recipient_id,
            target_id=target_id,
            target_type=TransactionTargetType.ARTICLE,
            supersedes_id=supersedes_id,
        )
