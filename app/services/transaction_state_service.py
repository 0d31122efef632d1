"""
Transaction state service.

Single choke point for settling on-chain donations. Every change of a
ledger transaction's terminal state, together with its blockchain
transaction record, is written here in one database transaction.

State machine (ledger / blockchain):
    pending   -> succeeded / succeeded   receipt matches the donation
    pending   -> failed    / reverted    receipt status 0
    pending   -> canceled  / succeeded   logs do not match, or superseded
    succeeded -> pending   / pending     reorg, receipt disappeared
    succeeded -> failed    / reverted    reorg, now reverted
    failed    -> succeeded / succeeded   reorg, now executed
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.blockchain_transaction import BlockchainTransaction
from app.models.enums import (
    BlockchainTransactionState,
    TransactionRemark,
    TransactionState,
)
from app.models.transaction import Transaction
from app.repositories.blockchain_transaction_repository import (
    BlockchainTransactionRepository,
)
from app.repositories.transaction_repository import TransactionRepository
from app.services.base_service import BaseService, transaction


class TransactionStateService(BaseService):
    """Atomic updates of (ledger transaction, blockchain transaction) pairs."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize service."""
        super().__init__(session)
        self.tx_repo = TransactionRepository(session)
        self.blockchain_tx_repo = BlockchainTransactionRepository(session)

    async def _lock_pair(
        self, transaction_id: int, blockchain_transaction_id: int
    ) -> tuple[Transaction, BlockchainTransaction]:
        # Ledger row first, then blockchain row: one lock order for all writers.
        tx = await self.tx_repo.get_by_id(transaction_id, for_update=True)
        if tx is None:
            raise ValueError(f"Transaction {transaction_id} not found")

        blockchain_tx = await self.blockchain_tx_repo.get_by_id(
            blockchain_transaction_id, for_update=True
        )
        if blockchain_tx is None:
            raise ValueError(
                f"Blockchain transaction {blockchain_transaction_id} not found"
            )
        return tx, blockchain_tx

    @transaction
    async def transition(
        self,
        transaction_id: int,
        state: TransactionState,
        blockchain_transaction_id: int,
        blockchain_state: BlockchainTransactionState,
        remark: TransactionRemark | None = None,
    ) -> bool:
        """
        Move both rows to the given states atomically.

        Re-asserting the current states is a no-op, so a concurrent
        writer that lost the race leaves the pair untouched.

        Args:
            transaction_id: Ledger transaction ID
            state: New ledger state
            blockchain_transaction_id: Blockchain transaction ID
            blockchain_state: New blockchain state
            remark: Optional reason code for the ledger row

        Returns:
            True if anything changed
        """
        tx, blockchain_tx = await self._lock_pair(
            transaction_id, blockchain_transaction_id
        )

        # A remark only describes a canceled row
        if remark is None and state == TransactionState.CANCELED:
            remark = tx.remark

        unchanged = (
            tx.state == state
            and blockchain_tx.state == blockchain_state
            and tx.remark == remark
        )
        if unchanged:
            self.logger.debug(
                f"[State] Transaction {transaction_id} already {state}/{blockchain_state}"
            )
            return False

        previous = f"{tx.state}/{blockchain_tx.state}"
        tx.state = state
        tx.remark = remark
        blockchain_tx.state = blockchain_state
        await self.session.flush()

        self.logger.info(
            f"[State] Transaction {transaction_id}: {previous} -> "
            f"{state}/{blockchain_state}"
            + (f" ({remark})" if remark else "")
        )
        return True

    async def succeed_both(
        self, transaction_id: int, blockchain_transaction_id: int
    ) -> bool:
        """Mark donation settled."""
        return await self.transition(
            transaction_id,
            TransactionState.SUCCEEDED,
            blockchain_transaction_id,
            BlockchainTransactionState.SUCCEEDED,
        )

    async def fail_both(
        self, transaction_id: int, blockchain_transaction_id: int
    ) -> bool:
        """Mark donation failed because the chain reverted it."""
        return await self.transition(
            transaction_id,
            TransactionState.FAILED,
            blockchain_transaction_id,
            BlockchainTransactionState.REVERTED,
        )

    async def reset_both(
        self, transaction_id: int, blockchain_transaction_id: int
    ) -> bool:
        """Return donation to pending after its block was retracted."""
        return await self.transition(
            transaction_id,
            TransactionState.PENDING,
            blockchain_transaction_id,
            BlockchainTransactionState.PENDING,
        )

    async def cancel_invalid(
        self, transaction_id: int, blockchain_transaction_id: int
    ) -> bool:
        """Cancel a donation whose mined transaction does not match it."""
        return await self.transition(
            transaction_id,
            TransactionState.CANCELED,
            blockchain_transaction_id,
            BlockchainTransactionState.SUCCEEDED,
            remark=TransactionRemark.INVALID,
        )

    @transaction
    async def settle_new_donation(
        self,
        blockchain_transaction_id: int,
        *,
        amount: Decimal,
        sender_id: int,
        recipient_id: int,
        target_id: int,
    ) -> Transaction | None:
        """
        Create a settled donation for an unlinked on-chain transaction.

        Args:
            blockchain_transaction_id: Blockchain transaction to link
            amount: Amount in USDT
            sender_id: Curator user ID
            recipient_id: Creator user ID
            target_id: Article ID

        Returns:
            Created ledger transaction, or None if already linked
        """
        blockchain_tx = await self.blockchain_tx_repo.get_by_id(
            blockchain_transaction_id, for_update=True
        )
        if blockchain_tx is None:
            raise ValueError(
                f"Blockchain transaction {blockchain_transaction_id} not found"
            )
        linked = (
            await self.tx_repo.get_by_id(blockchain_tx.transaction_id)
            if blockchain_tx.transaction_id is not None
            else None
        )
        if linked is not None:
            self.logger.warning(
                f"[State] Blockchain tx {blockchain_tx.id} already linked to "
                f"{blockchain_tx.transaction_id}, no donation created"
            )
            return None

        tx = await self.tx_repo.create_donation(
            amount=amount,
            state=TransactionState.SUCCEEDED,
            provider_tx_id=blockchain_tx.id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            target_id=target_id,
        )
        blockchain_tx.transaction_id = tx.id
        blockchain_tx.state = BlockchainTransactionState.SUCCEEDED
        await self.session.flush()

        self.logger.info(
            f"[State] Created settled donation {tx.id} for blockchain tx "
            f"{blockchain_tx.id}"
        )
        return tx

    @transaction
    async def supersede_donation(
        self,
        stale_transaction_id: int,
        blockchain_transaction_id: int,
        *,
        amount: Decimal,
        sender_id: int,
        recipient_id: int,
        target_id: int,
    ) -> Transaction | None:
        """
        Replace a linked donation that does not match the chain.

        Cancels the stale row (remark: invalid), creates a settled
        replacement pointing back at it and repoints the link, all in
        one database transaction.

        Args:
            stale_transaction_id: Currently linked ledger transaction
            blockchain_transaction_id: Blockchain transaction to repoint
            amount: Decoded amount in USDT
            sender_id: Decoded curator user ID
            recipient_id: Decoded creator user ID
            target_id: Decoded article ID

        Returns:
            Replacement ledger transaction, or None if the link moved
        """
        stale, blockchain_tx = await self._lock_pair(
            stale_transaction_id, blockchain_transaction_id
        )
        if blockchain_tx.transaction_id != stale.id:
            self.logger.warning(
                f"[State] Blockchain tx {blockchain_tx.id} no longer linked to "
                f"{stale.id} (now {blockchain_tx.transaction_id}), not superseding"
            )
            return None

        stale.state = TransactionState.CANCELED
        stale.remark = TransactionRemark.INVALID

        replacement = await self.tx_repo.create_donation(
            amount=amount,
            state=TransactionState.SUCCEEDED,
            provider_tx_id=blockchain_tx.id,
            sender_id=sender_id,
            recipient_id=recipient_id,
            target_id=target_id,
            supersedes_id=stale.id,
        )
        blockchain_tx.transaction_id = replacement.id
        blockchain_tx.state = BlockchainTransactionState.SUCCEEDED
        await self.session.flush()

        self.logger.warning(
            f"[State] Donation {stale.id} superseded by {replacement.id} "
            f"for blockchain tx {blockchain_tx.id}"
        )
        return replacement
