"""
Blockchain transaction repository.

Data access layer for on-chain transaction records.
"""

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.blockchain_transaction import BlockchainTransaction
from app.models.enums import BlockchainTransactionState, Chain
from app.repositories.base import BaseRepository


def normalize_tx_hash(tx_hash: str) -> str:
    """Lower-case a tx hash and ensure the 0x prefix."""
    normalized = tx_hash.lower()
    if not normalized.startswith("0x"):
        normalized = f"0x{normalized}"
    return normalized


class BlockchainTransactionRepository(BaseRepository[BlockchainTransaction]):
    """Repository for blockchain transactions."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(BlockchainTransaction, session)

    async def get_by_tx_hash(
        self, chain: Chain, tx_hash: str
    ) -> BlockchainTransaction | None:
        """
        Get record by chain and hash.

        Args:
            chain: Chain name
            tx_hash: Transaction hash (with or without 0x prefix)

        Returns:
            Record or None
        """
        stmt = select(BlockchainTransaction).where(
            BlockchainTransaction.chain == chain,
            BlockchainTransaction.tx_hash == normalize_tx_hash(tx_hash),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_or_create(
        self,
        chain: Chain,
        tx_hash: str,
        state: BlockchainTransactionState = BlockchainTransactionState.PENDING,
        **extra: object,
    ) -> BlockchainTransaction:
        """
        Find a record by hash or insert it.

        Concurrent creators race on the (chain, tx_hash) unique
        constraint; the loser's insert is skipped and it reads the
        winner's row. ``state`` only applies to a newly created row.

        Args:
            chain: Chain name
            tx_hash: Transaction hash
            state: State for a newly created record
            **extra: Optional from_address/to_address/block_number

        Returns:
            Existing or created record
        """
        normalized = normalize_tx_hash(tx_hash)

        existing = await self.get_by_tx_hash(chain, normalized)
        if existing:
            return existing

        stmt = (
            insert(BlockchainTransaction)
            .values(chain=chain, tx_hash=normalized, state=state, **extra)
            .on_conflict_do_nothing(constraint="uq_blockchain_transaction_chain_tx_hash")
        )
        await self.session.execute(stmt)
        await self.session.flush()

        created = await self.get_by_tx_hash(chain, normalized)
        if created is None:
            raise RuntimeError(f"Failed to create blockchain transaction {normalized}")
        return created

    async def record_receipt(
        self,
        blockchain_tx: BlockchainTransaction,
        *,
        block_number: int | None,
        from_address: str | None,
        to_address: str | None,
    ) -> BlockchainTransaction:
        """Fill in receipt fields that are still unknown."""
        if blockchain_tx.block_number is None and block_number is not None:
            blockchain_tx.block_number = block_number
        if blockchain_tx.from_address is None and from_address:
            blockchain_tx.from_address = from_address.lower()
        if blockchain_tx.to_address is None and to_address:
            blockchain_tx.to_address = to_address.lower()
        await self.session.flush()
        return blockchain_tx
