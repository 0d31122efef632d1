"""
Sync record repository.

Data access layer for the curation sync cursor.
"""

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.blockchain_sync_record import BlockchainSyncRecord
from app.repositories.base import BaseRepository


class SyncRecordRepository(BaseRepository[BlockchainSyncRecord]):
    """Repository for blockchain sync cursors."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(BlockchainSyncRecord, session)

    async def get_block_number(
        self, chain_id: int, contract_address: str
    ) -> int | None:
        """
        Get the last processed block.

        Args:
            chain_id: Chain ID
            contract_address: Watched contract address

        Returns:
            Block number or None when no cursor exists yet
        """
        stmt = select(BlockchainSyncRecord.block_number).where(
            BlockchainSyncRecord.chain_id == chain_id,
            BlockchainSyncRecord.contract_address == contract_address.lower(),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_block_number(
        self, chain_id: int, contract_address: str, block_number: int
    ) -> None:
        """
        Write the cursor, never moving it backwards.

        Args:
            chain_id: Chain ID
            contract_address: Watched contract address
            block_number: Last fully processed block
        """
        stmt = insert(BlockchainSyncRecord).values(
            chain_id=chain_id,
            contract_address=contract_address.lower(),
            block_number=block_number,
        )
        stmt = stmt.on_conflict_do_update(
            constraint="uq_blockchain_sync_record_chain_contract",
            set_={"block_number": stmt.excluded.block_number},
            where=BlockchainSyncRecord.block_number < stmt.excluded.block_number,
        )
        await self.session.execute(stmt)
        await self.session.flush()
