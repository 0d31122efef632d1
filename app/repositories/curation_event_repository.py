"""
Curation event repository.

Data access layer for mirrored curation events.
"""

from typing import Any

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.blockchain_curation_event import BlockchainCurationEvent
from app.repositories.base import BaseRepository

UPSERT_COLUMNS = (
    "contract_address",
    "curator_address",
    "creator_address",
    "token_address",
    "amount",
    "uri",
)


class CurationEventRepository(BaseRepository[BlockchainCurationEvent]):
    """Repository for mirrored curation events."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository."""
        super().__init__(BlockchainCurationEvent, session)

    async def upsert_batch(self, items: list[dict[str, Any]]) -> int:
        """
        Insert events, updating rows whose tx is already mirrored.

        Postgres refuses to touch the same row twice in one
        ON CONFLICT statement, so items are deduplicated by
        blockchain_transaction_id first (last one wins).

        Args:
            items: Event data dicts keyed like the model columns

        Returns:
            Number of rows written
        """
        if not items:
            return 0

        deduped = {
            item["blockchain_transaction_id"]: item for item in items
        }
        rows = list(deduped.values())

        stmt = insert(BlockchainCurationEvent).values(rows)
        stmt = stmt.on_conflict_do_update(
            index_elements=[BlockchainCurationEvent.blockchain_transaction_id],
            set_={column: stmt.excluded[column] for column in UPSERT_COLUMNS},
        )
        await self.session.execute(stmt)
        await self.session.flush()
        return len(rows)
