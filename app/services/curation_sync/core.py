"""
Curation Sync Core Service.

Main service class that combines event reconciliation and reorg
handling. Mirrors Curation events of the watched contract up to the
safe height, reconciles in-platform donations and advances the sync
cursor.
"""

from typing import Any

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.enums import Chain
from app.repositories.article_repository import ArticleRepository
from app.repositories.blockchain_transaction_repository import (
    BlockchainTransactionRepository,
)
from app.repositories.curation_event_repository import CurationEventRepository
from app.repositories.sync_record_repository import SyncRecordRepository
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService, transaction
from app.services.blockchain import CurationChainClient, CurationEvent
from app.services.transaction_state_service import TransactionStateService

from .reconciliation_mixin import ReconciliationMixin
from .reorg_mixin import ReorgMixin


class CurationSyncService(ReconciliationMixin, ReorgMixin, BaseService):
    """
    Curation event synchronizer.

    Two modes:
    - Catch-up: no cursor yet, the whole event history is fetched and
      everything up to the safe height is processed
    - Incremental: at most ``range_cap`` blocks after the cursor,
      clamped to the safe height

    Every write is idempotent per tx hash, so an aborted run is simply
    repeated by the next one from the unchanged cursor.
    """

    def __init__(
        self,
        session: AsyncSession,
        chain_client: CurationChainClient,
        *,
        chain_id: int | None = None,
        safe_confirmations: int | None = None,
        range_cap: int | None = None,
    ) -> None:
        """
        Initialize synchronizer.

        Args:
            session: Database session
            chain_client: Chain client for the curation contract
            chain_id: Chain ID (default: settings)
            safe_confirmations: Blocks behind the tip considered final
            range_cap: Max blocks per incremental run
        """
        super().__init__(session)
        self.chain_client = chain_client

        self.tx_repo = TransactionRepository(session)
        self.blockchain_tx_repo = BlockchainTransactionRepository(session)
        self.user_repo = UserRepository(session)
        self.article_repo = ArticleRepository(session)
        self.event_repo = CurationEventRepository(session)
        self.sync_record_repo = SyncRecordRepository(session)
        self.state_service = TransactionStateService(session)

        # Configuration
        self.chain = Chain.POLYGON
        self.chain_id = chain_id if chain_id is not None else settings.chain_id
        self.contract_address = chain_client.contract_address
        self.usdt_address = settings.usdt_contract_address
        self.usdt_decimals = settings.usdt_decimals

        self.safe_confirmations = (
            safe_confirmations
            if safe_confirmations is not None
            else settings.blockchain_safe_confirmations
        )
        self.range_cap = (
            range_cap if range_cap is not None else settings.curation_sync_range_cap
        )

    async def sync(self) -> int:
        """
        Run one synchronization pass.

        Returns:
            Number of events processed
        """
        height = await self.chain_client.current_height()
        safe_height = height - self.safe_confirmations
        if safe_height < 0:
            logger.info(
                f"[Curation Sync] Chain height {height} below "
                f"{self.safe_confirmations} confirmations, nothing to sync"
            )
            return 0

        cursor = await self.sync_record_repo.get_block_number(
            self.chain_id, self.contract_address
        )

        if cursor is None:
            events = await self.chain_client.get_curation_events()
            safe_events = [e for e in events if e.block_number <= safe_height]

            if safe_events and len(safe_events) < len(events):
                new_cursor = safe_events[-1].block_number
            else:
                new_cursor = safe_height

            logger.info(
                f"[Curation Sync] Catch-up: {len(safe_events)}/{len(events)} "
                f"events at or below safe height {safe_height}"
            )
        else:
            from_block = cursor + 1
            to_block = min(safe_height, cursor + self.range_cap)
            if from_block > to_block:
                logger.debug(
                    f"[Curation Sync] Cursor {cursor} at safe height "
                    f"{safe_height}, nothing to sync"
                )
                return 0

            safe_events = await self.chain_client.get_curation_events(
                from_block, to_block
            )
            new_cursor = to_block

            logger.info(
                f"[Curation Sync] Blocks {from_block}-{to_block}: "
                f"{len(safe_events)} events"
            )

        rows = await self._reconcile(safe_events)
        await self._commit_batch(rows, new_cursor)

        logger.success(
            f"[Curation Sync] Processed {len(safe_events)} events, "
            f"cursor at block {new_cursor}"
        )
        return len(safe_events)

    async def sync_events(self, events: list[CurationEvent]) -> int:
        """
        Reconcile and mirror events without touching the cursor.

        Args:
            events: Events in chain order

        Returns:
            Number of events processed
        """
        rows = await self._reconcile(events)
        await self._mirror_events(rows)
        return len(events)

    async def _reconcile(self, events: list[CurationEvent]) -> list[dict[str, Any]]:
        rows = []
        for event in events:
            if event.removed:
                await self._handle_removal(event)
            else:
                rows.append(await self._handle_addition(event))
        return rows

    @transaction
    async def _mirror_events(self, rows: list[dict[str, Any]]) -> int:
        """Upsert mirrored events in one database transaction."""
        return await self.event_repo.upsert_batch(rows)

    @transaction
    async def _commit_batch(self, rows: list[dict[str, Any]], cursor: int) -> None:
        """
        Upsert mirrored events, then advance the cursor.

        Args:
            rows: Mirror rows of added events
            cursor: Last fully processed block
        """
        await self.event_repo.upsert_batch(rows)
        await self.sync_record_repo.upsert_block_number(
            self.chain_id, self.contract_address, cursor
        )
