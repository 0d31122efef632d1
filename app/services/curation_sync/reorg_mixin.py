"""
Curation Sync Reorg Mixin.

Re-evaluates donations whose Curation event was retracted by a
chain reorganization.
"""

from loguru import logger

from app.services.blockchain import CurationEvent
from app.utils.security import mask_tx_hash

from .decisions import ReorgAction, resolve_reorg


class ReorgMixin:
    """Mixin handling removed Curation events."""

    async def _handle_removal(self, event: CurationEvent) -> ReorgAction:
        """
        Apply the reorg table to the donation linked to a retracted hash.

        Args:
            event: Removed Curation event

        Returns:
            Applied action
        """
        tx_label = mask_tx_hash(event.tx_hash)

        blockchain_tx = await self.blockchain_tx_repo.get_by_tx_hash(
            self.chain, event.tx_hash
        )
        if not blockchain_tx or not blockchain_tx.transaction_id:
            logger.debug(f"[Curation Sync] Reorg of {tx_label}: no linked donation")
            return ReorgAction.NONE

        tx = await self.tx_repo.get_by_id(blockchain_tx.transaction_id)
        if tx is None:
            logger.warning(
                f"[Curation Sync] Reorg of {tx_label}: linked transaction "
                f"{blockchain_tx.transaction_id} missing"
            )
            return ReorgAction.NONE

        receipt = await self.chain_client.get_receipt(event.tx_hash)
        action = resolve_reorg(tx.state, receipt)

        match action:
            case ReorgAction.RESET:
                await self.state_service.reset_both(tx.id, blockchain_tx.id)
            case ReorgAction.FAIL:
                await self.state_service.fail_both(tx.id, blockchain_tx.id)
            case ReorgAction.SUCCEED:
                await self.state_service.succeed_both(tx.id, blockchain_tx.id)
            case ReorgAction.NONE:
                pass

        logger.warning(
            f"[Curation Sync] Reorg of {tx_label}: transaction {tx.id} "
            f"was {tx.state}, receipt="
            f"{'none' if receipt is None else receipt.status}, action={action}"
        )
        return action
