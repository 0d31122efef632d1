"""
Curation Sync Reconciliation Mixin.

Mirrors added Curation events and reconciles in-platform donations
with the ledger.
"""

from typing import Any

from loguru import logger

from app.models.blockchain_transaction import BlockchainTransaction
from app.models.enums import BlockchainTransactionState, TransactionState
from app.services.blockchain import (
    CurationEvent,
    extract_cid,
    from_base_unit,
    is_valid_uri,
    to_base_unit,
)
from app.utils.security import mask_address, mask_tx_hash

from .decisions import DecodedDonation, DonationDecision, DonationDecisionKind


class ReconciliationMixin:
    """Mixin handling added (non-removed) Curation events."""

    async def _handle_addition(self, event: CurationEvent) -> dict[str, Any]:
        """
        Reconcile an added event and build its mirror row.

        Args:
            event: Decoded Curation event

        Returns:
            Mirror row data for the batch upsert
        """
        blockchain_tx = await self.blockchain_tx_repo.find_or_create(
            self.chain,
            event.tx_hash,
            state=BlockchainTransactionState.SUCCEEDED,
            block_number=event.block_number,
        )
        await self.commit()

        row = {
            "blockchain_transaction_id": blockchain_tx.id,
            "contract_address": self.contract_address,
            "curator_address": event.curator,
            "creator_address": event.creator,
            "token_address": event.token,
            "amount": str(event.amount),
            "uri": event.uri,
        }

        if await self._is_settled(blockchain_tx):
            return row

        decision = await self._decide_donation(event, blockchain_tx)
        await self._apply_decision(decision, blockchain_tx, event)
        return row

    async def _is_settled(self, blockchain_tx: BlockchainTransaction) -> bool:
        """Check the hash already links to a settled donation."""
        if not blockchain_tx.transaction_id:
            return False
        if blockchain_tx.state != BlockchainTransactionState.SUCCEEDED:
            return False

        tx = await self.tx_repo.get_by_id(blockchain_tx.transaction_id)
        return tx is not None and tx.state == TransactionState.SUCCEEDED

    async def _decide_donation(
        self, event: CurationEvent, blockchain_tx: BlockchainTransaction
    ) -> DonationDecision:
        """
        Classify an event against platform data and the linked row.

        Args:
            event: Decoded Curation event
            blockchain_tx: Record of the emitting transaction

        Returns:
            Tagged reconciliation decision
        """
        if event.token != self.usdt_address:
            return DonationDecision.no_match("token is not USDT")

        if not is_valid_uri(event.uri):
            return DonationDecision.no_match("uri is not ipfs://")

        curator = await self.user_repo.find_by_eth_address(event.curator)
        if not curator:
            return DonationDecision.no_match("unknown curator")

        creator = await self.user_repo.find_by_eth_address(event.creator)
        if not creator:
            return DonationDecision.no_match("unknown creator")

        article = await self.article_repo.find_by_author_and_cid(
            creator.id, extract_cid(event.uri)
        )
        if not article:
            return DonationDecision.no_match("no article for cid")

        donation = DecodedDonation(
            sender_id=curator.id,
            recipient_id=creator.id,
            target_id=article.id,
            amount=from_base_unit(event.amount, self.usdt_decimals),
            amount_base_unit=event.amount,
        )

        if not blockchain_tx.transaction_id:
            return DonationDecision(
                kind=DonationDecisionKind.NEW_DONATION, donation=donation
            )

        linked = await self.tx_repo.get_by_id(blockchain_tx.transaction_id)
        if linked is None:
            # Dangling link, treat as unlinked.
            return DonationDecision(
                kind=DonationDecisionKind.NEW_DONATION, donation=donation
            )

        kind = (
            DonationDecisionKind.CONFIRMED
            if self._matches(linked, donation)
            else DonationDecisionKind.SUPERSEDED
        )
        return DonationDecision(
            kind=kind, donation=donation, linked_transaction_id=linked.id
        )

    def _matches(self, tx: Any, donation: DecodedDonation) -> bool:
        """Compare a ledger row with a decoded donation."""
        try:
            amount_base_unit = to_base_unit(tx.amount, self.usdt_decimals)
        except ValueError:
            return False

        return (
            tx.sender_id == donation.sender_id
            and tx.recipient_id == donation.recipient_id
            and tx.target_id == donation.target_id
            and amount_base_unit == donation.amount_base_unit
        )

    async def _apply_decision(
        self,
        decision: DonationDecision,
        blockchain_tx: BlockchainTransaction,
        event: CurationEvent,
    ) -> None:
        """Apply a reconciliation decision through the state service."""
        tx_label = mask_tx_hash(event.tx_hash)

        match decision.kind:
            case DonationDecisionKind.NO_MATCH:
                logger.debug(
                    f"[Curation Sync] {tx_label} not a platform donation: "
                    f"{decision.reason} (curator={mask_address(event.curator)})"
                )

            case DonationDecisionKind.CONFIRMED:
                await self.state_service.succeed_both(
                    decision.linked_transaction_id, blockchain_tx.id
                )
                logger.info(
                    f"[Curation Sync] {tx_label} confirmed donation "
                    f"{decision.linked_transaction_id}"
                )

            case DonationDecisionKind.SUPERSEDED:
                donation = decision.donation
                await self.state_service.supersede_donation(
                    decision.linked_transaction_id,
                    blockchain_tx.id,
                    amount=donation.amount,
                    sender_id=donation.sender_id,
                    recipient_id=donation.recipient_id,
                    target_id=donation.target_id,
                )

            case DonationDecisionKind.NEW_DONATION:
                donation = decision.donation
                created = await self.state_service.settle_new_donation(
                    blockchain_tx.id,
                    amount=donation.amount,
                    sender_id=donation.sender_id,
                    recipient_id=donation.recipient_id,
                    target_id=donation.target_id,
                )
                if created is not None:
                    logger.info(
                        f"[Curation Sync] {tx_label} recorded donation {created.id} "
                        f"of {donation.amount} USDT"
                    )
