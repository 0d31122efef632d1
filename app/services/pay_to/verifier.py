"""
Pay-To Verification - Verifier Module.

Module: verifier.py
Verifies one pending on-chain donation against its mined receipt and
settles the ledger transaction through the state service.
"""

from dataclasses import dataclass
from typing import Any

from loguru import logger
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.config.settings import settings
from app.models.article import Article
from app.models.enums import NoticeType, PaymentNoticeKind, PaymentProvider
from app.models.transaction import Transaction
from app.models.user import User
from app.repositories.article_repository import ArticleRepository
from app.repositories.blockchain_transaction_repository import (
    BlockchainTransactionRepository,
)
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository
from app.services.base_service import BaseService
from app.services.blockchain import (
    CurationChainClient,
    CurationEvent,
    TransactionReceipt,
    extract_cid,
    is_valid_uri,
    same_address,
    to_base_unit,
)
from app.services.notification import NotificationService
from app.services.transaction_state_service import TransactionStateService
from app.utils.cache_invalidation import invalidate_node_cache
from app.utils.exceptions import (
    BlockchainTransactionNotMinedError,
    PaymentQueueJobDataError,
)
from app.utils.security import mask_tx_hash

from .constants import ARTICLE_NODE_TYPE, VerificationOutcome


@dataclass(frozen=True)
class ExpectedDonation:
    """Curation event parameters a donation must have been paid with."""

    curator: str | None
    creator: str | None
    token: str
    cid: str | None
    amount: int

    def matches(self, event: CurationEvent) -> bool:
        """Check a decoded Curation event against the expectation."""
        if not self.curator or not self.creator or not self.cid:
            return False
        return (
            same_address(event.curator, self.curator)
            and same_address(event.creator, self.creator)
            and same_address(event.token, self.token)
            and event.amount == self.amount
            and is_valid_uri(event.uri)
            and extract_cid(event.uri) == self.cid
        )


class PayToVerifier(BaseService):
    """
    Verifier of pending on-chain donations.

    Outcomes:
    - REVERTED: receipt status 0, pair failed/reverted
    - MISMATCH: no matching log, pair canceled (invalid)/succeeded
    - SUCCEEDED: pair succeeded/succeeded (notices via notify_settled)

    Malformed jobs raise PaymentQueueJobDataError, unmined ones raise
    BlockchainTransactionNotMinedError.
    """

    def __init__(
        self,
        session: AsyncSession,
        chain_client: CurationChainClient,
        notification_service: NotificationService | None = None,
        redis_client: Redis | None = None,
    ) -> None:
        """
        Initialize verifier.

        Args:
            session: Database session
            chain_client: Chain client for the curation contract
            notification_service: Notice delivery (default: log only)
            redis_client: Redis client for node cache invalidation
        """
        super().__init__(session)
        self.chain_client = chain_client
        self.notification_service = notification_service or NotificationService()
        self.redis_client = redis_client

        self.tx_repo = TransactionRepository(session)
        self.blockchain_tx_repo = BlockchainTransactionRepository(session)
        self.user_repo = UserRepository(session)
        self.article_repo = ArticleRepository(session)
        self.state_service = TransactionStateService(session)

        self.usdt_address = settings.usdt_contract_address
        self.usdt_decimals = settings.usdt_decimals

    async def verify(self, transaction_id: int) -> VerificationOutcome:
        """
        Run one verification attempt.

        Args:
            transaction_id: Ledger transaction ID

        Returns:
            Terminal outcome

        Raises:
            PaymentQueueJobDataError: Job data can never verify
            BlockchainTransactionNotMinedError: Receipt not available yet
        """
        tx = await self.tx_repo.get_by_id(transaction_id)
        if tx is None:
            raise PaymentQueueJobDataError(f"Transaction {transaction_id} not found")
        if tx.provider != PaymentProvider.BLOCKCHAIN:
            raise PaymentQueueJobDataError(
                f"Transaction {transaction_id} provider is {tx.provider}, "
                f"expected {PaymentProvider.BLOCKCHAIN}"
            )

        blockchain_tx = None
        if tx.provider_tx_id and tx.provider_tx_id.isdigit():
            blockchain_tx = await self.blockchain_tx_repo.get_by_id(
                int(tx.provider_tx_id)
            )
        if blockchain_tx is None:
            raise PaymentQueueJobDataError(
                f"Blockchain transaction of transaction {transaction_id} not found "
                f"(provider_tx_id={tx.provider_tx_id})"
            )

        tx_label = mask_tx_hash(blockchain_tx.tx_hash)
        receipt = await self.chain_client.get_receipt(blockchain_tx.tx_hash)
        if receipt is None:
            raise BlockchainTransactionNotMinedError(blockchain_tx.tx_hash)

        await self.blockchain_tx_repo.record_receipt(
            blockchain_tx,
            block_number=receipt.block_number,
            from_address=receipt.from_address,
            to_address=receipt.to_address,
        )

        if not receipt.succeeded:
            await self.state_service.fail_both(tx.id, blockchain_tx.id)
            logger.warning(
                f"[PayTo] Transaction {tx.id} reverted on chain ({tx_label})"
            )
            return VerificationOutcome.REVERTED

        sender, recipient, article = await self._load_parties(tx)
        try:
            amount = to_base_unit(tx.amount, self.usdt_decimals)
        except ValueError as e:
            raise PaymentQueueJobDataError(
                f"Transaction {tx.id} amount {tx.amount} is not payable: {e}"
            ) from e

        expected = ExpectedDonation(
            curator=sender.eth_address,
            creator=recipient.eth_address,
            token=self.usdt_address,
            cid=article.data_hash,
            amount=amount,
        )

        if not self._find_matching_log(receipt, expected):
            await self.state_service.cancel_invalid(tx.id, blockchain_tx.id)
            logger.warning(
                f"[PayTo] Transaction {tx.id}: no matching Curation log in "
                f"{tx_label}, canceled as invalid"
            )
            return VerificationOutcome.MISMATCH

        changed = await self.state_service.succeed_both(tx.id, blockchain_tx.id)
        if changed:
            logger.success(
                f"[PayTo] Transaction {tx.id} settled: {tx.amount} {tx.currency} "
                f"({tx_label})"
            )
        else:
            logger.info(
                f"[PayTo] Transaction {tx.id} already settled ({tx_label})"
            )
        return VerificationOutcome.SUCCEEDED

    async def notify_settled(self, transaction_id: int) -> None:
        """
        Send the best-effort side effects of a settled donation.

        Called once per donation by the job runner after it recorded
        the SUCCEEDED outcome, whichever component settled the pair.

        Args:
            transaction_id: Ledger transaction ID
        """
        tx = await self.tx_repo.get_by_id(transaction_id)
        if tx is None:
            logger.warning(
                f"[PayTo] Transaction {transaction_id} vanished before notices"
            )
            return

        try:
            sender, recipient, article = await self._load_parties(tx)
        except PaymentQueueJobDataError as e:
            logger.error(f"[PayTo] Notices of transaction {transaction_id} skipped: {e}")
            return

        await self._notify_settled(tx, sender, recipient, article)

    async def _load_parties(
        self, tx: Transaction
    ) -> tuple[User, User, Article]:
        """Load sender, recipient and donated article."""
        sender = await self.user_repo.get_by_id(tx.sender_id) if tx.sender_id else None
        recipient = await self.user_repo.get_by_id(tx.recipient_id)
        article = await self.article_repo.get_by_id(tx.target_id) if tx.target_id else None

        if sender is None or recipient is None or article is None:
            raise PaymentQueueJobDataError(
                f"Transaction {tx.id} references missing entities "
                f"(sender={tx.sender_id}, recipient={tx.recipient_id}, "
                f"target={tx.target_id})"
            )
        return sender, recipient, article

    def _find_matching_log(
        self, receipt: TransactionReceipt, expected: ExpectedDonation
    ) -> CurationEvent | None:
        """Find the receipt log paying the expected donation."""
        for raw_log in receipt.logs:
            event = self.chain_client.decode_log(raw_log)
            if event is not None and expected.matches(event):
                return event
        return None

    async def _notify_settled(
        self,
        tx: Transaction,
        sender: User,
        recipient: User,
        article: Article,
    ) -> None:
        """Best-effort side effects of a settled donation."""
        await self._side_effect(
            "sender notice",
            self.notification_service.send_payment_notice(
                sender, PaymentNoticeKind.DONATED, tx, article
            ),
        )
        await self._side_effect(
            "recipient notice",
            self.notification_service.trigger(
                NoticeType.PAYMENT_RECEIVED_DONATION,
                actor=sender,
                recipient=recipient,
                entities={"target": article, "transaction": tx},
            ),
        )
        await self._side_effect(
            "recipient payment notice",
            self.notification_service.send_payment_notice(
                recipient, PaymentNoticeKind.RECEIVED_DONATION, tx, article
            ),
        )
        await self._side_effect(
            "cache invalidation",
            invalidate_node_cache(self.redis_client, ARTICLE_NODE_TYPE, article.id),
        )

    async def _side_effect(self, name: str, awaitable: Any) -> None:
        try:
            await awaitable
        except Exception as e:
            logger.error(f"[PayTo] Side effect '{name}' failed: {e}")
