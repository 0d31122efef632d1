"""
Database models.

Exports all SQLAlchemy models for easy imports.
"""

from app.models.article import Article
from app.models.base import Base
from app.models.blockchain_curation_event import BlockchainCurationEvent
from app.models.blockchain_sync_record import BlockchainSyncRecord
from app.models.blockchain_transaction import BlockchainTransaction
from app.models.enums import (
    BlockchainTransactionState,
    Chain,
    NoticeType,
    PaymentCurrency,
    PaymentNoticeKind,
    PaymentProvider,
    PaymentVerificationStatus,
    TransactionPurpose,
    TransactionRemark,
    TransactionState,
    TransactionTargetType,
)
from app.models.payment_verification_job import PaymentVerificationJob
from app.models.transaction import Transaction
from app.models.user import User

__all__ = [
    "Article",
    "Base",
    "BlockchainCurationEvent",
    "BlockchainSyncRecord",
    "BlockchainTransaction",
    "BlockchainTransactionState",
    "Chain",
    "NoticeType",
    "PaymentCurrency",
    "PaymentNoticeKind",
    "PaymentProvider",
    "PaymentVerificationJob",
    "PaymentVerificationStatus",
    "Transaction",
    "TransactionPurpose",
    "TransactionRemark",
    "TransactionState",
    "TransactionTargetType",
    "User",
]
