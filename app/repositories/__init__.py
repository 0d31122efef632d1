"""
Repositories.

Data access layer. Repositories flush, services commit.
"""

from app.repositories.article_repository import ArticleRepository
from app.repositories.base import BaseRepository
from app.repositories.blockchain_transaction_repository import (
    BlockchainTransactionRepository,
)
from app.repositories.curation_event_repository import CurationEventRepository
from app.repositories.payment_verification_job_repository import (
    PaymentVerificationJobRepository,
)
from app.repositories.sync_record_repository import SyncRecordRepository
from app.repositories.transaction_repository import TransactionRepository
from app.repositories.user_repository import UserRepository

__all__ = [
    "ArticleRepository",
    "BaseRepository",
    "BlockchainTransactionRepository",
    "CurationEventRepository",
    "PaymentVerificationJobRepository",
    "SyncRecordRepository",
    "TransactionRepository",
    "UserRepository",
]
