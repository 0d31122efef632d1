"""
Services.

Business logic layer.
"""

from app.services.base_service import BaseService, transaction
from app.services.transaction_state_service import TransactionStateService

__all__ = [
    "BaseService",
    "TransactionStateService",
    "transaction",
]
