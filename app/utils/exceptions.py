"""
Exception types of the reconciliation core.

Jobs decide between discarding, retrying and failing loudly based on
these categories.
"""

from sqlalchemy.exc import OperationalError
from web3.exceptions import Web3Exception


class PaymentQueueJobDataError(Exception):
    """
    Pay-to job references data that can never verify.

    Raised when the ledger transaction is missing, has the wrong
    provider, or has no blockchain transaction. Not retryable.
    """

    pass


class BlockchainTransactionNotMinedError(Exception):
    """Receipt not available yet. Retryable."""

    def __init__(self, tx_hash: str) -> None:
        """Store the hash awaiting mining."""
        super().__init__(f"blockchain transaction not mined: {tx_hash}")
        self.tx_hash = tx_hash


class BlockchainTimeoutError(Exception):
    """Raised when blockchain RPC call times out."""

    pass


class BlockchainError(Exception):
    """Base exception for chain client errors."""

    pass


# Exception categories based on handling strategy

# Retry with backoff - the attempt may succeed later
RETRYABLE = (
    BlockchainTransactionNotMinedError,
    BlockchainTimeoutError,
    BlockchainError,
    OperationalError,  # Database unavailable, consistency unit rolled back
    Web3Exception,     # Blockchain RPC errors
    ConnectionError,
)

# Never retry - the job data is wrong
PERMANENT = (
    PaymentQueueJobDataError,
)


def is_retryable(exc: Exception) -> bool:
    """
    Check if a failed attempt should be retried.

    Args:
        exc: Exception to check

    Returns:
        True if exception is retryable
    """
    return isinstance(exc, RETRYABLE) and not isinstance(exc, PERMANENT)


def is_permanent(exc: Exception) -> bool:
    """
    Check if a failed attempt must discard the job.

    Args:
        exc: Exception to check

    Returns:
        True if exception is permanent
    """
    return isinstance(exc, PERMANENT)
