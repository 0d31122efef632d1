"""
Shared enumerations for ledger and blockchain models.

Values are persisted as plain strings.
"""

from enum import StrEnum


class TransactionState(StrEnum):
    """Ledger transaction state."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"


class TransactionRemark(StrEnum):
    """Reason code attached to a ledger transaction."""

    INVALID = "invalid"


class TransactionPurpose(StrEnum):
    """Purpose of a ledger transaction."""

    DONATION = "donation"


class TransactionTargetType(StrEnum):
    """Entity a ledger transaction is attached to."""

    ARTICLE = "article"


class PaymentCurrency(StrEnum):
    """Ledger currency."""

    USDT = "USDT"


class PaymentProvider(StrEnum):
    """Settlement mechanism of a ledger transaction."""

    BLOCKCHAIN = "blockchain"
    STRIPE = "stripe"


class BlockchainTransactionState(StrEnum):
    """Confirmation state of an on-chain transaction."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    REVERTED = "reverted"


class Chain(StrEnum):
    """Supported chains."""

    POLYGON = "Polygon"


class NoticeType(StrEnum):
    """In-app notice types fired by payment settlement."""

    PAYMENT_RECEIVED_DONATION = "payment_received_donation"


class PaymentVerificationStatus(StrEnum):
    """Lifecycle of a pay-to verification job."""

    PENDING = "pending"  # Waiting for next attempt
    COMPLETED = "completed"  # Terminal outcome recorded
    DISCARDED = "discarded"  # Malformed job data, never retried
    EXHAUSTED = "exhausted"  # Attempt budget spent without a receipt


class PaymentNoticeKind(StrEnum):
    """Payment notice sent to a party of a settled donation."""

    DONATED = "donated"  # To the sender
    RECEIVED_DONATION = "received_donation"  # To the recipient
