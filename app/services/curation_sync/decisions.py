"""
Curation sync decision types.

Reconciliation of a mirrored event against the ledger, and of a
retracted event against its receipt, each resolve to one tagged
result so every branch is handled explicitly.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import StrEnum

from app.models.enums import TransactionState
from app.services.blockchain import TransactionReceipt


class DonationDecisionKind(StrEnum):
    """Outcome of reconciling a Curation event with the ledger."""

    NO_MATCH = "no_match"  # Not an in-platform donation
    NEW_DONATION = "new_donation"  # Donation without a ledger row
    CONFIRMED = "confirmed"  # Linked row matches the event
    SUPERSEDED = "superseded"  # Linked row differs from the event


@dataclass(frozen=True)
class DecodedDonation:
    """Ledger view of a donation decoded from a Curation event."""

    sender_id: int
    recipient_id: int
    target_id: int
    amount: Decimal
    amount_base_unit: int


@dataclass(frozen=True)
class DonationDecision:
    """Tagged reconciliation result."""

    kind: DonationDecisionKind
    donation: DecodedDonation | None = None
    linked_transaction_id: int | None = None
    reason: str | None = None

    @classmethod
    def no_match(cls, reason: str) -> "DonationDecision":
        """Build a NO_MATCH decision."""
        return cls(kind=DonationDecisionKind.NO_MATCH, reason=reason)


class ReorgAction(StrEnum):
    """Transition applied to a donation whose event was retracted."""

    NONE = "none"
    RESET = "reset"  # succeeded -> pending, receipt gone
    FAIL = "fail"  # succeeded -> failed, now reverted
    SUCCEED = "succeed"  # failed -> succeeded, now executed


def resolve_reorg(
    state: TransactionState | str, receipt: TransactionReceipt | None
) -> ReorgAction:
    """
    Decide how a retracted event affects its linked donation.

    Args:
        state: Current ledger transaction state
        receipt: Receipt fetched after the retraction, if any

    Returns:
        Action to apply through the state service
    """
    if state == TransactionState.SUCCEEDED:
        if receipt is None:
            return ReorgAction.RESET
        if not receipt.succeeded:
            return ReorgAction.FAIL
        return ReorgAction.NONE

    if state == TransactionState.FAILED:
        if receipt is not None and receipt.succeeded:
            return ReorgAction.SUCCEED
        return ReorgAction.NONE

    return ReorgAction.NONE
