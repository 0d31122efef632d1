"""
Curation sync module.

Mirrors Curation events of the curation contract and reconciles
on-chain USDT donations with the ledger.
"""

from .core import CurationSyncService
from .decisions import (
    DecodedDonation,
    DonationDecision,
    DonationDecisionKind,
    ReorgAction,
    resolve_reorg,
)

__all__ = [
    "CurationSyncService",
    "DecodedDonation",
    "DonationDecision",
    "DonationDecisionKind",
    "ReorgAction",
    "resolve_reorg",
]
