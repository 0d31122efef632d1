"""
Blockchain services module.

Read-only chain access for curation event reconciliation.
"""

from .curation_client import (
    CurationChainClient,
    CurationEvent,
    TransactionReceipt,
    get_curation_client,
)
from .curation_constants import CURATION_ABI, CURATION_EVENT_TOPIC
from .token_utils import (
    extract_cid,
    from_base_unit,
    is_valid_uri,
    same_address,
    to_base_unit,
)

__all__ = [
    "CURATION_ABI",
    "CURATION_EVENT_TOPIC",
    "CurationChainClient",
    "CurationEvent",
    "TransactionReceipt",
    "extract_cid",
    "from_base_unit",
    "get_curation_client",
    "is_valid_uri",
    "same_address",
    "to_base_unit",
]
