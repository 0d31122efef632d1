"""
Pay-To Verification Constants.

Module: constants.py
Contains configuration constants for the verification retry mechanism.
"""

from enum import StrEnum

from app.config.constants import (
    PAY_TO_SWEEP_BATCH_LIMIT,
    PAY_TO_SWEEP_GRACE_SECONDS,
)

# Cached node type of a donated article
ARTICLE_NODE_TYPE = "Article"

SWEEP_BATCH_LIMIT = PAY_TO_SWEEP_BATCH_LIMIT
SWEEP_GRACE_SECONDS = PAY_TO_SWEEP_GRACE_SECONDS

# Stored last_error text is truncated to this length
MAX_ERROR_LENGTH = 1000

# Deliveries this close to next_attempt_at count as due (clock skew between workers)
ATTEMPT_DUE_TOLERANCE_SECONDS = 1


class VerificationOutcome(StrEnum):
    """Terminal outcome of a verification attempt."""

    REVERTED = "reverted"  # Receipt status 0
    MISMATCH = "mismatch"  # Mined, no matching Curation log
    SUCCEEDED = "succeeded"  # Matching Curation log found
