"""
Pay-To Verification - Main Module.

Verifies pending on-chain donations once their transaction is mined.

Module Structure:
- constants.py: Configuration constants and outcomes
- retry_policy.py: Exponential backoff arithmetic
- verifier.py: Single verification attempt
- runner.py: Persisted job bookkeeping around the verifier

Public Interface:
- PayToVerifier, PaymentVerificationRunner, RetryPolicy, VerificationOutcome
"""

from .constants import VerificationOutcome
from .retry_policy import RetryPolicy
from .runner import PaymentVerificationRunner
from .verifier import ExpectedDonation, PayToVerifier

__all__ = [
    "ExpectedDonation",
    "PaymentVerificationRunner",
    "PayToVerifier",
    "RetryPolicy",
    "VerificationOutcome",
]
