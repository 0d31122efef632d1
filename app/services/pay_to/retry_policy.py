"""
Pay-To Verification - Retry Policy Module.

Module: retry_policy.py
Pure exponential backoff arithmetic, testable without a scheduler.
"""

from dataclasses import dataclass
from datetime import timedelta

from app.config.settings import settings


@dataclass(frozen=True)
class RetryPolicy:
    """
    Exponential backoff for awaiting a receipt.

    The first attempt runs ``delay_seconds`` after enqueue; after failed
    attempt ``n`` the next one waits ``delay_seconds * 2**(n-1)``.
    """

    delay_seconds: float
    max_attempts: int

    @classmethod
    def from_settings(cls) -> "RetryPolicy":
        """Build policy from configuration."""
        return cls(
            delay_seconds=settings.pay_to_delay_seconds,
            max_attempts=settings.pay_to_max_attempts,
        )

    @property
    def initial_delay(self) -> timedelta:
        """Delay before the first attempt."""
        return timedelta(seconds=self.delay_seconds)

    def backoff(self, attempt: int) -> timedelta:
        """
        Delay after a failed attempt.

        Args:
            attempt: Number of failed attempts so far (>= 1)

        Returns:
            Delay before the next attempt
        """
        if attempt < 1:
            raise ValueError(f"attempt must be >= 1, got {attempt}")
        return timedelta(seconds=self.delay_seconds * 2 ** (attempt - 1))

    def should_retry(self, attempts: int) -> bool:
        """Check if another attempt is allowed after ``attempts`` failures."""
        return attempts < self.max_attempts

    def total_window(self) -> timedelta:
        """Time from enqueue to the last attempt."""
        window = self.initial_delay
        for attempt in range(1, self.max_attempts):
            window += self.backoff(attempt)
        return window
