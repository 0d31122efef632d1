"""Tests for pay-to retry backoff arithmetic."""

from datetime import timedelta

import pytest

from app.services.pay_to import RetryPolicy


@pytest.fixture
def policy():
    return RetryPolicy(delay_seconds=5, max_attempts=8)


class TestRetryPolicy:

    def test_backoff_doubles(self, policy):
        assert [policy.backoff(n).total_seconds() for n in range(1, 6)] == [
            5, 10, 20, 40, 80,
        ]

    def test_backoff_rejects_zero(self, policy):
        with pytest.raises(ValueError):
            policy.backoff(0)

    def test_should_retry_until_budget(self, policy):
        assert policy.should_retry(1)
        assert policy.should_retry(7)
        assert not policy.should_retry(8)

    def test_total_window(self, policy):
        # 5s initial delay + 5 + 10 + ... + 320
        assert policy.total_window() == timedelta(seconds=640)

    def test_from_settings_uses_defaults(self):
        policy = RetryPolicy.from_settings()

        assert policy.delay_seconds == 5.0
        assert policy.max_attempts == 8
