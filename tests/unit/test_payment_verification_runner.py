"""
Tests for the persisted pay-to retry loop.

Covers:
- Scheduling is idempotent per transaction
- Terminal outcomes complete the job
- Data errors discard it
- Unmined attempts back off until the budget is spent
- Early and duplicate deliveries leave the job untouched
- Settlement notices are sent once per job
- Overdue jobs are picked up by the sweep
"""

import asyncio
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from app.models.enums import PaymentVerificationStatus, TransactionState
from app.services.curation_sync import CurationSyncService
from app.services.pay_to import (
    PaymentVerificationRunner,
    PayToVerifier,
    RetryPolicy,
    VerificationOutcome,
)
from app.utils.exceptions import (
    BlockchainTimeoutError,
    BlockchainTransactionNotMinedError,
    PaymentQueueJobDataError,
)
from tests.fakes import make_event, make_receipt, wire_service


def make_due(store, transaction_id):
    """Move a job's next attempt into the past."""
    job = store.jobs[transaction_id]
    job.next_attempt_at = datetime.now(UTC) - timedelta(seconds=1)
    return job


@pytest.fixture
def verifier():
    verifier = AsyncMock()
    verifier.verify = AsyncMock(return_value=VerificationOutcome.SUCCEEDED)
    verifier.notify_settled = AsyncMock()
    return verifier


@pytest.fixture
def runner(mock_session, store, verifier):
    runner = PaymentVerificationRunner(
        mock_session, verifier, policy=RetryPolicy(delay_seconds=5, max_attempts=3)
    )
    return wire_service(runner, store)


class TestSchedule:

    @pytest.mark.asyncio
    async def test_schedule_creates_pending_job_after_delay(self, runner, store):
        before = datetime.now(UTC)

        job = await runner.schedule(42)

        assert job.status == PaymentVerificationStatus.PENDING
        assert job.attempt_count == 0
        assert job.max_attempts == 3
        assert job.next_attempt_at >= before + timedelta(seconds=5)

    @pytest.mark.asyncio
    async def test_schedule_is_idempotent(self, runner, store):
        first = await runner.schedule(42)
        second = await runner.schedule(42)

        assert first is second
        assert len(store.jobs) == 1


class TestRun:

    @pytest.mark.asyncio
    async def test_terminal_outcome_completes_job(self, runner, verifier, store):
        await runner.schedule(42)
        make_due(store, 42)
        verifier.verify.return_value = VerificationOutcome.MISMATCH

        job = await runner.run(42)

        assert job.status == PaymentVerificationStatus.COMPLETED
        assert job.outcome == VerificationOutcome.MISMATCH
        assert job.attempt_count == 1
        assert job.completed_at is not None
        verifier.notify_settled.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_data_error_discards_job(self, runner, verifier, store):
        await runner.schedule(42)
        make_due(store, 42)
        verifier.verify.side_effect = PaymentQueueJobDataError("Transaction 42 not found")

        job = await runner.run(42)

        assert job.status == PaymentVerificationStatus.DISCARDED
        assert "not found" in job.last_error

    @pytest.mark.asyncio
    async def test_unmined_attempt_backs_off(self, runner, verifier, store):
        await runner.schedule(42)
        make_due(store, 42)
        verifier.verify.side_effect = BlockchainTransactionNotMinedError("0xabc")
        before = datetime.now(UTC)

        job = await runner.run(42)

        assert job.is_pending
        assert job.attempt_count == 1
        assert job.next_attempt_at >= before + timedelta(seconds=5)

        make_due(store, 42)
        job = await runner.run(42)

        assert job.attempt_count == 2
        assert job.next_attempt_at >= before + timedelta(seconds=10)

    @pytest.mark.asyncio
    async def test_budget_exhausted_after_max_attempts(self, runner, verifier, store):
        await runner.schedule(42)
        verifier.verify.side_effect = BlockchainTimeoutError("eth_getTransactionReceipt timed out")

        for _ in range(3):
            make_due(store, 42)
            job = await runner.run(42)

        assert job.status == PaymentVerificationStatus.EXHAUSTED
        assert job.attempt_count == 3
        assert verifier.verify.await_count == 3

    @pytest.mark.asyncio
    async def test_finished_job_is_not_run_again(self, runner, verifier, store):
        await runner.schedule(42)
        make_due(store, 42)
        await runner.run(42)

        job = await runner.run(42)

        assert job.status == PaymentVerificationStatus.COMPLETED
        verifier.verify.assert_awaited_once_with(42)

    @pytest.mark.asyncio
    async def test_missing_job_returns_none(self, runner, verifier):
        assert await runner.run(7) is None
        verifier.verify.assert_not_awaited()


class TestDelivery:
    """Duplicate and early wake-ups under at-least-once delivery."""

    @pytest.mark.asyncio
    async def test_deliveries_before_backoff_elapses_are_ignored(
        self, mock_session, store, verifier
    ):
        runner = wire_service(
            PaymentVerificationRunner(
                mock_session, verifier, policy=RetryPolicy(delay_seconds=60, max_attempts=3)
            ),
            store,
        )
        verifier.verify.side_effect = BlockchainTransactionNotMinedError("0xabc")
        await runner.schedule(42)

        results = await asyncio.gather(*(runner.run(42) for _ in range(3)))

        job = store.jobs[42]
        assert results == [None, None, None]
        assert job.is_pending
        assert job.attempt_count == 0
        verifier.verify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_due_deliveries_record_one_attempt(
        self, runner, store, verifier
    ):
        async def not_mined(transaction_id):
            await asyncio.sleep(0)
            raise BlockchainTransactionNotMinedError("0xabc")

        verifier.verify.side_effect = not_mined
        await runner.schedule(42)
        make_due(store, 42)

        results = await asyncio.gather(*(runner.run(42) for _ in range(3)))

        job = store.jobs[42]
        assert job.is_pending
        assert job.attempt_count == 1
        assert job.next_attempt_at > datetime.now(UTC)
        assert sum(result is not None for result in results) == 1

    @pytest.mark.asyncio
    async def test_due_check_tolerates_small_clock_skew(self, runner, store):
        job = await runner.schedule(42)
        now = job.next_attempt_at - timedelta(milliseconds=500)

        assert runner.is_due(job, now=now)
        assert not runner.is_due(job, now=now - timedelta(seconds=5))


class TestSettlementNotices:
    """Notices follow the job's SUCCEEDED completion."""

    @pytest.mark.asyncio
    async def test_success_notifies_once(self, runner, store, verifier):
        await runner.schedule(42)
        make_due(store, 42)

        await runner.run(42)
        await runner.run(42)

        verifier.notify_settled.assert_awaited_once_with(42)

    @pytest.mark.asyncio
    async def test_concurrent_successes_notify_once(self, runner, store, verifier):
        async def succeeded(transaction_id):
            await asyncio.sleep(0)
            return VerificationOutcome.SUCCEEDED

        verifier.verify.side_effect = succeeded
        await runner.schedule(42)
        make_due(store, 42)

        await asyncio.gather(*(runner.run(42) for _ in range(3)))

        assert store.jobs[42].attempt_count == 1
        verifier.notify_settled.assert_awaited_once_with(42)

    @pytest.mark.asyncio
    async def test_notices_sent_when_synchronizer_settled_first(
        self, mock_session, chain_client, store
    ):
        """The synchronizer confirms the donation before the receipt check runs."""
        tx, _ = store.pending_donation(1)
        chain_client.set_receipt(make_receipt(1, events=[make_event(1, 100)]), 1)

        sync_service = wire_service(
            CurationSyncService(
                mock_session, chain_client, chain_id=137, safe_confirmations=12, range_cap=100
            ),
            store,
        )
        await sync_service.sync_events([make_event(1, 100)])
        assert tx.state == TransactionState.SUCCEEDED

        notification_service = AsyncMock()
        verifier = wire_service(
            PayToVerifier(mock_session, chain_client, notification_service=notification_service),
            store,
        )
        runner = wire_service(
            PaymentVerificationRunner(
                mock_session, verifier, policy=RetryPolicy(delay_seconds=5, max_attempts=8)
            ),
            store,
        )
        await runner.schedule(tx.id)
        make_due(store, tx.id)

        with patch(
            "app.services.pay_to.verifier.invalidate_node_cache",
            new=AsyncMock(return_value=1),
        ) as invalidate_cache:
            job = await runner.run(tx.id)

        assert job.outcome == VerificationOutcome.SUCCEEDED
        assert notification_service.send_payment_notice.await_count == 2
        notification_service.trigger.assert_awaited_once()
        invalidate_cache.assert_awaited_once()


class TestSweep:

    @pytest.mark.asyncio
    async def test_only_overdue_pending_jobs_are_returned(self, runner, store):
        now = datetime.now(UTC)
        overdue = await runner.schedule(1)
        overdue.next_attempt_at = now - timedelta(minutes=5)
        in_flight = await runner.schedule(2)
        in_flight.next_attempt_at = now - timedelta(seconds=1)
        finished = await runner.schedule(3)
        finished.next_attempt_at = now - timedelta(minutes=5)
        finished.status = PaymentVerificationStatus.COMPLETED

        assert await runner.get_due_transaction_ids(now=now) == [1]
