"""
Tests for atomic (ledger, blockchain) transaction transitions.

Covers:
- State pairs written by each wrapper
- Re-asserting current states is a no-op
- Leaving canceled clears the remark
- Link checks under the row lock
- Failures roll back and propagate
"""

from decimal import Decimal

import pytest

from app.models.enums import (
    BlockchainTransactionState,
    TransactionRemark,
    TransactionState,
)
from app.services.transaction_state_service import TransactionStateService
from tests.fakes import wire_state_service


@pytest.fixture
def state_service(mock_session, store):
    service = TransactionStateService(mock_session)
    wire_state_service(service, store)
    return service


class TestTransitions:

    @pytest.mark.asyncio
    async def test_succeed_both(self, state_service, store, mock_session):
        tx, blockchain_tx = store.pending_donation(1)

        changed = await state_service.succeed_both(tx.id, blockchain_tx.id)

        assert changed is True
        assert tx.state == TransactionState.SUCCEEDED
        assert blockchain_tx.state == BlockchainTransactionState.SUCCEEDED
        mock_session.commit.assert_awaited()

    @pytest.mark.asyncio
    async def test_cancel_invalid_keeps_blockchain_succeeded(self, state_service, store):
        tx, blockchain_tx = store.pending_donation(1)

        await state_service.cancel_invalid(tx.id, blockchain_tx.id)

        assert tx.state == TransactionState.CANCELED
        assert tx.remark == TransactionRemark.INVALID
        assert blockchain_tx.state == BlockchainTransactionState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_reset_and_fail(self, state_service, store):
        tx, blockchain_tx = store.pending_donation(1)
        await state_service.succeed_both(tx.id, blockchain_tx.id)

        await state_service.reset_both(tx.id, blockchain_tx.id)
        assert (tx.state, blockchain_tx.state) == ("pending", "pending")

        await state_service.fail_both(tx.id, blockchain_tx.id)
        assert (tx.state, blockchain_tx.state) == ("failed", "reverted")

    @pytest.mark.asyncio
    async def test_reasserting_states_is_noop(self, state_service, store):
        tx, blockchain_tx = store.pending_donation(1)
        await state_service.succeed_both(tx.id, blockchain_tx.id)

        assert await state_service.succeed_both(tx.id, blockchain_tx.id) is False

    @pytest.mark.asyncio
    async def test_missing_row_rolls_back(self, state_service, store, mock_session):
        tx, _ = store.pending_donation(1)

        with pytest.raises(ValueError):
            await state_service.succeed_both(tx.id, 999)

        mock_session.rollback.assert_awaited_once()
        mock_session.commit.assert_not_awaited()
        assert tx.state == TransactionState.PENDING


    @pytest.mark.asyncio
    async def test_leaving_canceled_clears_remark(self, state_service, store):
        tx, blockchain_tx = store.pending_donation(1)
        await state_service.cancel_invalid(tx.id, blockchain_tx.id)

        changed = await state_service.succeed_both(tx.id, blockchain_tx.id)

        assert changed is True
        assert tx.state == TransactionState.SUCCEEDED
        assert tx.remark is None

    @pytest.mark.asyncio
    async def test_stale_remark_alone_is_a_change(self, state_service, store):
        tx, blockchain_tx = store.pending_donation(1)
        tx.state = TransactionState.SUCCEEDED
        tx.remark = TransactionRemark.INVALID
        blockchain_tx.state = BlockchainTransactionState.SUCCEEDED

        assert await state_service.succeed_both(tx.id, blockchain_tx.id) is True
        assert tx.remark is None

class TestDonationRows:

    @pytest.mark.asyncio
    async def test_settle_new_donation_links_row(self, state_service, store):
        blockchain_tx = store.add_blockchain_tx("0x" + "11" * 32, "pending")

        tx = await state_service.settle_new_donation(
            blockchain_tx.id,
            amount=Decimal("2.5"),
            sender_id=store.curator.id,
            recipient_id=store.creator.id,
            target_id=1,
        )

        assert tx.state == TransactionState.SUCCEEDED
        assert blockchain_tx.transaction_id == tx.id
        assert blockchain_tx.state == BlockchainTransactionState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_supersede_donation_points_back(self, state_service, store):
        stale, blockchain_tx = store.pending_donation(1, amount=Decimal("5"))

        replacement = await state_service.supersede_donation(
            stale.id,
            blockchain_tx.id,
            amount=Decimal("10"),
            sender_id=store.curator.id,
            recipient_id=store.creator.id,
            target_id=stale.target_id,
        )

        assert stale.state == TransactionState.CANCELED
        assert stale.remark == TransactionRemark.INVALID
        assert replacement.supersedes_id == stale.id
        assert blockchain_tx.transaction_id == replacement.id

    @pytest.mark.asyncio
    async def test_supersede_skips_when_link_moved(self, state_service, store):
        stale, blockchain_tx = store.pending_donation(1, amount=Decimal("5"))
        current = store.add_transaction(amount=Decimal("10"), state=TransactionState.SUCCEEDED)
        blockchain_tx.transaction_id = current.id

        replacement = await state_service.supersede_donation(
            stale.id,
            blockchain_tx.id,
            amount=Decimal("10"),
            sender_id=store.curator.id,
            recipient_id=store.creator.id,
            target_id=stale.target_id,
        )

        assert replacement is None
        assert stale.state == TransactionState.PENDING
        assert blockchain_tx.transaction_id == current.id

    @pytest.mark.asyncio
    async def test_settle_new_donation_skips_linked_row(self, state_service, store):
        tx, blockchain_tx = store.pending_donation(1)
        count = len(store.transactions)

        created = await state_service.settle_new_donation(
            blockchain_tx.id,
            amount=Decimal("10"),
            sender_id=store.curator.id,
            recipient_id=store.creator.id,
            target_id=tx.target_id,
        )

        assert created is None
        assert len(store.transactions) == count
        assert blockchain_tx.transaction_id == tx.id

    @pytest.mark.asyncio
    async def test_settle_new_donation_replaces_dangling_link(self, state_service, store):
        blockchain_tx = store.add_blockchain_tx("0x" + "22" * 32, "pending", transaction_id=999)

        created = await state_service.settle_new_donation(
            blockchain_tx.id,
            amount=Decimal("1"),
            sender_id=store.curator.id,
            recipient_id=store.creator.id,
            target_id=1,
        )

        assert blockchain_tx.transaction_id == created.id
