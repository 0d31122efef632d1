"""
Tests for the curation event synchronizer.

Covers:
- Catch-up with partial safety and the resulting cursor
- Incremental range cap and cursor monotonicity
- Idempotent mirroring
- Donation reconciliation (new, confirmed, superseded, no match)
- Reorg round trip
"""

from decimal import Decimal

import pytest

from app.models.enums import (
    BlockchainTransactionState,
    TransactionRemark,
    TransactionState,
)
from app.services.curation_sync import CurationSyncService
from tests.fakes import (
    OTHER_ADDRESS,
    make_event,
    make_receipt,
    wire_service,
)


def build_service(mock_session, chain_client, store, safe_confirmations=12, range_cap=1999):
    service = CurationSyncService(
        mock_session,
        chain_client,
        chain_id=137,
        safe_confirmations=safe_confirmations,
        range_cap=range_cap,
    )
    return wire_service(service, store)


def cursor_of(store, service):
    return store.cursors.get((137, service.contract_address))


class TestCursor:
    """Cursor selection in catch-up and incremental mode."""

    @pytest.mark.asyncio
    async def test_catch_up_stops_at_last_safe_event(self, mock_session, chain_client, store):
        """Events past the safe height are left for a later run."""
        chain_client.height = 1000
        chain_client.events = [make_event(1, 500), make_event(2, 990), make_event(3, 995)]
        service = build_service(mock_session, chain_client, store)

        processed = await service.sync()

        assert processed == 1
        assert chain_client.queries == [(None, None)]
        assert cursor_of(store, service) == 500
        assert store.find_blockchain_tx(2) is None

    @pytest.mark.asyncio
    async def test_catch_up_all_safe_moves_cursor_to_safe_height(
        self, mock_session, chain_client, store
    ):
        """Without dropped events the cursor is the safe height."""
        chain_client.height = 1000
        chain_client.events = [make_event(1, 500), make_event(2, 700)]
        service = build_service(mock_session, chain_client, store)

        await service.sync()

        assert cursor_of(store, service) == 988

    @pytest.mark.asyncio
    async def test_catch_up_without_events(self, mock_session, chain_client, store):
        """Empty history still records the safe height."""
        chain_client.height = 1000
        service = build_service(mock_session, chain_client, store)

        assert await service.sync() == 0
        assert cursor_of(store, service) == 988

    @pytest.mark.asyncio
    async def test_young_chain_is_not_synced(self, mock_session, chain_client, store):
        """Height below the confirmation depth does nothing."""
        chain_client.height = 5
        service = build_service(mock_session, chain_client, store)

        assert await service.sync() == 0
        assert chain_client.queries == []
        assert cursor_of(store, service) is None

    @pytest.mark.asyncio
    async def test_incremental_range_is_capped(self, mock_session, chain_client, store):
        """cursor=2000, safe=5000, cap=1999 queries [2001, 3999]."""
        chain_client.height = 5012
        service = build_service(mock_session, chain_client, store)
        store.cursors[(137, service.contract_address)] = 2000

        await service.sync()

        assert chain_client.queries == [(2001, 3999)]
        assert cursor_of(store, service) == 3999

    @pytest.mark.asyncio
    async def test_incremental_range_clamped_to_safe_height(
        self, mock_session, chain_client, store
    ):
        """Near the head the range ends at the safe height."""
        chain_client.height = 2512
        service = build_service(mock_session, chain_client, store)
        store.cursors[(137, service.contract_address)] = 2000

        await service.sync()

        assert chain_client.queries == [(2001, 2500)]
        assert cursor_of(store, service) == 2500

    @pytest.mark.asyncio
    async def test_cursor_at_safe_height_is_untouched(self, mock_session, chain_client, store):
        """Nothing new below the safe height means no query and no write."""
        chain_client.height = 1012
        service = build_service(mock_session, chain_client, store)
        store.cursors[(137, service.contract_address)] = 1000

        assert await service.sync() == 0
        assert chain_client.queries == []
        assert store.cursor_writes == []

    @pytest.mark.asyncio
    async def test_cursor_is_monotonic_across_runs(self, mock_session, chain_client, store):
        """Each run queries strictly after the previous cursor."""
        service = build_service(mock_session, chain_client, store, range_cap=100)
        chain_client.height = 312
        store.cursors[(137, service.contract_address)] = 0

        for height in (312, 312, 250, 500):
            chain_client.height = height
            await service.sync()

        assert store.cursor_writes == sorted(store.cursor_writes)
        for (prev_from, prev_to), (next_from, _) in zip(
            chain_client.queries, chain_client.queries[1:]
        ):
            assert next_from == prev_to + 1

    @pytest.mark.asyncio
    async def test_failed_reconciliation_leaves_cursor(self, mock_session, chain_client, store):
        """A failing event aborts the run before the cursor moves."""
        chain_client.height = 1000
        chain_client.events = [make_event(1, 500)]
        service = build_service(mock_session, chain_client, store)

        async def boom(*args, **kwargs):
            raise ConnectionError("database unavailable")

        service.state_service.settle_new_donation = boom

        with pytest.raises(ConnectionError):
            await service.sync()

        assert cursor_of(store, service) is None
        assert store.curation_events == {}


class TestMirroring:
    """Mirror rows of added events."""

    @pytest.mark.asyncio
    async def test_same_batch_twice_keeps_one_row_per_hash(
        self, mock_session, chain_client, store
    ):
        """Reprocessing upserts instead of duplicating."""
        events = [make_event(1, 500), make_event(2, 600, curator=OTHER_ADDRESS)]
        service = build_service(mock_session, chain_client, store)

        await service.sync_events(events)
        await service.sync_events(events)

        assert len(store.curation_events) == 2
        assert len(store.blockchain_txs) == 2

    @pytest.mark.asyncio
    async def test_mirror_row_holds_decoded_fields(self, mock_session, chain_client, store):
        """Addresses lower-cased and amount kept as base-unit string."""
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500, amount=123_456)])

        blockchain_tx = store.find_blockchain_tx(1)
        row = store.curation_events[blockchain_tx.id]
        assert row["amount"] == "123456"
        assert row["uri"] == "ipfs://QmArticleCid"
        assert row["contract_address"] == service.contract_address
        assert blockchain_tx.state == BlockchainTransactionState.SUCCEEDED
        assert blockchain_tx.block_number == 500


class TestDonationReconciliation:
    """Ledger reconciliation of added events."""

    @pytest.mark.asyncio
    async def test_unlinked_donation_creates_settled_transaction(
        self, mock_session, chain_client, store
    ):
        """NEW_DONATION creates a succeeded row and links it."""
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500, amount=10_000_000)])

        blockchain_tx = store.find_blockchain_tx(1)
        tx = store.transactions[blockchain_tx.transaction_id]
        assert tx.state == TransactionState.SUCCEEDED
        assert tx.amount == Decimal("10")
        assert tx.sender_id == store.curator.id
        assert tx.recipient_id == store.creator.id
        assert tx.provider_tx_id == str(blockchain_tx.id)

    @pytest.mark.asyncio
    async def test_matching_pending_link_is_confirmed(self, mock_session, chain_client, store):
        """CONFIRMED settles the linked row without creating another."""
        tx, blockchain_tx = store.pending_donation(1)
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500)])

        assert tx.state == TransactionState.SUCCEEDED
        assert blockchain_tx.state == BlockchainTransactionState.SUCCEEDED
        assert blockchain_tx.transaction_id == tx.id
        assert len(store.transactions) == 1

    @pytest.mark.asyncio
    async def test_stale_link_is_superseded(self, mock_session, chain_client, store):
        """A linked row that differs is canceled and replaced."""
        stale, blockchain_tx = store.pending_donation(1, amount=Decimal("5"))
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500, amount=10_000_000)])

        assert stale.state == TransactionState.CANCELED
        assert stale.remark == TransactionRemark.INVALID

        replacement = store.transactions[blockchain_tx.transaction_id]
        assert replacement.id != stale.id
        assert replacement.state == TransactionState.SUCCEEDED
        assert replacement.amount == Decimal("10")
        assert replacement.supersedes_id == stale.id

    @pytest.mark.asyncio
    async def test_settled_link_is_skipped(self, mock_session, chain_client, store):
        """Already settled pairs are not reconciled again."""
        tx, blockchain_tx = store.pending_donation(1, amount=Decimal("5"))
        tx.state = TransactionState.SUCCEEDED
        blockchain_tx.state = BlockchainTransactionState.SUCCEEDED
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500, amount=10_000_000)])

        assert tx.state == TransactionState.SUCCEEDED
        assert len(store.transactions) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"token": OTHER_ADDRESS},
            {"uri": "https://example.com/QmArticleCid"},
            {"curator": OTHER_ADDRESS},
            {"creator": OTHER_ADDRESS},
            {"uri": "ipfs://QmSomeOtherCid"},
        ],
    )
    async def test_non_platform_events_are_only_mirrored(
        self, mock_session, chain_client, store, overrides
    ):
        """NO_MATCH leaves the ledger untouched."""
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500, **overrides)])

        blockchain_tx = store.find_blockchain_tx(1)
        assert blockchain_tx.transaction_id is None
        assert store.transactions == {}
        assert blockchain_tx.id in store.curation_events

    @pytest.mark.asyncio
    async def test_one_link_per_hash_after_repeated_runs(self, mock_session, chain_client, store):
        """Each blockchain tx links to at most one live ledger row."""
        store.pending_donation(1, amount=Decimal("5"))
        service = build_service(mock_session, chain_client, store)
        events = [make_event(1, 500), make_event(2, 501)]

        for _ in range(3):
            await service.sync_events(events)

        for blockchain_tx in store.blockchain_txs.values():
            live = [
                tx
                for tx in store.transactions.values()
                if tx.provider_tx_id == str(blockchain_tx.id)
                and tx.state != TransactionState.CANCELED
            ]
            assert len(live) <= 1


class TestReorg:
    """Removed events re-evaluate linked donations."""

    @pytest.mark.asyncio
    async def test_round_trip_returns_to_succeeded(self, mock_session, chain_client, store):
        """succeeded -> pending on retraction, -> succeeded on replay."""
        service = build_service(mock_session, chain_client, store)
        await service.sync_events([make_event(1, 500)])
        tx = store.transactions[store.find_blockchain_tx(1).transaction_id]
        assert tx.state == TransactionState.SUCCEEDED

        chain_client.set_receipt(None, 1)
        await service.sync_events([make_event(1, 500, removed=True)])
        assert tx.state == TransactionState.PENDING
        assert store.find_blockchain_tx(1).state == BlockchainTransactionState.PENDING

        await service.sync_events([make_event(1, 520)])
        assert tx.state == TransactionState.SUCCEEDED
        assert store.find_blockchain_tx(1).state == BlockchainTransactionState.SUCCEEDED
        assert len(store.transactions) == 1

    @pytest.mark.asyncio
    async def test_retracted_then_reverted_fails(self, mock_session, chain_client, store):
        """succeeded + status 0 receipt -> failed/reverted."""
        service = build_service(mock_session, chain_client, store)
        await service.sync_events([make_event(1, 500)])
        chain_client.set_receipt(make_receipt(1, status=0), 1)

        await service.sync_events([make_event(1, 500, removed=True)])

        blockchain_tx = store.find_blockchain_tx(1)
        assert store.transactions[blockchain_tx.transaction_id].state == TransactionState.FAILED
        assert blockchain_tx.state == BlockchainTransactionState.REVERTED

    @pytest.mark.asyncio
    async def test_failed_donation_recovers_when_executed(
        self, mock_session, chain_client, store
    ):
        """failed + status 1 receipt -> succeeded/succeeded."""
        tx, blockchain_tx = store.pending_donation(1)
        tx.state = TransactionState.FAILED
        blockchain_tx.state = BlockchainTransactionState.REVERTED
        chain_client.set_receipt(make_receipt(1, status=1), 1)
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(1, 500, removed=True)])

        assert tx.state == TransactionState.SUCCEEDED
        assert blockchain_tx.state == BlockchainTransactionState.SUCCEEDED

    @pytest.mark.asyncio
    async def test_removal_of_unknown_hash_is_noop(self, mock_session, chain_client, store):
        """No record, no link, nothing to do."""
        service = build_service(mock_session, chain_client, store)

        await service.sync_events([make_event(9, 500, removed=True)])

        assert store.blockchain_txs == {}
        assert store.curation_events == {}
