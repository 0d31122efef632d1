"""Tests for the thread-pool RPC wrapper."""

import time

import pytest
from web3.exceptions import TransactionNotFound

from app.services.blockchain.rpc_wrapper import run_sync_rpc
from app.utils.exceptions import BlockchainError, BlockchainTimeoutError


@pytest.mark.asyncio
async def test_result_is_returned():
    assert await run_sync_rpc(lambda: 42, operation_name="eth_blockNumber") == 42


@pytest.mark.asyncio
async def test_slow_call_times_out():
    with pytest.raises(BlockchainTimeoutError):
        await run_sync_rpc(lambda: time.sleep(0.5), timeout=0.01)


@pytest.mark.asyncio
async def test_node_errors_become_blockchain_errors():
    def fail():
        raise ValueError({"code": -32005, "message": "query returned more than 10000 results"})

    with pytest.raises(BlockchainError):
        await run_sync_rpc(fail, operation_name="eth_getLogs")


@pytest.mark.asyncio
async def test_missing_receipt_passes_through():
    def missing():
        raise TransactionNotFound("Transaction with hash 0xabc not found")

    with pytest.raises(TransactionNotFound):
        await run_sync_rpc(missing)
