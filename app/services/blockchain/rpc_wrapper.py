"""
RPC timeout wrapper.

Web3 HTTP calls are synchronous; they run in a thread pool and are
bounded by a timeout so a slow node fails the job instead of hanging it.
"""

import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any, TypeVar

from loguru import logger
from web3.exceptions import TransactionNotFound, Web3Exception

from app.config.constants import BLOCKCHAIN_EXECUTOR_WORKERS, BLOCKCHAIN_TIMEOUT
from app.utils.exceptions import BlockchainError, BlockchainTimeoutError

T = TypeVar("T")

_executor = ThreadPoolExecutor(
    max_workers=BLOCKCHAIN_EXECUTOR_WORKERS,
    thread_name_prefix="web3",
)


async def with_timeout(
    coro: Any,
    timeout: float = BLOCKCHAIN_TIMEOUT,
    operation_name: str = "RPC call",
) -> Any:
    """
    Execute async coroutine with timeout.

    Args:
        coro: Coroutine to execute
        timeout: Timeout in seconds (default: BLOCKCHAIN_TIMEOUT)
        operation_name: Operation name for logging

    Returns:
        Result of the coroutine

    Raises:
        BlockchainTimeoutError: If operation times out
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except TimeoutError as e:
        error_msg = f"{operation_name} timed out after {timeout}s"
        logger.error(error_msg)
        raise BlockchainTimeoutError(error_msg) from e


async def run_sync_rpc(
    func: Callable[[], T],
    timeout: float = BLOCKCHAIN_TIMEOUT,
    operation_name: str = "RPC call",
) -> T:
    """
    Run a synchronous Web3 call in the thread pool with a timeout.

    Args:
        func: Zero-argument callable performing the RPC
        timeout: Timeout in seconds
        operation_name: Operation name for logging

    Returns:
        Result of the call

    Raises:
        BlockchainTimeoutError: If the call times out
        BlockchainError: If the node or transport fails
    """
    loop = asyncio.get_running_loop()
    try:
        return await with_timeout(
            loop.run_in_executor(_executor, func),
            timeout=timeout,
            operation_name=operation_name,
        )
    except TransactionNotFound:
        raise
    except (Web3Exception, ValueError, OSError) as e:
        logger.error(f"{operation_name} failed: {e}")
        raise BlockchainError(f"{operation_name} failed: {e}") from e
