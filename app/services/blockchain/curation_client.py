"""
Curation chain client.

Read-only access to the chain for the reconciliation core:
- current block height
- Curation event log queries by block range
- transaction receipts
"""

from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from web3 import Web3
from web3.exceptions import TransactionNotFound

from app.config.constants import BLOCKCHAIN_LONG_TIMEOUT, BLOCKCHAIN_RPC_TIMEOUT
from app.config.settings import settings

from .curation_constants import CURATION_ABI, CURATION_EVENT_TOPIC
from .rpc_wrapper import run_sync_rpc
from .token_utils import to_hex


@dataclass(frozen=True)
class CurationEvent:
    """Decoded Curation log. Addresses are lower-cased."""

    tx_hash: str
    block_number: int
    log_index: int
    curator: str
    creator: str
    token: str
    uri: str
    amount: int
    removed: bool = False


@dataclass(frozen=True)
class TransactionReceipt:
    """Subset of a receipt used for verification."""

    tx_hash: str
    status: int
    block_number: int | None = None
    from_address: str | None = None
    to_address: str | None = None
    logs: list[Any] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        """Receipt status 1 means the transaction executed."""
        return self.status == 1


class CurationChainClient:
    """
    Chain client for the curation contract.

    Wraps a synchronous Web3 instance; every call runs in the RPC
    thread pool with a timeout.
    """

    def __init__(self, w3: Web3, contract_address: str) -> None:
        """
        Initialize client.

        Args:
            w3: Web3 instance
            contract_address: Curation contract address
        """
        self.w3 = w3
        self.contract_address = contract_address.lower()
        self.contract = w3.eth.contract(
            address=Web3.to_checksum_address(contract_address),
            abi=CURATION_ABI,
        )

    async def current_height(self) -> int:
        """Get the latest block number."""
        return await run_sync_rpc(
            lambda: self.w3.eth.block_number,
            operation_name="eth_blockNumber",
        )

    async def get_curation_events(
        self,
        from_block: int | None = None,
        to_block: int | None = None,
    ) -> list[CurationEvent]:
        """
        Query Curation events of the contract.

        Without bounds the whole history is requested.

        Args:
            from_block: First block (inclusive)
            to_block: Last block (inclusive)

        Returns:
            Events in chain order (block, log index)
        """
        params = {
            "address": Web3.to_checksum_address(self.contract_address),
            "topics": [CURATION_EVENT_TOPIC],
            "fromBlock": from_block if from_block is not None else 0,
            "toBlock": to_block if to_block is not None else "latest",
        }
        unbounded = from_block is None and to_block is None

        raw_logs = await run_sync_rpc(
            lambda: self.w3.eth.get_logs(params),
            timeout=BLOCKCHAIN_LONG_TIMEOUT if unbounded else BLOCKCHAIN_RPC_TIMEOUT,
            operation_name="eth_getLogs(Curation)",
        )

        events = []
        for raw in raw_logs:
            event = self.decode_log(raw)
            if event is not None:
                events.append(event)

        events.sort(key=lambda e: (e.block_number, e.log_index))
        return events

    async def get_receipt(self, tx_hash: str) -> TransactionReceipt | None:
        """
        Get the receipt of a transaction.

        Args:
            tx_hash: Transaction hash

        Returns:
            Receipt or None when not mined (or dropped by a reorg)
        """
        try:
            raw = await run_sync_rpc(
                lambda: self.w3.eth.get_transaction_receipt(tx_hash),
                operation_name="eth_getTransactionReceipt",
            )
        except TransactionNotFound:
            return None

        if raw is None:
            return None

        to_address = raw.get("to")
        return TransactionReceipt(
            tx_hash=to_hex(raw["transactionHash"]),
            status=int(raw.get("status", 0)),
            block_number=raw.get("blockNumber"),
            from_address=(raw.get("from") or "").lower() or None,
            to_address=to_address.lower() if to_address else None,
            logs=list(raw.get("logs", [])),
        )

    def decode_log(self, raw_log: Any) -> CurationEvent | None:
        """
        Decode a raw log emitted by the curation contract.

        Args:
            raw_log: Log from eth_getLogs or a receipt

        Returns:
            Decoded event, or None if the log is not a Curation event
            of the watched contract
        """
        address = str(raw_log.get("address", "")).lower()
        topics = raw_log.get("topics") or []
        if address != self.contract_address or not topics:
            return None
        if to_hex(topics[0]) != CURATION_EVENT_TOPIC:
            return None

        try:
            decoded = self.contract.events.Curation().process_log(raw_log)
        except Exception as e:
            logger.warning(f"[Curation Client] Undecodable Curation log: {e}")
            return None

        args = decoded["args"]
        return CurationEvent(
            tx_hash=to_hex(decoded["transactionHash"]),
            block_number=int(decoded["blockNumber"]),
            log_index=int(decoded.get("logIndex", 0)),
            curator=str(args["curator"]).lower(),
            creator=str(args["creator"]).lower(),
            token=str(args["token"]).lower(),
            uri=str(args["uri"]),
            amount=int(args["amount"]),
            removed=bool(raw_log.get("removed", False)),
        )


_client: CurationChainClient | None = None


def get_curation_client() -> CurationChainClient:
    """
    Get the process-wide curation chain client.

    Returns:
        CurationChainClient built from settings on first use
    """
    global _client
    if _client is None:
        w3 = Web3(
            Web3.HTTPProvider(
                settings.rpc_url,
                request_kwargs={"timeout": BLOCKCHAIN_RPC_TIMEOUT},
            )
        )
        _client = CurationChainClient(w3, settings.curation_contract_address)
        logger.info(
            f"[Curation Client] Initialized for contract "
            f"{settings.curation_contract_address} on chain {settings.chain_id}"
        )
    return _client
