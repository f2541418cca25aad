"""
JSON-RPC backend.

Lightweight alternative to web3.py: httpx for transport, results
normalized into the dataclasses of ``backend``.  Log subscriptions poll
``eth_getFilterChanges`` on a background thread.
"""

from __future__ import annotations

import itertools
import logging
import os
import queue
from typing import Any, Optional

import httpx

from .backend import (
    BlockId,
    ContractBackend,
    FilterQuery,
    Log,
    Receipt,
    log_from_dict,
    receipt_from_dict,
    to_bytes,
    to_hex,
    to_int,
)
from .event import Subscription, polling_subscription

logger = logging.getLogger(__name__)

DEFAULT_RPC_URL = "http://localhost:8545"


def get_rpc_url() -> str:
    """Get the RPC URL from environment or default."""
    return os.environ.get("ETH_RPC_URL", DEFAULT_RPC_URL)


class RPCError(RuntimeError):
    """JSON-RPC error object returned by the node."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(f"RPC error {code}: {message}")
        self.code = code
        self.message = message
        self.data = data


def _block_param(block: Optional[BlockId]) -> str:
    if block is None:
        return "latest"
    if isinstance(block, int):
        return hex(block)
    return block


def _call_object(msg: dict) -> dict[str, Any]:
    obj: dict[str, Any] = {}
    if msg.get("from"):
        obj["from"] = msg["from"]
    if msg.get("to"):
        obj["to"] = msg["to"]
    if msg.get("data"):
        obj["data"] = to_hex(msg["data"])
    if msg.get("value"):
        obj["value"] = hex(msg["value"])
    if msg.get("gas"):
        obj["gas"] = hex(msg["gas"])
    return obj


def _filter_object(query: FilterQuery) -> dict[str, Any]:
    obj: dict[str, Any] = {
        "fromBlock": _block_param(query.from_block),
        "toBlock": _block_param(query.to_block),
        "topics": [
            None if group is None else [to_hex(t) for t in group]
            for group in query.topics
        ],
    }
    if query.addresses:
        obj["address"] = list(query.addresses)
    return obj


class RPCBackend(ContractBackend):
    """
    Contract backend talking to an Ethereum node over HTTP JSON-RPC.

    Args:
        url: RPC endpoint (default: ``ETH_RPC_URL`` or localhost:8545)
        timeout: HTTP timeout in seconds
        poll_interval: Seconds between filter polls for subscriptions
        transport: Optional httpx transport (used by tests)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 30,
        poll_interval: float = 2.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url or get_rpc_url()
        self.poll_interval = poll_interval
        self._client = httpx.Client(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)
        self._chain_id: Optional[int] = None

    def _rpc_call(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Raises:
            RPCError: If the node answers with an error object
            httpx.HTTPError: On transport failures
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("rpc %s %s", method, params)

        response = self._client.post(self.url, json=payload)
        response.raise_for_status()
        data = response.json()

        if "error" in data:
            error = data["error"]
            raise RPCError(error.get("code", -1), error.get("message", ""), error.get("data"))

        return data.get("result")

    # -- caller -------------------------------------------------------------

    def code_at(self, address: str, block: BlockId = "latest") -> bytes:
        return to_bytes(self._rpc_call("eth_getCode", [address, _block_param(block)]))

    def call_contract(self, msg: dict, block: BlockId = "latest") -> bytes:
        result = self._rpc_call("eth_call", [_call_object(msg), _block_param(block)])
        return to_bytes(result)

    # -- transactor ---------------------------------------------------------

    def chain_id(self) -> int:
        if self._chain_id is None:
            self._chain_id = to_int(self._rpc_call("eth_chainId", []))
        return self._chain_id

    def pending_code_at(self, address: str) -> bytes:
        return self.code_at(address, "pending")

    def pending_nonce_at(self, address: str) -> int:
        return to_int(self._rpc_call("eth_getTransactionCount", [address, "pending"]))

    def suggest_gas_price(self) -> int:
        return to_int(self._rpc_call("eth_gasPrice", []))

    def estimate_gas(self, msg: dict) -> int:
        return to_int(self._rpc_call("eth_estimateGas", [_call_object(msg)]))

    def send_transaction(self, raw_tx: str) -> str:
        return self._rpc_call("eth_sendRawTransaction", [raw_tx])

    # -- chain state --------------------------------------------------------

    def transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        result = self._rpc_call("eth_getTransactionReceipt", [tx_hash])
        if result is None:
            return None
        return receipt_from_dict(result)

    def balance_at(self, address: str, block: BlockId = "latest") -> int:
        return to_int(self._rpc_call("eth_getBalance", [address, _block_param(block)]))

    def block_number(self) -> int:
        return to_int(self._rpc_call("eth_blockNumber", []))

    # -- filterer -----------------------------------------------------------

    def filter_logs(self, query: FilterQuery) -> list[Log]:
        result = self._rpc_call("eth_getLogs", [_filter_object(query)])
        return [log_from_dict(entry) for entry in result or []]

    def subscribe_filter_logs(self, query: FilterQuery, sink: "queue.Queue[Log]") -> Subscription:
        filter_id = self._rpc_call("eth_newFilter", [_filter_object(query)])
        logger.debug("installed log filter %s", filter_id)

        def poll() -> list[Log]:
            changes = self._rpc_call("eth_getFilterChanges", [filter_id])
            return [log_from_dict(entry) for entry in changes or []]

        def uninstall() -> None:
            self._rpc_call("eth_uninstallFilter", [filter_id])

        return polling_subscription(
            poll, sink, self.poll_interval, uninstall=uninstall, name=f"rpc-filter-{filter_id}"
        )

    def close(self) -> None:
        self._client.close()
