"""
Contract backends - the chain-facing half of the binding layer.

A backend answers the three kinds of questions a bound contract asks:

- caller:     code lookups and read-only calls (eth_call)
- transactor: nonces, gas price/limit suggestions, raw transaction submission
- filterer:   historical log queries and live log subscriptions

Two implementations ship with the package: ``RPCBackend`` (JSON-RPC over
httpx) and ``SimulatedBackend`` (in-memory eth-tester chain).  Both
normalize their results into the plain dataclasses defined here.
"""

from __future__ import annotations

import queue
from abc import ABCMeta, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from eth_utils import to_checksum_address

BlockId = Union[int, str]


@dataclass(frozen=True)
class Log:
    """A raw contract event log."""

    address: str
    topics: list[bytes]
    data: bytes
    block_number: Optional[int] = None
    transaction_hash: Optional[str] = None
    transaction_index: Optional[int] = None
    block_hash: Optional[str] = None
    log_index: Optional[int] = None
    removed: bool = False


@dataclass(frozen=True)
class Receipt:
    """Receipt of a mined transaction."""

    transaction_hash: str
    block_number: int
    status: int
    gas_used: int
    contract_address: Optional[str] = None
    logs: list[Log] = field(default_factory=list)


@dataclass(frozen=True)
class Transaction:
    """A signed transaction as it was submitted to the backend."""

    hash: str
    nonce: int
    to: Optional[str]
    value: int
    gas: int
    gas_price: int
    data: bytes
    raw: bytes


@dataclass
class FilterQuery:
    """Log filter criteria.  ``topics`` entries may be None (wildcard)."""

    from_block: Optional[int] = None
    to_block: Optional[int] = None
    addresses: list[str] = field(default_factory=list)
    topics: list[Optional[list[bytes]]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Normalization helpers shared by backends
# ---------------------------------------------------------------------------


def to_int(value: Any) -> int:
    """Accept an int or a 0x-prefixed hex quantity."""
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    return int(value, 16)


def to_bytes(value: Any) -> bytes:
    """Accept bytes or a 0x-prefixed hex string."""
    if value is None:
        return b""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    text = value[2:] if value.startswith("0x") else value
    return bytes.fromhex(text)


def to_hex(value: Any) -> str:
    """Render bytes or a hex string as a 0x-prefixed hex string."""
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value if value.startswith("0x") else "0x" + value


def _pick(data: dict, snake: str, camel: str) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel)


def log_from_dict(data: dict) -> Log:
    """Build a Log from an eth-tester (snake_case) or JSON-RPC (camelCase) dict."""
    block_number = _pick(data, "block_number", "blockNumber")
    tx_index = _pick(data, "transaction_index", "transactionIndex")
    log_index = _pick(data, "log_index", "logIndex")
    tx_hash = _pick(data, "transaction_hash", "transactionHash")
    block_hash = _pick(data, "block_hash", "blockHash")
    return Log(
        address=to_checksum_address(data["address"]),
        topics=[to_bytes(t) for t in data.get("topics", [])],
        data=to_bytes(data.get("data")),
        block_number=None if block_number is None else to_int(block_number),
        transaction_hash=None if tx_hash is None else to_hex(tx_hash),
        transaction_index=None if tx_index is None else to_int(tx_index),
        block_hash=None if block_hash is None else to_hex(block_hash),
        log_index=None if log_index is None else to_int(log_index),
        removed=bool(data.get("removed", False)),
    )


def receipt_from_dict(data: dict) -> Receipt:
    """Build a Receipt from an eth-tester or JSON-RPC receipt dict."""
    contract_address = _pick(data, "contract_address", "contractAddress")
    return Receipt(
        transaction_hash=to_hex(_pick(data, "transaction_hash", "transactionHash")),
        block_number=to_int(_pick(data, "block_number", "blockNumber")),
        status=to_int(data.get("status", 1)),
        gas_used=to_int(_pick(data, "gas_used", "gasUsed")),
        contract_address=to_checksum_address(contract_address) if contract_address else None,
        logs=[log_from_dict(entry) for entry in data.get("logs", [])],
    )


# ---------------------------------------------------------------------------
# Backend interface
# ---------------------------------------------------------------------------


class ContractBackend(metaclass=ABCMeta):
    """Caller, transactor and filterer in one object."""

    #
    # Caller
    #
    @abstractmethod
    def code_at(self, address: str, block: BlockId = "latest") -> bytes:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def call_contract(self, msg: dict, block: BlockId = "latest") -> bytes:
        raise NotImplementedError("Must be implemented by subclasses")

    #
    # Transactor
    #
    @abstractmethod
    def chain_id(self) -> int:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def pending_code_at(self, address: str) -> bytes:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def pending_nonce_at(self, address: str) -> int:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def suggest_gas_price(self) -> int:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def estimate_gas(self, msg: dict) -> int:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def send_transaction(self, raw_tx: str) -> str:
        raise NotImplementedError("Must be implemented by subclasses")

    #
    # Chain state
    #
    @abstractmethod
    def transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def balance_at(self, address: str, block: BlockId = "latest") -> int:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def block_number(self) -> int:
        raise NotImplementedError("Must be implemented by subclasses")

    #
    # Filterer
    #
    @abstractmethod
    def filter_logs(self, query: FilterQuery) -> list[Log]:
        raise NotImplementedError("Must be implemented by subclasses")

    @abstractmethod
    def subscribe_filter_logs(self, query: FilterQuery, sink: "queue.Queue[Log]"):
        """Deliver matching logs to ``sink`` until unsubscribed.

        Returns a ``Subscription``.
        """
        raise NotImplementedError("Must be implemented by subclasses")

    def close(self) -> None:
        """Release backend resources."""

    def __enter__(self) -> "ContractBackend":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
