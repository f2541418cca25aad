"""
Bound contracts - generic call / transact / filter wrappers.

A ``BoundContract`` pairs a contract address with its parsed ABI and the
backends used to reach it.  Generated bindings forward every method to one
of the primitives here; nothing in this module knows about a particular
contract.

Signing is done with eth-account, encoding with eth-abi.  All gas is paid
by the account in ``TransactOpts``.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from typing import Any, Optional, Union

import rlp
from eth_abi import encode
from eth_account.signers.local import LocalAccount
from eth_hash.auto import keccak
from eth_utils import to_canonical_address, to_checksum_address

from .abi import ABI, BindError, canonical_type, is_dynamic_type
from .backend import ContractBackend, FilterQuery, Log, Receipt, Transaction
from .event import Subscription, new_subscription

logger = logging.getLogger(__name__)


class NoCodeError(BindError):
    """The target address holds no contract code."""

    def __init__(self, address: Optional[str] = None) -> None:
        message = "no contract code at given address"
        if address:
            message = f"no contract code at {address}"
        super().__init__(message)
        self.address = address


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------


@dataclass
class CallOpts:
    """Options for read-only calls."""

    pending: bool = False
    from_address: Optional[str] = None
    block_number: Optional[int] = None


@dataclass
class TransactOpts:
    """
    Options for state-changing transactions.

    ``nonce``, ``gas_price`` and ``gas_limit`` are filled in from the
    backend when left as None.  With ``no_send`` the transaction is signed
    but not submitted.
    """

    account: LocalAccount
    nonce: Optional[int] = None
    value: int = 0
    gas_price: Optional[int] = None
    gas_limit: Optional[int] = None
    no_send: bool = False

    @property
    def sender(self) -> str:
        return self.account.address


@dataclass
class FilterOpts:
    """Block range for historical log queries (``end`` None means latest)."""

    start: int = 0
    end: Optional[int] = None


@dataclass
class WatchOpts:
    """Start block for live log subscriptions (None means latest)."""

    start: Optional[int] = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def create_address(sender: str, nonce: int) -> str:
    """Address of a contract created by ``sender`` at ``nonce``."""
    digest = keccak(rlp.encode([to_canonical_address(sender), nonce]))
    return to_checksum_address(digest[12:])


def _topic(typ: str, value: Any) -> bytes:
    if is_dynamic_type(typ):
        raw = value.encode("utf-8") if isinstance(value, str) else bytes(value)
        return keccak(raw)
    return encode([typ], [value])


def make_topics(abi: ABI, name: str, query: tuple) -> list[Optional[list[bytes]]]:
    """
    Build the topic filter for event ``name``.

    ``query`` holds one entry per indexed parameter: a list of accepted
    values, or None/empty for a wildcard.
    """
    indexed = [p for p in abi.event(name).get("inputs", []) if p.get("indexed", False)]
    if len(query) > len(indexed):
        raise BindError(f"too many topic filters for event '{name}'")

    topics: list[Optional[list[bytes]]] = [[abi.event_topic(name)]]
    for param, accepted in zip(indexed, query):
        if not accepted:
            topics.append(None)
            continue
        typ = canonical_type(param)
        topics.append([_topic(typ, value) for value in accepted])
    while len(topics) > 1 and topics[-1] is None:
        topics.pop()
    return topics


# ---------------------------------------------------------------------------
# BoundContract
# ---------------------------------------------------------------------------


class BoundContract:
    """Generic wrapper around a deployed contract."""

    def __init__(
        self,
        address: Optional[str],
        abi: ABI,
        caller: Optional[ContractBackend] = None,
        transactor: Optional[ContractBackend] = None,
        filterer: Optional[ContractBackend] = None,
    ) -> None:
        self.address = to_checksum_address(address) if address else None
        self.abi = abi
        self._caller = caller
        self._transactor = transactor
        self._filterer = filterer

    @staticmethod
    def _require(backend: Optional[ContractBackend], role: str) -> ContractBackend:
        if backend is None:
            raise BindError(f"contract is not bound to a {role}")
        return backend

    # -- calls --------------------------------------------------------------

    def call(self, opts: Optional[CallOpts], method: str, *params: Any) -> list[Any]:
        """
        Invoke a constant method and return its decoded outputs.

        Raises:
            NoCodeError: If nothing is deployed at the contract address
            BindError: If the call returned no data
        """
        opts = opts or CallOpts()
        caller = self._require(self._caller, "caller")
        msg = {
            "from": opts.from_address,
            "to": self.address,
            "data": self.abi.pack(method, *params),
        }

        if opts.pending:
            output = caller.call_contract(msg, "pending")
            if not output and not caller.pending_code_at(self.address):
                raise NoCodeError(self.address)
        else:
            block = opts.block_number if opts.block_number is not None else "latest"
            output = caller.call_contract(msg, block)
            if not output and not caller.code_at(self.address, block):
                raise NoCodeError(self.address)

        if not output and self.abi.method(method).get("outputs"):
            raise BindError(f"call to '{method}' returned no data")
        return self.abi.unpack(method, output)

    # -- transactions -------------------------------------------------------

    def transact(self, opts: TransactOpts, method: str, *params: Any) -> Transaction:
        """Invoke a paid method with ``params``."""
        return self._transact(opts, self.address, self.abi.pack(method, *params))

    def raw_transact(self, opts: TransactOpts, calldata: bytes) -> Transaction:
        """Send pre-packed calldata to the contract."""
        return self._transact(opts, self.address, calldata)

    def transfer(self, opts: TransactOpts) -> Transaction:
        """Plain value transfer, hitting the contract's receive/fallback."""
        return self._transact(opts, self.address, b"")

    def _transact(self, opts: TransactOpts, to: Optional[str], data: bytes) -> Transaction:
        transactor = self._require(self._transactor, "transactor")
        sender = opts.sender

        nonce = opts.nonce
        if nonce is None:
            nonce = transactor.pending_nonce_at(sender)

        gas_price = opts.gas_price
        if gas_price is None:
            gas_price = transactor.suggest_gas_price()

        gas = opts.gas_limit
        if gas is None:
            if to is not None and not transactor.pending_code_at(to):
                raise NoCodeError(to)
            msg: dict[str, Any] = {"from": sender, "value": opts.value, "data": data}
            if to is not None:
                msg["to"] = to
            gas = transactor.estimate_gas(msg)

        tx: dict[str, Any] = {
            "nonce": nonce,
            "gasPrice": gas_price,
            "gas": gas,
            "value": opts.value,
            "data": "0x" + data.hex(),
            "chainId": transactor.chain_id(),
        }
        if to is not None:
            tx["to"] = to

        signed = opts.account.sign_transaction(tx)
        raw = bytes(signed.raw_transaction)
        tx_hash = "0x" + bytes(signed.hash).hex()

        if not opts.no_send:
            transactor.send_transaction("0x" + raw.hex())
            logger.debug("sent tx %s nonce=%d to=%s gas=%d", tx_hash, nonce, to, gas)

        return Transaction(
            hash=tx_hash,
            nonce=nonce,
            to=to,
            value=opts.value,
            gas=gas,
            gas_price=gas_price,
            data=data,
            raw=raw,
        )

    # -- logs ---------------------------------------------------------------

    def filter_logs(
        self, opts: Optional[FilterOpts], name: str, *query: Any
    ) -> tuple["queue.Queue[Log]", Subscription]:
        """
        Retrieve past logs of event ``name``.

        Logs are pushed into the returned queue by a background producer;
        the subscription's err queue signals completion.
        """
        opts = opts or FilterOpts()
        filterer = self._require(self._filterer, "filterer")
        filter_query = FilterQuery(
            from_block=opts.start,
            to_block=opts.end,
            addresses=[self.address] if self.address else [],
            topics=make_topics(self.abi, name, query),
        )
        logs: "queue.Queue[Log]" = queue.Queue()

        def producer(quit_event: threading.Event) -> None:
            for log in filterer.filter_logs(filter_query):
                if quit_event.is_set():
                    break
                logs.put(log)
            return None

        return logs, new_subscription(producer, name=f"filter-{name}")

    def watch_logs(
        self, opts: Optional[WatchOpts], name: str, *query: Any
    ) -> tuple["queue.Queue[Log]", Subscription]:
        """Subscribe to future logs of event ``name``."""
        opts = opts or WatchOpts()
        filterer = self._require(self._filterer, "filterer")
        filter_query = FilterQuery(
            from_block=opts.start,
            addresses=[self.address] if self.address else [],
            topics=make_topics(self.abi, name, query),
        )
        logs: "queue.Queue[Log]" = queue.Queue()
        sub = filterer.subscribe_filter_logs(filter_query, logs)
        return logs, sub

    def unpack_log(self, name: str, log: Log) -> dict[str, Any]:
        """Decode ``log`` as event ``name``."""
        return self.abi.unpack_log(name, log)


# ---------------------------------------------------------------------------
# Deployment and mining
# ---------------------------------------------------------------------------


def deploy_contract(
    opts: TransactOpts,
    abi: ABI,
    bytecode: bytes,
    backend: ContractBackend,
    *params: Any,
) -> tuple[str, Transaction, BoundContract]:
    """
    Deploy a contract and bind to it.

    The returned address is derived from sender and nonce, so it is known
    before the creation transaction is mined.
    """
    contract = BoundContract(None, abi, backend, backend, backend)
    tx = contract._transact(opts, None, bytecode + abi.pack("", *params))
    address = create_address(opts.sender, tx.nonce)
    contract.address = address
    logger.debug("deploying contract at %s (tx %s)", address, tx.hash)
    return address, tx, contract


def wait_mined(
    backend: ContractBackend,
    tx: Union[Transaction, str],
    timeout: float = 120,
    poll_interval: float = 1.0,
) -> Receipt:
    """
    Wait until ``tx`` is mined and return its receipt.

    Raises:
        TimeoutError: If no receipt shows up within ``timeout`` seconds
    """
    tx_hash = tx.hash if isinstance(tx, Transaction) else tx
    start = time.time()
    while time.time() - start < timeout:
        receipt = backend.transaction_receipt(tx_hash)
        if receipt is not None:
            return receipt
        time.sleep(poll_interval)

    raise TimeoutError(f"Transaction {tx_hash} not mined within {timeout}s")


def wait_deployed(
    backend: ContractBackend,
    tx: Union[Transaction, str],
    timeout: float = 120,
    poll_interval: float = 1.0,
) -> str:
    """Wait for a creation transaction and return the deployed address."""
    receipt = wait_mined(backend, tx, timeout=timeout, poll_interval=poll_interval)
    if not receipt.contract_address:
        raise BindError("receipt has no contract address")
    if not backend.code_at(receipt.contract_address):
        raise NoCodeError(receipt.contract_address)
    return receipt.contract_address
