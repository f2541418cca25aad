"""
Simulated backend - an in-memory chain for tests.

Wraps eth-tester's ``EthereumTester`` on the py-evm backend.  Fresh
accounts are generated with eth-account and funded from the tester's
pre-funded genesis account, so transactions are signed exactly as they
would be for a real node.
"""

from __future__ import annotations

import logging
import queue
import threading
from decimal import Decimal
from typing import Any, Optional, Union

from eth_account import Account
from eth_tester import EthereumTester, PyEVMBackend
from eth_hash.auto import keccak
from eth_tester.exceptions import TransactionNotFound
from eth_utils import to_wei

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
)
from .event import Subscription, polling_subscription

logger = logging.getLogger(__name__)

DEFAULT_GAS_PRICE = 1_000_000_000  # 1 gwei

# eth-tester default; py-evm chains may leave chain_id unset.
DEFAULT_CHAIN_ID = 131277322940537


class SimulatedBackend(ContractBackend):
    """
    In-memory contract backend.

    Args:
        num_accounts: Number of funded accounts to create
        auto_commit: Mine every transaction as soon as it is sent
        account_balance: Starting balance of each account, in ether
        poll_interval: Seconds between filter polls for subscriptions
    """

    def __init__(
        self,
        num_accounts: int = 1,
        auto_commit: bool = True,
        account_balance: Union[int, Decimal] = 100,
        poll_interval: float = 0.1,
    ) -> None:
        self.poll_interval = poll_interval
        self._lock = threading.RLock()
        self._tester = EthereumTester(backend=PyEVMBackend())
        self._funder = self._tester.get_accounts()[0]

        self.private_keys: list[str] = []
        self.accounts: list[str] = []
        balance_wei = to_wei(account_balance, "ether")
        for _ in range(num_accounts):
            account = Account.create()
            self._tester.send_transaction(
                {
                    "from": self._funder,
                    "to": account.address,
                    "value": balance_wei,
                    "gas": 21000,
                }
            )
            self.private_keys.append("0x" + bytes(account.key).hex())
            self.accounts.append(account.address)

        self.auto_commit = auto_commit
        # (sender, raw tx) held until commit() when auto-commit is off
        self._held: list[tuple[str, str]] = []

        logger.debug(
            "simulated backend ready: %d account(s), %s ether each",
            num_accounts,
            account_balance,
        )

    @property
    def tester(self) -> EthereumTester:
        return self._tester

    def commit(self) -> None:
        """
        Mine the transactions held since the last commit.

        Each held transaction is sent in order and mined into its own
        block. With nothing held, a single empty block is mined.
        """
        with self._lock:
            if not self._held:
                self._tester.mine_blocks(1)
                return
            held, self._held = self._held, []
            for _, raw_tx in held:
                self._tester.send_raw_transaction(raw_tx)
            logger.debug("committed %d transaction(s)", len(held))

    # -- caller -------------------------------------------------------------

    def code_at(self, address: str, block: BlockId = "latest") -> bytes:
        with self._lock:
            return to_bytes(self._tester.get_code(address, block))

    def _gas_cap(self) -> int:
        return self._tester.get_block_by_number("latest")["gas_limit"]

    def call_contract(self, msg: dict, block: BlockId = "latest") -> bytes:
        with self._lock:
            txn: dict[str, Any] = {
                "from": msg.get("from") or self._funder,
                "to": msg["to"],
                "data": to_hex(msg.get("data", b"")),
                "gas": msg.get("gas") or self._gas_cap(),
            }
            if msg.get("value"):
                txn["value"] = msg["value"]
            return to_bytes(self._tester.call(txn, block))

    # -- transactor ---------------------------------------------------------

    def chain_id(self) -> int:
        with self._lock:
            return self._tester.backend.chain.chain_id or DEFAULT_CHAIN_ID

    def pending_code_at(self, address: str) -> bytes:
        return self.code_at(address, "pending")

    def pending_nonce_at(self, address: str) -> int:
        with self._lock:
            held = sum(1 for sender, _ in self._held if sender.lower() == address.lower())
            return self._tester.get_nonce(address, "pending") + held

    def suggest_gas_price(self) -> int:
        with self._lock:
            block = self._tester.get_block_by_number("pending")
        base_fee = block.get("base_fee_per_gas")
        if not base_fee:
            return DEFAULT_GAS_PRICE
        return base_fee * 2

    def estimate_gas(self, msg: dict) -> int:
        txn: dict[str, Any] = {
            "from": msg["from"],
            "data": to_hex(msg.get("data", b"")),
            "value": msg.get("value", 0),
        }
        if msg.get("to"):
            txn["to"] = msg["to"]
        with self._lock:
            return self._tester.estimate_gas(txn)

    def send_transaction(self, raw_tx: str) -> str:
        if self.auto_commit:
            with self._lock:
                return self._tester.send_raw_transaction(raw_tx)

        sender = Account.recover_transaction(raw_tx)
        with self._lock:
            self._held.append((sender, raw_tx))
        return "0x" + keccak(to_bytes(raw_tx)).hex()

    # -- chain state --------------------------------------------------------

    def transaction_receipt(self, tx_hash: str) -> Optional[Receipt]:
        with self._lock:
            try:
                receipt = self._tester.get_transaction_receipt(tx_hash)
            except TransactionNotFound:
                return None
        if receipt.get("block_number") is None:
            return None
        return receipt_from_dict(receipt)

    def balance_at(self, address: str, block: BlockId = "latest") -> int:
        with self._lock:
            return self._tester.get_balance(address, block)

    def block_number(self) -> int:
        with self._lock:
            return self._tester.get_block_by_number("latest")["number"]

    # -- filterer -----------------------------------------------------------

    @staticmethod
    def _filter_params(query: FilterQuery) -> dict[str, Any]:
        topics: list[Any] = []
        for group in query.topics:
            if group is None:
                topics.append(None)
            elif len(group) == 1:
                topics.append(to_hex(group[0]))
            else:
                topics.append([to_hex(t) for t in group])

        params: dict[str, Any] = {
            "from_block": query.from_block,
            "to_block": query.to_block,
            "topics": topics or None,
        }
        if len(query.addresses) == 1:
            params["address"] = query.addresses[0]
        elif query.addresses:
            params["address"] = list(query.addresses)
        return params

    def filter_logs(self, query: FilterQuery) -> list[Log]:
        with self._lock:
            filter_id = self._tester.create_log_filter(**self._filter_params(query))
            try:
                entries = self._tester.get_all_filter_logs(filter_id)
            finally:
                self._tester.delete_filter(filter_id)
        return [log_from_dict(entry) for entry in entries]

    def subscribe_filter_logs(self, query: FilterQuery, sink: "queue.Queue[Log]") -> Subscription:
        with self._lock:
            filter_id = self._tester.create_log_filter(**self._filter_params(query))

        def poll() -> list[Log]:
            with self._lock:
                entries = self._tester.get_only_filter_changes(filter_id)
            return [log_from_dict(entry) for entry in entries]

        def uninstall() -> None:
            with self._lock:
                self._tester.delete_filter(filter_id)

        return polling_subscription(
            poll, sink, self.poll_interval, uninstall=uninstall, name=f"sim-filter-{filter_id}"
        )
