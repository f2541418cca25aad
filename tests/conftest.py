from __future__ import annotations

import queue
import threading
from typing import Optional

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from smartcontract.bind import ContractBackend, FilterQuery, Log, Receipt
from smartcontract.bind.event import new_subscription
from smartcontract.contracts.basic import BASIC_META_DATA

CONTRACT_ADDRESS = to_checksum_address("0x" + "11" * 20)


def item_set_log(key: str, value: int, block_number: int = 1) -> Log:
    """Raw ItemSet log as the chain would emit it."""
    return Log(
        address=CONTRACT_ADDRESS,
        topics=[BASIC_META_DATA.get_abi().event_topic("ItemSet")],
        data=encode(["string", "uint256"], [key, value]),
        block_number=block_number,
    )


class FakeBackend(ContractBackend):
    """Scriptable in-process backend that records what it was asked."""

    def __init__(self) -> None:
        self.code: dict[str, bytes] = {}
        self.call_results: list[bytes] = []
        self.calls: list[tuple[dict, object]] = []
        self.estimates: list[dict] = []
        self.sent: list[str] = []
        self.nonces: dict[str, int] = {}
        self.balances: dict[str, int] = {}
        self.receipts: dict[str, Receipt] = {}
        self.logs: list[Log] = []
        self.queries: list[FilterQuery] = []
        self.gas_price = 2_000_000_000
        self.gas_estimate = 50_000
        self.sink: Optional[queue.Queue] = None
        self.upstream_error: Optional[Exception] = None

    def code_at(self, address, block="latest"):
        return self.code.get(address, b"")

    def call_contract(self, msg, block="latest"):
        self.calls.append((msg, block))
        return self.call_results.pop(0) if self.call_results else b""

    def chain_id(self):
        return 1337

    def pending_code_at(self, address):
        return self.code_at(address, "pending")

    def pending_nonce_at(self, address):
        return self.nonces.get(address, 0)

    def suggest_gas_price(self):
        return self.gas_price

    def estimate_gas(self, msg):
        self.estimates.append(msg)
        return self.gas_estimate

    def send_transaction(self, raw_tx):
        self.sent.append(raw_tx)
        return "0x" + "ab" * 32

    def transaction_receipt(self, tx_hash):
        return self.receipts.get(tx_hash)

    def balance_at(self, address, block="latest"):
        return self.balances.get(address, 0)

    def block_number(self):
        return 1

    def filter_logs(self, query):
        self.queries.append(query)
        return list(self.logs)

    def subscribe_filter_logs(self, query, sink):
        self.queries.append(query)
        self.sink = sink

        def producer(quit_event: threading.Event):
            while not quit_event.wait(0.01):
                if self.upstream_error is not None:
                    return self.upstream_error
            return None

        return new_subscription(producer, name="fake-filter")


@pytest.fixture()
def fake_backend() -> FakeBackend:
    backend = FakeBackend()
    backend.code[CONTRACT_ADDRESS] = b"\x60\x80"
    return backend
