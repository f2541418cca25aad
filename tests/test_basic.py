"""End-to-end tests of the Basic binding against the simulated chain."""

from __future__ import annotations

import queue
import threading
from decimal import Decimal

import pytest

from smartcontract.bind import FilterOpts, WatchOpts, wait_deployed, wait_mined
from smartcontract.bind.simulated import SimulatedBackend
from smartcontract.client import Client
from smartcontract.contracts.basic import (
    BasicCallerSession,
    BasicRaw,
    BasicSession,
    deploy_basic,
    new_basic,
    new_basic_caller,
)
from smartcontract.currency import gwei_to_wei

GAS_LIMIT = 1_600_000
GAS_PRICE = gwei_to_wei(Decimal("39.576"))


@pytest.fixture(scope="module")
def backend():
    backend = SimulatedBackend(num_accounts=1, auto_commit=True, account_balance=100)
    yield backend
    backend.close()


@pytest.fixture(scope="module")
def client(backend: SimulatedBackend) -> Client:
    return Client(backend, backend.private_keys[0])


@pytest.fixture()
def deployed(client: Client) -> str:
    opts = client.new_transact_opts(GAS_LIMIT, GAS_PRICE, Decimal("0.0"))
    address, tx, _ = deploy_basic(opts, client.backend)
    client.wait_mined(tx)
    return address


class TestBasic:
    def test_version_set_item_and_read_back(self, client: Client, deployed: str) -> None:
        basic = new_basic(deployed, client.backend)

        assert basic.version(client.new_call_opts()) == "1.1"

        opts = client.new_transact_opts(GAS_LIMIT, GAS_PRICE, 0)
        tx = basic.set_item(opts, "bill", 100_000)
        client.wait_mined(tx)

        assert basic.items(client.new_call_opts(), "bill") == 100_000

    def test_unset_key_reads_zero(self, client: Client, deployed: str) -> None:
        basic = new_basic_caller(deployed, client.backend)
        assert basic.items(client.new_call_opts(), "nobody") == 0

    def test_predicted_address_matches_receipt(self, client: Client) -> None:
        opts = client.new_transact_opts(GAS_LIMIT, GAS_PRICE)
        address, tx, basic = deploy_basic(opts, client.backend)

        assert wait_deployed(client.backend, tx) == address
        assert basic.address == address

    def test_filter_item_set(self, client: Client, deployed: str) -> None:
        basic = new_basic(deployed, client.backend)
        for key, value in (("bill", 1), ("ann", 2)):
            tx = basic.set_item(client.new_transact_opts(GAS_LIMIT, GAS_PRICE), key, value)
            client.wait_mined(tx)

        with basic.filter_item_set(FilterOpts(start=0)) as it:
            events = list(it)

        assert [(e.key, e.value) for e in events] == [("bill", 1), ("ann", 2)]
        assert all(e.raw.address == deployed for e in events)
        assert it.error is None

    def test_session(self, client: Client, deployed: str) -> None:
        basic = new_basic(deployed, client.backend)
        session = BasicSession(
            contract=basic,
            call_opts=client.new_call_opts(),
            transact_opts=client.new_transact_opts(GAS_LIMIT, GAS_PRICE),
        )
        client.wait_mined(session.set_item("carol", 7))

        reader = BasicCallerSession(contract=basic, call_opts=client.new_call_opts())
        assert reader.items("carol") == 7
        assert reader.version() == "1.1"

    def test_raw_call(self, client: Client, deployed: str) -> None:
        raw = BasicRaw(new_basic(deployed, client.backend))
        assert raw.call(None, "Version") == ["1.1"]

    def test_watch_item_set(self, client: Client, deployed: str) -> None:
        basic = new_basic(deployed, client.backend)
        sink: queue.Queue = queue.Queue()

        sub = basic.watch_item_set(None, sink)
        try:
            tx = basic.set_item(client.new_transact_opts(GAS_LIMIT, GAS_PRICE), "dave", 11)
            client.wait_mined(tx)
            event = sink.get(timeout=10)
        finally:
            sub.unsubscribe()

        assert (event.key, event.value) == ("dave", 11)
        assert event.raw.address == deployed
        assert sub.err().get(timeout=5) is None

    def test_watch_from_past_block(self, client: Client, deployed: str) -> None:
        basic = new_basic(deployed, client.backend)
        tx = basic.set_item(client.new_transact_opts(GAS_LIMIT, GAS_PRICE), "erin", 12)
        receipt = client.wait_mined(tx)
        sink: queue.Queue = queue.Queue()

        sub = basic.watch_item_set(WatchOpts(start=receipt.block_number), sink)
        try:
            event = sink.get(timeout=10)
        finally:
            sub.unsubscribe()

        assert (event.key, event.value) == ("erin", 12)
        assert event.raw.block_number == receipt.block_number


class TestManualCommit:
    @pytest.fixture()
    def backend(self) -> SimulatedBackend:
        return SimulatedBackend(num_accounts=1, auto_commit=False)

    @pytest.fixture()
    def client(self, backend: SimulatedBackend) -> Client:
        return Client(backend, backend.private_keys[0])

    def test_deploy_and_set_item_after_commit(
        self, backend: SimulatedBackend, client: Client
    ) -> None:
        address, tx, basic = deploy_basic(client.new_transact_opts(GAS_LIMIT, GAS_PRICE), backend)
        assert backend.transaction_receipt(tx.hash) is None

        backend.commit()
        assert wait_mined(backend, tx, timeout=5).contract_address.lower() == address.lower()
        assert basic.version(None) == "1.1"

        tx = basic.set_item(client.new_transact_opts(GAS_LIMIT, GAS_PRICE), "bill", 100_000)
        assert basic.items(None, "bill") == 0

        backend.commit()
        assert wait_mined(backend, tx, timeout=5).status == 1
        assert basic.items(None, "bill") == 100_000

    def test_held_transactions_advance_nonce(
        self, backend: SimulatedBackend, client: Client
    ) -> None:
        first = client.new_transact_opts(GAS_LIMIT, GAS_PRICE)
        deploy_basic(first, backend)
        second = client.new_transact_opts(GAS_LIMIT, GAS_PRICE)
        address, tx, basic = deploy_basic(second, backend)

        assert second.nonce == first.nonce + 1
        backend.commit()
        wait_mined(backend, tx, timeout=5)
        assert basic.version(None) == "1.1"

    def test_commit_without_transactions_mines_a_block(self, backend: SimulatedBackend) -> None:
        before = backend.block_number()
        backend.commit()
        assert backend.block_number() == before + 1

    def test_chain_id_waits_for_lock(self, backend: SimulatedBackend) -> None:
        results: list[int] = []
        reader = threading.Thread(target=lambda: results.append(backend.chain_id()))

        with backend._lock:
            reader.start()
            reader.join(timeout=0.2)
            assert results == []
        reader.join(timeout=5)

        assert results and results[0] > 0
