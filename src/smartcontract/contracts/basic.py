"""
Basic contract bindings for Python.
This file is auto-generated - DO NOT EDIT manually.
"""

from __future__ import annotations

import queue
import threading
from dataclasses import dataclass
from typing import Any, Optional

from ..bind import (
    BoundContract,
    CallOpts,
    ContractBackend,
    FilterOpts,
    Log,
    MetaData,
    Subscription,
    TransactOpts,
    Transaction,
    WatchOpts,
    deploy_contract,
    new_subscription,
)

# Seconds between checks of the upstream subscription while waiting for logs.
_POLL_INTERVAL = 0.05


BASIC_META_DATA = MetaData(
    abi="[{\"inputs\":[],\"stateMutability\":\"nonpayable\",\"type\":\"constructor\"},{\"anonymous\":false,\"inputs\":[{\"indexed\":false,\"internalType\":\"string\",\"name\":\"key\",\"type\":\"string\"},{\"indexed\":false,\"internalType\":\"uint256\",\"name\":\"value\",\"type\":\"uint256\"}],\"name\":\"ItemSet\",\"type\":\"event\"},{\"inputs\":[{\"internalType\":\"string\",\"name\":\"\",\"type\":\"string\"}],\"name\":\"Items\",\"outputs\":[{\"internalType\":\"uint256\",\"name\":\"\",\"type\":\"uint256\"}],\"stateMutability\":\"view\",\"type\":\"function\"},{\"inputs\":[{\"internalType\":\"string\",\"name\":\"key\",\"type\":\"string\"},{\"internalType\":\"uint256\",\"name\":\"value\",\"type\":\"uint256\"}],\"name\":\"SetItem\",\"outputs\":[],\"stateMutability\":\"nonpayable\",\"type\":\"function\"},{\"inputs\":[],\"name\":\"Version\",\"outputs\":[{\"internalType\":\"string\",\"name\":\"\",\"type\":\"string\"}],\"stateMutability\":\"view\",\"type\":\"function\"}]",
    bin="0x608060405234801561001057600080fd5b506040518060400160405280600381526020017f312e3100000000000000000000000000000000000000000000000000000000008152506000908161005591906102ab565b5061037d565b600081519050919050565b7f4e487b7100000000000000000000000000000000000000000000000000000000600052604160045260246000fd5b7f4e487b7100000000000000000000000000000000000000000000000000000000600052602260045260246000fd5b600060028204905060018216806100dc57607f821691505b6020821081036100ef576100ee610095565b5b50919050565b60008190508160005260206000209050919050565b60006020601f8301049050919050565b600082821b905092915050565b6000600883026101577fffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffffff8261011a565b610161868361011a565b95508019841693508086168417925050509392505050565b6000819050919050565b6000819050919050565b60006101a86101a361019e84610179565b610183565b610179565b9050919050565b6000819050919050565b6101c28361018d565b6101d66101ce826101af565b848454610127565b825550505050565b600090565b6101eb6101de565b6101f68184846101b9565b505050565b5b8181101561021a5761020f6000826101e3565b6001810190506101fc565b5050565b601f82111561025f57610230816100f5565b6102398461010a565b81016020851015610248578190505b61025c6102548561010a565b8301826101fb565b50505b505050565b600082821c905092915050565b600061028260001984600802610264565b1980831691505092915050565b600061029b8383610271565b9150826002028217905092915050565b6102b48261005b565b67ffffffffffffffff8111156102cd576102cc610066565b5b6102d782546100c4565b6102e282828561021e565b600060209050601f8311600181146103155760008415610303578287015190505b61030d858261028f565b865550610375565b601f198416610323866100f5565b60005b8281101561034b57848901518255600182019150602085019450602081019050610326565b868310156103685784890151610364601f891682610271565b8355505b6001600288020188555050505b505050505050565b6105e58061038c6000396000f3fe608060405234801561001057600080fd5b50600436106100415760003560e01c80634547a6b3146100465780638c5cf3ed14610076578063bb62860d14610092575b600080fd5b610060600480360381019061005b9190610326565b6100b0565b60405161006d9190610388565b60405180910390f35b610090600480360381019061008b91906103cf565b6100de565b005b61009a61013e565b6040516100a791906104aa565b60405180910390f35b6001818051602081018201805184825260208301602085012081835280955050505050506000915090505481565b806001836040516100ef9190610508565b9081526020016040518091039020819055507f814c96094cf9633fd519eab4539bc5f26a8ab7965b7243057596bafd3318e60f828260405161013292919061051f565b60405180910390a15050565b6000805461014b9061057e565b80601f01602080910402602001604051908101604052809291908181526020018280546101779061057e565b80156101c45780601f10610199576101008083540402835291602001916101c4565b820191906000526020600020905b8154815290600101906020018083116101a757829003601f168201915b505050505081565b6000604051905090565b600080fd5b600080fd5b600080fd5b600080fd5b6000601f19601f8301169050919050565b7f4e487b7100000000000000000000000000000000000000000000000000000000600052604160045260246000fd5b610233826101ea565b810181811067ffffffffffffffff82111715610252576102516101fb565b5b80604052505050565b60006102656101cc565b9050610271828261022a565b919050565b600067ffffffffffffffff821115610291576102906101fb565b5b61029a826101ea565b9050602081019050919050565b82818337600083830152505050565b60006102c96102c484610276565b61025b565b9050828152602081018484840111156102e5576102e46101e5565b5b6102f08482856102a7565b509392505050565b600082601f83011261030d5761030c6101e0565b5b813561031d8482602086016102b6565b91505092915050565b60006020828403121561033c5761033b6101d6565b5b600082013567ffffffffffffffff81111561035a576103596101db565b5b610366848285016102f8565b91505092915050565b6000819050919050565b6103828161036f565b82525050565b600060208201905061039d6000830184610379565b92915050565b6103ac8161036f565b81146103b757600080fd5b50565b6000813590506103c9816103a3565b92915050565b600080604083850312156103e6576103e56101d6565b5b600083013567ffffffffffffffff811115610404576104036101db565b5b610410858286016102f8565b9250506020610421858286016103ba565b9150509250929050565b600081519050919050565b600082825260208201905092915050565b60005b8381101561046557808201518184015260208101905061044a565b60008484015250505050565b600061047c8261042b565b6104868185610436565b9350610496818560208601610447565b61049f816101ea565b840191505092915050565b600060208201905081810360008301526104c48184610471565b905092915050565b600081905092915050565b60006104e28261042b565b6104ec81856104cc565b93506104fc818560208601610447565b80840191505092915050565b600061051482846104d7565b915081905092915050565b600060408201905081810360008301526105398185610471565b90506105486020830184610379565b9392505050565b7f4e487b7100000000000000000000000000000000000000000000000000000000600052602260045260246000fd5b6000600282049050600182168061059657607f821691505b6020821081036105a9576105a861054f565b5b5091905056fea2646970667358221220cf1af4405ebb15e857a546469fc78478069e13944272bf821157b7365245c1ec64736f6c63430008190033",
)

# Deprecated: use BASIC_META_DATA.abi instead.
BASIC_ABI = BASIC_META_DATA.abi

# Deprecated: use BASIC_META_DATA.bin instead.
BASIC_BIN = BASIC_META_DATA.bin


def deploy_basic(
    opts: TransactOpts, backend: ContractBackend
) -> tuple[str, Transaction, "Basic"]:
    """
    Deploy a new Basic contract and bind to it.

    Returns:
        Tuple of (contract_address, creation_transaction, binding)
    """
    parsed = BASIC_META_DATA.get_abi()
    address, tx, contract = deploy_contract(opts, parsed, BASIC_META_DATA.bytecode(), backend)
    return address, tx, Basic(contract)


def _bind_basic(
    address: str,
    caller: Optional[ContractBackend],
    transactor: Optional[ContractBackend],
    filterer: Optional[ContractBackend],
) -> BoundContract:
    return BoundContract(address, BASIC_META_DATA.get_abi(), caller, transactor, filterer)


def new_basic(address: str, backend: ContractBackend) -> "Basic":
    """Bind to a deployed Basic contract."""
    return Basic(_bind_basic(address, backend, backend, backend))


def new_basic_caller(address: str, caller: ContractBackend) -> "BasicCaller":
    """Read-only binding to a deployed Basic contract."""
    return BasicCaller(_bind_basic(address, caller, None, None))


def new_basic_transactor(address: str, transactor: ContractBackend) -> "BasicTransactor":
    """Write-only binding to a deployed Basic contract."""
    return BasicTransactor(_bind_basic(address, None, transactor, None))


def new_basic_filterer(address: str, filterer: ContractBackend) -> "BasicFilterer":
    """Log filtering binding to a deployed Basic contract."""
    return BasicFilterer(_bind_basic(address, None, None, filterer))


# ============ Events ============


@dataclass(frozen=True)
class BasicItemSet:
    """An ItemSet event raised by the Basic contract."""

    key: str
    value: int
    raw: Log


class BasicItemSetIterator:
    """
    Iterates over ItemSet events returned by ``filter_item_set``.

    A retrieval or decoding failure is raised from ``next()`` and kept in
    ``error``; iteration stops afterwards.
    """

    def __init__(
        self,
        contract: BoundContract,
        event: str,
        logs: "queue.Queue[Log]",
        sub: Subscription,
    ) -> None:
        self.event: Optional[BasicItemSet] = None
        self.error: Optional[BaseException] = None
        self._contract = contract
        self._event_name = event
        self._logs = logs
        self._sub = sub
        self._done = False

    def __iter__(self) -> "BasicItemSetIterator":
        return self

    def __next__(self) -> BasicItemSet:
        if self.error is not None:
            raise StopIteration

        # Producer finished: hand out whatever is left
        if self._done:
            try:
                log = self._logs.get_nowait()
            except queue.Empty:
                raise StopIteration from None
            return self._unpack(log)

        while True:
            try:
                log = self._logs.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                pass
            else:
                return self._unpack(log)

            try:
                err = self._sub.err().get_nowait()
            except queue.Empty:
                continue
            self._done = True
            if err is not None:
                self.error = err
                raise err
            return self.__next__()

    def _unpack(self, log: Log) -> BasicItemSet:
        try:
            fields = self._contract.unpack_log(self._event_name, log)
        except Exception as exc:
            self.error = exc
            raise
        self.event = BasicItemSet(key=fields["key"], value=fields["value"], raw=log)
        return self.event

    def close(self) -> None:
        """Stop the underlying log retrieval."""
        self._sub.unsubscribe()

    def __enter__(self) -> "BasicItemSetIterator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


# ============ Role bindings ============


class BasicCaller:
    """Read-only binding to the Basic contract."""

    def __init__(self, contract: BoundContract) -> None:
        self._contract = contract

    @property
    def address(self) -> Optional[str]:
        return self._contract.address

    def items(self, opts: Optional[CallOpts], arg0: str) -> int:
        """
        Binding for method 0x4547a6b3.

        Solidity: function Items(string ) view returns(uint256)
        """
        out = self._contract.call(opts, "Items", arg0)
        return out[0]

    def version(self, opts: Optional[CallOpts]) -> str:
        """
        Binding for method 0xbb62860d.

        Solidity: function Version() view returns(string)
        """
        out = self._contract.call(opts, "Version")
        return out[0]


class BasicTransactor:
    """Write-only binding to the Basic contract."""

    def __init__(self, contract: BoundContract) -> None:
        self._contract = contract

    def set_item(self, opts: TransactOpts, key: str, value: int) -> Transaction:
        """
        Binding for method 0x8c5cf3ed.

        Solidity: function SetItem(string key, uint256 value) returns()
        """
        return self._contract.transact(opts, "SetItem", key, value)


class BasicFilterer:
    """Log filtering binding for Basic contract events."""

    def __init__(self, contract: BoundContract) -> None:
        self._contract = contract

    def filter_item_set(self, opts: Optional[FilterOpts]) -> BasicItemSetIterator:
        """
        Retrieve past ItemSet events (topic 0x814c96094cf9633fd519eab4539bc5f26a8ab7965b7243057596bafd3318e60f).

        Solidity: event ItemSet(string key, uint256 value)
        """
        logs, sub = self._contract.filter_logs(opts, "ItemSet")
        return BasicItemSetIterator(self._contract, "ItemSet", logs, sub)

    def watch_item_set(
        self, opts: Optional[WatchOpts], sink: "queue.Queue[BasicItemSet]"
    ) -> Subscription:
        """
        Subscribe to new ItemSet events, decoding each into ``sink``.

        The returned subscription ends with an error if the upstream log
        subscription fails or a log cannot be decoded.

        Solidity: event ItemSet(string key, uint256 value)
        """
        logs, sub = self._contract.watch_logs(opts, "ItemSet")

        def producer(quit_event: threading.Event) -> Optional[BaseException]:
            try:
                while not quit_event.is_set():
                    try:
                        log = logs.get(timeout=_POLL_INTERVAL)
                    except queue.Empty:
                        try:
                            return sub.err().get_nowait()
                        except queue.Empty:
                            continue
                    sink.put(self.parse_item_set(log))
                return None
            finally:
                sub.unsubscribe()

        return new_subscription(producer, name="watch-ItemSet")

    def parse_item_set(self, log: Log) -> BasicItemSet:
        """
        Decode a raw log as an ItemSet event.

        Solidity: event ItemSet(string key, uint256 value)
        """
        fields = self._contract.unpack_log("ItemSet", log)
        return BasicItemSet(key=fields["key"], value=fields["value"], raw=log)


class Basic(BasicCaller, BasicTransactor, BasicFilterer):
    """Full binding to the Basic contract: calls, transactions and events."""


# ============ Sessions ============


@dataclass
class BasicSession:
    """Basic binding with preset call and transact options."""

    contract: Basic
    call_opts: CallOpts
    transact_opts: TransactOpts

    def items(self, arg0: str) -> int:
        return self.contract.items(self.call_opts, arg0)

    def version(self) -> str:
        return self.contract.version(self.call_opts)

    def set_item(self, key: str, value: int) -> Transaction:
        return self.contract.set_item(self.transact_opts, key, value)


@dataclass
class BasicCallerSession:
    """Read-only Basic binding with preset call options."""

    contract: BasicCaller
    call_opts: CallOpts

    def items(self, arg0: str) -> int:
        return self.contract.items(self.call_opts, arg0)

    def version(self) -> str:
        return self.contract.version(self.call_opts)


@dataclass
class BasicTransactorSession:
    """Write-only Basic binding with preset transact options."""

    contract: BasicTransactor
    transact_opts: TransactOpts

    def set_item(self, key: str, value: int) -> Transaction:
        return self.contract.set_item(self.transact_opts, key, value)


# ============ Raw access ============


class BasicCallerRaw:
    """Low-level read-only access by method name."""

    def __init__(self, contract: BasicCaller) -> None:
        self.contract = contract

    def call(self, opts: Optional[CallOpts], method: str, *params: Any) -> list[Any]:
        return self.contract._contract.call(opts, method, *params)


class BasicTransactorRaw:
    """Low-level write access by method name."""

    def __init__(self, contract: BasicTransactor) -> None:
        self.contract = contract

    def transfer(self, opts: TransactOpts) -> Transaction:
        """Plain value transfer to the contract."""
        return self.contract._contract.transfer(opts)

    def transact(self, opts: TransactOpts, method: str, *params: Any) -> Transaction:
        return self.contract._contract.transact(opts, method, *params)


class BasicRaw(BasicCallerRaw, BasicTransactorRaw):
    """Low-level access to every Basic method by name."""

    def __init__(self, contract: Basic) -> None:
        self.contract = contract
