"""
Bind - generic contract-binding layer.

Provides contract metadata handling, bound contracts (call / transact /
filter / watch), and the backends they run against: a JSON-RPC node or an
in-memory simulated chain.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""

from .abi import ABI, BindError, MetaData, load_artifact
from .backend import ContractBackend, FilterQuery, Log, Receipt, Transaction
from .base import (
    BoundContract,
    CallOpts,
    FilterOpts,
    NoCodeError,
    TransactOpts,
    WatchOpts,
    create_address,
    deploy_contract,
    wait_deployed,
    wait_mined,
)
from .event import Subscription, new_subscription
from .rpc import RPCBackend, RPCError

__all__ = [
    "ABI",
    "BindError",
    "BoundContract",
    "CallOpts",
    "ContractBackend",
    "FilterOpts",
    "FilterQuery",
    "Log",
    "MetaData",
    "NoCodeError",
    "RPCBackend",
    "RPCError",
    "Receipt",
    "Subscription",
    "TransactOpts",
    "Transaction",
    "WatchOpts",
    "create_address",
    "deploy_contract",
    "load_artifact",
    "new_subscription",
    "wait_deployed",
    "wait_mined",
]
