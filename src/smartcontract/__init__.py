__all__ = [
    # Client
    "Client",
    "InsufficientFundsError",
    "TransactionFailedError",
    # Binding layer
    "BindError",
    "CallOpts",
    "FilterOpts",
    "NoCodeError",
    "RPCBackend",
    "RPCError",
    "TransactOpts",
    "WatchOpts",
    # Basic contract
    "Basic",
    "BasicItemSet",
    "deploy_basic",
    "new_basic",
    # Keys
    "generate_eoa",
    "get_address",
    "load_private_key",
]

from .bind import (
    BindError,
    CallOpts,
    FilterOpts,
    NoCodeError,
    RPCBackend,
    RPCError,
    TransactOpts,
    WatchOpts,
)
from .client import Client, InsufficientFundsError, TransactionFailedError
from .contracts.basic import Basic, BasicItemSet, deploy_basic, new_basic
from .keys import generate_eoa, get_address, load_private_key
