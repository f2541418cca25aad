"""
Client - an account bound to a backend.

Bundles a signing key with a ``ContractBackend`` and builds the option
objects that generated bindings expect.  All gas is paid by the client
account.
"""

from __future__ import annotations

import logging
from typing import Union

from .bind import CallOpts, ContractBackend, Receipt, TransactOpts, Transaction, wait_mined
from .currency import Number, gwei_to_wei, wei_to_ether
from .keys import get_account

logger = logging.getLogger(__name__)


class InsufficientFundsError(RuntimeError):
    """The account cannot cover gas and value for a transaction."""


class TransactionFailedError(RuntimeError):
    """A mined transaction reverted (receipt status 0)."""

    def __init__(self, receipt: Receipt) -> None:
        super().__init__(f"transaction {receipt.transaction_hash} failed")
        self.receipt = receipt


class Client:
    """
    Signing account plus backend.

    Args:
        backend: Chain access (RPC node or simulated chain)
        private_key: 0x-prefixed hex private key
    """

    def __init__(self, backend: ContractBackend, private_key: str) -> None:
        self.backend = backend
        self.account = get_account(private_key)

    @property
    def address(self) -> str:
        return self.account.address

    def balance(self) -> int:
        """Current balance in wei."""
        return self.backend.balance_at(self.address)

    def new_call_opts(self, pending: bool = False) -> CallOpts:
        return CallOpts(pending=pending, from_address=self.address)

    def new_transact_opts(
        self,
        gas_limit: int,
        gas_price: int,
        value_gwei: Number = 0,
    ) -> TransactOpts:
        """
        Build transaction options with an explicit gas budget.

        Args:
            gas_limit: Gas limit for the transaction
            gas_price: Gas price in wei
            value_gwei: Value to send, in gwei

        Raises:
            InsufficientFundsError: If the balance cannot cover
                gas_limit * gas_price + value
        """
        nonce = self.backend.pending_nonce_at(self.address)
        value = gwei_to_wei(value_gwei)

        cost = gas_limit * gas_price + value
        balance = self.balance()
        if balance < cost:
            raise InsufficientFundsError(
                f"balance {wei_to_ether(balance)} ETH cannot cover "
                f"{wei_to_ether(cost)} ETH (gas + value)"
            )

        return TransactOpts(
            account=self.account,
            nonce=nonce,
            value=value,
            gas_price=gas_price,
            gas_limit=gas_limit,
        )

    def wait_mined(
        self,
        tx: Union[Transaction, str],
        timeout: float = 120,
        poll_interval: float = 1.0,
    ) -> Receipt:
        """
        Wait for ``tx`` to be mined.

        Raises:
            TransactionFailedError: If the transaction reverted
            TimeoutError: If it is not mined within ``timeout``
        """
        receipt = wait_mined(self.backend, tx, timeout=timeout, poll_interval=poll_interval)
        if receipt.status == 0:
            raise TransactionFailedError(receipt)
        logger.debug(
            "tx %s mined in block %d (gas used %d)",
            receipt.transaction_hash,
            receipt.block_number,
            receipt.gas_used,
        )
        return receipt
