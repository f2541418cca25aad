"""
smartcontract CLI

Command-line interface for the Basic contract.

Commands:
  keygen    - Create a signing wallet (if none exists)
  whoami    - Show current wallet address
  deploy    - Deploy the Basic contract
  version   - Read the contract version
  item      - Read the value stored under a key
  set-item  - Store a value under a key
  events    - List ItemSet events
"""

from __future__ import annotations

import sys
from typing import Optional

import click
import httpx

from .bind import BindError, ContractBackend, FilterOpts, RPCBackend, RPCError
from .bind.rpc import DEFAULT_RPC_URL
from .client import Client, InsufficientFundsError, TransactionFailedError
from .contracts.basic import deploy_basic, new_basic
from .currency import gwei_to_wei
from .keys import (
    generate_eoa,
    get_address,
    load_config,
    load_private_key,
    save_env_value,
    save_private_key,
)


# ============ Constants ============

VERSION = "0.1.0"

DEFAULT_GAS_LIMIT = 1_600_000

_CHAIN_ERRORS = (
    BindError,
    RPCError,
    httpx.HTTPError,
    TimeoutError,
    TransactionFailedError,
    InsufficientFundsError,
)


# ============ Shared options ============

rpc_url_option = click.option(
    "--rpc-url",
    envvar="ETH_RPC_URL",
    default=DEFAULT_RPC_URL,
    show_default=True,
    help="Ethereum JSON-RPC URL",
)

contract_option = click.option(
    "--contract",
    envvar="BASIC_CONTRACT_ADDRESS",
    required=True,
    help="Basic contract address",
)


def _transact_options(func):
    func = click.option(
        "--gas-price",
        type=float,
        default=None,
        help="Gas price in gwei (default: node suggestion)",
    )(func)
    func = click.option(
        "--gas-limit",
        type=int,
        default=DEFAULT_GAS_LIMIT,
        show_default=True,
        help="Gas limit",
    )(func)
    return func


def _open_backend(rpc_url: str) -> ContractBackend:
    return RPCBackend(rpc_url)


def _load_client(backend: ContractBackend) -> Client:
    try:
        private_key = load_private_key()
    except ValueError as exc:
        click.secho(f"ERROR: {exc}", fg="red")
        sys.exit(1)
    return Client(backend, private_key)


def _fail(exc: Exception) -> None:
    click.secho(f"ERROR: {exc}", fg="red")
    sys.exit(1)


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="smartcontract")
def cli() -> None:
    """Deploy and use the Basic key/value contract."""
    load_config()


# ============ Identity ============


@cli.command()
def keygen() -> None:
    """Create a signing wallet if none exists."""
    try:
        address = get_address(load_private_key())
        click.echo(f"Wallet already exists: {address}")
        return
    except ValueError:
        pass

    private_key, address = generate_eoa()
    env_path = save_private_key(private_key)
    click.secho("Wallet created.", fg="green")
    click.echo(f"  Address: {address}")
    click.echo(f"  Key file: {env_path}")


@cli.command()
def whoami() -> None:
    """Show current wallet identity."""
    try:
        address = get_address(load_private_key())
    except ValueError:
        click.echo("No wallet found.")
        click.echo("Run 'smartcontract keygen' to create one.")
        sys.exit(1)
    click.echo(f"Address: {address}")


# ============ Contract ============


@cli.command()
@rpc_url_option
@_transact_options
def deploy(rpc_url: str, gas_limit: int, gas_price: Optional[float]) -> None:
    """Deploy the Basic contract and remember its address."""
    with _open_backend(rpc_url) as backend:
        client = _load_client(backend)
        click.echo(f"  Deployer: {client.address}")
        try:
            price = gwei_to_wei(gas_price) if gas_price is not None else backend.suggest_gas_price()
            opts = client.new_transact_opts(gas_limit, price)
            address, tx, _ = deploy_basic(opts, backend)
            click.echo(f"  TX: {tx.hash}")
            client.wait_mined(tx)
        except _CHAIN_ERRORS as exc:
            _fail(exc)

    save_env_value("BASIC_CONTRACT_ADDRESS", address)
    click.secho("SUCCESS: Basic deployed!", fg="green")
    click.echo(f"  Contract: {address}")


@cli.command()
@rpc_url_option
@contract_option
def version(rpc_url: str, contract: str) -> None:
    """Show the contract version."""
    with _open_backend(rpc_url) as backend:
        try:
            ver = new_basic(contract, backend).version(None)
        except _CHAIN_ERRORS as exc:
            _fail(exc)
    click.echo(f"Version: {ver}")


@cli.command()
@click.argument("key")
@rpc_url_option
@contract_option
def item(key: str, rpc_url: str, contract: str) -> None:
    """Show the value stored under KEY."""
    with _open_backend(rpc_url) as backend:
        try:
            value = new_basic(contract, backend).items(None, key)
        except _CHAIN_ERRORS as exc:
            _fail(exc)
    click.echo(f"{key} = {value}")


@cli.command("set-item")
@click.argument("key")
@click.argument("value", type=int)
@rpc_url_option
@contract_option
@_transact_options
def set_item(
    key: str,
    value: int,
    rpc_url: str,
    contract: str,
    gas_limit: int,
    gas_price: Optional[float],
) -> None:
    """Store VALUE under KEY."""
    with _open_backend(rpc_url) as backend:
        client = _load_client(backend)
        try:
            price = gwei_to_wei(gas_price) if gas_price is not None else backend.suggest_gas_price()
            opts = client.new_transact_opts(gas_limit, price)
            tx = new_basic(contract, backend).set_item(opts, key, value)
            click.echo(f"  TX: {tx.hash}")
            receipt = client.wait_mined(tx)
        except _CHAIN_ERRORS as exc:
            _fail(exc)

    click.secho("SUCCESS: Transaction confirmed!", fg="green")
    click.echo(f"  Block: {receipt.block_number}")


@cli.command()
@click.option("--from-block", type=int, default=0, show_default=True, help="First block to scan")
@rpc_url_option
@contract_option
def events(from_block: int, rpc_url: str, contract: str) -> None:
    """List ItemSet events."""
    count = 0
    with _open_backend(rpc_url) as backend:
        try:
            with new_basic(contract, backend).filter_item_set(FilterOpts(start=from_block)) as it:
                for event in it:
                    count += 1
                    click.echo(f"  block {event.raw.block_number}: {event.key} = {event.value}")
        except _CHAIN_ERRORS as exc:
            _fail(exc)

    if count == 0:
        click.echo("No ItemSet events.")


# ============ Entry Points ============


def main() -> None:
    """smartcontract CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
