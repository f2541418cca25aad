"""
CLI integration tests using Click's test runner.

Chain access is redirected to an in-memory simulated backend, so the
commands run end-to-end without a node.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from smartcontract.bind.simulated import SimulatedBackend
from smartcontract.cli import cli
from smartcontract.keys import generate_eoa, save_private_key


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def env_path(tmp_path: Path) -> Path:
    return tmp_path / ".smartcontract" / ".env"


@pytest.fixture()
def backend():
    return SimulatedBackend(num_accounts=1, auto_commit=True, account_balance=10)


@pytest.fixture()
def chain_env(backend: SimulatedBackend, env_path: Path):
    """Wallet funded on the simulated chain, with CLI chain access patched."""
    clean = {k: v for k, v in os.environ.items() if k not in ("PRIVATE_KEY", "BASIC_CONTRACT_ADDRESS")}
    with patch.dict(os.environ, clean, clear=True):
        save_private_key(backend.private_keys[0], env_path)
        with patch("smartcontract.keys.SMARTCONTRACT_ENV", env_path):
            with patch("smartcontract.cli._open_backend", lambda rpc_url: backend):
                yield backend


class TestVersionAndIdentity:
    def test_version_flag(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_whoami_with_wallet(self, runner: CliRunner, env_path: Path) -> None:
        private_key, address = generate_eoa()
        with patch("smartcontract.keys.SMARTCONTRACT_ENV", env_path):
            with patch.dict(os.environ, {"PRIVATE_KEY": private_key}):
                result = runner.invoke(cli, ["whoami"])
        assert result.exit_code == 0
        assert f"Address: {address}" in result.output

    def test_whoami_without_wallet(self, runner: CliRunner) -> None:
        env = {k: v for k, v in os.environ.items() if k != "PRIVATE_KEY"}
        with patch.dict(os.environ, env, clear=True):
            with patch("smartcontract.keys.SMARTCONTRACT_ENV", Path("/nonexistent/.env")):
                result = runner.invoke(cli, ["whoami"])
        assert result.exit_code != 0
        assert "No wallet found" in result.output

    def test_keygen(self, runner: CliRunner, env_path: Path) -> None:
        env = {k: v for k, v in os.environ.items() if k != "PRIVATE_KEY"}
        with patch.dict(os.environ, env, clear=True):
            with patch("smartcontract.keys.SMARTCONTRACT_ENV", env_path):
                result = runner.invoke(cli, ["keygen"])
                again = runner.invoke(cli, ["keygen"])
        assert result.exit_code == 0
        assert "Wallet created" in result.output
        assert "PRIVATE_KEY=0x" in env_path.read_text(encoding="utf-8")
        assert "Wallet already exists" in again.output


class TestContractCommands:
    def _deploy(self, runner: CliRunner) -> str:
        result = runner.invoke(cli, ["deploy", "--gas-price", "39.576"])
        assert result.exit_code == 0, result.output
        assert "Basic deployed" in result.output
        match = re.search(r"Contract: (0x[0-9a-fA-F]{40})", result.output)
        assert match
        return match.group(1)

    def test_deploy_saves_address(self, runner: CliRunner, chain_env, env_path: Path) -> None:
        address = self._deploy(runner)
        assert f"BASIC_CONTRACT_ADDRESS={address}" in env_path.read_text(encoding="utf-8")

    def test_full_flow(self, runner: CliRunner, chain_env) -> None:
        address = self._deploy(runner)

        result = runner.invoke(cli, ["version", "--contract", address])
        assert result.exit_code == 0
        assert "Version: 1.1" in result.output

        result = runner.invoke(cli, ["set-item", "bill", "100000", "--contract", address])
        assert result.exit_code == 0, result.output
        assert "Transaction confirmed" in result.output

        result = runner.invoke(cli, ["item", "bill", "--contract", address])
        assert result.exit_code == 0
        assert "bill = 100000" in result.output

        result = runner.invoke(cli, ["events", "--contract", address])
        assert result.exit_code == 0
        assert "bill = 100000" in result.output

    def test_contract_address_from_env_file(self, runner: CliRunner, chain_env) -> None:
        self._deploy(runner)
        os.environ.pop("BASIC_CONTRACT_ADDRESS", None)

        result = runner.invoke(cli, ["version"])
        assert result.exit_code == 0
        assert "Version: 1.1" in result.output

    def test_no_events(self, runner: CliRunner, chain_env) -> None:
        address = self._deploy(runner)
        result = runner.invoke(cli, ["events", "--contract", address])
        assert result.exit_code == 0
        assert "No ItemSet events" in result.output

    def test_no_code_at_address(self, runner: CliRunner, chain_env) -> None:
        result = runner.invoke(cli, ["version", "--contract", "0x" + "42" * 20])
        assert result.exit_code == 1
        assert "no contract code" in result.output

    def test_missing_wallet(self, runner: CliRunner, chain_env, env_path: Path) -> None:
        env_path.write_text("", encoding="utf-8")
        os.environ.pop("PRIVATE_KEY", None)
        result = runner.invoke(cli, ["deploy"])
        assert result.exit_code == 1
        assert "PRIVATE_KEY not found" in result.output
