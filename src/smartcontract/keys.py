"""
Key and configuration management.

The signing key is an Ethereum ECDSA/secp256k1 private key, stored in
~/.smartcontract/.env as PRIVATE_KEY (hex format).  The same file holds
other settings the CLI persists, such as BASIC_CONTRACT_ADDRESS after a
deployment.

Dependencies: eth-account for keys, python-dotenv for the .env file.
"""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from eth_account import Account
from eth_account.signers.local import LocalAccount


# Default config directory
SMARTCONTRACT_DIR = Path.home() / ".smartcontract"
SMARTCONTRACT_ENV = SMARTCONTRACT_DIR / ".env"


def generate_eoa() -> tuple[str, str]:
    """
    Generate a new ECDSA/secp256k1 keypair (EOA).

    Returns:
        Tuple of (private_key_hex, address)
    """
    private_key = "0x" + secrets.token_hex(32)
    account = Account.from_key(private_key)
    return private_key, account.address


def _read_env(env_path: Path) -> dict[str, str]:
    existing: dict[str, str] = {}
    if env_path.exists():
        for line in env_path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#") and "=" in line:
                k, v = line.split("=", 1)
                existing[k.strip()] = v.strip()
    return existing


def save_env_value(key: str, value: str, env_path: Optional[Path] = None) -> Path:
    """
    Save a single key=value to the .env file, preserving other entries.

    The value is also exported into the current process environment.
    """
    env_path = env_path or SMARTCONTRACT_ENV
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing = _read_env(env_path)
    existing[key] = value

    lines = [f"{k}={v}" for k, v in existing.items()]
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        env_path.chmod(0o600)

    os.environ[key] = value
    return env_path


def save_private_key(private_key: str, env_path: Optional[Path] = None) -> Path:
    """
    Save private key to .env file.

    Returns:
        Path to the saved .env file
    """
    return save_env_value("PRIVATE_KEY", private_key, env_path)


def load_config(env_path: Optional[Path] = None) -> None:
    """Load the .env file (if any) into the process environment."""
    env_path = env_path or SMARTCONTRACT_ENV
    if env_path.exists():
        load_dotenv(env_path, override=True)


def load_private_key(env_path: Optional[Path] = None) -> str:
    """
    Load private key from .env file or environment.

    Returns:
        0x-prefixed hex private key

    Raises:
        ValueError: If PRIVATE_KEY is not set
    """
    env_path = env_path or SMARTCONTRACT_ENV
    load_config(env_path)

    private_key = os.environ.get("PRIVATE_KEY")
    if not private_key:
        raise ValueError(
            f"PRIVATE_KEY not found. Run 'smartcontract keygen' or set "
            f"PRIVATE_KEY in {env_path}"
        )

    if not private_key.startswith("0x"):
        private_key = "0x" + private_key

    return private_key


def get_account(private_key: Optional[str] = None) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Args:
        private_key: 0x-prefixed hex private key.
                     If None, loads from .env.
    """
    if private_key is None:
        private_key = load_private_key()
    return Account.from_key(private_key)


def get_address(private_key: Optional[str] = None) -> str:
    """Checksummed Ethereum address for a private key (or the stored one)."""
    return get_account(private_key).address
