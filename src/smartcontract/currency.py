"""Ether denomination conversions on top of eth-utils."""

from __future__ import annotations

from decimal import Decimal
from typing import Union

from eth_utils import from_wei, to_wei

Number = Union[int, float, str, Decimal]


def gwei_to_wei(amount: Number) -> int:
    return to_wei(amount, "gwei")


def wei_to_gwei(amount: int) -> Decimal:
    return Decimal(from_wei(amount, "gwei"))


def ether_to_wei(amount: Number) -> int:
    return to_wei(amount, "ether")


def wei_to_ether(amount: int) -> Decimal:
    return Decimal(from_wei(amount, "ether"))
