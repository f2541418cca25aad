"""
ABI handling - contract metadata, selectors, and argument packing.

Encoding and decoding are delegated to eth-abi; Keccak-256 comes from
eth-hash.  This module only knows how to find the right ABI entry and
how to turn it into a canonical signature.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, Union

from eth_abi import decode, encode
from eth_hash.auto import keccak

from .backend import Log


class BindError(RuntimeError):
    """Raised when a binding cannot carry out a request."""


def canonical_type(param: dict[str, Any]) -> str:
    """Canonical ABI type for a parameter, expanding tuples."""
    typ = param["type"]
    if typ.startswith("tuple"):
        inner = ",".join(canonical_type(c) for c in param.get("components", []))
        return f"({inner}){typ[len('tuple'):]}"
    return typ


def is_dynamic_type(typ: str) -> bool:
    return typ in ("string", "bytes") or typ.endswith("]") or typ.startswith("(")


def signature(entry: dict[str, Any]) -> str:
    """``Name(type1,type2)`` for a function or event entry."""
    types = ",".join(canonical_type(p) for p in entry.get("inputs", []))
    return f"{entry['name']}({types})"


class ABI:
    """Parsed contract ABI with lookup, packing and unpacking helpers."""

    def __init__(self, entries: list[dict[str, Any]]) -> None:
        self.entries = entries
        self.constructor: Optional[dict[str, Any]] = None
        self.methods: dict[str, dict[str, Any]] = {}
        self.events: dict[str, dict[str, Any]] = {}
        for entry in entries:
            kind = entry.get("type", "function")
            if kind == "constructor":
                self.constructor = entry
            elif kind == "function":
                self.methods.setdefault(entry["name"], entry)
            elif kind == "event":
                self.events.setdefault(entry["name"], entry)

    @classmethod
    def from_json(cls, text: str) -> "ABI":
        return cls(json.loads(text))

    def method(self, name: str) -> dict[str, Any]:
        try:
            return self.methods[name]
        except KeyError:
            raise BindError(f"method '{name}' not found") from None

    def event(self, name: str) -> dict[str, Any]:
        try:
            return self.events[name]
        except KeyError:
            raise BindError(f"event '{name}' not found") from None

    def selector(self, name: str) -> bytes:
        """First four bytes of the Keccak-256 of the method signature."""
        return keccak(signature(self.method(name)).encode("utf-8"))[:4]

    def event_topic(self, name: str) -> bytes:
        """Keccak-256 of the event signature (topic 0)."""
        return keccak(signature(self.event(name)).encode("utf-8"))

    def pack(self, name: str, *args: Any) -> bytes:
        """
        ABI-encode a call.

        An empty ``name`` packs constructor arguments only (no selector).
        """
        if name == "":
            inputs = self.constructor.get("inputs", []) if self.constructor else []
            prefix = b""
        else:
            inputs = self.method(name).get("inputs", [])
            prefix = self.selector(name)

        if len(args) != len(inputs):
            raise BindError(
                f"argument count mismatch for '{name or 'constructor'}': "
                f"got {len(args)}, want {len(inputs)}"
            )
        if not inputs:
            return prefix
        return prefix + encode([canonical_type(p) for p in inputs], list(args))

    def unpack(self, name: str, data: bytes) -> list[Any]:
        """Decode the return data of ``name`` into a list of values."""
        outputs = self.method(name).get("outputs", [])
        if not outputs:
            return []
        return list(decode([canonical_type(p) for p in outputs], data))

    def unpack_log(self, name: str, log: Log) -> dict[str, Any]:
        """
        Decode an event log into a dict keyed by parameter name.

        Non-indexed parameters come from the log data; indexed ones from
        topics[1:].  Indexed dynamic values are only available as their
        32-byte Keccak hash and are returned as raw bytes.  Unnamed
        parameters are keyed ``arg<N>``.
        """
        entry = self.event(name)
        if not entry.get("anonymous", False):
            if not log.topics or log.topics[0] != self.event_topic(name):
                raise BindError("event signature mismatch")
            topics = log.topics[1:]
        else:
            topics = log.topics

        inputs = entry.get("inputs", [])
        plain = [p for p in inputs if not p.get("indexed", False)]
        values = decode([canonical_type(p) for p in plain], log.data) if plain else ()
        plain_values = iter(values)
        indexed_topics = iter(topics)

        out: dict[str, Any] = {}
        for position, param in enumerate(inputs):
            key = param.get("name") or f"arg{position}"
            if not param.get("indexed", False):
                out[key] = next(plain_values)
                continue
            try:
                topic = next(indexed_topics)
            except StopIteration:
                raise BindError(f"missing topic for indexed field '{key}'") from None
            typ = canonical_type(param)
            out[key] = topic if is_dynamic_type(typ) else decode([typ], topic)[0]
        return out


@dataclass
class MetaData:
    """ABI JSON and deployment bytecode of a compiled contract."""

    abi: str
    bin: str = ""
    _parsed: Optional[ABI] = field(default=None, init=False, repr=False, compare=False)

    def get_abi(self) -> ABI:
        """Parse the ABI once and cache it."""
        if self._parsed is None:
            self._parsed = ABI.from_json(self.abi)
        return self._parsed

    def bytecode(self) -> bytes:
        text = self.bin[2:] if self.bin.startswith("0x") else self.bin
        return bytes.fromhex(text)


def load_artifact(path: Union[str, Path]) -> MetaData:
    """
    Load contract metadata from a compiler artifact.

    Accepts Foundry output (``{"abi": [...], "bytecode": {"object": "0x..."}}``)
    as well as flat ``{"abi": [...], "bytecode": "0x..."}`` or ``"bin"`` files.

    Raises:
        FileNotFoundError: If the artifact does not exist
        ValueError: If it carries no ABI
    """
    artifact_path = Path(path)
    if not artifact_path.exists():
        raise FileNotFoundError(f"Artifact not found: {artifact_path}")

    with artifact_path.open("r", encoding="utf-8") as f:
        artifact = json.load(f)

    if "abi" not in artifact:
        raise ValueError(f"No ABI in artifact {artifact_path}")

    bytecode = artifact.get("bytecode", artifact.get("bin", ""))
    if isinstance(bytecode, dict):
        bytecode = bytecode.get("object", "")
    if bytecode and not bytecode.startswith("0x"):
        bytecode = "0x" + bytecode

    return MetaData(abi=json.dumps(artifact["abi"]), bin=bytecode)
