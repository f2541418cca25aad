"""Unit tests for ABI lookup, selectors and (un)packing."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from eth_abi import encode

from smartcontract.bind import BindError, Log, MetaData, load_artifact
from smartcontract.contracts.basic import BASIC_ABI, BASIC_BIN, BASIC_META_DATA

from conftest import CONTRACT_ADDRESS, item_set_log

ITEM_SET_TOPIC = "814c96094cf9633fd519eab4539bc5f26a8ab7965b7243057596bafd3318e60f"


@pytest.fixture()
def abi():
    return BASIC_META_DATA.get_abi()


class TestMetaData:
    def test_abi_parsed_once(self) -> None:
        assert BASIC_META_DATA.get_abi() is BASIC_META_DATA.get_abi()

    def test_deprecated_aliases(self) -> None:
        assert BASIC_ABI == BASIC_META_DATA.abi
        assert BASIC_BIN == BASIC_META_DATA.bin

    def test_bytecode_is_hex(self) -> None:
        code = BASIC_META_DATA.bytecode()
        assert code[:4] == bytes.fromhex("60806040")

    def test_malformed_abi(self) -> None:
        with pytest.raises(ValueError):
            MetaData(abi="[{not json").get_abi()


class TestSelectors:
    @pytest.mark.parametrize(
        "method, selector",
        [("Items", "4547a6b3"), ("Version", "bb62860d"), ("SetItem", "8c5cf3ed")],
    )
    def test_method_selector(self, abi, method: str, selector: str) -> None:
        assert abi.selector(method).hex() == selector

    def test_event_topic(self, abi) -> None:
        assert abi.event_topic("ItemSet").hex() == ITEM_SET_TOPIC

    def test_unknown_method(self, abi) -> None:
        with pytest.raises(BindError, match="method 'Nope' not found"):
            abi.selector("Nope")

    def test_unknown_event(self, abi) -> None:
        with pytest.raises(BindError):
            abi.event_topic("Nope")


class TestPacking:
    def test_pack_set_item(self, abi) -> None:
        packed = abi.pack("SetItem", "bill", 100_000)
        assert packed[:4].hex() == "8c5cf3ed"
        assert packed[4:] == encode(["string", "uint256"], ["bill", 100_000])

    def test_pack_no_args(self, abi) -> None:
        assert abi.pack("Version") == bytes.fromhex("bb62860d")

    def test_pack_constructor(self, abi) -> None:
        assert abi.pack("") == b""

    def test_pack_wrong_arg_count(self, abi) -> None:
        with pytest.raises(BindError, match="argument count mismatch"):
            abi.pack("Items")

    def test_unpack_version(self, abi) -> None:
        assert abi.unpack("Version", encode(["string"], ["1.1"])) == ["1.1"]

    def test_unpack_no_outputs(self, abi) -> None:
        assert abi.unpack("SetItem", b"") == []


class TestUnpackLog:
    def test_item_set(self, abi) -> None:
        fields = abi.unpack_log("ItemSet", item_set_log("bill", 100_000))
        assert fields == {"key": "bill", "value": 100_000}

    def test_signature_mismatch(self, abi) -> None:
        log = Log(
            address=CONTRACT_ADDRESS,
            topics=[b"\x00" * 32],
            data=encode(["string", "uint256"], ["bill", 1]),
        )
        with pytest.raises(BindError, match="event signature mismatch"):
            abi.unpack_log("ItemSet", log)

    def test_missing_topics(self, abi) -> None:
        log = Log(address=CONTRACT_ADDRESS, topics=[], data=b"")
        with pytest.raises(BindError):
            abi.unpack_log("ItemSet", log)

    def test_indexed_fields(self) -> None:
        abi = MetaData(
            abi=json.dumps(
                [
                    {
                        "type": "event",
                        "name": "Moved",
                        "anonymous": False,
                        "inputs": [
                            {"name": "who", "type": "address", "indexed": True},
                            {"name": "tag", "type": "string", "indexed": True},
                            {"name": "amount", "type": "uint256", "indexed": False},
                        ],
                    }
                ]
            )
        ).get_abi()
        who = "0x" + "22" * 20
        tag_hash = b"\x33" * 32
        log = Log(
            address=CONTRACT_ADDRESS,
            topics=[abi.event_topic("Moved"), encode(["address"], [who]), tag_hash],
            data=encode(["uint256"], [5]),
        )

        fields = abi.unpack_log("Moved", log)

        assert fields["who"].lower() == who
        assert fields["tag"] == tag_hash
        assert fields["amount"] == 5


class TestLoadArtifact:
    def test_foundry_layout(self, tmp_path: Path) -> None:
        path = tmp_path / "Basic.json"
        path.write_text(
            json.dumps(
                {
                    "abi": json.loads(BASIC_META_DATA.abi),
                    "bytecode": {"object": BASIC_META_DATA.bin},
                }
            ),
            encoding="utf-8",
        )

        meta = load_artifact(path)

        assert meta.bin == BASIC_META_DATA.bin
        assert meta.get_abi().selector("Version").hex() == "bb62860d"

    def test_flat_bin_without_prefix(self, tmp_path: Path) -> None:
        path = tmp_path / "Basic.json"
        path.write_text(json.dumps({"abi": [], "bin": "6080"}), encoding="utf-8")
        assert load_artifact(path).bin == "0x6080"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_artifact(tmp_path / "nope.json")

    def test_missing_abi(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{}", encoding="utf-8")
        with pytest.raises(ValueError, match="No ABI"):
            load_artifact(path)
