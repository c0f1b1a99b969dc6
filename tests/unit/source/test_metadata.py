"""Unit tests for metadata partition discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from core.errors import ForkSourceError
from source.metadata import (
    decode_partition_names,
    load_module_names,
    partition_names_from_metadata,
)
from tests.fixture_paths import fixture_path


def test_v14_pallets_with_storage_are_listed() -> None:
    """Only pallets declaring storage become partitions."""
    metadata_value = [
        "0x6d657461",
        {
            "V14": {
                "pallets": [
                    {"name": "System", "storage": {"prefix": "System", "entries": []}},
                    {"name": "Utility", "storage": None},
                    {"name": "Balances", "storage": {"prefix": "Balances", "entries": []}},
                ]
            }
        },
    ]

    assert partition_names_from_metadata(metadata_value) == ["System", "Balances"]


def test_legacy_modules_are_listed() -> None:
    """Pre-V14 metadata lists pallets under ``modules``."""
    metadata_value = {
        "V12": {"modules": [{"name": "Timestamp", "storage": {"prefix": "Timestamp"}}]}
    }

    assert partition_names_from_metadata(metadata_value) == ["Timestamp"]


def test_unrecognized_metadata_raises() -> None:
    """Metadata without a pallet list is rejected."""
    with pytest.raises(ForkSourceError):
        partition_names_from_metadata({"V14": {"types": []}})


def test_module_names_file_is_loaded() -> None:
    """A pinned modules.json list is returned verbatim."""
    names = load_module_names(fixture_path("modules.json"))

    assert names == ["System", "Timestamp", "Balances", "Sudo", "Staking"]


def test_missing_module_names_file_returns_none(tmp_path: Path) -> None:
    """No pinned list means live metadata must be queried."""
    assert load_module_names(tmp_path / "modules.json") is None


def test_invalid_module_names_file_raises(tmp_path: Path) -> None:
    """A pinned list must be a JSON array of strings."""
    module_names_path = tmp_path / "modules.json"
    module_names_path.write_text('{"System": true}', encoding="utf-8")

    with pytest.raises(ForkSourceError):
        load_module_names(module_names_path)


def _text(value: str) -> str:
    encoded = value.encode("utf-8")
    return f"{len(encoded) << 2:02x}{encoded.hex()}"


def _pallet_v14(name: str, index: int, has_storage: bool) -> str:
    storage = f"01{_text(name)}00" if has_storage else "00"
    # calls, event, constants, error are all empty.
    return f"{_text(name)}{storage}00000000{index:02x}"


def test_decode_scale_v14_metadata() -> None:
    """SCALE-encoded V14 metadata yields storage pallets in order."""
    metadata_hex = (
        "0x6d657461"
        "0e"
        "00"
        "0c"
        + _pallet_v14("System", 0, True)
        + _pallet_v14("Utility", 1, False)
        + _pallet_v14("Balances", 2, True)
        + "000400"
        + "00"
    )

    assert decode_partition_names(metadata_hex) == ["System", "Balances"]


def test_decode_garbage_metadata_raises() -> None:
    """Undecodable metadata surfaces as a source error."""
    with pytest.raises(ForkSourceError):
        decode_partition_names("0x6d657461ff")


def test_module_names_invalid_utf8_raises(tmp_path: Path) -> None:
    """A pinned name list that is not UTF-8 is reported, not crashed on."""
    module_names_path = tmp_path / "modules.json"
    module_names_path.write_bytes(b'["Sys\xfftem"]')

    with pytest.raises(ForkSourceError):
        load_module_names(module_names_path)
