"""Unit tests for binary and runtime artifact handling."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.errors import ForkArtifactError
from core.types import ForkArtifactPaths
from genesis.runtime import ensure_binary, ensure_runtime_hex, read_runtime_code


def test_missing_binary_raises(tmp_path: Path) -> None:
    """A missing node binary is a precondition failure."""
    with pytest.raises(ForkArtifactError, match="Binary missing"):
        ensure_binary(ForkArtifactPaths.from_data_root(tmp_path))


def test_binary_is_made_executable(tmp_path: Path) -> None:
    """The node binary is marked executable."""
    paths = ForkArtifactPaths.from_data_root(tmp_path)
    paths.binary.write_bytes(b"#!/bin/sh\n")
    paths.binary.chmod(0o644)

    ensure_binary(paths)

    assert os.access(paths.binary, os.X_OK)


def test_runtime_hex_is_written_from_wasm(tmp_path: Path) -> None:
    """WASM bytes are hex-encoded and read back with a 0x prefix."""
    paths = ForkArtifactPaths.from_data_root(tmp_path)
    paths.runtime_wasm.write_bytes(b"\x00asm\x01\x00\x00\x00")

    ensure_runtime_hex(paths)

    assert paths.runtime_hex.read_text(encoding="utf-8") == "0061736d01000000"
    assert read_runtime_code(paths) == "0x0061736d01000000"


def test_existing_runtime_hex_is_reused(tmp_path: Path) -> None:
    """An existing hex file wins even when no WASM is present."""
    paths = ForkArtifactPaths.from_data_root(tmp_path)
    paths.runtime_hex.write_text("0xdeadbeef\n", encoding="utf-8")

    ensure_runtime_hex(paths)

    assert read_runtime_code(paths) == "0xdeadbeef"


def test_missing_wasm_raises(tmp_path: Path) -> None:
    """Without hex or WASM the run cannot start."""
    with pytest.raises(ForkArtifactError, match="WASM missing"):
        ensure_runtime_hex(ForkArtifactPaths.from_data_root(tmp_path))
