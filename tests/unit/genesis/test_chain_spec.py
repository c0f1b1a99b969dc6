"""Unit tests for chain spec loading, building, and writing."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from core.errors import ForkGenesisError
from genesis import chain_spec as chain_spec_module
from genesis.chain_spec import ensure_template_chain_spec, load_chain_spec, write_chain_spec


def test_existing_template_is_loaded_without_building(tmp_path: Path, monkeypatch) -> None:
    """An existing template must not trigger build-spec."""
    spec_path = tmp_path / "fork.json"
    spec_path.write_text(json.dumps({"genesis": {"raw": {"top": {}}}}), encoding="utf-8")

    def _fail_run(*args, **kwargs):
        raise AssertionError("build-spec should not run")

    monkeypatch.setattr(chain_spec_module.subprocess, "run", _fail_run)

    chain_spec = ensure_template_chain_spec(spec_path, tmp_path / "binary", None)

    assert chain_spec == {"genesis": {"raw": {"top": {}}}}


@pytest.mark.parametrize(
    ("fork_chain", "expected_args"),
    [(None, ["--dev"]), ("kusama-dev", ["--chain", "kusama-dev"])],
)
def test_missing_template_is_built(tmp_path: Path, monkeypatch, fork_chain, expected_args) -> None:
    """build-spec runs with the dev chain or the named chain and --raw."""
    spec_path = tmp_path / "fork.json"
    binary_path = tmp_path / "binary"
    captured: list[list[str]] = []

    def _fake_run(command, check, capture_output):
        captured.append(command)
        return subprocess.CompletedProcess(command, 0, stdout=b'{"genesis": {"raw": {"top": {}}}}')

    monkeypatch.setattr(chain_spec_module.subprocess, "run", _fake_run)

    chain_spec = ensure_template_chain_spec(spec_path, binary_path, fork_chain)

    assert captured == [[str(binary_path), "build-spec", *expected_args, "--raw"]]
    assert spec_path.exists()
    assert chain_spec["genesis"]["raw"]["top"] == {}


def test_failed_build_raises(tmp_path: Path, monkeypatch) -> None:
    """A failing build-spec command surfaces as a genesis error."""

    def _fake_run(command, check, capture_output):
        raise subprocess.CalledProcessError(1, command, stderr=b"unknown chain")

    monkeypatch.setattr(chain_spec_module.subprocess, "run", _fake_run)

    with pytest.raises(ForkGenesisError, match="unknown chain"):
        ensure_template_chain_spec(tmp_path / "fork.json", tmp_path / "binary", "nope")


def test_load_rejects_invalid_json(tmp_path: Path) -> None:
    """Malformed template files are reported with their location."""
    spec_path = tmp_path / "fork.json"
    spec_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ForkGenesisError):
        load_chain_spec(spec_path)


def test_load_rejects_non_utf8_template(tmp_path: Path) -> None:
    """Templates with undecodable bytes are reported as genesis errors."""
    spec_path = tmp_path / "fork.json"
    spec_path.write_bytes(b'{"a":"\xff"}')

    with pytest.raises(ForkGenesisError):
        load_chain_spec(spec_path)


def test_write_replaces_existing_file(tmp_path: Path) -> None:
    """Writing fully replaces the previous spec with four-space indentation."""
    spec_path = tmp_path / "fork.json"
    spec_path.write_text("x" * 1000, encoding="utf-8")

    write_chain_spec(spec_path, {"genesis": {"raw": {"top": {"0x01": "0x02"}}}})

    text = spec_path.read_text(encoding="utf-8")
    assert json.loads(text) == {"genesis": {"raw": {"top": {"0x01": "0x02"}}}}
    assert text.startswith('{\n    "genesis"')
    assert [path.name for path in tmp_path.iterdir()] == ["fork.json"]
