"""Unit tests for the genesis merge."""

from __future__ import annotations

import copy
import json

import pytest

from core.constants import (
    ALICE_PUBLIC_KEY,
    LAST_RUNTIME_UPGRADE_KEY,
    RUNTIME_CODE_KEY,
    SUDO_KEY_STORAGE_KEY,
)
from core.errors import ForkGenesisError
from core.types import GenesisOverrides
from genesis.allowlist import Allowlist
from genesis.chain_spec import load_chain_spec, render_chain_spec
from genesis.merger import merge_into_chain_spec
from tests.fixture_paths import fixture_path

_RUNTIME_CODE = "0x0061736d01000000"


def _template(top: dict[str, str]) -> dict[str, object]:
    return {"name": "Development", "genesis": {"raw": {"top": dict(top), "childrenDefault": {}}}}


def test_merge_overwrites_allowlisted_and_drops_others() -> None:
    """Allowlisted origin values win; non-matching origin keys are ignored."""
    chain_spec = _template({"0xab01": "old"})
    pairs = [("0xab01", "v1"), ("0xcd02", "v2")]

    merged_count = merge_into_chain_spec(
        chain_spec, Allowlist(prefixes=("0xab",)), pairs, GenesisOverrides(_RUNTIME_CODE)
    )

    assert chain_spec["genesis"]["raw"]["top"] == {
        "0xab01": "v1",
        RUNTIME_CODE_KEY: _RUNTIME_CODE,
    }
    assert merged_count == 1


def test_merge_keeps_template_values_for_non_matching_keys() -> None:
    """Template keys outside the allowlist keep their template value."""
    chain_spec = _template({"0xcd02": "template"})

    merge_into_chain_spec(
        chain_spec,
        Allowlist(prefixes=("0xab",)),
        [("0xcd02", "origin")],
        GenesisOverrides(_RUNTIME_CODE),
    )

    assert chain_spec["genesis"]["raw"]["top"]["0xcd02"] == "template"


def test_pair_matching_multiple_prefixes_is_written_once() -> None:
    """Overlapping prefixes count a matching pair once."""
    chain_spec = _template({})

    merged_count = merge_into_chain_spec(
        chain_spec,
        Allowlist(prefixes=("0xab", "0xab01")),
        [("0xab0102", "v")],
        GenesisOverrides(_RUNTIME_CODE),
    )

    assert merged_count == 1


def test_overrides_take_precedence_over_origin_values() -> None:
    """Code, upgrade marker, and sudo key ignore allowlisted origin values."""
    chain_spec = _template({})
    pairs = [
        (RUNTIME_CODE_KEY, "0xorigin-code"),
        (LAST_RUNTIME_UPGRADE_KEY, "0x1c"),
        (SUDO_KEY_STORAGE_KEY, "0xorigin-sudo"),
    ]

    merge_into_chain_spec(
        chain_spec,
        Allowlist(prefixes=("0x",)),
        pairs,
        GenesisOverrides(_RUNTIME_CODE, sudo_override=True),
    )

    top = chain_spec["genesis"]["raw"]["top"]
    assert top[RUNTIME_CODE_KEY] == _RUNTIME_CODE
    assert LAST_RUNTIME_UPGRADE_KEY not in top
    assert top[SUDO_KEY_STORAGE_KEY] == ALICE_PUBLIC_KEY


def test_sudo_key_untouched_without_override() -> None:
    """Without the override the sudo key keeps its merged or template value."""
    chain_spec = load_chain_spec(fixture_path("chain_spec/dev_raw.json"))
    template_sudo = chain_spec["genesis"]["raw"]["top"][SUDO_KEY_STORAGE_KEY]

    merge_into_chain_spec(chain_spec, Allowlist(prefixes=()), [], GenesisOverrides(_RUNTIME_CODE))

    top = chain_spec["genesis"]["raw"]["top"]
    assert top[SUDO_KEY_STORAGE_KEY] == template_sudo
    assert LAST_RUNTIME_UPGRADE_KEY not in top


def test_merge_is_idempotent() -> None:
    """Merging the same inputs into the same template renders identical bytes."""
    template = load_chain_spec(fixture_path("chain_spec/dev_raw.json"))
    allowlist = Allowlist(prefixes=("0xc2261276cc9d1f8598ea4b6a74b15c2f", "0xee"))
    pairs = [("0xee01", "0x01"), ("0xc2261276cc9d1f8598ea4b6a74b15c2f57c8", "0x02")]
    overrides = GenesisOverrides(_RUNTIME_CODE, sudo_override=True)
    first = copy.deepcopy(template)
    second = copy.deepcopy(template)

    merge_into_chain_spec(first, allowlist, pairs, overrides)
    merge_into_chain_spec(second, allowlist, pairs, overrides)

    assert render_chain_spec(first) == render_chain_spec(second)
    assert json.loads(render_chain_spec(first)) == first


def test_merge_rejects_spec_without_raw_top() -> None:
    """A non-raw template is a structural error."""
    with pytest.raises(ForkGenesisError):
        merge_into_chain_spec(
            {"genesis": {"runtime": {}}},
            Allowlist(prefixes=("0x",)),
            [],
            GenesisOverrides(_RUNTIME_CODE),
        )
