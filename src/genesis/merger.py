"""Merge of allowlisted origin storage into a template chain spec.

After the allowlisted pairs are copied, a fixed set of keys is edited
unconditionally and always wins over any origin value:

- ``System.LastRuntimeUpgrade`` is removed so the forked chain runs its
  runtime upgrade hooks on the first block;
- ``:code`` is set to the supplied runtime;
- ``Sudo.Key`` is optionally set to Alice.
"""

from __future__ import annotations

from typing import Any, Iterable

from core.constants import (
    ALICE_PUBLIC_KEY,
    LAST_RUNTIME_UPGRADE_KEY,
    RUNTIME_CODE_KEY,
    SUDO_KEY_STORAGE_KEY,
)
from core.errors import ForkGenesisError
from core.logging_config import get_logger
from core.types import GenesisOverrides, StatePair
from genesis.allowlist import Allowlist

_LOGGER = get_logger(__name__)


def merge_into_chain_spec(
    chain_spec: dict[str, Any],
    allowlist: Allowlist,
    pairs: Iterable[StatePair],
    overrides: GenesisOverrides,
) -> int:
    """Merge origin pairs into chain_spec in place.

    Args:
        chain_spec: Template chain spec; ``genesis.raw.top`` is mutated.
        allowlist: Prefixes eligible for migration.
        pairs: Origin storage pairs.
        overrides: Unconditional post-merge edits.

    Returns:
        Number of origin pairs written into the spec.

    Raises:
        ForkGenesisError: If the template lacks a ``genesis.raw.top`` object.
    """
    top = genesis_top(chain_spec)
    merged_count = 0
    for key, value in pairs:
        if allowlist.matches(key):
            top[key] = value
            merged_count += 1
    top.pop(LAST_RUNTIME_UPGRADE_KEY, None)
    top[RUNTIME_CODE_KEY] = overrides.runtime_code
    if overrides.sudo_override:
        top[SUDO_KEY_STORAGE_KEY] = ALICE_PUBLIC_KEY
    _LOGGER.info(
        "genesis_merged",
        merged_pair_count=merged_count,
        top_key_count=len(top),
        sudo_override=overrides.sudo_override,
    )
    return merged_count


def genesis_top(chain_spec: dict[str, Any]) -> dict[str, str]:
    """Return the raw top-level storage map of a chain spec.

    Raises:
        ForkGenesisError: If the map is missing or not an object.
    """
    try:
        top = chain_spec["genesis"]["raw"]["top"]
    except (KeyError, TypeError) as error:
        raise ForkGenesisError(
            "Template chain spec has no genesis.raw.top; build it with --raw."
        ) from error
    if not isinstance(top, dict):
        raise ForkGenesisError("Template chain spec genesis.raw.top is not an object.")
    return top
