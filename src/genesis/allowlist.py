"""Migration allowlist construction.

This module decides which origin storage is carried into the fork:
manually pinned prefixes plus the TwoX-128 prefix of every storage
partition that is not explicitly skipped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from core.constants import (
    DEFAULT_PINNED_PREFIXES,
    DEFAULT_SKIPPED_PARTITIONS,
    PARTITION_HASH_BITS,
)
from core.logging_config import get_logger
from genesis.hashing import twox_hash_hex

_LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class Allowlist:
    """Immutable ordered set of migratable key prefixes.

    Attributes:
        prefixes: Hex prefixes; duplicates are harmless.
    """

    prefixes: tuple[str, ...]

    def matches(self, key: str) -> bool:
        """Return whether key starts with at least one allowed prefix."""
        return key.startswith(self.prefixes)

    def __len__(self) -> int:
        return len(self.prefixes)


def build_allowlist(
    partition_names: Iterable[str],
    skipped: Iterable[str] = DEFAULT_SKIPPED_PARTITIONS,
    pinned: Iterable[str] = DEFAULT_PINNED_PREFIXES,
) -> Allowlist:
    """Build the allowlist from partition names.

    Args:
        partition_names: Storage partition names of the origin runtime.
        skipped: Partition names never derived automatically.
        pinned: Literal prefixes always included, ahead of derived ones.

    Returns:
        Allowlist with pinned prefixes followed by derived prefixes.
    """
    skipped_names = frozenset(skipped)
    prefixes = list(pinned)
    for name in partition_names:
        if name in skipped_names:
            _LOGGER.info("partition_skipped", partition=name)
            continue
        prefixes.append(twox_hash_hex(name, PARTITION_HASH_BITS))
    _LOGGER.info("allowlist_built", prefix_count=len(prefixes), prefixes=prefixes)
    return Allowlist(prefixes=tuple(prefixes))
