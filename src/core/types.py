"""Shared typed models.

This module defines immutable data models used by the fetch, genesis,
and pipeline layers to keep interfaces explicit and stable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol, Sequence

from core.constants import (
    BINARY_FILE_NAME,
    DEFAULT_CHUNKS_LEVEL,
    EXPORTED_STATE_FILE_NAME,
    FORKED_SPEC_FILE_NAME,
    MODULE_NAMES_FILE_NAME,
    RUNTIME_HEX_FILE_NAME,
    RUNTIME_WASM_FILE_NAME,
    STATE_PAIRS_FILE_NAME,
)

StatePair = tuple[str, str]
PairSource = Literal["exported_state", "cache", "download"]


class StateSource(Protocol):
    """Remote key-value state the fork is taken from."""

    async def get_partition_names(self) -> list[str]:
        """Return names of storage partitions declared by the runtime."""
        ...

    async def get_pairs(self, prefix: str, at: str) -> list[StatePair]:
        """Return all pairs whose key starts with prefix at block hash ``at``."""
        ...

    async def get_block_hash(self, block_number: int | None = None) -> str:
        """Return the hash of a block height, or of the chain head."""
        ...

    async def aclose(self) -> None:
        """Release transport resources."""
        ...


@dataclass(frozen=True)
class ForkArtifactPaths:
    """Filesystem layout of fork inputs and outputs.

    Attributes:
        binary: Node binary used to build the template chain spec.
        runtime_wasm: Runtime WASM blob.
        runtime_hex: Hex encoding of the runtime WASM blob.
        module_names: Optional pinned list of partition names.
        forked_spec: Template chain spec, replaced by the merged result.
        exported_state: Optional full exported state of the origin chain.
        state_pairs: Cached snapshot of origin storage pairs.
    """

    binary: Path
    runtime_wasm: Path
    runtime_hex: Path
    module_names: Path
    forked_spec: Path
    exported_state: Path
    state_pairs: Path

    @classmethod
    def from_data_root(cls, data_root: Path) -> "ForkArtifactPaths":
        """Build the artifact layout below a data root directory."""
        return cls(
            binary=data_root / BINARY_FILE_NAME,
            runtime_wasm=data_root / RUNTIME_WASM_FILE_NAME,
            runtime_hex=data_root / RUNTIME_HEX_FILE_NAME,
            module_names=data_root / MODULE_NAMES_FILE_NAME,
            forked_spec=data_root / FORKED_SPEC_FILE_NAME,
            exported_state=data_root / EXPORTED_STATE_FILE_NAME,
            state_pairs=data_root / STATE_PAIRS_FILE_NAME,
        )


@dataclass(frozen=True)
class FetchOptions:
    """State download options.

    Attributes:
        chunks_level: Partition depth; 256^chunks_level leaf requests.
        from_block: Optional block height; chain head when omitted.
        quick_mode: Fetch the last partition level concurrently.
    """

    chunks_level: int = DEFAULT_CHUNKS_LEVEL
    from_block: int | None = None
    quick_mode: bool = False


@dataclass(frozen=True)
class GenesisOverrides:
    """Unconditional edits applied after the allowlisted merge.

    Attributes:
        runtime_code: Hex runtime code written to the ``:code`` key.
        sudo_override: Replace the sudo key with Alice's public key.
    """

    runtime_code: str
    sudo_override: bool = False


@dataclass(frozen=True)
class FetchResult:
    """Outcome of one state download.

    Attributes:
        snapshot_path: Final snapshot artifact path.
        block_hash: Block hash every leaf request was evaluated at.
        leaves_fetched: Number of leaf range queries issued.
        pair_count: Number of pairs written.
    """

    snapshot_path: Path
    block_hash: str
    leaves_fetched: int
    pair_count: int


@dataclass(frozen=True)
class ForkResult:
    """Fork run output.

    Attributes:
        spec_path: Merged chain spec path.
        pair_source: Where origin pairs came from.
        prefixes: Allowlist prefixes used for the merge.
        merged_pair_count: Number of origin pairs written into the spec.
    """

    spec_path: Path
    pair_source: PairSource
    prefixes: Sequence[str]
    merged_pair_count: int
