"""Fork orchestration.

This module coordinates artifact checks, allowlist construction,
origin state retrieval, and the genesis merge for one fork run.
"""

from __future__ import annotations

import asyncio
from typing import Callable

from core.config import ForkConfig
from core.logging_config import get_logger
from core.types import (
    FetchOptions,
    FetchResult,
    ForkArtifactPaths,
    ForkResult,
    GenesisOverrides,
    PairSource,
    StatePair,
    StateSource,
)
from fetch.downloader import download_origin_state
from fetch.pair_stream import load_origin_pairs, read_state_pairs
from genesis.allowlist import Allowlist, build_allowlist
from genesis.chain_spec import ensure_template_chain_spec, write_chain_spec
from genesis.merger import merge_into_chain_spec
from genesis.runtime import ensure_binary, ensure_runtime_hex, read_runtime_code
from source.metadata import load_module_names
from source.rpc_client import SubstrateRpcClient

_LOGGER = get_logger(__name__)

StateSourceFactory = Callable[[ForkConfig], StateSource]


def default_state_source(config: ForkConfig) -> StateSource:
    """Create the HTTP JSON-RPC state source for a config."""
    return SubstrateRpcClient(config.rpc_endpoint, config.rpc_timeout_seconds)


class ForkPipelineRunner:
    """Stateful runner for one fork run.

    The state source is created on first use, so runs served entirely
    from cached artifacts never open a connection.
    """

    def __init__(
        self,
        config: ForkConfig,
        source_factory: StateSourceFactory = default_state_source,
        show_progress: bool = True,
    ) -> None:
        self._config = config
        self._paths = ForkArtifactPaths.from_data_root(config.data_root)
        self._source_factory = source_factory
        self._source: StateSource | None = None
        self._show_progress = show_progress

    async def run(self) -> ForkResult:
        """Execute the fork and return the merged spec location."""
        try:
            ensure_binary(self._paths)
            ensure_runtime_hex(self._paths)
            allowlist = await self.build_allowlist()
            pairs, pair_source = await self._load_origin_pairs()
            chain_spec = ensure_template_chain_spec(
                self._paths.forked_spec, self._paths.binary, self._config.fork_chain
            )
            overrides = GenesisOverrides(
                runtime_code=read_runtime_code(self._paths),
                sudo_override=self._config.sudo_override,
            )
            merged_count = merge_into_chain_spec(chain_spec, allowlist, pairs, overrides)
            spec_path = write_chain_spec(self._paths.forked_spec, chain_spec)
        finally:
            await self.close()
        _LOGGER.info(
            "fork_completed",
            spec_path=str(spec_path),
            pair_source=pair_source,
            prefix_count=len(allowlist),
            merged_pair_count=merged_count,
        )
        return ForkResult(
            spec_path=spec_path,
            pair_source=pair_source,
            prefixes=allowlist.prefixes,
            merged_pair_count=merged_count,
        )

    async def build_allowlist(self) -> Allowlist:
        """Build the allowlist from pinned or live partition names."""
        partition_names = load_module_names(self._paths.module_names)
        if partition_names is None:
            partition_names = await self._state_source().get_partition_names()
        return build_allowlist(partition_names)

    async def fetch(self) -> FetchResult:
        """Download origin state into the snapshot artifact."""
        options = FetchOptions(
            chunks_level=self._config.chunks_level,
            from_block=self._config.from_block,
            quick_mode=self._config.quick_mode,
        )
        return await download_origin_state(
            self._state_source(),
            options,
            self._paths.state_pairs,
            show_progress=self._show_progress,
        )

    async def close(self) -> None:
        """Close the state source if one was opened."""
        if self._source is not None:
            await self._source.aclose()
            self._source = None

    async def _load_origin_pairs(self) -> tuple[list[StatePair], PairSource]:
        cached = load_origin_pairs(self._paths)
        if cached is not None:
            return cached
        result = await self.fetch()
        return read_state_pairs(result.snapshot_path), "download"

    def _state_source(self) -> StateSource:
        if self._source is None:
            self._source = self._source_factory(self._config)
        return self._source


def run_fork(
    config: ForkConfig,
    source_factory: StateSourceFactory = default_state_source,
) -> ForkResult:
    """Run the full fork pipeline.

    Args:
        config: Runtime configuration.
        source_factory: Builds the origin state source on first use.

    Returns:
        Fork run result.

    Raises:
        ForkArtifactError: If the binary or runtime is missing.
        ForkSourceError: If an origin RPC query fails.
        ForkSnapshotError: If a snapshot cannot be written or read.
        ForkGenesisError: If the template is invalid or cannot be built.
    """
    runner = ForkPipelineRunner(config, source_factory)
    return asyncio.run(runner.run())


def fetch_origin_state(
    config: ForkConfig,
    source_factory: StateSourceFactory = default_state_source,
) -> FetchResult:
    """Download origin state only, replacing any cached snapshot."""
    runner = ForkPipelineRunner(config, source_factory)
    return asyncio.run(_fetch_and_close(runner))


def build_fork_allowlist(
    config: ForkConfig,
    source_factory: StateSourceFactory = default_state_source,
) -> Allowlist:
    """Build the allowlist a fork run would use."""
    runner = ForkPipelineRunner(config, source_factory)
    return asyncio.run(_allowlist_and_close(runner))


async def _fetch_and_close(runner: ForkPipelineRunner) -> FetchResult:
    try:
        return await runner.fetch()
    finally:
        await runner.close()


async def _allowlist_and_close(runner: ForkPipelineRunner) -> Allowlist:
    try:
        return await runner.build_allowlist()
    finally:
        await runner.close()
