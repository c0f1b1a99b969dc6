"""Public SDK surface for chainfork.

This module provides a stable import path for library users.
It re-exports the pipeline entry points and typed option models.
"""

from __future__ import annotations

from core.config import ForkConfig
from core.errors import (
    ForkArtifactError,
    ForkConfigError,
    ForkError,
    ForkGenesisError,
    ForkSnapshotError,
    ForkSourceError,
)
from core.types import (
    FetchOptions,
    FetchResult,
    ForkArtifactPaths,
    ForkResult,
    GenesisOverrides,
    StateSource,
)
from fetch.downloader import download_origin_state
from fork.pipeline import ForkPipelineRunner, build_fork_allowlist, fetch_origin_state, run_fork
from genesis.allowlist import Allowlist, build_allowlist
from genesis.merger import merge_into_chain_spec
from source.rpc_client import SubstrateRpcClient

__all__ = [
    "Allowlist",
    "FetchOptions",
    "FetchResult",
    "ForkArtifactError",
    "ForkArtifactPaths",
    "ForkConfig",
    "ForkConfigError",
    "ForkError",
    "ForkGenesisError",
    "ForkPipelineRunner",
    "ForkResult",
    "ForkSnapshotError",
    "ForkSourceError",
    "GenesisOverrides",
    "StateSource",
    "SubstrateRpcClient",
    "build_allowlist",
    "build_fork_allowlist",
    "download_origin_state",
    "fetch_origin_state",
    "merge_into_chain_spec",
    "run_fork",
]
