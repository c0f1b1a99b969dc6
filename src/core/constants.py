"""Core constants used across chainfork modules.

This module centralizes artifact names, storage keys, and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path("data")
DEFAULT_RPC_ENDPOINT = "http://127.0.0.1:9933"
DEFAULT_RPC_TIMEOUT_SECONDS = 120.0
DEFAULT_CHUNKS_LEVEL = 1

BINARY_FILE_NAME = "binary"
RUNTIME_WASM_FILE_NAME = "runtime.wasm"
RUNTIME_HEX_FILE_NAME = "runtime.hex"
MODULE_NAMES_FILE_NAME = "modules.json"
FORKED_SPEC_FILE_NAME = "fork.json"
EXPORTED_STATE_FILE_NAME = "exported_state.json"
STATE_PAIRS_FILE_NAME = "state_pairs.json"
PARTIAL_FILE_SUFFIX = ".partial"

ROOT_PREFIX = "0x"
KEYSPACE_FAN_OUT = 256
PARTITION_HASH_BITS = 128
PROGRESS_LOG_INTERVAL_LEAVES = 1024

# Storage keys in the raw genesis map.
SYSTEM_ACCOUNT_PREFIX = "0x26aa394eea5630e07c48ae0c9558cef7b99d880ec681799c0cf30e8886371da9"
LAST_RUNTIME_UPGRADE_KEY = "0x26aa394eea5630e07c48ae0c9558cef7f9cce9c888469bb1a0dceaa129672ef8"
RUNTIME_CODE_KEY = "0x3a636f6465"
SUDO_KEY_STORAGE_KEY = "0x5c0d1176a568c1f92944340dbfed9e9c530ebca703c85910e7164cb7d1c9e47b"
ALICE_PUBLIC_KEY = "0xd43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d"

DEFAULT_PINNED_PREFIXES = (SYSTEM_ACCOUNT_PREFIX,)
DEFAULT_SKIPPED_PARTITIONS = (
    "System",
    "Session",
    "Historical",
    "Babe",
    "Grandpa",
    "Staking",
    "Authorship",
    "AuthorityDiscovery",
    "ImOnline",
    "Offences",
    "BagsList",
    "ElectionProviderMultiPhase",
)
