"""Runtime configuration model for chainfork.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_CHUNKS_LEVEL,
    DEFAULT_DATA_ROOT,
    DEFAULT_RPC_ENDPOINT,
    DEFAULT_RPC_TIMEOUT_SECONDS,
)
from core.errors import ForkConfigError

_FALSY_VALUES = ("", "0", "false", "no", "off")


@dataclass(frozen=True)
class ForkConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Directory holding the binary, runtime, and fork artifacts.
        rpc_endpoint: HTTP JSON-RPC endpoint of the live chain.
        chunks_level: Keyspace partition depth for the state download.
        from_block: Optional block height to snapshot; chain head when omitted.
        quick_mode: Fetch the last partition level concurrently.
        fork_chain: Optional chain name passed to ``build-spec --chain``.
        sudo_override: Replace the sudo key with Alice's public key.
        rpc_timeout_seconds: Per-request HTTP timeout.
    """

    data_root: Path
    rpc_endpoint: str
    chunks_level: int
    from_block: int | None
    quick_mode: bool
    fork_chain: str | None
    sudo_override: bool
    rpc_timeout_seconds: float = DEFAULT_RPC_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "ForkConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ForkConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("FORK_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        chunks_level = _parse_non_negative_int(
            "FORK_CHUNKS_LEVEL", os.getenv("FORK_CHUNKS_LEVEL", str(DEFAULT_CHUNKS_LEVEL))
        )
        from_block_value = os.getenv("FROM_BLOCK_NUM")
        from_block = (
            _parse_non_negative_int("FROM_BLOCK_NUM", from_block_value)
            if from_block_value
            else None
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            rpc_endpoint=os.getenv("HTTP_RPC_ENDPOINT") or DEFAULT_RPC_ENDPOINT,
            chunks_level=chunks_level,
            from_block=from_block,
            quick_mode=_parse_flag(os.getenv("QUICK_MODE")),
            fork_chain=os.getenv("FORK_CHAIN") or None,
            sudo_override=_parse_flag(os.getenv("ALICE")),
            rpc_timeout_seconds=_parse_timeout(
                os.getenv("FORK_RPC_TIMEOUT", str(DEFAULT_RPC_TIMEOUT_SECONDS))
            ),
        )


def _parse_non_negative_int(name: str, raw_value: str) -> int:
    """Parse a non-negative integer environment value.

    Args:
        name: Environment variable name, used in error messages.
        raw_value: Raw string from environment.

    Returns:
        Parsed integer.

    Raises:
        ForkConfigError: If value is not a non-negative integer.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ForkConfigError(
            f"Invalid {name} value: expected integer, got '{raw_value}'. "
            f"Set {name} to a non-negative number."
        ) from error
    if value < 0:
        raise ForkConfigError(
            f"Invalid {name} value: expected non-negative integer, got {value}."
        )
    return value


def _parse_timeout(raw_value: str) -> float:
    """Parse the RPC timeout in seconds."""
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise ForkConfigError(
            f"Invalid FORK_RPC_TIMEOUT value: expected seconds, got '{raw_value}'."
        ) from error
    if timeout <= 0:
        raise ForkConfigError("Invalid FORK_RPC_TIMEOUT value: must be positive.")
    return timeout


def _parse_flag(raw_value: str | None) -> bool:
    """Interpret an optional environment flag; only explicit off values disable it."""
    if raw_value is None:
        return False
    return raw_value.strip().lower() not in _FALSY_VALUES
