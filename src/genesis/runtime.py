"""Node binary and runtime code artifacts.

These are local preconditions of a fork run and are checked before
any state is downloaded or any file is modified.
"""

from __future__ import annotations

import stat

from core.errors import ForkArtifactError
from core.logging_config import get_logger
from core.types import ForkArtifactPaths

_LOGGER = get_logger(__name__)


def ensure_binary(paths: ForkArtifactPaths) -> None:
    """Require the node binary and mark it executable.

    Raises:
        ForkArtifactError: If the binary is missing.
    """
    if not paths.binary.exists():
        raise ForkArtifactError(
            f"Binary missing at {paths.binary}. Copy your substrate node binary "
            f"into {paths.binary.parent} and rename it to '{paths.binary.name}'."
        )
    mode = paths.binary.stat().st_mode
    paths.binary.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def ensure_runtime_hex(paths: ForkArtifactPaths) -> None:
    """Hex-encode the runtime WASM unless an encoding already exists.

    Raises:
        ForkArtifactError: If neither the hex nor the WASM file exists.
    """
    if paths.runtime_hex.exists():
        return
    if not paths.runtime_wasm.exists():
        raise ForkArtifactError(
            f"WASM missing at {paths.runtime_wasm}. Copy your runtime WASM blob "
            f"into {paths.runtime_wasm.parent} and rename it to '{paths.runtime_wasm.name}'."
        )
    paths.runtime_hex.write_text(paths.runtime_wasm.read_bytes().hex(), encoding="utf-8")
    _LOGGER.info("runtime_hex_written", path=str(paths.runtime_hex))


def read_runtime_code(paths: ForkArtifactPaths) -> str:
    """Return the runtime code as ``0x``-prefixed hex."""
    code = paths.runtime_hex.read_text(encoding="utf-8").strip()
    if code.startswith("0x"):
        return code
    return "0x" + code
