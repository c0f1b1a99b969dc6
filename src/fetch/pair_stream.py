"""Streaming snapshot writer and cached pair loading.

This module appends leaf batches to a JSON array on disk as they arrive,
so the full origin state is never held in memory during download.
The array is written to a partial file and moved into place only once
it is complete; an aborted run leaves no reusable cache behind.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import IO, Any, Sequence

from core.constants import PARTIAL_FILE_SUFFIX
from core.errors import ForkSnapshotError
from core.logging_config import get_logger
from core.types import ForkArtifactPaths, PairSource, StatePair

_LOGGER = get_logger(__name__)


class PairStreamWriter:
    """Append-only JSON array writer shared by concurrent leaf tasks."""

    def __init__(self, snapshot_path: Path) -> None:
        self._snapshot_path = snapshot_path
        self._partial_path = snapshot_path.with_name(snapshot_path.name + PARTIAL_FILE_SUFFIX)
        self._lock = asyncio.Lock()
        self._handle: IO[str] | None = None
        self._wrote_batch = False
        self._pair_count = 0

    @property
    def pair_count(self) -> int:
        return self._pair_count

    def open(self) -> None:
        """Create the partial file and write the opening delimiter."""
        try:
            self._partial_path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self._partial_path.open("w", encoding="utf-8")
            self._handle.write("[")
        except OSError as error:
            raise ForkSnapshotError(
                f"Cannot open snapshot file {self._partial_path}: {error}"
            ) from error

    async def append_batch(self, pairs: Sequence[StatePair]) -> None:
        """Append one leaf batch; empty batches write nothing.

        Args:
            pairs: Pairs returned by one leaf range query.
        """
        if not pairs:
            return
        encoded = encode_batch(pairs)
        async with self._lock:
            handle = self._require_handle()
            if self._wrote_batch:
                handle.write(",")
            else:
                self._wrote_batch = True
            handle.write(encoded)
            self._pair_count += len(pairs)

    def close(self) -> Path:
        """Write the closing delimiter and publish the snapshot.

        Returns:
            Final snapshot path.
        """
        handle = self._require_handle()
        try:
            handle.write("]")
            handle.close()
            self._handle = None
            self._partial_path.replace(self._snapshot_path)
        except OSError as error:
            raise ForkSnapshotError(
                f"Cannot finalize snapshot file {self._snapshot_path}: {error}"
            ) from error
        return self._snapshot_path

    def discard(self) -> None:
        """Drop an incomplete snapshot after a failed run."""
        if self._handle is not None:
            self._handle.close()
            self._handle = None
        if self._partial_path.exists():
            self._partial_path.unlink()
        _LOGGER.warning("snapshot_discarded", snapshot_path=str(self._partial_path))

    def _require_handle(self) -> IO[str]:
        if self._handle is None:
            raise ForkSnapshotError("Snapshot writer used before open() or after close().")
        return self._handle


def encode_batch(pairs: Sequence[StatePair]) -> str:
    """Encode pairs as the interior of a JSON array, without brackets."""
    return json.dumps([list(pair) for pair in pairs], separators=(",", ":"))[1:-1]


def load_origin_pairs(
    paths: ForkArtifactPaths,
) -> tuple[list[StatePair], PairSource] | None:
    """Load origin pairs from a previous export or download, if any.

    A full exported state takes precedence over a cached pair snapshot.

    Args:
        paths: Artifact layout.

    Returns:
        Pairs and their source, or None when nothing is cached.

    Raises:
        ForkSnapshotError: If a cache file exists but is malformed.
    """
    if paths.exported_state.exists():
        top = _read_exported_top(paths.exported_state)
        _LOGGER.info("exported_state_loaded", path=str(paths.exported_state), pair_count=len(top))
        return [(str(key), str(value)) for key, value in top.items()], "exported_state"
    if paths.state_pairs.exists():
        _LOGGER.warning(
            "cached_state_reused",
            path=str(paths.state_pairs),
            hint="Delete this file and rerun to fetch the latest storage.",
        )
        return read_state_pairs(paths.state_pairs), "cache"
    return None


def read_state_pairs(snapshot_path: Path) -> list[StatePair]:
    """Read a snapshot artifact into a pair list.

    Raises:
        ForkSnapshotError: If the file is not a JSON array of pairs.
    """
    payload = _read_json(snapshot_path)
    if not isinstance(payload, list):
        raise ForkSnapshotError(f"Invalid snapshot {snapshot_path}: expected a JSON array.")
    pairs: list[StatePair] = []
    for index, item in enumerate(payload):
        if not isinstance(item, list) or len(item) != 2:
            raise ForkSnapshotError(
                f"Invalid snapshot {snapshot_path}: entry {index} is not a key/value pair."
            )
        pairs.append((str(item[0]), str(item[1])))
    return pairs


def _read_exported_top(exported_state_path: Path) -> dict[str, Any]:
    payload = _read_json(exported_state_path)
    try:
        top = payload["genesis"]["raw"]["top"]
    except (KeyError, TypeError) as error:
        raise ForkSnapshotError(
            f"Invalid exported state {exported_state_path}: missing genesis.raw.top."
        ) from error
    if not isinstance(top, dict):
        raise ForkSnapshotError(
            f"Invalid exported state {exported_state_path}: genesis.raw.top is not an object."
        )
    return top


def _read_json(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError as error:
        raise ForkSnapshotError(
            f"Invalid JSON in {path} at line {error.lineno}: {error.msg}. "
            "Delete the file and rerun to download fresh state."
        ) from error
    except (UnicodeDecodeError, OSError) as error:
        raise ForkSnapshotError(
            f"Cannot read {path}: {error}. Delete the file and rerun to download fresh state."
        ) from error
