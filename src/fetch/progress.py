"""Leaf-level download progress.

This module counts visited keyspace leaves, drives a terminal progress
bar, and emits periodic structured progress events.
"""

from __future__ import annotations

import asyncio
import time
from typing import Any

from tqdm import tqdm

from core.constants import PROGRESS_LOG_INTERVAL_LEAVES
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


class FetchProgress:
    """Concurrency-safe leaf counter for one download run."""

    def __init__(
        self,
        total_leaves: int,
        log_interval: int = PROGRESS_LOG_INTERVAL_LEAVES,
        show_bar: bool = True,
    ) -> None:
        self._total_leaves = total_leaves
        self._log_interval = max(1, log_interval)
        self._lock = asyncio.Lock()
        self._leaves_fetched = 0
        self._pairs_fetched = 0
        self._started_at = time.monotonic()
        self._bar: Any = tqdm(
            total=total_leaves, unit="chunk", desc="state", disable=not show_bar
        )

    @property
    def leaves_fetched(self) -> int:
        return self._leaves_fetched

    @property
    def pairs_fetched(self) -> int:
        return self._pairs_fetched

    async def advance(self, pair_count: int) -> None:
        """Record one visited leaf and the number of pairs it returned."""
        async with self._lock:
            self._leaves_fetched += 1
            self._pairs_fetched += pair_count
            self._bar.update(1)
            if _should_log(self._leaves_fetched, self._total_leaves, self._log_interval):
                _LOGGER.info(
                    "fetch_progress",
                    leaves_fetched=self._leaves_fetched,
                    total_leaves=self._total_leaves,
                    pairs_fetched=self._pairs_fetched,
                    elapsed_seconds=round(time.monotonic() - self._started_at, 3),
                )

    def close(self) -> None:
        """Close the progress bar."""
        self._bar.close()


def _should_log(leaves_fetched: int, total_leaves: int, interval: int) -> bool:
    """Return true when the current leaf should emit a progress event."""
    if leaves_fetched >= total_leaves:
        return True
    return leaves_fetched % interval == 0
