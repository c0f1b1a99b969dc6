"""Keyspace enumeration by hierarchical prefix partitions.

The key namespace is split into a 256-ary tree of hex prefixes. Each
level appends one byte; nodes at the configured depth are leaves and
are fetched with a single range query. Leaves form a disjoint cover of
the namespace, so every key is retrieved exactly once.

Concurrency is confined to the last level: with quick mode enabled the
256 leaf requests under one parent run together, which caps in-flight
requests at 256 regardless of depth. All other levels run sequentially.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Sequence

from core.constants import KEYSPACE_FAN_OUT, ROOT_PREFIX
from core.types import StatePair, StateSource
from fetch.pair_stream import PairStreamWriter
from fetch.progress import FetchProgress

BatchSink = Callable[[Sequence[StatePair]], Awaitable[None]]


def child_prefixes(prefix: str) -> list[str]:
    """Return the 256 child prefixes of a node in ascending byte order."""
    return [f"{prefix}{byte:02x}" for byte in range(KEYSPACE_FAN_OUT)]


def leaf_count(depth: int) -> int:
    """Return the number of leaves below the root at a partition depth."""
    return KEYSPACE_FAN_OUT**depth


class KeyspaceEnumerator:
    """Recursive prefix descent over one consistent state snapshot."""

    def __init__(
        self,
        source: StateSource,
        block_hash: str,
        sink: BatchSink,
        progress: FetchProgress,
        quick_mode: bool = False,
    ) -> None:
        """Initialize the enumerator.

        Args:
            source: State source answering range queries.
            block_hash: Block every leaf query is evaluated at.
            sink: Receives each leaf batch, e.g. ``PairStreamWriter.append_batch``.
            progress: Leaf counter advanced once per visited leaf.
            quick_mode: Fetch siblings of the last level concurrently.
        """
        self._source = source
        self._block_hash = block_hash
        self._sink = sink
        self._progress = progress
        self._quick_mode = quick_mode

    async def enumerate(self, prefix: str, levels_remaining: int) -> None:
        """Visit every leaf below prefix.

        Args:
            prefix: Hex prefix of the subtree root.
            levels_remaining: Levels to descend before treating a node as a leaf.

        Raises:
            ForkSourceError: If any leaf query fails; the whole run aborts.
        """
        if levels_remaining <= 0:
            await self._fetch_leaf(prefix)
            return
        children = child_prefixes(prefix)
        if self._quick_mode and levels_remaining == 1:
            await self._fetch_leaves_concurrently(children)
            return
        for child in children:
            await self.enumerate(child, levels_remaining - 1)

    async def _fetch_leaves_concurrently(self, prefixes: list[str]) -> None:
        tasks = [asyncio.create_task(self._fetch_leaf(prefix)) for prefix in prefixes]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            # Siblings must not keep writing once the run has failed.
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _fetch_leaf(self, prefix: str) -> None:
        pairs = await self._source.get_pairs(prefix, self._block_hash)
        await self._sink(pairs)
        await self._progress.advance(len(pairs))


async def stream_keyspace(
    source: StateSource,
    block_hash: str,
    writer: PairStreamWriter,
    progress: FetchProgress,
    chunks_level: int,
    quick_mode: bool = False,
) -> None:
    """Enumerate the whole keyspace from the root into a snapshot writer."""
    enumerator = KeyspaceEnumerator(
        source=source,
        block_hash=block_hash,
        sink=writer.append_batch,
        progress=progress,
        quick_mode=quick_mode,
    )
    await enumerator.enumerate(ROOT_PREFIX, chunks_level)
