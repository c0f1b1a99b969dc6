"""Origin state download orchestration.

This module pins the snapshot block, runs the keyspace enumeration,
and publishes the streamed snapshot artifact.
"""

from __future__ import annotations

from pathlib import Path

from core.logging_config import get_logger
from core.types import FetchOptions, FetchResult, StateSource
from fetch.keyspace import leaf_count, stream_keyspace
from fetch.pair_stream import PairStreamWriter
from fetch.progress import FetchProgress

_LOGGER = get_logger(__name__)


async def download_origin_state(
    source: StateSource,
    options: FetchOptions,
    snapshot_path: Path,
    show_progress: bool = True,
) -> FetchResult:
    """Download the full origin state into a snapshot artifact.

    The block hash is resolved once before the first leaf request and
    reused for every request, so the snapshot reflects a single block.

    Args:
        source: Origin state source.
        options: Partition depth, block height, and concurrency options.
        snapshot_path: Destination of the pair snapshot.
        show_progress: Whether to render a terminal progress bar.

    Returns:
        Download summary.

    Raises:
        ForkSourceError: If any RPC query fails. No snapshot is published.
        ForkSnapshotError: If the snapshot cannot be written.
    """
    block_hash = await source.get_block_hash(options.from_block)
    total_leaves = leaf_count(options.chunks_level)
    _LOGGER.info(
        "fetch_started",
        block_hash=block_hash,
        from_block=options.from_block,
        chunks_level=options.chunks_level,
        total_leaves=total_leaves,
        quick_mode=options.quick_mode,
    )
    writer = PairStreamWriter(snapshot_path)
    progress = FetchProgress(total_leaves, show_bar=show_progress)
    try:
        writer.open()
        await stream_keyspace(
            source,
            block_hash,
            writer,
            progress,
            options.chunks_level,
            quick_mode=options.quick_mode,
        )
        final_path = writer.close()
    except BaseException:
        writer.discard()
        raise
    finally:
        progress.close()
    _LOGGER.info(
        "fetch_completed",
        snapshot_path=str(final_path),
        block_hash=block_hash,
        leaves_fetched=progress.leaves_fetched,
        pair_count=writer.pair_count,
    )
    return FetchResult(
        snapshot_path=final_path,
        block_hash=block_hash,
        leaves_fetched=progress.leaves_fetched,
        pair_count=writer.pair_count,
    )
