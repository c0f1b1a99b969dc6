"""Chainfork CLI entry points.
This module exposes commands for forking, downloading, and inspecting
the migration allowlist. It maps argparse commands onto pipeline calls.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from core.config import ForkConfig
from core.errors import ForkConfigError, ForkError
from fork.pipeline import build_fork_allowlist, fetch_origin_state, run_fork


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="chainfork",
        description="Fork live Substrate chain state into a raw chain spec",
    )
    parser.add_argument("--data-root", help="Override FORK_DATA_ROOT for this command")
    parser.add_argument("--rpc-endpoint", help="Override HTTP_RPC_ENDPOINT")
    parser.add_argument(
        "--chunks-level",
        type=int,
        help="Override FORK_CHUNKS_LEVEL; the download issues 256^N range queries",
    )
    parser.add_argument("--from-block", type=int, help="Override FROM_BLOCK_NUM")
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Fetch the last partition level concurrently (QUICK_MODE)",
    )
    parser.add_argument("--chain", help="Override FORK_CHAIN for build-spec")
    parser.add_argument(
        "--sudo-override",
        action="store_true",
        help="Set the sudo key to Alice (ALICE)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("fork", help="Build the forked chain spec")
    subparsers.add_parser("fetch", help="Download origin state into the pair snapshot")
    subparsers.add_parser("prefixes", help="Print the migration allowlist prefixes")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the chainfork CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = _build_config(args)
        if args.command == "fork":
            return _run_fork_command(config)
        if args.command == "fetch":
            return _run_fetch_command(config)
        if args.command == "prefixes":
            return _run_prefixes_command(config)
    except ForkError as error:
        print(f"chainfork: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> ForkConfig:
    """Build config from environment with CLI overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Effective configuration.
    """
    config = ForkConfig.from_env()
    if args.data_root:
        config = replace(config, data_root=Path(args.data_root).expanduser().resolve())
    if args.rpc_endpoint:
        config = replace(config, rpc_endpoint=args.rpc_endpoint)
    if args.chunks_level is not None:
        if args.chunks_level < 0:
            raise _negative_option_error("--chunks-level", args.chunks_level)
        config = replace(config, chunks_level=args.chunks_level)
    if args.from_block is not None:
        if args.from_block < 0:
            raise _negative_option_error("--from-block", args.from_block)
        config = replace(config, from_block=args.from_block)
    if args.quick:
        config = replace(config, quick_mode=True)
    if args.chain:
        config = replace(config, fork_chain=args.chain)
    if args.sudo_override:
        config = replace(config, sudo_override=True)
    return config


def _run_fork_command(config: ForkConfig) -> int:
    """Handle fork command."""
    result = run_fork(config)
    print(result.spec_path)
    return 0


def _run_fetch_command(config: ForkConfig) -> int:
    """Handle fetch command."""
    result = fetch_origin_state(config)
    print(result.snapshot_path)
    return 0


def _run_prefixes_command(config: ForkConfig) -> int:
    """Handle prefixes command."""
    allowlist = build_fork_allowlist(config)
    for prefix in allowlist.prefixes:
        print(prefix)
    return 0


def _negative_option_error(option: str, value: int) -> ForkConfigError:
    return ForkConfigError(f"Invalid {option} value: expected non-negative integer, got {value}.")
