"""
CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m hashtree_cli build ITEM... [--file PATH] [--layers] [--out PATH] [--json]
    python -m hashtree_cli prove --index N ITEM... [--file PATH] [--out PATH] [--legacy]
    python -m hashtree_cli verify PROOF_PATH [--root HEX] [--leaf HEX | --item TEXT] [--json]
    python -m hashtree_cli demo [NAME...] [--json]
    python -m hashtree_cli config --init | --show

Environment Variables:
    HASHTREE_HASH_ALGORITHM     Hash primitive (default: sha256)
    HASHTREE_RECORD_SELF_PAIRS  Record self-paired proof levels (default: true)
    HASHTREE_LOG_LEVEL          Log level (default: INFO)
    HASHTREE_LOG_FILE           Optional log file
    HASHTREE_OUTPUT_FORMAT      human or json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from core.config import get_default_config_template, load_config, set_config
from core.crypto.hashing import HASH_FUNCTIONS
from core.schemas.errors import HashTreeException
from hashtree_cli import __version__
from hashtree_cli.commands import build, demo, prove, verify


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )


def _add_item_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "items",
        nargs="*",
        help="Items in order (hashed as UTF-8)",
    )
    parser.add_argument(
        "--file", "-f",
        type=str,
        default=None,
        help="Read items from a JSON array or newline-delimited file ('-' for stdin)",
    )
    parser.add_argument(
        "--algorithm", "-a",
        type=str,
        default=None,
        choices=sorted(HASH_FUNCTIONS),
        help="Hash primitive (default: from config, sha256)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="hashtree",
        description="hashtree CLI - Build hash trees, generate and verify inclusion proofs.",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./hashtree.json or ~/.config/hashtree/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Show tracebacks on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- build command ---
    build_parser = subparsers.add_parser(
        "build",
        help="Build a tree and print its root",
        description="Hash items into leaves, build every layer and print the root.",
    )
    _add_item_arguments(build_parser)
    build_parser.add_argument(
        "--layers",
        action="store_true",
        default=False,
        help="Include every layer in the output",
    )
    build_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write the full tree (root, leaves, layers) as JSON to this path",
    )
    build_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON summary",
    )
    build_parser.set_defaults(func=build.build_cmd)

    # --- prove command ---
    prove_parser = subparsers.add_parser(
        "prove",
        help="Generate an inclusion proof for one item",
        description="Build the tree and emit a self-contained inclusion proof as JSON.",
    )
    _add_item_arguments(prove_parser)
    prove_parser.add_argument(
        "--index", "-i",
        type=int,
        required=True,
        help="0-based index of the item to prove",
    )
    prove_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Output path for the proof JSON (default: stdout)",
    )
    prove_parser.add_argument(
        "--legacy",
        action="store_true",
        default=False,
        help="Omit steps for self-paired levels (legacy proofs)",
    )
    prove_parser.set_defaults(func=prove.prove_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an inclusion proof",
        description="Recompute the root from a proof and compare it with the claimed root.",
    )
    verify_parser.add_argument(
        "proof_path",
        type=str,
        help="Path to proof JSON ('-' for stdin)",
    )
    verify_parser.add_argument(
        "--root",
        type=str,
        default=None,
        help="Trusted root (hex) to verify against instead of the proof's root",
    )
    leaf_group = verify_parser.add_mutually_exclusive_group()
    leaf_group.add_argument(
        "--leaf",
        type=str,
        default=None,
        help="Leaf digest (hex) to verify instead of the proof's leaf",
    )
    leaf_group.add_argument(
        "--item",
        type=str,
        default=None,
        help="Raw item to hash and verify instead of the proof's leaf",
    )
    verify_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON report",
    )
    verify_parser.set_defaults(func=verify.verify_cmd)

    # --- demo command ---
    demo_parser = subparsers.add_parser(
        "demo",
        help="Build a sample tree and verify every leaf",
    )
    demo_parser.add_argument("names", nargs="*", help="Names to use (default: sample names)")
    demo_parser.add_argument("--json", action="store_true", help="JSON output")
    demo_parser.set_defaults(func=demo.demo_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage CLI configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="hashtree.json",
        help="Path for config file (default: hashtree.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (HASHTREE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.cli_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: hashtree config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    log_level = args.log_level or config.log_level
    setup_logging(level=log_level, log_file=config.log_file)

    # Public operations read defaults from the process-wide config
    set_config(config)
    args.cli_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except (HashTreeException, OSError, ValueError) as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
