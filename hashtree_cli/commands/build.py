"""
CLI Build Command

Build a tree over an ordered item sequence and print its root.

Usage:
    hashtree build Debo Kenneth Manji [--layers] [--json]
    hashtree build --file items.json [--out tree.json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path

from core.merkle import BuildResult, build
from hashtree_cli.inputs import load_items


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


@dataclass
class BuildSummary:
    """Summary of a tree build for CLI output."""
    algorithm: str = ""
    root: str = ""
    leaf_count: int = 0
    layer_sizes: list[int] = field(default_factory=list)
    leaves: list[str] = field(default_factory=list)
    layers: list[list[str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        if not d["layers"]:
            del d["layers"]
        return d


def build_summary(result: BuildResult, include_layers: bool = False) -> BuildSummary:
    """Build a BuildSummary from a BuildResult."""
    return BuildSummary(
        algorithm=result.algorithm,
        root=result.root,
        leaf_count=len(result.leaves),
        layer_sizes=[len(layer) for layer in result.layers],
        leaves=list(result.leaves),
        layers=[list(layer) for layer in result.layers] if include_layers else [],
    )


def print_summary_human(summary: BuildSummary) -> None:
    """Print summary in human-readable format."""
    print(f"root: {summary.root}")
    print(f"algorithm: {summary.algorithm}")
    print(f"leaves: {summary.leaf_count}")
    print(f"layer_sizes: {summary.layer_sizes}")
    for i, leaf in enumerate(summary.leaves):
        print(f"  [{i}] {leaf}")
    for depth, layer in enumerate(summary.layers):
        print(f"layer {depth}:")
        for node in layer:
            print(f"  {node}")


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.cli_config
    algorithm = args.algorithm or config.hash_algorithm

    items = load_items(args)
    if not items:
        print("Error: No items given (pass items or --file)", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    result = build(items, algorithm=algorithm)
    logger.info(f"Built tree over {len(items)} items, root={result.root}")

    if args.out:
        Path(args.out).write_text(result.model_dump_json(indent=2) + "\n", encoding="utf-8")
        logger.info(f"Wrote tree to {args.out}")

    summary = build_summary(result, include_layers=args.layers)
    if args.json or config.output_format == "json":
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
