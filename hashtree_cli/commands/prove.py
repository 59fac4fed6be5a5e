"""
CLI Prove Command

Generate a self-contained inclusion proof for one item.

Usage:
    hashtree prove --index 2 Debo Kenneth Manji [--out proof.json]
    hashtree prove --index 4 --file items.json --legacy
"""

from __future__ import annotations

import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.merkle import prove
from hashtree_cli.inputs import load_items


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Writes the InclusionProof JSON to --out, or to stdout when no
    output path is given.
    """
    config = args.cli_config
    algorithm = args.algorithm or config.hash_algorithm
    include_self_pairs = False if args.legacy else config.record_self_pairs

    items = load_items(args)
    if not items:
        print("Error: No items given (pass items or --file)", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    inclusion = prove(
        items,
        args.index,
        algorithm=algorithm,
        include_self_pairs=include_self_pairs,
    )
    logger.info(
        f"Generated proof for index {args.index}: {inclusion.step_count} steps, "
        f"self_pairs={'recorded' if include_self_pairs else 'omitted'}"
    )

    payload = inclusion.to_json()
    if args.out:
        Path(args.out).write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote proof: {args.out}")
    else:
        print(payload)

    return EXIT_SUCCESS
