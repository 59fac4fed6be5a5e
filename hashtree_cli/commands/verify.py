"""
CLI Verify Command

Verify an inclusion proof offline, optionally against an independently
trusted root, leaf digest, or raw item.

Usage:
    hashtree verify proof.json [--root HEX] [--leaf HEX | --item TEXT] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from pathlib import Path

from core.crypto.hashing import get_hash_function, to_hex
from core.merkle import InclusionProof, hash_leaf, verify
from core.schemas.errors import ErrorCodes, ProofFormatException


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of proof verification for CLI output."""
    proof_path: str = ""
    algorithm: str = ""
    index: int = 0
    leaf: str = ""
    root: str = ""
    steps: int = 0
    verified: bool = False
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        d = asdict(self)
        if not d["errors"]:
            del d["errors"]
        return d


def load_proof(path: str) -> InclusionProof:
    """Load an InclusionProof from a file ("-" for stdin)."""
    if path == "-":
        return InclusionProof.from_json(sys.stdin.read())

    proof_path = Path(path)
    if not proof_path.exists():
        raise FileNotFoundError(f"Proof not found: {proof_path}")
    return InclusionProof.from_json(proof_path.read_text(encoding="utf-8"))


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"proof: {summary.proof_path}")
    print(f"algorithm: {summary.algorithm}")
    print(f"index: {summary.index}")
    print(f"leaf: {summary.leaf}")
    print(f"root: {summary.root}")
    print(f"steps: {summary.steps}")
    print(f"verified: {str(summary.verified).lower()}")
    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors:
            print(f"  ✗ {err}")


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Returns:
        EXIT_SUCCESS if the proof verifies, EXIT_VERIFICATION_FAILED if it
        does not, EXIT_RUNTIME_ERROR if the proof cannot be loaded.
    """
    try:
        inclusion = load_proof(args.proof_path)
    except (FileNotFoundError, ProofFormatException) as e:
        print(f"Error loading proof: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    leaf = inclusion.leaf
    if args.leaf:
        leaf = args.leaf
    elif args.item is not None:
        leaf = to_hex(hash_leaf(args.item, get_hash_function(inclusion.algorithm)))
    root = args.root or inclusion.root

    summary = VerifySummary(
        proof_path=args.proof_path,
        algorithm=inclusion.algorithm,
        index=inclusion.index,
        leaf=leaf,
        root=root,
        steps=inclusion.step_count,
    )

    summary.verified = verify(leaf, inclusion.steps, root, algorithm=inclusion.algorithm)
    if not summary.verified:
        summary.errors.append(f"{ErrorCodes.MERKLE_PROOF_INVALID}: Recomputed root does not match")
        if leaf != inclusion.leaf:
            summary.errors.append(f"{ErrorCodes.MERKLE_PROOF_INVALID}: Leaf differs from the leaf recorded in the proof")
        if root != inclusion.root:
            summary.errors.append(f"{ErrorCodes.ROOT_MISMATCH}: Trusted root differs from the root recorded in the proof")

    if args.json or args.cli_config.output_format == "json":
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if summary.verified:
        logger.info("Verification passed")
        return EXIT_SUCCESS

    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
