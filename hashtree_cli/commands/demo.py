"""
CLI Demo Command

Builds a tree over a small list of names and verifies a proof for every
leaf, in both self-pair modes.

Usage:
    hashtree demo [NAME ...] [--json]
"""

from __future__ import annotations

import json
from argparse import Namespace

from core.merkle import build, proof, verify


EXIT_SUCCESS = 0

DEMO_NAMES = ["Debo", "Kenneth", "Manji", "Jerry", "victor"]


def run_demo(names: list[str], algorithm: str) -> dict:
    """Build, prove and verify every leaf; returns a JSON-ready report."""
    result = build(names, algorithm=algorithm)
    leaves = []
    for i, name in enumerate(names):
        recorded = proof(result.layers, i, include_self_pairs=True)
        legacy = proof(result.layers, i, include_self_pairs=False)
        leaves.append({
            "index": i,
            "item": name,
            "leaf": result.leaves[i],
            "verified": verify(result.leaves[i], recorded, result.root, algorithm=algorithm),
            "legacy_verified": verify(result.leaves[i], legacy, result.root, algorithm=algorithm),
        })
    return {
        "algorithm": result.algorithm,
        "root": result.root,
        "layer_sizes": [len(layer) for layer in result.layers],
        "leaves": leaves,
    }


def demo_cmd(args: Namespace) -> int:
    names = args.names or DEMO_NAMES
    report = run_demo(names, args.cli_config.hash_algorithm)

    if args.json:
        print(json.dumps(report, indent=2))
        return EXIT_SUCCESS

    print(f"Merkle Root: {report['root']}")
    print(f"Layer sizes: {report['layer_sizes']}")
    for entry in report["leaves"]:
        print(
            f"  [{entry['index']}] {entry['item']}: "
            f"verified={str(entry['verified']).lower()} "
            f"legacy_verified={str(entry['legacy_verified']).lower()}"
        )
    return EXIT_SUCCESS
