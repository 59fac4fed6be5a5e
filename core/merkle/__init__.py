"""
Merkle Tree and Inclusion Proofs
Deterministic tree construction + proof generation/verification.

This module provides:
- MerkleTree: Immutable layered tree (leaves first, root last)
- ProofStep / Side: One level of an inclusion proof
- build_tree / generate_proof / verify_proof: Core operations on raw digests
- build / proof / verify: Public operations over hex digests
- InclusionProof / BuildResult: Serializable boundary models

Canonical Commitment Rules:
1. Leaf hashing: H(item), str items as UTF-8
2. Parent hashing: H(left || right), order preserved
3. Padding: Unpartnered last node is combined with itself
4. Empty tree: rejected
5. Single leaf: root = leaf

Usage:
    from core.merkle import build, proof, verify

    result = build(["Debo", "Kenneth", "Manji", "Jerry", "victor"])
    steps = proof(result.layers, 0)
    assert verify(result.leaves[0], steps, result.root)
"""
from .merkle_tree import (
    Digest,
    Layer,
    MerkleTree,
    Proof,
    ProofStep,
    Side,
    build_merkle_root,
    build_tree,
    compute_tree_depth,
    generate_proof,
    hash_leaf,
    layer_sizes,
    merkle_parent,
    tree_for_algorithm,
    verify_proof,
)

from .merkle_proofs import (
    BuildResult,
    InclusionProof,
    MerkleProver,
    MerkleVerifier,
    ProofStepModel,
    build,
    proof,
    prove,
    verify,
)


__all__ = [
    # Core types
    "Digest",
    "Layer",
    "MerkleTree",
    "Proof",
    "ProofStep",
    "Side",
    # Core functions
    "build_merkle_root",
    "build_tree",
    "compute_tree_depth",
    "generate_proof",
    "hash_leaf",
    "layer_sizes",
    "merkle_parent",
    "tree_for_algorithm",
    "verify_proof",
    # Boundary models and operations
    "BuildResult",
    "InclusionProof",
    "ProofStepModel",
    "build",
    "proof",
    "prove",
    "verify",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
