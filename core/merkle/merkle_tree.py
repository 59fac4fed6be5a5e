"""
Merkle Tree Implementation
Deterministic tree construction, proof generation, and verification.

This module provides:
- Leaf hashing of raw items
- Layered tree construction with the duplicate-last pairing rule
- Inclusion proof generation for any leaf index
- Inclusion proof verification

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = H(item_bytes), str items encoded as UTF-8
2. Parent hashing: parent = H(left || right), left operand first, never sorted
3. Padding rule: an unpartnered last node is combined with itself
4. Empty leaves: rejected with InvalidInputException
5. Single leaf: one layer, root = leaf (no hashing)

Self-paired levels:
    When the node on a proof path is the unpartnered tail of an odd layer,
    construction computed H(node || node). By default proof generation
    records that level as a RIGHT step whose hash is the node itself, so
    verification replays it. With include_self_pairs=False no step is
    recorded (legacy proofs), and such proofs do not verify.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Sequence

from core.crypto.hashing import (
    HashFunction,
    algorithm_name,
    get_hash_function,
    hash_concat,
    sha256,
)
from core.schemas.errors import IndexOutOfRangeException, InvalidInputException


logger = logging.getLogger(__name__)


Digest = bytes
Layer = tuple[bytes, ...]


class Side(str, Enum):
    """Position of a sibling relative to the node being authenticated."""
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class ProofStep:
    """
    One level of an inclusion proof.

    Attributes:
        side: RIGHT means the sibling is concatenated after the current
              hash, LEFT means before
        hash: The sibling digest
    """
    side: Side
    hash: bytes


Proof = tuple[ProofStep, ...]


@dataclass(frozen=True)
class MerkleTree:
    """
    Immutable layered hash tree.

    layers[0] is the leaf sequence; the final layer holds only the root.
    Each layer has ceil(len(previous) / 2) nodes.

    Attributes:
        layers: Ordered layers from leaves to root
        algorithm: Name of the hash primitive used to build the tree
    """
    layers: tuple[Layer, ...]
    algorithm: str = "sha256"

    def __post_init__(self) -> None:
        """Validate layer shape and digest invariants."""
        if not self.layers or not self.layers[0]:
            raise InvalidInputException("Tree must contain at least one leaf")
        if len(self.layers[-1]) != 1:
            raise InvalidInputException(
                f"Root layer must contain exactly one digest, got {len(self.layers[-1])}",
            )
        for depth, (lower, upper) in enumerate(zip(self.layers, self.layers[1:])):
            expected = (len(lower) + 1) // 2
            if len(upper) != expected:
                raise InvalidInputException(
                    f"Layer {depth + 1} must have {expected} digests, got {len(upper)}",
                    details={"layer": depth + 1, "expected": expected, "actual": len(upper)},
                )

        # Every node shares one fixed digest length
        size = None
        for depth, layer in enumerate(self.layers):
            for position, node in enumerate(layer):
                if not isinstance(node, bytes):
                    raise InvalidInputException(
                        f"Digest at layer {depth} position {position} must be bytes, "
                        f"got {type(node).__name__}",
                        details={"layer": depth, "position": position},
                    )
                if size is None:
                    size = len(node)
                elif len(node) != size:
                    raise InvalidInputException(
                        f"Digest at layer {depth} position {position} is {len(node)} bytes, "
                        f"expected {size}",
                        details={"layer": depth, "position": position, "expected": size, "actual": len(node)},
                    )

    @property
    def leaves(self) -> Layer:
        return self.layers[0]

    @property
    def root(self) -> bytes:
        return self.layers[-1][0]

    @property
    def leaf_count(self) -> int:
        return len(self.layers[0])

    @property
    def depth(self) -> int:
        """Number of layers including leaves and root."""
        return len(self.layers)

    @property
    def layer_sizes(self) -> list[int]:
        return [len(layer) for layer in self.layers]

    @classmethod
    def from_items(cls, items: Iterable[Any], hash_fn: HashFunction = sha256) -> "MerkleTree":
        """Hash raw items into leaves and build the tree over them."""
        leaves = [hash_leaf(item, hash_fn) for item in items]
        return build_tree(leaves, hash_fn)

    def proof(self, leaf_index: int, include_self_pairs: bool = True) -> Proof:
        """Generate an inclusion proof for the leaf at leaf_index."""
        return generate_proof(self, leaf_index, include_self_pairs)


def hash_leaf(item: Any, hash_fn: HashFunction = sha256) -> bytes:
    """
    Hash one raw item into a leaf digest.

    Strings are hashed as their UTF-8 bytes; bytes-like items as-is. Any
    other type goes to the primitive unchanged, so its TypeError surfaces
    to the caller.

    Example:
        >>> hash_leaf("Debo") == sha256("Debo".encode("utf-8"))
        True
    """
    if isinstance(item, str):
        item = item.encode("utf-8")
    elif isinstance(item, (bytearray, memoryview)):
        item = bytes(item)
    return hash_fn(item)


def merkle_parent(left: bytes, right: bytes, hash_fn: HashFunction = sha256) -> bytes:
    """
    Combine two child digests into their parent: H(left || right).

    Order-sensitive: merkle_parent(a, b) != merkle_parent(b, a) for a != b.
    """
    return hash_concat(left, right, hash_fn)


def _next_layer(layer: Layer, hash_fn: HashFunction) -> Layer:
    parents = []
    for i in range(0, len(layer), 2):
        left = layer[i]
        # Unpartnered tail is paired with itself
        right = layer[i + 1] if i + 1 < len(layer) else left
        parents.append(merkle_parent(left, right, hash_fn))
    return tuple(parents)


def _as_digest(value: Any) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"Digest must be bytes, got {type(value).__name__}")
    return bytes(value)


def build_tree(leaf_digests: Sequence[bytes], hash_fn: HashFunction = sha256) -> MerkleTree:
    """
    Build a layered tree from a sequence of leaf digests.

    Algorithm:
    1. If empty: raise InvalidInputException
    2. Layer 0 is the leaf sequence (copied, the input is not mutated)
    3. Pair adjacent nodes left to right; an odd tail is paired with itself
    4. Repeat until a layer of length 1 remains

    Example: [a, b, c] -> [H(a||b), H(c||c)] -> [H(H(a||b)||H(c||c))]

    Args:
        leaf_digests: Ordered leaf digests. Order is preserved.
        hash_fn: Hash primitive used for parent hashing

    Returns:
        MerkleTree holding every layer

    Raises:
        InvalidInputException: If leaf_digests is empty or of mixed length
        TypeError: If a leaf digest is not bytes-like
    """
    if len(leaf_digests) == 0:
        raise InvalidInputException("Cannot build a tree from an empty leaf sequence")

    leaves = tuple(_as_digest(leaf) for leaf in leaf_digests)
    lengths = sorted({len(leaf) for leaf in leaves})
    if len(lengths) > 1:
        raise InvalidInputException(
            f"Leaf digests must share one length, got lengths {lengths}",
            details={"lengths": lengths},
        )

    layers: list[Layer] = [leaves]
    while len(layers[-1]) > 1:
        layers.append(_next_layer(layers[-1], hash_fn))

    tree = MerkleTree(
        layers=tuple(layers),
        algorithm=algorithm_name(hash_fn) or "custom",
    )
    logger.debug("Built tree: leaves=%d layer_sizes=%s", tree.leaf_count, tree.layer_sizes)
    return tree


def build_merkle_root(leaf_digests: Sequence[bytes], hash_fn: HashFunction = sha256) -> bytes:
    """Compute only the root over a sequence of leaf digests."""
    return build_tree(leaf_digests, hash_fn).root


def generate_proof(
    tree: MerkleTree | Sequence[Sequence[bytes]],
    leaf_index: int,
    include_self_pairs: bool = True,
) -> Proof:
    """
    Generate an inclusion proof for the leaf at the given index.

    At each layer below the root:
    - is_left = index % 2 == 0; sibling is index + 1 if left, else index - 1
    - In-bounds sibling: record (RIGHT if is_left else LEFT, sibling digest)
    - Out-of-bounds sibling (self-paired tail): record (RIGHT, own digest)
      when include_self_pairs, otherwise record nothing
    - Move up: index = index // 2

    Args:
        tree: MerkleTree, or its bare layers (leaves first)
        leaf_index: 0-based index of the leaf to prove
        include_self_pairs: Record self-paired levels as explicit steps

    Returns:
        Ordered proof steps, leaf level first

    Raises:
        IndexOutOfRangeException: If leaf_index is outside [0, leaf_count)
    """
    layers = tree.layers if isinstance(tree, MerkleTree) else tree
    if not layers:
        raise InvalidInputException("Cannot generate a proof from an empty tree")

    leaf_count = len(layers[0])
    if isinstance(leaf_index, bool) or not isinstance(leaf_index, int):
        raise IndexOutOfRangeException(
            f"Leaf index must be an integer, got {type(leaf_index).__name__}",
            index=repr(leaf_index),
            leaf_count=leaf_count,
        )
    if leaf_index < 0 or leaf_index >= leaf_count:
        raise IndexOutOfRangeException(
            f"Leaf index {leaf_index} out of range for {leaf_count} leaves",
            index=leaf_index,
            leaf_count=leaf_count,
        )

    steps: list[ProofStep] = []
    index = leaf_index
    for layer in layers[:-1]:
        is_left = index % 2 == 0
        sibling_index = index + 1 if is_left else index - 1

        if sibling_index < len(layer):
            steps.append(ProofStep(
                side=Side.RIGHT if is_left else Side.LEFT,
                hash=bytes(layer[sibling_index]),
            ))
        elif include_self_pairs:
            steps.append(ProofStep(side=Side.RIGHT, hash=bytes(layer[index])))

        index //= 2

    return tuple(steps)


def verify_proof(
    leaf_digest: bytes,
    proof: Iterable[ProofStep],
    claimed_root: bytes,
    hash_fn: HashFunction = sha256,
) -> bool:
    """
    Verify an inclusion proof.

    Recomputes the path from the leaf upward:
    - LEFT step: current = H(step.hash || current)
    - RIGHT step: current = H(current || step.hash)
    then compares the result with the claimed root.

    Never raises; a malformed or mismatched proof yields False.

    Args:
        leaf_digest: Digest of the leaf being authenticated
        proof: Ordered proof steps, leaf level first
        claimed_root: Root the proof is checked against
        hash_fn: Hash primitive used when the tree was built

    Returns:
        True if the recomputed root equals claimed_root
    """
    try:
        current = _as_digest(leaf_digest)
        root = _as_digest(claimed_root)
        for step in proof:
            sibling = _as_digest(step.hash)
            side = Side(step.side)
            if side is Side.LEFT:
                current = merkle_parent(sibling, current, hash_fn)
            else:
                current = merkle_parent(current, sibling, hash_fn)
    except (AttributeError, TypeError, ValueError) as e:
        logger.debug("Rejecting malformed proof: %s", e)
        return False

    if current != root:
        logger.debug("Proof root mismatch: computed=%s claimed=%s", current.hex(), root.hex())
        return False
    return True


def compute_tree_depth(num_leaves: int) -> int:
    """
    Number of layers (leaves through root) for a tree of num_leaves leaves.

    A single leaf has depth 1, two leaves depth 2, five leaves depth 4.
    Returns 0 for an empty tree.
    """
    return len(layer_sizes(num_leaves))


def layer_sizes(num_leaves: int) -> list[int]:
    """Layer lengths from leaves to root, e.g. 5 -> [5, 3, 2, 1]."""
    if num_leaves <= 0:
        return []
    sizes = [num_leaves]
    while sizes[-1] > 1:
        sizes.append((sizes[-1] + 1) // 2)
    return sizes


def tree_for_algorithm(items: Iterable[Any], algorithm: str | None = None) -> MerkleTree:
    """Build a tree over raw items using a registered hash primitive by name."""
    return MerkleTree.from_items(items, get_hash_function(algorithm))


__all__ = [
    "Digest",
    "Layer",
    "Side",
    "ProofStep",
    "Proof",
    "MerkleTree",
    "hash_leaf",
    "merkle_parent",
    "build_tree",
    "build_merkle_root",
    "generate_proof",
    "verify_proof",
    "compute_tree_depth",
    "layer_sizes",
    "tree_for_algorithm",
]
