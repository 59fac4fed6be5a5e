"""
Merkle Proofs - Boundary API
Hex-encoded proof models and the public build/proof/verify operations.

This module provides:
- ProofStepModel / InclusionProof: serializable proof values that carry
  no reference to the tree they came from
- BuildResult: root, leaves and layers of a built tree as hex digests
- build / proof / verify: the public operations over hex digests
- MerkleProver / MerkleVerifier: class-based convenience wrappers

Digests cross this boundary as lowercase hex strings; internally all
combination happens on raw bytes.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Iterable, Literal, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from core.config import get_config
from core.crypto.hashing import (
    digest_size,
    from_hex,
    get_hash_function,
    hash_canonical,
    to_hex,
)
from core.schemas.errors import (
    HashTreeException,
    InvalidInputException,
    ProofFormatException,
)
from core.merkle.merkle_tree import (
    MerkleTree,
    ProofStep,
    Side,
    build_tree,
    generate_proof,
    hash_leaf,
    tree_for_algorithm,
    verify_proof,
)


logger = logging.getLogger(__name__)


def _check_hex(value: str) -> str:
    from_hex(value)
    return value


def _check_digest_sizes(algorithm: str, digests: Iterable[str]) -> None:
    """Every boundary digest must be exactly the primitive's digest size."""
    size = digest_size(get_hash_function(algorithm))
    for digest in digests:
        from_hex(digest, expected_length=size)


class ProofStepModel(BaseModel):
    """One proof step with its sibling digest in hex form."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    side: Literal["left", "right"] = Field(
        ...,
        description="Side the sibling occupies relative to the current node",
    )
    hash: str = Field(
        ...,
        description="Sibling digest, lowercase hex",
        min_length=2,
    )

    @field_validator("hash")
    @classmethod
    def _validate_hash(cls, v: str) -> str:
        return _check_hex(v)

    @classmethod
    def from_step(cls, step: ProofStep) -> "ProofStepModel":
        return cls(side=Side(step.side).value, hash=to_hex(step.hash))

    def to_step(self) -> ProofStep:
        return ProofStep(side=Side(self.side), hash=from_hex(self.hash))


class InclusionProof(BaseModel):
    """
    Self-contained inclusion proof.

    Holds everything a party that only knows the root needs: the leaf,
    its index, the ordered steps and the root it commits to.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    algorithm: str = Field(default="sha256", description="Hash primitive name")
    index: int = Field(..., ge=0, description="0-based leaf index")
    leaf: str = Field(..., min_length=2, description="Leaf digest, lowercase hex")
    root: str = Field(..., min_length=2, description="Root digest, lowercase hex")
    steps: tuple[ProofStepModel, ...] = Field(default_factory=tuple)

    @field_validator("leaf", "root")
    @classmethod
    def _validate_digest(cls, v: str) -> str:
        return _check_hex(v)

    @model_validator(mode="after")
    def validate_digest_sizes(self) -> "InclusionProof":
        """Leaf, root and step digests must match the algorithm's digest size."""
        _check_digest_sizes(
            self.algorithm,
            [self.leaf, self.root, *(step.hash for step in self.steps)],
        )
        return self

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def verify(self) -> bool:
        """Verify this proof against its own root."""
        return verify(self.leaf, self.steps, self.root, algorithm=self.algorithm)

    def to_json(self, indent: int | None = 2) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, data: str | bytes) -> "InclusionProof":
        """
        Parse a proof from JSON.

        Raises:
            ProofFormatException: If the JSON is malformed or fails validation
        """
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise ProofFormatException(
                message=f"Invalid inclusion proof: {e.error_count()} validation error(s)",
                details={"errors": json.loads(e.json(include_url=False))},
            ) from e


class BuildResult(BaseModel):
    """Root, leaves and all layers of a built tree, as hex digests."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    algorithm: str = Field(default="sha256")
    root: str = Field(..., description="Root digest, lowercase hex")
    leaves: tuple[str, ...] = Field(..., min_length=1)
    layers: tuple[tuple[str, ...], ...] = Field(..., min_length=1)

    @field_validator("root")
    @classmethod
    def _validate_root(cls, v: str) -> str:
        return _check_hex(v)

    @model_validator(mode="after")
    def validate_digest_sizes(self) -> "BuildResult":
        """Root and every node must match the algorithm's digest size."""
        _check_digest_sizes(
            self.algorithm,
            [self.root, *self.leaves, *(node for layer in self.layers for node in layer)],
        )
        return self

    @classmethod
    def from_tree(cls, tree: MerkleTree) -> "BuildResult":
        return cls(
            algorithm=tree.algorithm,
            root=to_hex(tree.root),
            leaves=tuple(to_hex(leaf) for leaf in tree.leaves),
            layers=tuple(tuple(to_hex(node) for node in layer) for layer in tree.layers),
        )

    def to_tree(self) -> MerkleTree:
        return _coerce_tree(self.layers, self.algorithm)


def _resolve_algorithm(algorithm: str | None) -> str:
    return algorithm or get_config().hash_algorithm


def _coerce_digest(value: bytes | str) -> bytes:
    if isinstance(value, str):
        return from_hex(value)
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise TypeError(f"Digest must be hex str or bytes, got {type(value).__name__}")
    return bytes(value)


def _coerce_tree(layers: Any, algorithm: str = "sha256") -> MerkleTree:
    if isinstance(layers, MerkleTree):
        return layers
    if isinstance(layers, BuildResult):
        return layers.to_tree()
    try:
        coerced = tuple(tuple(_coerce_digest(node) for node in layer) for layer in layers)
    except TypeError as e:
        raise InvalidInputException(f"Malformed tree layers: {e}") from e
    return MerkleTree(layers=coerced, algorithm=algorithm)


def _coerce_step(step: Any) -> ProofStep:
    if isinstance(step, ProofStep):
        return step
    if isinstance(step, ProofStepModel):
        return step.to_step()
    if isinstance(step, dict):
        return ProofStepModel.model_validate(step).to_step()
    raise TypeError(f"Unsupported proof step type: {type(step).__name__}")


def build(items: Sequence[Any], algorithm: str | None = None) -> BuildResult:
    """
    Hash raw items into leaves and build the tree over them.

    Args:
        items: Ordered raw items (str or bytes)
        algorithm: Hash primitive name (defaults to configured algorithm)

    Returns:
        BuildResult with root, leaves and layers as hex digests

    Raises:
        InvalidInputException: If items is empty
        UnsupportedAlgorithmException: If algorithm is unknown
    """
    items = list(items)
    if not items:
        raise InvalidInputException("Cannot build a tree from an empty item sequence")
    tree = tree_for_algorithm(items, _resolve_algorithm(algorithm))
    return BuildResult.from_tree(tree)


def proof(
    layers: MerkleTree | BuildResult | Sequence[Sequence[bytes | str]],
    leaf_index: int,
    include_self_pairs: bool | None = None,
) -> list[ProofStepModel]:
    """
    Generate the proof steps for one leaf.

    Args:
        layers: A MerkleTree, a BuildResult, or bare layers (hex or bytes)
        leaf_index: 0-based index of the leaf
        include_self_pairs: Record self-paired levels (defaults to config)

    Returns:
        Ordered list of ProofStepModel, leaf level first

    Raises:
        IndexOutOfRangeException: If leaf_index is outside [0, leaf_count)
    """
    if include_self_pairs is None:
        include_self_pairs = get_config().record_self_pairs
    tree = _coerce_tree(layers)
    steps = generate_proof(tree, leaf_index, include_self_pairs)
    return [ProofStepModel.from_step(step) for step in steps]


def verify(
    leaf_digest: bytes | str,
    proof: Iterable[Any] | InclusionProof,
    root: bytes | str,
    algorithm: str | None = None,
) -> bool:
    """
    Verify that leaf_digest is committed to by root.

    Accepts hex or raw digests and steps as ProofStepModel, ProofStep or
    plain dicts. Never raises: anything malformed yields False.
    """
    try:
        if isinstance(proof, InclusionProof):
            algorithm = algorithm or proof.algorithm
            proof = proof.steps
        hash_fn = get_hash_function(_resolve_algorithm(algorithm))
        leaf_bytes = _coerce_digest(leaf_digest)
        root_bytes = _coerce_digest(root)
        steps = [_coerce_step(step) for step in proof]
    except (HashTreeException, ValidationError, AttributeError, TypeError, ValueError) as e:
        logger.warning("Proof rejected before verification: %s", e)
        return False

    return verify_proof(leaf_bytes, steps, root_bytes, hash_fn)


def prove(
    items: Sequence[Any],
    leaf_index: int,
    algorithm: str | None = None,
    include_self_pairs: bool | None = None,
) -> InclusionProof:
    """Build a tree over raw items and return a self-contained proof for one of them."""
    items = list(items)
    if not items:
        raise InvalidInputException("Cannot build a tree from an empty item sequence")
    tree = tree_for_algorithm(items, _resolve_algorithm(algorithm))
    return _inclusion_proof(tree, leaf_index, include_self_pairs)


def _inclusion_proof(
    tree: MerkleTree,
    leaf_index: int,
    include_self_pairs: bool | None = None,
) -> InclusionProof:
    steps = proof(tree, leaf_index, include_self_pairs)
    return InclusionProof(
        algorithm=tree.algorithm,
        index=leaf_index,
        leaf=to_hex(tree.leaves[leaf_index]),
        root=to_hex(tree.root),
        steps=steps,
    )


class MerkleProver:
    """
    Convenience class for generating inclusion proofs.

    Provides static methods for proof generation from:
    - Pre-hashed leaves (bytes)
    - Raw items (str/bytes)
    - Structured objects (canonically hashed)

    Example:
        >>> proof = MerkleProver.prove_item(["a", "b", "c"], index=1)
        >>> proof.leaf == to_hex(hash_leaf("b"))
        True
    """

    @staticmethod
    def prove(leaves: Sequence[bytes], index: int, algorithm: str | None = None) -> InclusionProof:
        """
        Generate a proof for the leaf digest at the given index.

        Raises:
            IndexOutOfRangeException: If index is out of range
            InvalidInputException: If leaves is empty
        """
        hash_fn = get_hash_function(_resolve_algorithm(algorithm))
        return _inclusion_proof(build_tree(leaves, hash_fn), index)

    @staticmethod
    def prove_item(items: Sequence[Any], index: int, algorithm: str | None = None) -> InclusionProof:
        """Generate a proof for the raw item at the given index."""
        return prove(items, index, algorithm)

    @staticmethod
    def prove_object(objects: Sequence[Any], index: int, algorithm: str | None = None) -> InclusionProof:
        """
        Generate a proof for a structured object at the given index.

        Objects are converted to leaves via canonical JSON hashing.
        """
        hash_fn = get_hash_function(_resolve_algorithm(algorithm))
        leaves = [hash_canonical(obj, hash_fn) for obj in objects]
        return _inclusion_proof(build_tree(leaves, hash_fn), index)

    @staticmethod
    def compute_root(leaves: Sequence[bytes], algorithm: str | None = None) -> bytes:
        """Compute the root over pre-hashed leaves."""
        hash_fn = get_hash_function(_resolve_algorithm(algorithm))
        return build_tree(leaves, hash_fn).root

    @staticmethod
    def compute_root_from_objects(objects: Sequence[Any], algorithm: str | None = None) -> bytes:
        """Compute the root over canonically hashed objects."""
        hash_fn = get_hash_function(_resolve_algorithm(algorithm))
        return build_tree([hash_canonical(obj, hash_fn) for obj in objects], hash_fn).root


class MerkleVerifier:
    """
    Convenience class for verifying inclusion proofs.

    Example:
        >>> proof = MerkleProver.prove_item(["a", "b"], index=1)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def verify(proof: InclusionProof) -> bool:
        """Verify a self-contained proof against its own root."""
        return proof.verify()

    @staticmethod
    def verify_against_root(proof: InclusionProof, trusted_root: bytes | str) -> bool:
        """Verify a proof against an independently trusted root."""
        return verify(proof.leaf, proof.steps, trusted_root, algorithm=proof.algorithm)

    @staticmethod
    def verify_item_in_root(
        item: Any,
        steps: Iterable[Any],
        root: bytes | str,
        algorithm: str | None = None,
    ) -> bool:
        """Verify a raw item is included in a root; the item is leaf-hashed first."""
        try:
            hash_fn = get_hash_function(_resolve_algorithm(algorithm))
            leaf = hash_leaf(item, hash_fn)
        except (HashTreeException, TypeError) as e:
            logger.warning("Item rejected before verification: %s", e)
            return False
        return verify(leaf, steps, root, algorithm)

    @staticmethod
    def verify_object_in_root(
        obj: Any,
        steps: Iterable[Any],
        root: bytes | str,
        algorithm: str | None = None,
    ) -> bool:
        """Verify a structured object is included in a root via canonical hashing."""
        try:
            hash_fn = get_hash_function(_resolve_algorithm(algorithm))
            leaf = hash_canonical(obj, hash_fn)
        except HashTreeException as e:
            logger.warning("Object rejected before verification: %s", e)
            return False
        return verify(leaf, steps, root, algorithm)


__all__ = [
    "ProofStepModel",
    "InclusionProof",
    "BuildResult",
    "build",
    "proof",
    "verify",
    "prove",
    "MerkleProver",
    "MerkleVerifier",
]
