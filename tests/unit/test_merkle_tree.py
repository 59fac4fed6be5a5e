"""
Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Covers:
1. Construction - layer shapes, duplicate-last pairing, single leaf, empty input
2. Root determinism and order sensitivity
3. Proof generation - steps, sides, self-paired levels in both modes
4. Proof verification - every index, tamper detection, malformed input
"""
import pytest

from fixtures import (
    SAMPLE_NAMES,
    flip_bit,
    flip_side,
    h,
    make_leaves,
    make_tree,
    reference_root,
)

from core.crypto.hashing import sha3_256, sha256
from core.merkle.merkle_tree import (
    MerkleTree,
    ProofStep,
    Side,
    build_merkle_root,
    build_tree,
    compute_tree_depth,
    generate_proof,
    hash_leaf,
    layer_sizes,
    merkle_parent,
    verify_proof,
)
from core.schemas.errors import IndexOutOfRangeException, InvalidInputException


class TestHashLeaf:
    """Tests for hash_leaf()."""

    def test_str_hashed_as_utf8(self):
        assert hash_leaf("Debo") == h("Debo".encode("utf-8"))

    def test_non_ascii_str(self):
        assert hash_leaf("Manjí") == h("Manjí".encode("utf-8"))

    def test_bytes_hashed_as_is(self):
        assert hash_leaf(b"\x00\x01") == h(b"\x00\x01")

    def test_bytearray_accepted(self):
        assert hash_leaf(bytearray(b"abc")) == h(b"abc")

    def test_unsupported_type_propagates_primitive_error(self):
        with pytest.raises(TypeError):
            hash_leaf(42)

    def test_custom_primitive(self):
        assert hash_leaf("x", sha3_256) == sha3_256(b"x")


class TestMerkleParent:
    """Tests for merkle_parent()."""

    def test_equals_sha256_concat(self):
        left, right = h(b"left"), h(b"right")

        assert merkle_parent(left, right) == h(left + right)

    def test_order_matters(self):
        a, b = h(b"a"), h(b"b")

        assert merkle_parent(a, b) != merkle_parent(b, a)

    def test_not_sorted(self):
        """Parent hashing never sorts its operands."""
        a, b = sorted([h(b"a"), h(b"b")])

        assert merkle_parent(b, a) == h(b + a)


class TestBuildTree:
    """Tests for build_tree() construction."""

    def test_empty_raises_invalid_input(self):
        with pytest.raises(InvalidInputException, match="empty"):
            build_tree([])

    def test_single_leaf(self):
        leaf = h(b"only")
        tree = build_tree([leaf])

        assert tree.layers == ((leaf,),)
        assert tree.root == leaf
        assert tree.depth == 1

    def test_two_leaves(self):
        a, b = make_leaves(2)
        tree = build_tree([a, b])

        assert tree.root == h(a + b)
        assert tree.layer_sizes == [2, 1]

    def test_three_leaves_duplicate_last(self):
        a, b, c = make_leaves(3)
        tree = build_tree([a, b, c])

        ab = h(a + b)
        cc = h(c + c)
        assert tree.layers[1] == (ab, cc)
        assert tree.root == h(ab + cc)

    def test_five_leaves_layers(self):
        leaves = make_leaves(5)
        a, b, c, d, e = leaves
        tree = build_tree(leaves)

        ab, cd, ee = h(a + b), h(c + d), h(e + e)
        abcd, eeee = h(ab + cd), h(ee + ee)
        assert tree.layers == (
            tuple(leaves),
            (ab, cd, ee),
            (abcd, eeee),
            (h(abcd + eeee),),
        )

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 6, 7, 8, 9, 16, 17, 33])
    def test_root_matches_reference(self, count):
        leaves = make_leaves(count)

        assert build_tree(leaves).root == reference_root(leaves)

    @pytest.mark.parametrize("count", [1, 2, 3, 5, 8, 13, 100])
    def test_layer_invariants(self, count):
        tree = make_tree(count)

        assert list(tree.layers[0]) == make_leaves(count)
        assert len(tree.layers[-1]) == 1
        for lower, upper in zip(tree.layers, tree.layers[1:]):
            assert len(upper) == (len(lower) + 1) // 2

    def test_input_not_mutated(self):
        leaves = make_leaves(5)
        snapshot = list(leaves)

        build_tree(leaves)

        assert leaves == snapshot

    def test_layers_are_immutable(self):
        tree = make_tree(4)

        assert isinstance(tree.layers, tuple)
        assert all(isinstance(layer, tuple) for layer in tree.layers)
        with pytest.raises(AttributeError):
            tree.layers = ()

    def test_algorithm_recorded(self):
        assert make_tree(3).algorithm == "sha256"
        assert build_tree(make_leaves(3), sha3_256).algorithm == "sha3_256"

    def test_unregistered_primitive_recorded_as_custom(self):
        tree = build_tree(make_leaves(2), lambda data: sha256(b"salt" + data))

        assert tree.algorithm == "custom"

    def test_build_merkle_root(self):
        leaves = make_leaves(6)

        assert build_merkle_root(leaves) == build_tree(leaves).root

    def test_integer_leaves_rejected(self):
        with pytest.raises(TypeError, match="must be bytes"):
            build_tree([5, 7])

    def test_str_leaves_rejected(self):
        with pytest.raises(TypeError):
            build_tree(["ab", "cd"])

    def test_mixed_length_leaves_rejected(self):
        a, b = make_leaves(2)

        with pytest.raises(InvalidInputException, match="one length"):
            build_tree([a, b[:16]])

    def test_bytes_like_leaves_accepted(self):
        a, b = make_leaves(2)

        tree = build_tree([bytearray(a), memoryview(b)])

        assert tree.leaves == (a, b)
        assert tree.root == h(a + b)


class TestMerkleTreeValidation:
    """MerkleTree enforces its shape and digest invariants on direct construction."""

    def test_empty_layers_rejected(self):
        with pytest.raises(InvalidInputException):
            MerkleTree(layers=())

    def test_root_layer_must_be_single(self):
        a, b = make_leaves(2)
        with pytest.raises(InvalidInputException, match="exactly one"):
            MerkleTree(layers=((a, b),))

    def test_layer_length_must_halve(self):
        a, b, c = make_leaves(3)
        with pytest.raises(InvalidInputException, match="Layer 1"):
            MerkleTree(layers=((a, b, c), (a, b, c), (a,)))

    def test_non_bytes_node_rejected(self):
        a, b = make_leaves(2)
        with pytest.raises(InvalidInputException, match="must be bytes"):
            MerkleTree(layers=((a, b.hex()), (a,)))

    def test_mixed_digest_length_rejected(self):
        a, b = make_leaves(2)
        with pytest.raises(InvalidInputException, match="16 bytes, expected 32"):
            MerkleTree(layers=((a, b[:16]), (a,)))

    def test_short_leaves_rejected_against_parent_digests(self):
        with pytest.raises(InvalidInputException, match="expected 2"):
            build_tree([b"ab", b"cd"])


class TestRootDeterminism:
    """Tests for deterministic root computation."""

    def test_same_items_same_root(self):
        roots = {MerkleTree.from_items(SAMPLE_NAMES).root for _ in range(5)}

        assert len(roots) == 1

    def test_different_items_different_roots(self):
        altered = list(SAMPLE_NAMES)
        altered[2] = "Manj1"

        assert MerkleTree.from_items(altered).root != MerkleTree.from_items(SAMPLE_NAMES).root

    def test_order_matters(self):
        swapped = list(SAMPLE_NAMES)
        swapped[0], swapped[1] = swapped[1], swapped[0]

        assert MerkleTree.from_items(swapped).root != MerkleTree.from_items(SAMPLE_NAMES).root

    def test_single_item_root_is_leaf_hash(self):
        assert MerkleTree.from_items(["x"]).root == hash_leaf("x")


class TestDepthHelpers:

    def test_layer_sizes(self):
        assert layer_sizes(0) == []
        assert layer_sizes(1) == [1]
        assert layer_sizes(5) == [5, 3, 2, 1]
        assert layer_sizes(8) == [8, 4, 2, 1]

    def test_compute_tree_depth(self):
        assert compute_tree_depth(0) == 0
        assert compute_tree_depth(1) == 1
        assert compute_tree_depth(2) == 2
        assert compute_tree_depth(3) == 3
        assert compute_tree_depth(5) == 4
        assert compute_tree_depth(16) == 5

    @pytest.mark.parametrize("count", [1, 2, 3, 5, 9, 31])
    def test_depth_matches_built_tree(self, count):
        tree = make_tree(count)

        assert tree.depth == compute_tree_depth(count)
        assert tree.layer_sizes == layer_sizes(count)


class TestProofGeneration:
    """Tests for generate_proof()."""

    def test_single_leaf_proof_empty(self):
        tree = build_tree([h(b"x")])

        assert generate_proof(tree, 0) == ()

    def test_two_leaf_proofs(self):
        a, b = make_leaves(2)
        tree = build_tree([a, b])

        assert generate_proof(tree, 0) == (ProofStep(Side.RIGHT, b),)
        assert generate_proof(tree, 1) == (ProofStep(Side.LEFT, a),)

    def test_sides_follow_position(self):
        tree = make_tree(8)
        steps = generate_proof(tree, 5)

        # 5 is right child, 2 is left child, 1 is right child
        assert [s.side for s in steps] == [Side.LEFT, Side.RIGHT, Side.LEFT]
        assert steps[0].hash == tree.layers[0][4]
        assert steps[1].hash == tree.layers[1][3]
        assert steps[2].hash == tree.layers[2][0]

    def test_power_of_two_proof_length(self):
        tree = make_tree(16)

        for i in range(16):
            assert len(generate_proof(tree, i)) == 4

    def test_self_pair_recorded_by_default(self):
        a, b, c = make_leaves(3)
        tree = build_tree([a, b, c])

        steps = generate_proof(tree, 2)

        assert steps == (
            ProofStep(Side.RIGHT, c),
            ProofStep(Side.LEFT, h(a + b)),
        )

    def test_self_pair_omitted_in_legacy_mode(self):
        a, b, c = make_leaves(3)
        tree = build_tree([a, b, c])

        steps = generate_proof(tree, 2, include_self_pairs=False)

        assert steps == (ProofStep(Side.LEFT, h(a + b)),)

    def test_recorded_proofs_have_one_step_per_level(self):
        tree = make_tree(11)

        for i in range(11):
            assert len(generate_proof(tree, i)) == tree.depth - 1

    def test_accepts_bare_layers(self):
        tree = make_tree(5)
        bare = [list(layer) for layer in tree.layers]

        assert generate_proof(bare, 3) == generate_proof(tree, 3)

    def test_method_on_tree(self):
        tree = make_tree(5)

        assert tree.proof(1) == generate_proof(tree, 1)

    @pytest.mark.parametrize("index", [-1, 5, 100])
    def test_index_out_of_range(self, index):
        tree = make_tree(5)

        with pytest.raises(IndexOutOfRangeException) as exc_info:
            generate_proof(tree, index)

        assert exc_info.value.details["leaf_count"] == 5

    @pytest.mark.parametrize("index", ["0", 1.0, None, True])
    def test_non_integer_index(self, index):
        with pytest.raises(IndexOutOfRangeException, match="integer"):
            generate_proof(make_tree(3), index)

    def test_proof_does_not_mutate_tree(self):
        tree = make_tree(7)
        before = tree.layers

        generate_proof(tree, 6)

        assert tree.layers == before


class TestProofVerification:
    """Tests for verify_proof()."""

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 6, 7, 8, 9, 15, 33])
    def test_every_index_verifies(self, count):
        tree = make_tree(count)

        for i in range(count):
            steps = generate_proof(tree, i)
            assert verify_proof(tree.leaves[i], steps, tree.root), f"index {i} of {count}"

    def test_single_leaf_empty_proof(self):
        leaf = hash_leaf("x")

        assert verify_proof(leaf, [], leaf)

    def test_sample_names_all_verify(self, name_tree):
        assert name_tree.layer_sizes == [5, 3, 2, 1]
        for i in range(5):
            assert verify_proof(name_tree.leaves[i], name_tree.proof(i), name_tree.root)

    def test_legacy_proofs_fail_only_on_self_paired_paths(self, name_tree):
        """
        Legacy proofs skip self-paired levels, so the last name (alone at
        layers 0 and 1) cannot be replayed; every fully paired path still
        verifies.
        """
        results = [
            verify_proof(
                name_tree.leaves[i],
                generate_proof(name_tree, i, include_self_pairs=False),
                name_tree.root,
            )
            for i in range(5)
        ]

        assert results == [True, True, True, True, False]
        assert len(generate_proof(name_tree, 4, include_self_pairs=False)) == 1
        assert len(generate_proof(name_tree, 4)) == 3

    def test_wrong_primitive_fails(self):
        tree = make_tree(4)
        steps = generate_proof(tree, 1)

        assert not verify_proof(tree.leaves[1], steps, tree.root, sha3_256)

    def test_other_primitive_round_trip(self):
        leaves = make_leaves(6)
        tree = build_tree(leaves, sha3_256)

        assert verify_proof(leaves[5], generate_proof(tree, 5), tree.root, sha3_256)


class TestTamperDetection:
    """Single-bit tampering anywhere in (leaf, proof, root) fails verification."""

    @pytest.fixture
    def triple(self):
        tree = make_tree(8)
        return tree.leaves[5], generate_proof(tree, 5), tree.root

    def test_flipped_leaf_bit(self, triple):
        leaf, steps, root = triple

        for bit in (0, 7, 255):
            assert not verify_proof(flip_bit(leaf, bit), steps, root)

    def test_flipped_step_hash_bit(self, triple):
        leaf, steps, root = triple

        for i in range(len(steps)):
            tampered = list(steps)
            tampered[i] = ProofStep(steps[i].side, flip_bit(steps[i].hash, 3))
            assert not verify_proof(leaf, tampered, root), f"step {i}"

    def test_flipped_step_side(self, triple):
        leaf, steps, root = triple

        for i in range(len(steps)):
            tampered = list(steps)
            tampered[i] = flip_side(steps[i])
            assert not verify_proof(leaf, tampered, root), f"step {i}"

    def test_flipped_root_bit(self, triple):
        leaf, steps, root = triple

        assert not verify_proof(leaf, steps, flip_bit(root, 100))

    def test_missing_step(self, triple):
        leaf, steps, root = triple

        assert not verify_proof(leaf, steps[:-1], root)

    def test_extra_step(self, triple):
        leaf, steps, root = triple

        assert not verify_proof(leaf, steps + (ProofStep(Side.RIGHT, h(b"x")),), root)

    def test_tampered_self_pair_hash(self):
        tree = make_tree(5)
        steps = list(generate_proof(tree, 4))
        steps[0] = ProofStep(Side.RIGHT, flip_bit(steps[0].hash))

        assert not verify_proof(tree.leaves[4], steps, tree.root)


class TestMalformedInput:
    """verify_proof never raises."""

    def test_unknown_side(self):
        leaf = h(b"a")
        bad = [ProofStep("up", h(b"b"))]

        assert verify_proof(leaf, bad, h(leaf + h(b"b"))) is False

    def test_string_side_accepted(self):
        a, b = h(b"a"), h(b"b")

        assert verify_proof(a, [ProofStep("right", b)], h(a + b)) is True

    def test_non_bytes_leaf(self):
        tree = make_tree(2)

        assert verify_proof(tree.leaves[0].hex(), generate_proof(tree, 0), tree.root) is False

    def test_integer_leaf_not_coerced(self):
        assert verify_proof(32, [], bytes(32)) is False

    def test_non_bytes_root(self):
        tree = make_tree(2)

        assert verify_proof(tree.leaves[0], generate_proof(tree, 0), None) is False

    def test_proof_not_iterable(self):
        leaf = h(b"a")

        assert verify_proof(leaf, None, leaf) is False

    def test_step_without_fields(self):
        leaf = h(b"a")

        assert verify_proof(leaf, [("right", h(b"b"))], leaf) is False

    def test_step_hash_wrong_type(self):
        leaf = h(b"a")

        assert verify_proof(leaf, [ProofStep(Side.RIGHT, "beef")], leaf) is False
