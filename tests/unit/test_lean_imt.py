"""
Lean Incremental Merkle Tree Unit Tests
Tests for core/merkle/lean_imt.py and core/merkle/merkle_proofs.py

Required behaviour:
1. Single leaf - root equals the leaf
2. Odd node carried up unhashed (no padding)
3. Tombstones keep indices stable
4. index_of tracks every insert and update
5. Proofs verify for every index, including after removals
6. Invalid inserts and updates raise TreeConsistencyException
"""
import pytest

from core.crypto.poseidon import SNARK_SCALAR_FIELD, poseidon2
from core.merkle import LeanIMT, MerkleProof, generate_proof, verify_proof
from core.schemas.errors import ErrorCodes, TreeConsistencyException


def _leaves(n: int) -> list[int]:
    return [100 + i for i in range(n)]


class TestEmptyTree:
    """Tests for empty tree behavior."""

    def test_empty_tree(self):
        tree = LeanIMT()
        assert tree.size == 0
        assert tree.depth == 0
        assert tree.root is None
        assert len(tree) == 0

    def test_proof_on_empty_tree_raises(self):
        with pytest.raises(TreeConsistencyException, match="out of range"):
            LeanIMT().generate_proof(0)


class TestShape:
    """Tests for root computation and tree shape."""

    def test_single_leaf_root_equals_leaf(self):
        tree = LeanIMT()
        tree.insert(42)
        assert tree.root == 42
        assert tree.depth == 0

    def test_two_leaves(self):
        tree = LeanIMT(leaves=[1, 2])
        assert tree.root == poseidon2(1, 2)
        assert tree.depth == 1

    def test_three_leaves_carries_odd_node(self):
        """Third leaf moves up unhashed: root = H(H(l0, l1), l2)."""
        tree = LeanIMT(leaves=[1, 2, 3])
        assert tree.root == poseidon2(poseidon2(1, 2), 3)
        assert tree.depth == 2

    def test_five_leaves(self):
        tree = LeanIMT(leaves=[1, 2, 3, 4, 5])
        left = poseidon2(poseidon2(1, 2), poseidon2(3, 4))
        assert tree.root == poseidon2(left, 5)
        assert tree.depth == 3

    @pytest.mark.parametrize("size,depth", [(1, 0), (2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4)])
    def test_depth_is_ceil_log2(self, size, depth):
        assert LeanIMT(leaves=_leaves(size)).depth == depth

    def test_insert_returns_index(self):
        tree = LeanIMT()
        assert [tree.insert(leaf) for leaf in _leaves(4)] == [0, 1, 2, 3]

    def test_incremental_matches_batch(self):
        """Root after each insert equals the root of a tree built at once."""
        tree = LeanIMT()
        for n, leaf in enumerate(_leaves(7), start=1):
            tree.insert(leaf)
            assert tree.root == LeanIMT(leaves=_leaves(n)).root

    def test_custom_hash(self):
        tree = LeanIMT(hash_fn=lambda a, b: a + 2 * b, leaves=[1, 2, 3])
        assert tree.root == (1 + 2 * 2) + 2 * 3


class TestUpdate:
    """Tests for update and tombstones."""

    def test_update_matches_fresh_build(self):
        tree = LeanIMT(leaves=[1, 2, 3, 4, 5])
        tree.update(2, 30)
        assert tree.root == LeanIMT(leaves=[1, 2, 30, 4, 5]).root

    def test_update_last_odd_leaf(self):
        tree = LeanIMT(leaves=[1, 2, 3])
        tree.update(2, 33)
        assert tree.root == poseidon2(poseidon2(1, 2), 33)

    def test_remove_keeps_slot(self):
        """Tombstoning preserves size and every other index."""
        tree = LeanIMT(leaves=[1, 2, 3])
        tree.remove(1)
        assert tree.size == 3
        assert tree.leaves == [1, 0, 3]
        assert tree.index_of(3) == 2
        assert tree.index_of(2) is None

    def test_removed_root_hashes_zero(self):
        tree = LeanIMT(leaves=[1, 2])
        tree.update(0, 0)
        assert tree.root == poseidon2(0, 2)

    def test_insert_after_remove_appends(self):
        tree = LeanIMT(leaves=[1, 2])
        tree.remove(0)
        assert tree.insert(1) == 2
        assert tree.index_of(1) == 2

    def test_index_of_follows_update(self):
        tree = LeanIMT(leaves=[1, 2])
        tree.update(1, 20)
        assert tree.index_of(20) == 1
        assert tree.index_of(2) is None
        assert tree.has(20)
        assert not tree.has(2)

    def test_index_of_zero_returns_first_tombstone(self):
        tree = LeanIMT(leaves=[1, 2, 3])
        assert tree.index_of(0) is None
        tree.remove(2)
        tree.remove(1)
        assert tree.index_of(0) == 1

    def test_update_same_value_is_noop(self):
        tree = LeanIMT(leaves=[1, 2, 3])
        root = tree.root
        tree.update(1, 2)
        assert tree.root == root
        assert tree.index_of(2) == 1


class TestInvalidOperations:
    """Tests for rejected operations."""

    def test_insert_zero_rejected(self):
        with pytest.raises(TreeConsistencyException, match="empty leaf") as exc_info:
            LeanIMT().insert(0)
        assert exc_info.value.code == ErrorCodes.TREE_CONSISTENCY_ERROR

    def test_insert_duplicate_rejected(self):
        tree = LeanIMT(leaves=[1, 2])
        with pytest.raises(TreeConsistencyException, match="already present") as exc_info:
            tree.insert(2)
        assert exc_info.value.details["existing_index"] == 1
        assert tree.size == 2

    def test_insert_out_of_field_rejected(self):
        with pytest.raises(TreeConsistencyException, match="field"):
            LeanIMT().insert(SNARK_SCALAR_FIELD)

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_update_out_of_range(self, index):
        tree = LeanIMT(leaves=[1, 2, 3])
        with pytest.raises(TreeConsistencyException, match="out of range") as exc_info:
            tree.update(index, 5)
        assert exc_info.value.details["index"] == index

    def test_update_to_value_held_elsewhere(self):
        tree = LeanIMT(leaves=[1, 2, 3])
        with pytest.raises(TreeConsistencyException, match="already present"):
            tree.update(0, 3)
        assert tree.leaves == [1, 2, 3]


class TestProofs:
    """Tests for proof generation and verification."""

    def test_single_leaf_proof(self):
        tree = LeanIMT(leaves=[42])
        proof = tree.generate_proof(0)
        assert proof == MerkleProof(root=42, leaf=42, index=0, siblings=[])
        assert verify_proof(proof)

    def test_three_leaf_proof_shape(self):
        """Index 2 has no level-0 sibling and H(l0, l1) at level 1."""
        l0, l1, l2 = 11, 22, 33
        tree = LeanIMT(leaves=[l0, l1, l2])
        proof = tree.generate_proof(2)
        assert proof.siblings == [poseidon2(l0, l1)]
        assert proof.index == 1
        assert proof.leaf == l2
        assert proof.root == tree.root
        assert generate_proof(tree, 2) == [poseidon2(l0, l1)]

    def test_left_leaf_proof(self):
        tree = LeanIMT(leaves=[11, 22, 33])
        proof = tree.generate_proof(0)
        assert proof.siblings == [22, 33]
        assert proof.index == 0

    @pytest.mark.parametrize("size", range(1, 10))
    def test_all_indices_verify(self, size):
        tree = LeanIMT(leaves=_leaves(size))
        for index in range(size):
            proof = tree.generate_proof(index)
            assert proof.leaf == 100 + index
            assert LeanIMT.verify_proof(proof), f"proof failed for index {index} of {size}"

    @pytest.mark.parametrize("size", [3, 6, 9])
    def test_all_indices_verify_after_removals(self, size):
        tree = LeanIMT(leaves=_leaves(size))
        tree.remove(0)
        tree.remove(size - 1)
        tree.update(1, 999)
        for index in range(size):
            assert verify_proof(tree.generate_proof(index))

    def test_tampered_sibling_fails(self):
        tree = LeanIMT(leaves=_leaves(5))
        proof = tree.generate_proof(3)
        tampered = MerkleProof(
            root=proof.root,
            leaf=proof.leaf,
            index=proof.index,
            siblings=[proof.siblings[0] + 1] + proof.siblings[1:],
        )
        assert not verify_proof(tampered)

    def test_tampered_leaf_fails(self):
        tree = LeanIMT(leaves=_leaves(4))
        proof = tree.generate_proof(1)
        tampered = MerkleProof(root=proof.root, leaf=proof.leaf + 1, index=proof.index, siblings=proof.siblings)
        assert not verify_proof(tampered)

    def test_negative_proof_index_rejected(self):
        with pytest.raises(ValueError, match="non-negative"):
            MerkleProof(root=1, leaf=1, index=-1)

    def test_to_dict_is_hex(self):
        proof = LeanIMT(leaves=[1, 2]).generate_proof(0)
        data = proof.to_dict()
        assert data["leaf"] == "0x1"
        assert data["siblings"] == ["0x2"]
        assert data["index"] == 0
