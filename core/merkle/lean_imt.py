"""
Lean Incremental Merkle Tree
Append-only, index-stable binary hash tree matching the census contract.

Tree Shape Rules (Hard Contracts):
1. Leaves are appended at index = size; indices are never reassigned
2. Removal overwrites the slot with 0 (tombstone); size never shrinks
3. Parent = H(left, right) with H = Poseidon over BN254
4. A node without a right sibling is carried up unhashed (no padding)
5. depth = ceil(log2(size)); a single leaf is its own root
6. Empty tree has no root

Storage is one list per level: nodes[0] are the leaves and nodes[depth]
holds only the root.
"""
from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from core.crypto.poseidon import SNARK_SCALAR_FIELD, poseidon2
from core.merkle.merkle_proofs import MerkleProof, verify_proof
from core.schemas.errors import TreeConsistencyException


logger = logging.getLogger(__name__)

HashFn = Callable[[int, int], int]


class LeanIMT:
    """
    Lean incremental Merkle tree over integer leaves.

    Usage:
        tree = LeanIMT()
        tree.insert(leaf)
        tree.update(0, new_leaf)
        proof = tree.generate_proof(0)
        assert LeanIMT.verify_proof(proof)
    """

    def __init__(
        self,
        hash_fn: HashFn = poseidon2,
        leaves: Optional[Iterable[int]] = None,
    ) -> None:
        self._hash = hash_fn
        self._nodes: list[list[int]] = [[]]
        # leaf value -> index, for non-zero leaves only
        self._positions: dict[int, int] = {}
        if leaves is not None:
            self.insert_many(leaves)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of leaves, tombstoned slots included."""
        return len(self._nodes[0])

    @property
    def depth(self) -> int:
        """Number of hashing levels above the leaves."""
        return len(self._nodes) - 1

    @property
    def root(self) -> Optional[int]:
        """Root value, or None for an empty tree."""
        if self.size == 0:
            return None
        return self._nodes[self.depth][0]

    @property
    def leaves(self) -> list[int]:
        """Copy of the leaf level."""
        return list(self._nodes[0])

    def __len__(self) -> int:
        return self.size

    def has(self, leaf: int) -> bool:
        """True if some slot currently holds ``leaf``."""
        if leaf == 0:
            return 0 in self._nodes[0]
        return leaf in self._positions

    def index_of(self, leaf: int) -> Optional[int]:
        """
        Index currently holding ``leaf``, or None.

        Non-zero leaves are unique, so the answer is unambiguous. For the
        empty value 0 the first tombstoned slot is returned.
        """
        if leaf == 0:
            try:
                return self._nodes[0].index(0)
            except ValueError:
                return None
        return self._positions.get(leaf)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, leaf: int) -> int:
        """
        Append a leaf and recompute its path to the root.

        Returns:
            The index assigned to the leaf

        Raises:
            TreeConsistencyException: If the leaf is 0, outside the field,
                or already present
        """
        self._check_new_leaf(leaf)

        index = self.size
        # Grow when the new size no longer fits in 2**depth leaves
        if self.depth < index.bit_length():
            self._nodes.append([])

        node = leaf
        position = index
        for level in range(self.depth):
            self._set(level, position, node)
            if position & 1:
                node = self._hash(self._nodes[level][position - 1], node)
            position >>= 1

        self._nodes[self.depth] = [node]
        self._positions[leaf] = index
        return index

    def insert_many(self, leaves: Iterable[int]) -> None:
        """Insert leaves in order."""
        for leaf in leaves:
            self.insert(leaf)

    def update(self, index: int, leaf: int) -> None:
        """
        Overwrite the leaf at ``index`` and recompute its path.

        ``leaf = 0`` removes the account while keeping the slot.

        Raises:
            TreeConsistencyException: If the index is out of range, or the
                new leaf is outside the field or held by another slot
        """
        if not 0 <= index < self.size:
            raise TreeConsistencyException(
                f"leaf index {index} out of range for tree of size {self.size}",
                index=index,
                details={"size": self.size},
            )
        if leaf != 0:
            self._check_field(leaf)
            holder = self._positions.get(leaf)
            if holder is not None and holder != index:
                raise TreeConsistencyException(
                    f"leaf already present at index {holder}",
                    index=index,
                    leaf=leaf,
                    details={"existing_index": holder},
                )

        old_leaf = self._nodes[0][index]

        node = leaf
        position = index
        for level in range(self.depth):
            self._nodes[level][position] = node
            if position & 1:
                node = self._hash(self._nodes[level][position - 1], node)
            elif position + 1 < len(self._nodes[level]):
                node = self._hash(node, self._nodes[level][position + 1])
            position >>= 1

        self._nodes[self.depth][0] = node

        if old_leaf != 0 and self._positions.get(old_leaf) == index:
            del self._positions[old_leaf]
        if leaf != 0:
            self._positions[leaf] = index

    def remove(self, index: int) -> None:
        """Tombstone the slot at ``index``."""
        self.update(index, 0)

    # ------------------------------------------------------------------
    # Proofs
    # ------------------------------------------------------------------

    def generate_proof(self, index: int) -> MerkleProof:
        """
        Build an inclusion proof for the leaf at ``index``.

        A sibling is recorded only at levels where the partner node exists;
        the odd last node of a level contributes nothing and moves up as is.
        ``MerkleProof.index`` packs the left/right bits of the recorded
        levels, lowest level in the least significant bit.

        Raises:
            TreeConsistencyException: If the index is out of range
        """
        if not 0 <= index < self.size:
            raise TreeConsistencyException(
                f"leaf index {index} out of range for tree of size {self.size}",
                index=index,
                details={"size": self.size},
            )

        leaf = self._nodes[0][index]
        siblings: list[int] = []
        path_bits = 0

        position = index
        for level in range(self.depth):
            is_right = position & 1
            sibling_position = position - 1 if is_right else position + 1
            if sibling_position < len(self._nodes[level]):
                path_bits |= is_right << len(siblings)
                siblings.append(self._nodes[level][sibling_position])
            position >>= 1

        return MerkleProof(
            root=self._nodes[self.depth][0],
            leaf=leaf,
            index=path_bits,
            siblings=siblings,
        )

    @staticmethod
    def verify_proof(proof: MerkleProof, hash_fn: HashFn = poseidon2) -> bool:
        """Recompute the root from a proof and compare."""
        return verify_proof(proof, hash_fn)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set(self, level: int, position: int, node: int) -> None:
        nodes = self._nodes[level]
        if position == len(nodes):
            nodes.append(node)
        else:
            nodes[position] = node

    def _check_field(self, leaf: int) -> None:
        if not 0 <= leaf < SNARK_SCALAR_FIELD:
            raise TreeConsistencyException(
                "leaf is not a BN254 field element",
                leaf=leaf,
            )

    def _check_new_leaf(self, leaf: int) -> None:
        if leaf == 0:
            raise TreeConsistencyException(
                "cannot insert the empty leaf 0",
                leaf=leaf,
                details={"size": self.size},
            )
        self._check_field(leaf)
        if leaf in self._positions:
            raise TreeConsistencyException(
                f"leaf already present at index {self._positions[leaf]}",
                leaf=leaf,
                details={"existing_index": self._positions[leaf]},
            )

    def __repr__(self) -> str:
        root = self.root
        root_repr = f"{root:#x}" if root is not None else "None"
        return f"LeanIMT(size={self.size}, depth={self.depth}, root={root_repr})"


__all__ = [
    "HashFn",
    "LeanIMT",
]
