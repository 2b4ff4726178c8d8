"""
Census Merkle Tree
Lean incremental Merkle tree (LeanIMT) with Poseidon hashing.

This module provides:
- LeanIMT: index-stable append/update tree matching the census contract
- MerkleProof: Dataclass representing an inclusion proof
- generate_proof: Sibling list for a leaf, as the contract expects it
- verify_proof: Recompute a root from a proof

Tree Rules:
1. Parent hashing: poseidon2(left, right)
2. No padding: a node without a right sibling moves up unchanged
3. Removed leaves become 0 and keep their slot
4. Single leaf: root = leaf
5. Empty tree: no root (callers treat it as 0)

Usage:
    from core.merkle import LeanIMT, generate_proof

    tree = LeanIMT()
    tree.insert(leaf)
    siblings = generate_proof(tree, tree.index_of(leaf))
"""
from .merkle_proofs import (
    MerkleProof,
    generate_proof,
    verify_proof,
)

from .lean_imt import (
    HashFn,
    LeanIMT,
)


__all__ = [
    # Core types
    "LeanIMT",
    "MerkleProof",
    "HashFn",
    # Core functions
    "generate_proof",
    "verify_proof",
]
