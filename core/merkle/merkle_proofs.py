"""
Census Merkle Proofs
Inclusion proofs in the shape the census contract consumes.

The contract's delegate/undelegate calls take the bare sibling list
(``uint256[] siblings``); the path bits are recomputed on-chain from the
account's leaf index. MerkleProof keeps both so proofs can also be
checked off-chain.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable

from core.crypto.poseidon import poseidon2

if TYPE_CHECKING:
    from core.merkle.lean_imt import LeanIMT


@dataclass(frozen=True)
class MerkleProof:
    """
    A Merkle inclusion proof for a single leaf.

    Attributes:
        root: The root this proof is against
        leaf: The leaf value being proven
        index: Path bits of the levels that have a sibling (1 = right child),
            lowest level first
        siblings: Sibling values from the leaf level upwards
    """
    root: int
    leaf: int
    index: int
    siblings: list[int] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError(f"Proof index must be non-negative, got {self.index}")

    def to_dict(self) -> dict[str, Any]:
        """Hex-encoded form for JSON output."""
        return {
            "root": hex(self.root),
            "leaf": hex(self.leaf),
            "index": self.index,
            "siblings": [hex(s) for s in self.siblings],
        }


def generate_proof(tree: "LeanIMT", index: int) -> list[int]:
    """
    Sibling list for the leaf at ``index``.

    This is the array passed as ``toProof`` / ``ProofInput.siblings`` to the
    census contract.
    """
    return list(tree.generate_proof(index).siblings)


def verify_proof(
    proof: MerkleProof,
    hash_fn: Callable[[int, int], int] = poseidon2,
) -> bool:
    """
    Verify a Merkle proof.

    Recomputes the root from the leaf and siblings, consuming one path bit
    per sibling, and checks it against the claimed root.
    """
    node = proof.leaf
    for i, sibling in enumerate(proof.siblings):
        if (proof.index >> i) & 1:
            node = hash_fn(sibling, node)
        else:
            node = hash_fn(node, sibling)
    return node == proof.root


__all__ = [
    "MerkleProof",
    "generate_proof",
    "verify_proof",
]
