"""
Census Reconstruction Orchestrator

Rebuilds the census tree from the event history and validates it against
the on-chain root.

Public API:
- reconstruct_tree: Replay the full history into a fresh LeanIMT
- TreeReconstructor: Configurable reconstruction runner
- ReconstructionResult: Tree, root, size and replay statistics
- validate_root: Raise RootMismatchException unless roots agree
- check_root: Non-raising root comparison
- cross_check_accounts: Slot-by-slot comparison with the contract
- LeanIMT, generate_proof, verify_proof, pack_leaf, unpack_leaf: Re-exported for callers
"""

from core.census.leaf import pack_leaf, unpack_leaf
from core.merkle.lean_imt import LeanIMT
from core.merkle.merkle_proofs import generate_proof, verify_proof
from orchestrator.reconstruct import (
    DEFAULT_PAGE_SIZE,
    ReconstructionResult,
    TreeReconstructor,
    reconstruct_tree,
)
from orchestrator.validator import (
    check_root,
    cross_check_accounts,
    validate_root,
)


__all__ = [
    # Reconstruction
    "DEFAULT_PAGE_SIZE",
    "ReconstructionResult",
    "TreeReconstructor",
    "reconstruct_tree",
    # Validation
    "check_root",
    "cross_check_accounts",
    "validate_root",
    # Re-exports
    "LeanIMT",
    "generate_proof",
    "verify_proof",
    "pack_leaf",
    "unpack_leaf",
]
