"""
Crypto Module

Poseidon hashing over the BN254 scalar field.
"""

from .poseidon import (
    SNARK_SCALAR_FIELD,
    PoseidonParameters,
    poseidon_parameters,
    poseidon_permutation,
    poseidon_hash,
    poseidon2,
)

__all__ = [
    "SNARK_SCALAR_FIELD",
    "PoseidonParameters",
    "poseidon_parameters",
    "poseidon_permutation",
    "poseidon_hash",
    "poseidon2",
]
