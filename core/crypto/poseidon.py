"""
Poseidon Hash (BN254)
Arithmetic sponge hash used by the census contract's LeanIMT.

This module provides:
- SNARK_SCALAR_FIELD: the BN254 scalar field modulus
- poseidon_hash: circomlib-compatible Poseidon over 1..8 inputs
- poseidon2: the two-input form used for internal tree nodes

Parameter Rules (Hard Contracts):
1. Width t = number of inputs + 1, S-box x^5
2. 8 full rounds, partial rounds from the circomlib table
3. Round constants and MDS matrix come from the Grain LFSR generator of the
   reference Poseidon implementation (field=prime, sbox=power, n=254)
4. Initial state is [0, *inputs]; the output is state[0]

These are the parameters shipped by circomlib, poseidon-lite and
poseidon-solidity, so hashes computed here match the on-chain verifier.
"""
from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterator


SNARK_SCALAR_FIELD: int = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)

FULL_ROUNDS = 8

# Partial rounds for t = 2..9
PARTIAL_ROUNDS = (56, 57, 56, 60, 60, 63, 64, 63)

_FIELD_BITS = 254
_GRAIN_FIELD_PRIME = 1
_GRAIN_SBOX_POWER = 0


@dataclass(frozen=True)
class PoseidonParameters:
    """Round constants and MDS matrix for one state width."""
    t: int
    full_rounds: int
    partial_rounds: int
    round_constants: tuple[int, ...]
    mds: tuple[tuple[int, ...], ...]


def _grain_bits(t: int, full_rounds: int, partial_rounds: int) -> Iterator[int]:
    """Self-shrinking Grain LFSR bit stream seeded with the instance parameters."""
    seed = (
        format(_GRAIN_FIELD_PRIME, "02b")
        + format(_GRAIN_SBOX_POWER, "04b")
        + format(_FIELD_BITS, "012b")
        + format(t, "012b")
        + format(full_rounds, "010b")
        + format(partial_rounds, "010b")
        + "1" * 30
    )
    state = deque(int(bit) for bit in seed)

    def step() -> int:
        bit = state[62] ^ state[51] ^ state[38] ^ state[23] ^ state[13] ^ state[0]
        state.popleft()
        state.append(bit)
        return bit

    for _ in range(160):
        step()

    while True:
        control = step()
        while control == 0:
            step()
            control = step()
        yield step()


def _random_field_bits(bits: Iterator[int], count: int) -> int:
    value = 0
    for _ in range(count):
        value = (value << 1) | next(bits)
    return value


@lru_cache(maxsize=None)
def poseidon_parameters(t: int) -> PoseidonParameters:
    """
    Derive the Poseidon parameters for state width ``t``.

    The derivation is deterministic and cached per width.

    Raises:
        ValueError: If t is outside the supported range 2..9
    """
    if not 2 <= t <= len(PARTIAL_ROUNDS) + 1:
        raise ValueError(f"unsupported Poseidon width t={t}")

    partial_rounds = PARTIAL_ROUNDS[t - 2]
    bits = _grain_bits(t, FULL_ROUNDS, partial_rounds)
    p = SNARK_SCALAR_FIELD

    constants: list[int] = []
    for _ in range((FULL_ROUNDS + partial_rounds) * t):
        value = _random_field_bits(bits, _FIELD_BITS)
        while value >= p:
            value = _random_field_bits(bits, _FIELD_BITS)
        constants.append(value)

    # Cauchy matrix M[i][j] = 1 / (x_i + y_j)
    while True:
        samples = [_random_field_bits(bits, _FIELD_BITS) % p for _ in range(2 * t)]
        while len(set(samples)) != len(samples):
            samples = [_random_field_bits(bits, _FIELD_BITS) % p for _ in range(2 * t)]
        xs, ys = samples[:t], samples[t:]
        if all((x + y) % p != 0 for x in xs for y in ys):
            break

    mds = tuple(
        tuple(pow((x + y) % p, p - 2, p) for y in ys)
        for x in xs
    )

    return PoseidonParameters(
        t=t,
        full_rounds=FULL_ROUNDS,
        partial_rounds=partial_rounds,
        round_constants=tuple(constants),
        mds=mds,
    )


def poseidon_permutation(state: list[int]) -> list[int]:
    """Apply the Poseidon permutation to a full state vector."""
    p = SNARK_SCALAR_FIELD
    params = poseidon_parameters(len(state))
    t = params.t
    constants = params.round_constants
    mds = params.mds
    half_full = params.full_rounds // 2
    total = params.full_rounds + params.partial_rounds

    state = list(state)
    for r in range(total):
        state = [(s + constants[r * t + i]) % p for i, s in enumerate(state)]
        if r < half_full or r >= total - half_full:
            state = [pow(s, 5, p) for s in state]
        else:
            state[0] = pow(state[0], 5, p)
        state = [sum(row[j] * state[j] for j in range(t)) % p for row in mds]
    return state


def poseidon_hash(*inputs: int) -> int:
    """
    Hash 1..8 field elements.

    Args:
        inputs: Integers in [0, SNARK_SCALAR_FIELD)

    Returns:
        The hash as a field element

    Raises:
        ValueError: If an input is not a field element or the arity is unsupported

    Example:
        >>> hex(poseidon_hash(1, 2))
        '0x115cc0f5e7d690413df64c6b9662e9cf2a3617f2743245519e19607a4417189a'
    """
    if not inputs:
        raise ValueError("poseidon_hash requires at least one input")
    for value in inputs:
        if not 0 <= value < SNARK_SCALAR_FIELD:
            raise ValueError(f"input is not a BN254 field element: {value}")
    return poseidon_permutation([0, *inputs])[0]


def poseidon2(left: int, right: int) -> int:
    """Hash an ordered pair of child nodes."""
    return poseidon_hash(left, right)


__all__ = [
    "SNARK_SCALAR_FIELD",
    "PoseidonParameters",
    "poseidon_parameters",
    "poseidon_permutation",
    "poseidon_hash",
    "poseidon2",
]
