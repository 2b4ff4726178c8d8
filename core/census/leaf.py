"""
Census Leaf Codec
Bidirectional mapping between (account, weight) and a single leaf value.

Encoding (matches the contract's computeLeaf):
    leaf = (uint160(account) << 88) | weight

- Top 160 bits: account address
- Bottom 88 bits: weight (uint88)
- leaf == 0 is reserved for an empty or removed slot
"""
from __future__ import annotations

from typing import Optional, Sequence, Union

from eth_utils import is_address, to_canonical_address, to_checksum_address

from core.schemas.errors import LeafEncodingException


WEIGHT_BITS = 88
WEIGHT_MASK = (1 << WEIGHT_BITS) - 1
IDENTITY_BITS = 160
IDENTITY_MASK = (1 << IDENTITY_BITS) - 1

EMPTY_LEAF = 0

Identity = Union[int, str, bytes]


def identity_value(identity: Identity) -> int:
    """
    Convert an account identity to its 160-bit integer value.

    Accepts an integer, a hex address string (any case) or 20 raw bytes.

    Raises:
        LeafEncodingException: If the identity is not a valid address
    """
    if isinstance(identity, bool):
        raise LeafEncodingException(f"invalid identity: {identity!r}")
    if isinstance(identity, int):
        if not 0 <= identity <= IDENTITY_MASK:
            raise LeafEncodingException(
                "identity does not fit in 160 bits",
                details={"identity": identity},
            )
        return identity
    if isinstance(identity, (str, bytes)) and is_address(identity):
        return int.from_bytes(to_canonical_address(identity), "big")
    raise LeafEncodingException(
        f"invalid identity: {identity!r}",
        details={"identity": repr(identity)},
    )


def pack_leaf(identity: Identity, weight: int) -> int:
    """
    Pack an account and its weight into a leaf value.

    Args:
        identity: Account address (hex string, 20 bytes or 160-bit int)
        weight: Unsigned weight below 2**88

    Returns:
        The packed leaf

    Raises:
        LeafEncodingException: If the weight is out of range or the identity is
            invalid

    A packed leaf has at most 248 bits, so it is always a BN254 field element.
    """
    if isinstance(weight, bool) or not isinstance(weight, int):
        raise LeafEncodingException(
            f"weight must be an integer, got {type(weight).__name__}",
            details={"weight": repr(weight)},
        )
    if not 0 <= weight <= WEIGHT_MASK:
        raise LeafEncodingException(
            f"weight {weight} exceeds the {WEIGHT_BITS}-bit domain",
            details={"weight": weight},
        )

    leaf = (identity_value(identity) << WEIGHT_BITS) | weight

    return leaf


def split_leaf(leaf: int) -> tuple[int, int]:
    """Split a leaf into its (identity_value, weight) integers."""
    if leaf < 0:
        raise LeafEncodingException("leaf must be non-negative", details={"leaf": leaf})
    return (leaf >> WEIGHT_BITS) & IDENTITY_MASK, leaf & WEIGHT_MASK


def unpack_leaf(leaf: int) -> tuple[str, int]:
    """
    Unpack a leaf into (checksum address, weight).

    Inverse of pack_leaf: unpack_leaf(pack_leaf(addr, w)) == (checksum(addr), w).
    """
    identity, weight = split_leaf(leaf)
    return to_checksum_address(identity.to_bytes(20, "big")), weight


def is_empty_leaf(leaf: int) -> bool:
    """True for the reserved empty/tombstone value."""
    return leaf == EMPTY_LEAF


def find_identity(leaves: Sequence[int], identity: Identity) -> Optional[tuple[int, int]]:
    """
    Locate an account among packed leaves regardless of its weight.

    Returns:
        (index, weight) of the first matching slot, or None
    """
    target = identity_value(identity)
    for index, leaf in enumerate(leaves):
        if leaf == EMPTY_LEAF:
            continue
        value, weight = split_leaf(leaf)
        if value == target:
            return index, weight
    return None


__all__ = [
    "WEIGHT_BITS",
    "WEIGHT_MASK",
    "IDENTITY_BITS",
    "EMPTY_LEAF",
    "identity_value",
    "pack_leaf",
    "split_leaf",
    "unpack_leaf",
    "is_empty_leaf",
    "find_identity",
]
