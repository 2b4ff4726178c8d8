"""
Census Module

Leaf encoding and event classification for the census tree.
"""

from .leaf import (
    EMPTY_LEAF,
    IDENTITY_BITS,
    WEIGHT_BITS,
    WEIGHT_MASK,
    identity_value,
    find_identity,
    is_empty_leaf,
    pack_leaf,
    split_leaf,
    unpack_leaf,
)
from .classifier import (
    AppliedOperation,
    EventKind,
    apply_event,
    classify_event,
)

__all__ = [
    "EMPTY_LEAF",
    "IDENTITY_BITS",
    "WEIGHT_BITS",
    "WEIGHT_MASK",
    "identity_value",
    "find_identity",
    "is_empty_leaf",
    "pack_leaf",
    "split_leaf",
    "unpack_leaf",
    "AppliedOperation",
    "EventKind",
    "apply_event",
    "classify_event",
]
