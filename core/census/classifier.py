"""
Census Event Classifier
Turns a WeightChanged event into a LeanIMT operation.

Classification by (previous_weight, new_weight):
- 0 -> w   INSERT  insert(pack(account, w))
- w -> 0   REMOVE  update(index_of(pack(account, w)), 0)
- w -> w'  UPDATE  update(index_of(pack(account, w)), pack(account, w'))
- 0 -> 0   not a tree operation; rejected
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.census.leaf import EMPTY_LEAF, pack_leaf
from core.merkle.lean_imt import LeanIMT
from core.schemas.errors import (
    EventClassificationException,
    LeafEncodingException,
    TreeConsistencyException,
)
from core.schemas.events import WeightChangeEvent


logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Tree operation implied by a weight transition."""
    INSERT = "insert"
    REMOVE = "remove"
    UPDATE = "update"


@dataclass(frozen=True)
class AppliedOperation:
    """Record of one event applied to the tree."""
    kind: EventKind
    index: int
    old_leaf: int
    new_leaf: int
    account: str


def classify_event(event: WeightChangeEvent) -> EventKind:
    """
    Decide which tree operation an event represents.

    Raises:
        EventClassificationException: For a 0 -> 0 transition
    """
    previous, new = event.previous_weight, event.new_weight
    if previous == 0 and new > 0:
        return EventKind.INSERT
    if previous > 0 and new == 0:
        return EventKind.REMOVE
    if previous > 0 and new > 0:
        return EventKind.UPDATE
    raise EventClassificationException(
        f"event for {event.account} changes weight 0 -> 0",
        details=event.describe(),
    )


def apply_event(
    tree: LeanIMT,
    event: WeightChangeEvent,
    position: Optional[int] = None,
) -> AppliedOperation:
    """
    Apply one event to the tree.

    Args:
        tree: Tree being reconstructed
        event: The event to apply
        position: Position of the event in the replayed history (error context)

    Returns:
        AppliedOperation describing what changed

    Raises:
        EventClassificationException: If the event maps to no operation
        LeafEncodingException: If a weight does not fit in 88 bits
        TreeConsistencyException: If the tree does not hold the leaf the event
            depends on, or rejects the new leaf
    """
    context = event.describe()
    if position is not None:
        context["position"] = position

    try:
        kind = classify_event(event)
        return _apply(tree, event, kind, position)
    except (EventClassificationException, LeafEncodingException, TreeConsistencyException) as e:
        e.details.update(context)
        raise


def _apply(
    tree: LeanIMT,
    event: WeightChangeEvent,
    kind: EventKind,
    position: Optional[int],
) -> AppliedOperation:
    if kind is EventKind.INSERT:
        new_leaf = pack_leaf(event.account, event.new_weight)
        index = tree.insert(new_leaf)
        return AppliedOperation(kind, index, EMPTY_LEAF, new_leaf, event.account)

    old_leaf = pack_leaf(event.account, event.previous_weight)
    if kind is EventKind.REMOVE:
        new_leaf = EMPTY_LEAF
    else:
        new_leaf = pack_leaf(event.account, event.new_weight)

    index = tree.index_of(old_leaf)
    if index is None:
        where = f" in event {position}" if position is not None else ""
        raise TreeConsistencyException(
            f"{kind.value} failed: leaf not found for {event.account}{where}",
            leaf=old_leaf,
        )

    tree.update(index, new_leaf)
    return AppliedOperation(kind, index, old_leaf, new_leaf, event.account)


__all__ = [
    "EventKind",
    "AppliedOperation",
    "classify_event",
    "apply_event",
]
