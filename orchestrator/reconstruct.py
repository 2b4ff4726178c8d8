"""
Census Tree Reconstruction

Rebuilds the census LeanIMT off-chain by replaying the full WeightChanged
history in chronological order.

Flow:
1. Page through the event source (offset paging) until an empty page
2. Start from an empty tree
3. Classify and apply each event in order

The procedure is deterministic: the same event sequence always yields the
same tree, root and size. Any failure aborts the run; a partially built tree
is never returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from core.census.classifier import AppliedOperation, apply_event
from core.crypto.poseidon import poseidon2
from core.merkle.lean_imt import HashFn, LeanIMT
from core.schemas.errors import TransportException
from core.schemas.events import WeightChangeEvent
from core.sources.base import EventSource


logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 1000
DEFAULT_PROGRESS_EVERY = 100

# Events logged individually at the start of a run
_VERBOSE_HEAD = 10


@dataclass
class ReconstructionResult:
    """
    Outcome of a reconstruction run.

    Unpacks as ``tree, root, size`` for callers that need only those.
    """
    tree: LeanIMT
    root: int
    size: int
    events_applied: int = 0
    events_skipped: int = 0
    operations: list[AppliedOperation] = field(default_factory=list)

    def __iter__(self) -> Iterator:
        return iter((self.tree, self.root, self.size))

    @property
    def empty_slots(self) -> int:
        """Number of tombstoned slots."""
        return sum(1 for leaf in self.tree.leaves if leaf == 0)

    @property
    def active_slots(self) -> int:
        return self.size - self.empty_slots


class TreeReconstructor:
    """
    Replays the WeightChanged history into a fresh LeanIMT.

    Usage:
        reconstructor = TreeReconstructor(SubgraphClient(url))
        result = reconstructor.reconstruct()
        validate_root(result.tree, contract.get_root())
    """

    def __init__(
        self,
        source: EventSource,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        skip_noop_events: bool = False,
        hash_fn: HashFn = poseidon2,
        progress_every: int = DEFAULT_PROGRESS_EVERY,
        record_operations: bool = False,
    ) -> None:
        """
        Args:
            source: Paginated event source
            page_size: Events requested per page
            skip_noop_events: Skip 0 -> 0 events instead of failing
            hash_fn: Node hash (Poseidon unless testing)
            progress_every: Log progress every N events
            record_operations: Keep an AppliedOperation per event
        """
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        self.source = source
        self.page_size = page_size
        self.skip_noop_events = skip_noop_events
        self.hash_fn = hash_fn
        self.progress_every = progress_every
        self.record_operations = record_operations

    def iter_events(self) -> Iterator[WeightChangeEvent]:
        """
        Yield every event in source order, one page at a time.

        Raises:
            TransportException: If a page cannot be fetched
        """
        offset = 0
        previous_key: Optional[tuple[int, int]] = None
        while True:
            try:
                page = self.source.fetch_page(self.page_size, offset)
            except TransportException as e:
                e.details.setdefault("offset", offset)
                raise
            if not page:
                break

            logger.debug(f"fetched {len(page)} events at offset {offset}")
            for event in page:
                key = event.order_key
                if previous_key is not None and key < previous_key:
                    logger.warning(
                        f"event {event.id or event.account} out of order: "
                        f"{key} after {previous_key}"
                    )
                previous_key = key
                yield event

            offset += len(page)

    def fetch_all_events(self) -> list[WeightChangeEvent]:
        """Fetch the full event history."""
        events = list(self.iter_events())
        logger.info(f"fetched {len(events)} weight change events")
        return events

    def reconstruct(self) -> ReconstructionResult:
        """
        Rebuild the tree from the full history.

        Raises:
            TransportException: If fetching fails
            EventClassificationException: On a 0 -> 0 event (unless skipped)
            LeafEncodingException: On a weight that does not fit 88 bits
            TreeConsistencyException: If an event references a missing leaf
        """
        events = self.fetch_all_events()
        return self.replay(events)

    def replay(self, events: list[WeightChangeEvent]) -> ReconstructionResult:
        """Apply an already fetched history to a fresh tree."""
        tree = LeanIMT(hash_fn=self.hash_fn)
        operations: list[AppliedOperation] = []
        applied = 0
        skipped = 0

        for position, event in enumerate(events):
            if event.previous_weight == 0 and event.new_weight == 0 and self.skip_noop_events:
                logger.warning(f"skipping 0 -> 0 event {position} for {event.account}")
                skipped += 1
                continue

            operation = apply_event(tree, event, position=position)
            applied += 1
            if self.record_operations:
                operations.append(operation)

            if position < _VERBOSE_HEAD or (self.progress_every and position % self.progress_every == 0):
                logger.info(
                    f"event {position}: {operation.kind.value} {event.account} "
                    f"{event.previous_weight} -> {event.new_weight} (index {operation.index})"
                )
            else:
                logger.debug(
                    f"event {position}: {operation.kind.value} {event.account} (index {operation.index})"
                )

        root = tree.root or 0
        logger.info(
            f"reconstructed tree: size={tree.size} depth={tree.depth} root={root:#x}"
        )
        return ReconstructionResult(
            tree=tree,
            root=root,
            size=tree.size,
            events_applied=applied,
            events_skipped=skipped,
            operations=operations,
        )


def reconstruct_tree(
    source: EventSource,
    **kwargs,
) -> ReconstructionResult:
    """
    Rebuild the census tree from ``source``.

    Keyword arguments are passed to TreeReconstructor. The result unpacks
    as ``tree, root, size``.
    """
    return TreeReconstructor(source, **kwargs).reconstruct()


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "ReconstructionResult",
    "TreeReconstructor",
    "reconstruct_tree",
]
