"""
Common test fixtures shared by all modules.

Provides factory functions for census data structures:
- Account addresses
- WeightChangeEvent histories
- In-memory event sources

These are the foundational building blocks used by higher-level fixtures.
"""

from typing import Iterable, Optional

from core.schemas.events import WeightChangeEvent
from core.sources.base import StaticEventSource


# =============================================================================
# Accounts
# =============================================================================

ADDR_A = "0x1111111111111111111111111111111111111111"
ADDR_B = "0x2222222222222222222222222222222222222222"
ADDR_C = "0x3333333333333333333333333333333333333333"
ADDR_D = "0x4444444444444444444444444444444444444444"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def make_address(n: int) -> str:
    """Deterministic distinct address for account number ``n`` (n >= 1)."""
    return "0x" + format(n, "040x")


# =============================================================================
# WeightChangeEvent Factory
# =============================================================================

def make_event(
    account: str,
    previous_weight: int,
    new_weight: int,
    block_number: int = 1,
    log_index: int = 0,
    event_id: Optional[str] = None,
) -> WeightChangeEvent:
    """
    Create a WeightChangeEvent for testing.

    Args:
        account: Account address
        previous_weight: Weight before the change
        new_weight: Weight after the change
        block_number: Block of the event
        log_index: Position within the block
        event_id: Subgraph id (derived from block/log when omitted)

    Returns:
        WeightChangeEvent
    """
    return WeightChangeEvent(
        id=event_id or f"0x{block_number:064x}-{log_index}",
        account=account,
        previous_weight=previous_weight,
        new_weight=new_weight,
        block_number=block_number,
        log_index=log_index,
    )


def make_history(transitions: Iterable[tuple[str, int, int]]) -> list[WeightChangeEvent]:
    """
    Build an ordered history from (account, previous, new) tuples.

    Each event gets its own block so order_key is strictly increasing.
    """
    return [
        make_event(account, previous, new, block_number=i + 1)
        for i, (account, previous, new) in enumerate(transitions)
    ]


def make_subgraph_record(
    account: str,
    previous_weight: int,
    new_weight: int,
    block_number: int = 1,
    log_index: int = 0,
) -> dict:
    """Raw weightChangeEvents entry as returned by the subgraph."""
    return {
        "id": f"0x{block_number:064x}-{log_index}",
        "account": {"id": account.lower(), "address": account.lower()},
        "previousWeight": str(previous_weight),
        "newWeight": str(new_weight),
        "blockNumber": str(block_number),
        "blockTimestamp": "1700000000",
        "transactionHash": "0x" + "ab" * 32,
        "logIndex": str(log_index),
    }


# =============================================================================
# Event Sources
# =============================================================================

def make_event_source(events: Iterable[WeightChangeEvent]) -> StaticEventSource:
    """In-memory paginated event source."""
    return StaticEventSource(events)


class FailingEventSource:
    """Event source that serves ``pages_before_failure`` pages, then raises."""

    def __init__(self, events: list[WeightChangeEvent], error: Exception, pages_before_failure: int = 0):
        self.events = events
        self.error = error
        self.pages_before_failure = pages_before_failure
        self.calls: list[tuple[int, int]] = []

    def fetch_page(self, page_size: int, offset: int) -> list[WeightChangeEvent]:
        self.calls.append((page_size, offset))
        if len(self.calls) > self.pages_before_failure:
            raise self.error
        return self.events[offset:offset + page_size]
