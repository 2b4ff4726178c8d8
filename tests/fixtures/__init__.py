"""
Test fixtures package for census tests.

This package provides factory functions for creating test objects.
Organized into layers:
- common.py: Addresses, events and in-memory event sources
- contract_fixtures.py: Fake census contract for validation tests

Usage:
    from fixtures import make_history, make_event_source, ADDR_A

    def test_something():
        source = make_event_source(make_history([(ADDR_A, 0, 5)]))
"""

from .common import (
    ADDR_A,
    ADDR_B,
    ADDR_C,
    ADDR_D,
    ZERO_ADDRESS,
    FailingEventSource,
    make_address,
    make_event,
    make_event_source,
    make_history,
    make_subgraph_record,
)

from .contract_fixtures import (
    FakeCensusContract,
)

__all__ = [
    # Common
    "ADDR_A",
    "ADDR_B",
    "ADDR_C",
    "ADDR_D",
    "ZERO_ADDRESS",
    "FailingEventSource",
    "make_address",
    "make_event",
    "make_event_source",
    "make_history",
    "make_subgraph_record",
    # Contract
    "FakeCensusContract",
]
