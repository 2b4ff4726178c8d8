"""
Census Sources - Base Interfaces

Protocols for the external collaborators consumed by reconstruction:
- EventSource: ordered pages of WeightChanged events
- RootSource: the authoritative on-chain root
- AccountSource: index -> account and account -> weight lookups
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Protocol, Sequence, runtime_checkable

from core.schemas.events import WeightChangeEvent


@runtime_checkable
class EventSource(Protocol):
    """Paginated, chronologically ordered event log."""

    def fetch_page(self, page_size: int, offset: int) -> list[WeightChangeEvent]:
        """
        Fetch up to ``page_size`` events starting at ``offset``.

        Events are in ascending (block_number, log_index) order.
        An empty list marks the end of history.
        """
        ...


@runtime_checkable
class RootSource(Protocol):
    """Authoritative census root."""

    def get_root(self) -> int:
        """Current on-chain root as an integer."""
        ...


@runtime_checkable
class AccountSource(Protocol):
    """On-chain account enumeration."""

    def get_account_at(self, index: int) -> str:
        """Address stored for tree slot ``index``."""
        ...

    def weight_of(self, address: str) -> int:
        """Current weight of ``address``."""
        ...


class StaticEventSource:
    """
    Event source over an in-memory list.

    Serves recorded histories (``--events`` in the CLI) and tests.
    """

    def __init__(self, events: Iterable[WeightChangeEvent]) -> None:
        self.events: list[WeightChangeEvent] = list(events)
        self.calls: list[tuple[int, int]] = []

    def fetch_page(self, page_size: int, offset: int) -> list[WeightChangeEvent]:
        self.calls.append((page_size, offset))
        return self.events[offset:offset + page_size]

    @classmethod
    def from_records(cls, records: Sequence[dict[str, Any]]) -> "StaticEventSource":
        """Build from subgraph-shaped dicts."""
        return cls(WeightChangeEvent.model_validate(r) for r in records)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "StaticEventSource":
        """
        Load a JSON file holding either a list of events or a subgraph
        response body (``{"data": {"weightChangeEvents": [...]}}``).
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Events file not found: {path}")
        with open(path, "r") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("data", data).get("weightChangeEvents", [])
        return cls.from_records(data)


__all__ = [
    "EventSource",
    "RootSource",
    "AccountSource",
    "StaticEventSource",
]
