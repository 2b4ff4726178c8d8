"""
Census Sources - Subgraph Client

GraphQL client for the census subgraph (The Graph).

Provides the paginated WeightChanged event log used to rebuild the tree,
plus a few read-only lookups used by the CLI.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.http import HttpClient, HttpError
from core.schemas.errors import TransportException
from core.schemas.events import WeightChangeEvent


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


WEIGHT_CHANGE_EVENTS_QUERY = """
query GetWeightChangeEvents($first: Int!, $skip: Int!) {
  weightChangeEvents(
    first: $first
    skip: $skip
    orderBy: blockNumber
    orderDirection: asc
  ) {
    id
    account {
      id
      address
    }
    previousWeight
    newWeight
    blockNumber
    blockTimestamp
    transactionHash
    logIndex
  }
}
"""

ACCOUNT_QUERY = """
query GetAccount($id: ID!) {
  account(id: $id) {
    id
    address
    weight
    lastUpdatedAt
    lastUpdatedBlock
  }
}
"""

GLOBAL_STATS_QUERY = """
query GetGlobalStats {
  globalStats(id: "global") {
    id
    totalDelegations
    totalAccounts
    totalWeight
    lastUpdatedAt
  }
}
"""

LATEST_CENSUS_ROOTS_QUERY = """
query GetLatestCensusRoots($first: Int!) {
  censusRoots(
    first: $first
    orderBy: blockNumber
    orderDirection: desc
  ) {
    id
    root
    updater
    blockNumber
    blockTimestamp
    transactionHash
  }
}
"""


class SubgraphAccount(BaseModel):
    """Account entity as indexed by the subgraph."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    address: str
    weight: int = 0
    last_updated_at: int = Field(default=0, alias="lastUpdatedAt")
    last_updated_block: int = Field(default=0, alias="lastUpdatedBlock")


class GlobalStats(BaseModel):
    """Aggregate delegation statistics."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str = "global"
    total_delegations: int = Field(default=0, alias="totalDelegations")
    total_accounts: int = Field(default=0, alias="totalAccounts")
    total_weight: int = Field(default=0, alias="totalWeight")
    last_updated_at: int = Field(default=0, alias="lastUpdatedAt")


class CensusRootRecord(BaseModel):
    """A CensusRootUpdated snapshot."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    root: int
    updater: str = ""
    block_number: int = Field(default=0, alias="blockNumber")
    block_timestamp: int = Field(default=0, alias="blockTimestamp")
    transaction_hash: str = Field(default="", alias="transactionHash")


class SubgraphClient:
    """
    GraphQL client for the census subgraph.

    Implements the EventSource protocol through ``fetch_page``.

    Usage:
        client = SubgraphClient("https://api.studio.thegraph.com/query/...")
        events = client.get_weight_change_events(first=1000, skip=0)
    """

    source_id = "subgraph"

    def __init__(
        self,
        url: str,
        *,
        http: Optional[HttpClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Args:
            url: Subgraph GraphQL endpoint
            http: Shared HTTP client (one is created when omitted)
            timeout: Per-request timeout in seconds
        """
        self.url = url
        self.timeout = timeout
        self._http = http or HttpClient(timeout=timeout)

    def query(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Execute a GraphQL query and return its ``data`` object.

        Raises:
            TransportException: On network failure, non-200 status,
                malformed body, or GraphQL errors
        """
        body: dict[str, Any] = {"query": query}
        if variables:
            body["variables"] = variables

        try:
            response = self._http.post(
                self.url,
                json=body,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except HttpError as e:
            raise TransportException(
                f"failed to execute request: {e}",
                source=self.source_id,
                details={"url": self.url},
            ) from e

        if response.status_code != 200:
            raise TransportException(
                f"unexpected status code {response.status_code}: {response.text[:500]}",
                source=self.source_id,
                details={"url": self.url, "status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise TransportException(
                f"failed to unmarshal response: {e}",
                source=self.source_id,
                details={"url": self.url},
            ) from e

        errors = payload.get("errors") if isinstance(payload, dict) else None
        if errors:
            message = errors[0].get("message", "unknown error") if isinstance(errors[0], dict) else str(errors[0])
            raise TransportException(
                f"graphql error: {message}",
                source=self.source_id,
                details={"url": self.url, "errors": errors},
            )

        data = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(data, dict):
            raise TransportException(
                "response has no data object",
                source=self.source_id,
                details={"url": self.url},
            )
        return data

    def get_weight_change_events(self, first: int, skip: int) -> list[WeightChangeEvent]:
        """
        Fetch a page of WeightChanged events in chronological order.

        Raises:
            TransportException: If the query fails or an event is malformed
        """
        data = self.query(WEIGHT_CHANGE_EVENTS_QUERY, {"first": first, "skip": skip})
        records = data.get("weightChangeEvents") or []
        try:
            return [WeightChangeEvent.model_validate(r) for r in records]
        except ValidationError as e:
            raise TransportException(
                f"malformed weightChangeEvents page at skip={skip}: {e.errors()[0]['msg']}",
                source=self.source_id,
                details={"skip": skip, "first": first},
            ) from e

    def fetch_page(self, page_size: int, offset: int) -> list[WeightChangeEvent]:
        """EventSource protocol."""
        return self.get_weight_change_events(first=page_size, skip=offset)

    def get_account(self, address: str) -> Optional[SubgraphAccount]:
        """Account entity, or None if the subgraph does not know it."""
        data = self.query(ACCOUNT_QUERY, {"id": to_checksum_address(address)})
        record = data.get("account")
        return SubgraphAccount.model_validate(record) if record else None

    def get_global_stats(self) -> Optional[GlobalStats]:
        """Global delegation statistics."""
        record = self.query(GLOBAL_STATS_QUERY).get("globalStats")
        return GlobalStats.model_validate(record) if record else None

    def get_latest_census_roots(self, first: int = 10) -> list[CensusRootRecord]:
        """Most recent census roots, newest first."""
        records = self.query(LATEST_CENSUS_ROOTS_QUERY, {"first": first}).get("censusRoots") or []
        return [CensusRootRecord.model_validate(r) for r in records]

    def close(self) -> None:
        self._http.close()


__all__ = [
    "SubgraphClient",
    "SubgraphAccount",
    "GlobalStats",
    "CensusRootRecord",
    "WEIGHT_CHANGE_EVENTS_QUERY",
]
