"""
Census Schemas
File: events.py

Purpose: The WeightChanged event record replayed to rebuild the census tree.

The model accepts the subgraph's JSON shape directly:

    {
      "id": "0xabc...-3",
      "account": {"id": "0x12...", "address": "0x12..."},
      "previousWeight": "0",
      "newWeight": "5",
      "blockNumber": "123",
      "blockTimestamp": "1700000000",
      "transactionHash": "0xabc...",
      "logIndex": "3"
    }

Numbers arrive as decimal strings and are coerced to int.
"""

from typing import Any

from eth_utils import is_address, to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, field_validator


class WeightChangeEvent(BaseModel):
    """
    A single weight transition for one account.

    Events must be replayed in ascending ``order_key`` order.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    id: str = Field(
        default="",
        description="Indexer identifier of the event",
    )
    account: str = Field(
        ...,
        description="Checksummed address of the account whose weight changed",
    )
    previous_weight: int = Field(
        ...,
        alias="previousWeight",
        ge=0,
    )
    new_weight: int = Field(
        ...,
        alias="newWeight",
        ge=0,
    )
    block_number: int = Field(
        default=0,
        alias="blockNumber",
        ge=0,
    )
    block_timestamp: int = Field(
        default=0,
        alias="blockTimestamp",
        ge=0,
    )
    transaction_hash: str = Field(
        default="",
        alias="transactionHash",
    )
    log_index: int = Field(
        default=0,
        alias="logIndex",
        ge=0,
    )

    @field_validator("account", mode="before")
    @classmethod
    def _normalize_account(cls, value: Any) -> str:
        # The subgraph nests the account as {"id": ..., "address": ...}
        if isinstance(value, dict):
            value = value.get("id") or value.get("address")
        if not isinstance(value, str) or not is_address(value):
            raise ValueError(f"invalid account address: {value!r}")
        return to_checksum_address(value)

    @property
    def order_key(self) -> tuple[int, int]:
        """Position of the event in chain history."""
        return (self.block_number, self.log_index)

    def describe(self) -> dict[str, Any]:
        """Context attached to errors raised while applying this event."""
        return {
            "event_id": self.id,
            "account": self.account,
            "previous_weight": self.previous_weight,
            "new_weight": self.new_weight,
            "block_number": self.block_number,
            "log_index": self.log_index,
        }
