"""
Census Sources Module

External data sources consumed by reconstruction and validation.
"""

from .base import AccountSource, EventSource, RootSource, StaticEventSource
from .contract import CensusContractClient
from .subgraph import (
    CensusRootRecord,
    GlobalStats,
    SubgraphAccount,
    SubgraphClient,
)

__all__ = [
    "AccountSource",
    "EventSource",
    "RootSource",
    "StaticEventSource",
    "CensusContractClient",
    "CensusRootRecord",
    "GlobalStats",
    "SubgraphAccount",
    "SubgraphClient",
]
