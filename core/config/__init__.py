"""
Runtime Configuration Module

Provides configuration loading and management for census reconstruction.
"""

from .runtime import (
    HttpConfig,
    ReconstructionConfig,
    RpcConfig,
    RuntimeConfig,
    SubgraphConfig,
)

__all__ = [
    "RuntimeConfig",
    "SubgraphConfig",
    "RpcConfig",
    "HttpConfig",
    "ReconstructionConfig",
]
