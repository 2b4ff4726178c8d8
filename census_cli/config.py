"""
Census CLI - Configuration

Resolves the runtime configuration for a CLI invocation and builds the
data source clients from it.

Precedence (highest first): command-line flags, CENSUS_* environment
variables, YAML config file, defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from core.config import RuntimeConfig
from core.http import HttpClient
from core.sources import CensusContractClient, StaticEventSource, SubgraphClient
from core.sources.base import EventSource


logger = logging.getLogger(__name__)


def default_config_paths() -> list[Path]:
    return [
        Path.cwd() / "census.yaml",
        Path.cwd() / ".census.yaml",
        Path.home() / ".config" / "census" / "config.yaml",
    ]


def load_config(
    config_path: Path | None = None,
    *,
    subgraph_url: Optional[str] = None,
    rpc_url: Optional[str] = None,
    contract_address: Optional[str] = None,
) -> RuntimeConfig:
    """
    Load configuration from file and/or environment.

    Environment variables override file settings; explicit arguments
    override both.

    Raises:
        FileNotFoundError: If ``config_path`` is given but missing
    """
    if config_path is not None:
        config = RuntimeConfig.from_yaml(config_path)
    else:
        config = RuntimeConfig()
        for default_path in default_config_paths():
            if default_path.exists():
                logger.debug(f"using config file {default_path}")
                config = RuntimeConfig.from_yaml(default_path)
                break

    config = config.with_env_overrides()
    return config.with_overrides(
        subgraph_url=subgraph_url,
        rpc_url=rpc_url,
        contract_address=contract_address,
    )


def build_event_source(config: RuntimeConfig, events_path: Optional[str] = None) -> EventSource:
    """
    Event source for reconstruction: a recorded events file when given,
    otherwise the configured subgraph.

    Raises:
        ConfigurationException: If no subgraph URL is configured
    """
    if events_path:
        return StaticEventSource.from_json_file(events_path)
    config.require("subgraph.url")
    http = HttpClient(timeout=config.http.timeout, proxy=config.http.proxy)
    return SubgraphClient(config.subgraph.url, http=http, timeout=config.http.timeout)


def build_contract(config: RuntimeConfig) -> CensusContractClient:
    """
    Census contract client.

    Raises:
        ConfigurationException: If the RPC URL or contract address is missing
    """
    config.require("rpc.url", "rpc.contract_address")
    return CensusContractClient(
        config.rpc.url,
        config.rpc.contract_address,
        timeout=config.http.timeout,
    )


def has_contract(config: RuntimeConfig) -> bool:
    """True when both RPC URL and contract address are set."""
    return bool(config.rpc.url and config.rpc.contract_address)


def get_default_config_template() -> str:
    """Get a template configuration file."""
    return """# Census reconstruction settings
subgraph:
  url: https://api.studio.thegraph.com/query/<id>/<name>/<version>

rpc:
  url: https://sepolia.drpc.org
  contract_address: "0x0000000000000000000000000000000000000000"

http:
  timeout: 30.0
  proxy: null

reconstruction:
  page_size: 1000
  skip_noop_events: false
  progress_every: 100

log_level: WARNING
"""
