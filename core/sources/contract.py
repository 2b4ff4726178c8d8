"""
Census Sources - Contract Client

Read-only web3 binding to the census contract.

Serves as RootSource (``getCensusRoot``) and AccountSource
(``getAccountAt`` / ``weightOf``) for validation. Never sends transactions.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from eth_utils import is_address, to_checksum_address
from web3 import Web3
from web3.exceptions import Web3Exception

from core.schemas.errors import ConfigurationException, TransportException


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


def _view(name: str, inputs: list[tuple[str, str]], outputs: list[tuple[str, str]]) -> dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [{"name": n, "type": t, "internalType": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t, "internalType": t} for n, t in outputs],
    }


CENSUS_ABI: list[dict[str, Any]] = [
    _view("getCensusRoot", [], [("", "uint256")]),
    _view("getAccountAt", [("index", "uint256")], [("", "address")]),
    _view("indexAccount", [("", "uint256")], [("", "address")]),
    _view("weightOf", [("account", "address")], [("", "uint88")]),
    _view("computeLeaf", [("account", "address")], [("", "uint256")]),
    _view("getDelegations", [("account", "address")], [("weight", "uint88"), ("leaf", "uint256")]),
    _view("getRootBlockNumber", [("root", "uint256")], [("", "uint256")]),
]


class CensusContractClient:
    """
    Read-only census contract client.

    Usage:
        contract = CensusContractClient(rpc_url, "0xabc...")
        root = contract.get_census_root()
    """

    source_id = "contract"

    def __init__(
        self,
        rpc_url: str,
        address: str,
        *,
        web3: Optional[Web3] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """
        Args:
            rpc_url: JSON-RPC endpoint
            address: Census contract address
            web3: Pre-built Web3 instance (tests inject one here)
            timeout: RPC request timeout in seconds

        Raises:
            ConfigurationException: If the address is malformed
        """
        if not is_address(address):
            raise ConfigurationException(
                f"invalid contract address: {address}",
                setting="rpc.contract_address",
            )
        self.rpc_url = rpc_url
        self.address = to_checksum_address(address)
        self.w3 = web3 or Web3(Web3.HTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self.contract = self.w3.eth.contract(address=self.address, abi=CENSUS_ABI)

    def _call(self, function: str, *args: Any) -> Any:
        logger.debug(f"eth_call {function}{args} on {self.address}")
        try:
            return getattr(self.contract.functions, function)(*args).call()
        except (Web3Exception, requests.RequestException, ValueError) as e:
            raise TransportException(
                f"failed to call {function}: {e}",
                source=self.source_id,
                details={"function": function, "contract": self.address},
            ) from e

    def get_census_root(self) -> int:
        """Current census root."""
        return int(self._call("getCensusRoot"))

    def get_root(self) -> int:
        """RootSource protocol."""
        return self.get_census_root()

    def get_account_at(self, index: int) -> str:
        """Account stored at tree slot ``index`` (zero address when removed)."""
        return to_checksum_address(self._call("getAccountAt", index))

    def weight_of(self, address: str) -> int:
        """Current weight of ``address``."""
        return int(self._call("weightOf", to_checksum_address(address)))

    def compute_leaf(self, address: str) -> int:
        """Leaf the contract would store for ``address`` at its current weight."""
        return int(self._call("computeLeaf", to_checksum_address(address)))

    def get_delegations(self, address: str) -> tuple[int, int]:
        """(weight, leaf) for ``address``."""
        weight, leaf = self._call("getDelegations", to_checksum_address(address))
        return int(weight), int(leaf)

    def get_root_block_number(self, root: int) -> int:
        """Block in which ``root`` became the census root (0 if never)."""
        return int(self._call("getRootBlockNumber", root))


__all__ = [
    "CensusContractClient",
    "CENSUS_ABI",
]
