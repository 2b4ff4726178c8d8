"""
Census CLI - proof Command

Reconstruct the tree and print the inclusion proof for one account.

The root is validated against the contract before the proof is printed
when an RPC endpoint is configured; ``--root`` supplies the expected root
for offline use.

Usage:
    census proof <address> [--weight W] [--root HEX] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from typing import Any, Optional

from census_cli.config import build_contract, build_event_source, has_contract
from core.census.leaf import find_identity, pack_leaf
from core.merkle import LeanIMT
from core.schemas.errors import CensusException, RootMismatchException, TreeConsistencyException
from orchestrator import TreeReconstructor, validate_root


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def locate_leaf(tree: LeanIMT, address: str, weight: Optional[int] = None) -> tuple[int, int]:
    """
    Find the slot holding ``address``.

    With ``weight`` the exact leaf is looked up; otherwise the tree is
    scanned for the account at any weight.

    Returns:
        (index, weight)

    Raises:
        TreeConsistencyException: If the account is not in the tree
    """
    if weight is not None:
        leaf = pack_leaf(address, weight)
        index = tree.index_of(leaf)
        if index is None:
            raise TreeConsistencyException(
                f"no leaf for {address} with weight {weight}",
                leaf=leaf,
            )
        return index, weight

    found = find_identity(tree.leaves, address)
    if found is None:
        raise TreeConsistencyException(
            f"account {address} is not in the census",
            details={"account": address},
        )
    return found


def build_report(tree: LeanIMT, address: str, index: int, weight: int, validated: bool) -> dict[str, Any]:
    proof = tree.generate_proof(index)
    report = {
        "account": address,
        "weight": weight,
        "validated": validated,
        **proof.to_dict(),
    }
    # proof.index holds path bits; report the slot as well
    report["path_bits"] = report["index"]
    report["index"] = index
    report["verified"] = LeanIMT.verify_proof(proof)
    return report


def print_report_human(report: dict[str, Any]) -> None:
    print(f"account:  {report['account']}")
    print(f"weight:   {report['weight']}")
    print(f"leaf:     {report['leaf']}")
    print(f"index:    {report['index']}")
    print(f"root:     {report['root']}{'' if report['validated'] else ' (not validated)'}")
    print(f"siblings ({len(report['siblings'])}):")
    for sibling in report["siblings"]:
        print(f"  {sibling}")


def _parse_root(value: str) -> int:
    return int(value, 0)


def proof_cmd(args: Namespace) -> int:
    """
    Execute the proof command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config
    output_json = args.json

    try:
        source = build_event_source(config, getattr(args, "events", None))
        result = TreeReconstructor(
            source,
            page_size=config.reconstruction.page_size,
            skip_noop_events=config.reconstruction.skip_noop_events,
            progress_every=config.reconstruction.progress_every,
        ).reconstruct()

        expected_root = None
        if args.root:
            expected_root = _parse_root(args.root)
        elif has_contract(config):
            expected_root = build_contract(config).get_root()
        else:
            logger.warning("no contract configured; proof root is not validated")

        if expected_root is not None:
            validate_root(result.tree, expected_root)

        index, weight = locate_leaf(result.tree, args.address, args.weight)
        report = build_report(
            result.tree,
            args.address,
            index,
            weight,
            validated=expected_root is not None,
        )
    except RootMismatchException as e:
        _print_error(e, output_json)
        return EXIT_VERIFICATION_FAILED
    except CensusException as e:
        _print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    if output_json:
        print(json.dumps(report, indent=2))
    else:
        print_report_human(report)
    return EXIT_SUCCESS


def _print_error(e: CensusException, output_json: bool) -> None:
    if output_json:
        print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
    else:
        print(f"Error: {e.message}", file=sys.stderr)
