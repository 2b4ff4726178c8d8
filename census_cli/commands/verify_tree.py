"""
Census CLI - verify-tree Command

Rebuild the census tree from the event history and check it against the
on-chain root:
- Reconstruct from the subgraph (or a recorded events file)
- Compare the root with getCensusRoot()
- Optionally cross-check slots against getAccountAt()/weightOf()

Usage:
    census verify-tree [--show-tree] [--check-accounts [N]] [--json]
"""

from __future__ import annotations

import json
import logging
import sys
import time
from argparse import Namespace
from dataclasses import asdict, dataclass, field
from typing import Any, Optional

from census_cli.config import build_contract, build_event_source
from core.census.leaf import unpack_leaf
from core.schemas.errors import CensusException
from core.schemas.verification import CheckResult, VerificationResult
from orchestrator import ReconstructionResult, TreeReconstructor, check_root, cross_check_accounts


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

_RULE = "━" * 53


@dataclass
class VerifyTreeSummary:
    """Summary of a tree verification for CLI output."""
    reconstructed_root: str = ""
    onchain_root: str = ""
    root_ok: bool = False
    size: int = 0
    depth: int = 0
    active_accounts: int = 0
    empty_slots: int = 0
    events_applied: int = 0
    events_skipped: int = 0
    duration_s: float = 0.0
    accounts_ok: bool | None = None
    accounts_checked: int = 0
    leaves: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if self.accounts_ok is None:
            del d["accounts_ok"]
            del d["accounts_checked"]
        if not d["leaves"]:
            del d["leaves"]
        if not d["errors"]:
            del d["errors"]
        return d

    @property
    def all_ok(self) -> bool:
        """Check if all verifications passed."""
        if not self.root_ok:
            return False
        if self.accounts_ok is not None and not self.accounts_ok:
            return False
        return True


def leaf_rows(result: ReconstructionResult) -> list[dict[str, Any]]:
    """One row per tree slot: index, address and weight (None when empty)."""
    rows = []
    for index, leaf in enumerate(result.tree.leaves):
        if leaf == 0:
            rows.append({"index": index, "address": None, "weight": 0})
        else:
            address, weight = unpack_leaf(leaf)
            rows.append({"index": index, "address": address, "weight": weight})
    return rows


def build_summary(
    result: ReconstructionResult,
    onchain_root: int,
    root_check: CheckResult,
    duration_s: float,
    accounts: Optional[VerificationResult] = None,
    show_tree: bool = False,
) -> VerifyTreeSummary:
    """Build a VerifyTreeSummary from reconstruction and check results."""
    summary = VerifyTreeSummary(
        reconstructed_root=hex(result.root),
        onchain_root=hex(onchain_root),
        root_ok=root_check.ok,
        size=result.size,
        depth=result.tree.depth,
        active_accounts=result.active_slots,
        empty_slots=result.empty_slots,
        events_applied=result.events_applied,
        events_skipped=result.events_skipped,
        duration_s=round(duration_s, 3),
    )

    if not root_check.ok:
        summary.errors.append(root_check.message)

    if accounts is not None:
        summary.accounts_ok = accounts.ok
        summary.accounts_checked = len(accounts.checks)
        for check in accounts.get_failed_checks():
            summary.errors.append(check.message)
        if accounts.error is not None:
            summary.errors.append(f"account cross-check aborted: {accounts.error.message}")

    if show_tree:
        summary.leaves = leaf_rows(result)

    return summary


def print_summary_human(summary: VerifyTreeSummary) -> None:
    """Print summary in human-readable format."""
    print("Tree Statistics")
    print(_RULE)
    print(f"   Reconstructed root:  {summary.reconstructed_root}")
    print(f"   Tree size:           {summary.size} leaves")
    print(f"   Tree depth:          {summary.depth} levels")
    print(f"   Reconstruction time: {summary.duration_s:.3f}s")
    print(f"   Active accounts:     {summary.active_accounts}")
    print(f"   Empty slots:         {summary.empty_slots}")
    print()
    print("Validating Root")
    print(_RULE)
    if summary.root_ok:
        print("   ✓ Root matches")
        print(f"   Root: {summary.onchain_root}")
    else:
        print("   ✗ ROOT MISMATCH")
        print(f"   Expected (on-chain): {summary.onchain_root}")
        print(f"   Got (reconstructed): {summary.reconstructed_root}")

    if summary.accounts_ok is not None:
        print()
        print("Account Cross-Check")
        print(_RULE)
        status = "✓" if summary.accounts_ok else "✗"
        print(f"   {status} {summary.accounts_checked} slots checked")

    if summary.leaves:
        print()
        print("Tree Structure")
        print(_RULE)
        for row in summary.leaves:
            if row["address"] is None:
                print(f"   [{row['index']:3d}] EMPTY (removed account)")
            else:
                print(f"   [{row['index']:3d}] {row['address']} (weight: {row['weight']})")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")


def print_summary_json(summary: VerifyTreeSummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def print_error(e: CensusException, output_json: bool) -> None:
    if output_json:
        print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
    else:
        print(f"Error: {e.message}", file=sys.stderr)


def verify_tree_cmd(args: Namespace) -> int:
    """
    Execute the verify-tree command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    config = args.runtime_config
    output_json = args.json

    try:
        source = build_event_source(config, getattr(args, "events", None))
        contract = build_contract(config)

        onchain_root = contract.get_root()
        logger.info(f"on-chain root: {onchain_root:#x}")

        started = time.monotonic()
        reconstructor = TreeReconstructor(
            source,
            page_size=config.reconstruction.page_size,
            skip_noop_events=config.reconstruction.skip_noop_events,
            progress_every=config.reconstruction.progress_every,
        )
        result = reconstructor.reconstruct()
        duration = time.monotonic() - started
    except CensusException as e:
        print_error(e, output_json)
        return EXIT_RUNTIME_ERROR

    root_check = check_root(result.tree, onchain_root)

    accounts = None
    if args.check_accounts is not None:
        limit = args.check_accounts if args.check_accounts > 0 else None
        accounts = cross_check_accounts(result.tree, contract, limit=limit)

    summary = build_summary(
        result,
        onchain_root,
        root_check,
        duration,
        accounts=accounts,
        show_tree=args.show_tree,
    )

    if output_json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    if summary.all_ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS

    if accounts is not None and accounts.error is not None and root_check.ok:
        return EXIT_RUNTIME_ERROR

    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
