"""
Census Root Validator

Compares a reconstructed tree against the authoritative on-chain state.

The root check is the only gate callers must pass before trusting proofs
generated from the tree. The account cross-check is a diagnostic that
pinpoints which slot diverged after a mismatch.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.census.leaf import unpack_leaf
from core.merkle.lean_imt import LeanIMT
from core.schemas.errors import CensusException, ErrorCodes, RootMismatchException
from core.schemas.verification import CheckResult, VerificationResult
from core.sources.base import AccountSource


logger = logging.getLogger(__name__)


def _actual_root(tree: LeanIMT) -> int:
    return tree.root or 0


def validate_root(tree: LeanIMT, expected_root: int) -> None:
    """
    Fail unless the tree root equals ``expected_root``.

    An empty tree counts as root 0.

    Raises:
        RootMismatchException: Carrying both expected and actual root
    """
    actual = _actual_root(tree)
    if actual != expected_root:
        raise RootMismatchException(
            expected_root,
            actual,
            details={"size": tree.size, "depth": tree.depth},
        )
    logger.info(f"root validated: {actual:#x}")


def check_root(tree: LeanIMT, expected_root: int) -> CheckResult:
    """Non-raising form of validate_root."""
    try:
        validate_root(tree, expected_root)
    except RootMismatchException as e:
        return CheckResult.failed(
            check_id="root_match",
            message=e.message,
            details=e.to_error_model().details,
        )
    return CheckResult.passed(
        check_id="root_match",
        message=f"root matches contract: {expected_root:#x}",
        details={"root": hex(expected_root), "size": tree.size},
    )


def _check_slot(index: int, leaf: int, contract: AccountSource) -> CheckResult:
    check_id = f"account_{index}"
    if leaf == 0:
        return CheckResult.passed(
            check_id=check_id,
            message=f"slot {index} is empty (removed account)",
            details={"index": index},
            slot=index,
        )

    address, weight = unpack_leaf(leaf)
    on_chain_address = contract.get_account_at(index)
    if on_chain_address.lower() != address.lower():
        return CheckResult.failed(
            check_id=check_id,
            message=f"slot {index}: tree has {address}, contract has {on_chain_address}",
            slot=index,
            details={
                "index": index,
                "code": ErrorCodes.ACCOUNT_MISMATCH,
                "tree_address": address,
                "contract_address": on_chain_address,
            },
        )

    on_chain_weight = contract.weight_of(address)
    if on_chain_weight != weight:
        return CheckResult.failed(
            check_id=check_id,
            message=f"slot {index}: {address} has weight {weight} in tree, {on_chain_weight} on chain",
            slot=index,
            details={
                "index": index,
                "code": ErrorCodes.ACCOUNT_MISMATCH,
                "address": address,
                "tree_weight": weight,
                "contract_weight": on_chain_weight,
            },
        )

    return CheckResult.passed(
        check_id=check_id,
        message=f"slot {index}: {address} weight {weight}",
        slot=index,
        details={"index": index, "address": address, "weight": weight},
    )


def cross_check_accounts(
    tree: LeanIMT,
    contract: AccountSource,
    limit: Optional[int] = None,
) -> VerificationResult:
    """
    Compare each tree slot with the contract's account list.

    Args:
        tree: Reconstructed tree
        contract: Account lookups (getAccountAt / weightOf)
        limit: Check only the first ``limit`` slots

    Returns:
        VerificationResult with one check per slot. Transport failures stop
        the cross-check and are reported through ``error``.
    """
    leaves = tree.leaves
    if limit is not None:
        leaves = leaves[:limit]

    result = VerificationResult.success()
    for index, leaf in enumerate(leaves):
        try:
            check = _check_slot(index, leaf, contract)
        except CensusException as e:
            logger.error(f"account cross-check aborted at slot {index}: {e.message}")
            result.abort(e.to_error_model())
            break
        if not check.ok:
            logger.warning(check.message)
        result.add_check(check)

    logger.info(f"account cross-check: {result.passed_count}/{len(result.checks)} slots match")
    return result


__all__ = [
    "validate_root",
    "check_root",
    "cross_check_accounts",
]
