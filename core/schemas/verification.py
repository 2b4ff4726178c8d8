"""
Census Schemas
File: verification.py

Purpose: Outcome of comparing a reconstructed tree with the contract.
The root comparison yields a single CheckResult; the account cross-check
yields a VerificationResult holding one CheckResult per tree slot.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .errors import CensusError


CheckSeverity = Literal["info", "error"]


class CheckResult(BaseModel):
    """One comparison between tree state and on-chain state."""

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(..., min_length=1, description="e.g. root_match, account_3")
    ok: bool
    severity: CheckSeverity
    message: str
    slot: Optional[int] = Field(default=None, ge=0, description="Tree slot the check covers")
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
        slot: Optional[int] = None,
    ) -> "CheckResult":
        return cls(
            check_id=check_id,
            ok=True,
            severity="info",
            message=message,
            slot=slot,
            details=details or {},
        )

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
        slot: Optional[int] = None,
    ) -> "CheckResult":
        return cls(
            check_id=check_id,
            ok=False,
            severity="error",
            message=message,
            slot=slot,
            details=details or {},
        )


class VerificationResult(BaseModel):
    """
    Per-slot results of an account cross-check.

    ``error`` is set when the check could not run to completion (an RPC
    failure part way through); ``checks`` then covers only the slots
    compared before the failure.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool
    checks: list[CheckResult] = Field(default_factory=list)
    error: Optional[CensusError] = None

    @property
    def passed_count(self) -> int:
        return sum(1 for check in self.checks if check.ok)

    @property
    def mismatched_slots(self) -> list[int]:
        """Slots whose check failed, in tree order."""
        return [c.slot for c in self.checks if not c.ok and c.slot is not None]

    def get_failed_checks(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.ok]

    @classmethod
    def success(cls) -> "VerificationResult":
        """Empty result that stays ok until a failing check is added."""
        return cls(ok=True)

    def add_check(self, check: CheckResult) -> None:
        self.checks.append(check)
        if not check.ok:
            self.ok = False

    def abort(self, error: CensusError) -> None:
        """Record the error that stopped the check."""
        self.ok = False
        self.error = error
