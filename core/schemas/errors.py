"""
Census Schemas
File: errors.py

Purpose: Standard error taxonomy for census tree reconstruction.
Defines both Pydantic models for structured error reporting
and Python exceptions for control flow.

Every failure during a reconstruction run is terminal: a tree built on an
inconsistent premise cannot produce trustworthy proofs. Callers may rerun the
whole reconstruction (transport errors are flagged ``retryable``) but never
resume a partially built tree.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes."""

    # Encoding Errors
    LEAF_ENCODING_ERROR = "LEAF_ENCODING_ERROR"

    # Consistency Errors
    TREE_CONSISTENCY_ERROR = "TREE_CONSISTENCY_ERROR"
    EVENT_CLASSIFICATION_ERROR = "EVENT_CLASSIFICATION_ERROR"

    # Transport Errors
    TRANSPORT_ERROR = "TRANSPORT_ERROR"

    # Validation Errors
    ROOT_MISMATCH = "ROOT_MISMATCH"
    ACCOUNT_MISMATCH = "ACCOUNT_MISMATCH"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class CensusError(BaseModel):
    """
    Base error model for structured error reporting.

    Used by the CLI to emit machine-readable failures (``--json``).
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.ROOT_MISMATCH],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the whole reconstruction can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class CensusException(Exception):
    """
    Base exception for all census errors.

    Carries structured error information and can be converted
    to a CensusError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "CENSUS_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> CensusError:
        """Convert this exception to a CensusError model."""
        return CensusError(
            code=self.code,
            message=self.message,
            details=_jsonable(self.details),
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


def _jsonable(details: dict[str, Any]) -> dict[str, Any]:
    # Field elements overflow JSON number precision in most consumers
    out: dict[str, Any] = {}
    for key, value in details.items():
        if isinstance(value, int) and not isinstance(value, bool) and value.bit_length() > 53:
            out[key] = hex(value)
        else:
            out[key] = value
    return out


class LeafEncodingException(CensusException):
    """Raised when an (identity, weight) pair cannot be packed into a leaf."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.LEAF_ENCODING_ERROR,
            details=details,
            retryable=False,
        )


class TreeConsistencyException(CensusException):
    """
    Raised when a tree operation contradicts the current tree state.

    Examples: inserting the reserved empty leaf, inserting a duplicate leaf,
    updating an index that does not exist, or an event referencing a leaf
    the tree does not hold.
    """

    def __init__(
        self,
        message: str,
        index: int | None = None,
        leaf: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        if leaf is not None:
            full_details["leaf"] = leaf
        super().__init__(
            message=message,
            code=ErrorCodes.TREE_CONSISTENCY_ERROR,
            details=full_details,
            retryable=False,
        )


class EventClassificationException(CensusException):
    """Raised when an event's weight transition maps to no tree operation."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.EVENT_CLASSIFICATION_ERROR,
            details=details,
            retryable=False,
        )


class TransportException(CensusException):
    """Raised when the event log or the contract cannot be queried."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if source:
            full_details["source"] = source
        super().__init__(
            message=message,
            code=ErrorCodes.TRANSPORT_ERROR,
            details=full_details,
            retryable=True,
        )


class RootMismatchException(CensusException):
    """Raised when the reconstructed root differs from the authoritative root."""

    def __init__(
        self,
        expected_root: int,
        actual_root: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["expected_root"] = expected_root
        full_details["actual_root"] = actual_root
        super().__init__(
            message=f"root mismatch: expected {expected_root:#x}, got {actual_root:#x}",
            code=ErrorCodes.ROOT_MISMATCH,
            details=full_details,
            retryable=False,
        )
        self.expected_root = expected_root
        self.actual_root = actual_root


class ConfigurationException(CensusException):
    """Raised when required settings are missing or malformed."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if setting:
            full_details["setting"] = setting
        super().__init__(
            message=message,
            code=ErrorCodes.CONFIGURATION_ERROR,
            details=full_details,
            retryable=False,
        )
