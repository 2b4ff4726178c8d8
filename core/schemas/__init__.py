"""
Census Schemas
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Error models and exceptions
from .errors import (
    CensusError,
    CensusException,
    ConfigurationException,
    ErrorCodes,
    EventClassificationException,
    LeafEncodingException,
    RootMismatchException,
    TransportException,
    TreeConsistencyException,
)

# Event schemas
from .events import WeightChangeEvent

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)

__all__ = [
    # Errors
    "CensusError",
    "CensusException",
    "ConfigurationException",
    "ErrorCodes",
    "EventClassificationException",
    "LeafEncodingException",
    "RootMismatchException",
    "TransportException",
    "TreeConsistencyException",
    # Events
    "WeightChangeEvent",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
