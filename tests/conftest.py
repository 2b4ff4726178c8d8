"""
Pytest configuration and shared fixtures for census tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")
_contract = importlib.import_module("fixtures.contract_fixtures")

ADDR_A = _common.ADDR_A
ADDR_B = _common.ADDR_B
ADDR_C = _common.ADDR_C

make_history = _common.make_history
make_event_source = _common.make_event_source

FakeCensusContract = _contract.FakeCensusContract


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture(autouse=True)
def _isolate_census_env(monkeypatch):
    """Keep CENSUS_* variables from the developer's shell out of tests."""
    import os
    for name in list(os.environ):
        if name.startswith("CENSUS_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def ab_history():
    """
    Insert A, insert B, update B, remove A.

    Final tree: [0, pack(B, 3)].
    """
    return make_history([
        (ADDR_A, 0, 5),
        (ADDR_B, 0, 2),
        (ADDR_B, 2, 3),
        (ADDR_A, 5, 0),
    ])


@pytest.fixture
def ab_source(ab_history):
    """Event source serving the A/B history."""
    return make_event_source(ab_history)


@pytest.fixture
def three_account_history():
    """Three plain inserts."""
    return make_history([
        (ADDR_A, 0, 1),
        (ADDR_B, 0, 2),
        (ADDR_C, 0, 3),
    ])


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_check_passed():
    """Helper to assert a specific check passed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert checks[0].ok, f"Check '{check_id}' failed: {checks[0].message}"
    return _assert


@pytest.fixture
def assert_check_failed():
    """Helper to assert a specific check failed in VerificationResult."""
    def _assert(result, check_id: str):
        checks = [c for c in result.checks if c.check_id == check_id]
        assert len(checks) == 1, f"Expected check '{check_id}' not found in {[c.check_id for c in result.checks]}"
        assert not checks[0].ok, f"Check '{check_id}' unexpectedly passed"
    return _assert
