"""
Pytest fixtures for the bank file engine test suite.

Provides:
- The shipped bank registry (loaded once per session)
- A deterministic clock pinned to a Monday morning, bank-local time
- Log context cleanup between tests

No database, network or file-system fixtures: every layer under test is a
pure computation over in-memory data.
"""

import pytest

from bankfile_config import get_bank_registry
from bankfile_kernel.domain import DeterministicClock
from bankfile_kernel.logging_config import LogContext, reset_logging
from tests.factories import MONDAY_MORNING


@pytest.fixture(scope="session")
def registry():
    """The bank registry shipped with the package."""
    return get_bank_registry()


@pytest.fixture
def clock():
    return DeterministicClock(MONDAY_MORNING)


@pytest.fixture
def rajhi(registry):
    return registry.require("ALRAJHI")


@pytest.fixture(autouse=True)
def _clean_log_context():
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()
