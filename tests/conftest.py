"""Pytest configuration and fixtures."""

import pytest
import structlog

from dex.events import EventLog
from dex.pool import Pool
from tests.helpers import ONE, OWNER, PoolHarness, make_pool


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog.configure() a test performs."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def harness() -> PoolHarness:
    """Empty pool with funded participants and invariant checking on."""
    return make_pool()


@pytest.fixture
def pool(harness: PoolHarness) -> Pool:
    return harness.pool


@pytest.fixture
def events(harness: PoolHarness) -> EventLog:
    return harness.events


@pytest.fixture
def funded(harness: PoolHarness) -> PoolHarness:
    """Pool seeded by OWNER with 100/100."""
    harness.pool.add_liquidity(OWNER, 100 * ONE, 100 * ONE)
    return harness
