"""Test helpers module for shared test utilities.

- constants: Participant and token identifiers, common amounts
- factories: Pool factory wired to in-memory ledgers
"""

from tests.helpers.constants import (
    ALICE,
    BOB,
    ONE,
    OWNER,
    POOL,
    STARTING_BALANCE,
    TOKEN_A,
    TOKEN_B,
)
from tests.helpers.factories import PoolHarness, make_pool

__all__ = [
    # Constants
    "ONE",
    "TOKEN_A",
    "TOKEN_B",
    "POOL",
    "OWNER",
    "ALICE",
    "BOB",
    "STARTING_BALANCE",
    # Factories
    "PoolHarness",
    "make_pool",
]
