"""Seeded pool scenario: provide liquidity, trade randomly, withdraw everything.

Used by scripts/simulate_pool.py and handy for eyeballing fee accrual: the
liquidity provider ends with more value than they deposited once swaps have
paid fees into the reserves.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any

import structlog

from dex.config import PoolConfig
from dex.custody import LedgerCustody, TokenLedger
from dex.errors import ZeroOutput
from dex.events import EventLog
from dex.pool import Pool

logger = structlog.get_logger()

ONE = 10**18
POOL_ACCOUNT = "pool"
PROVIDER = "provider"
TRADER = "trader"


@dataclass
class SimulationResult:
    """Outcome of a scenario run."""

    initial: dict[str, Any]
    final: dict[str, Any]
    k_initial: int
    k_before_withdrawal: int
    deposited: tuple[int, int]
    withdrawn: tuple[int, int]
    swaps_executed: int
    swaps_skipped: int
    k_history: list[int] = field(default_factory=list)

    @property
    def k_monotonic(self) -> bool:
        return all(a <= b for a, b in zip(self.k_history, self.k_history[1:]))

    def to_dict(self) -> dict[str, Any]:
        return {
            "initial": self.initial,
            "final": self.final,
            "k_initial": str(self.k_initial),
            "k_before_withdrawal": str(self.k_before_withdrawal),
            "k_monotonic": self.k_monotonic,
            "deposited": [str(x) for x in self.deposited],
            "withdrawn": [str(x) for x in self.withdrawn],
            "swaps_executed": self.swaps_executed,
            "swaps_skipped": self.swaps_skipped,
        }


def run_simulation(
    seed_a: int,
    seed_b: int,
    swaps: int,
    max_swap: int,
    *,
    rng_seed: int = 0,
    config: PoolConfig | None = None,
) -> SimulationResult:
    """Run the scenario on a fresh pool backed by in-memory ledgers.

    Args:
        seed_a: Initial deposit of asset A (base units)
        seed_b: Initial deposit of asset B (base units)
        swaps: Number of random swaps to attempt
        max_swap: Upper bound of a single swap input (base units)
        rng_seed: Seed for the swap sequence
        config: Pool configuration (default: PoolConfig())

    Returns:
        SimulationResult with snapshots, k history and withdrawn amounts
    """
    ledger_a = TokenLedger("TKA")
    ledger_b = TokenLedger("TKB")
    ledger_a.mint(PROVIDER, seed_a)
    ledger_b.mint(PROVIDER, seed_b)
    ledger_a.mint(TRADER, max_swap * swaps)
    ledger_b.mint(TRADER, max_swap * swaps)

    events = EventLog()
    pool = Pool(
        LedgerCustody(ledger_a, POOL_ACCOUNT),
        LedgerCustody(ledger_b, POOL_ACCOUNT),
        config=config or PoolConfig(),
        events=events,
    )

    minted = pool.add_liquidity(PROVIDER, seed_a, seed_b)
    initial = pool.snapshot()
    k_history = [initial.k]

    rng = random.Random(rng_seed)
    skipped = 0
    for _ in range(swaps):
        amount = rng.randint(1, max_swap)
        try:
            if rng.random() < 0.5:
                pool.swap_a_for_b(TRADER, amount)
            else:
                pool.swap_b_for_a(TRADER, amount)
        except ZeroOutput:
            skipped += 1
            continue
        k_history.append(pool.snapshot().k)

    withdrawn = pool.remove_liquidity(PROVIDER, minted)
    final = pool.snapshot()

    logger.info(
        "simulation_complete",
        swaps=len(events.swaps),
        skipped=skipped,
        k_initial=initial.k,
        k_before_withdrawal=k_history[-1],
    )

    return SimulationResult(
        initial=initial.model_dump(mode="json"),
        final=final.model_dump(mode="json"),
        k_initial=initial.k,
        k_before_withdrawal=k_history[-1],
        deposited=(seed_a, seed_b),
        withdrawn=withdrawn,
        swaps_executed=len(events.swaps),
        swaps_skipped=skipped,
        k_history=k_history,
    )
