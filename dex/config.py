"""Pool configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass

from dex.constants import DEFAULT_FEE_BPS, FEE_BASE, PRICE_SCALE

_TRUTHY = ("true", "1", "yes")


@dataclass(frozen=True)
class PoolConfig:
    """Centralized configuration for a pool.

    Attributes:
        fee_bps: Swap fee in basis points (default: 30 = 0.3%)
        price_scale: Fixed-point scale of price() (default: 1e18)
        check_invariants: If True, verify I1/I2/I4 after every mutation and
            roll the operation back on a violation. Costs O(participants).
    """

    fee_bps: int = DEFAULT_FEE_BPS
    price_scale: int = PRICE_SCALE
    check_invariants: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.fee_bps < FEE_BASE:
            raise ValueError(f"fee_bps must be in [0, {FEE_BASE}): {self.fee_bps}")
        if self.price_scale <= 0:
            raise ValueError(f"price_scale must be positive: {self.price_scale}")

    @property
    def fee_multiplier(self) -> int:
        """Fee multiplier for swap math (10000 - fee_bps).

        For 30 bps this returns 9970, pricing 99.7% of every input.
        """
        return FEE_BASE - self.fee_bps

    @classmethod
    def from_env(cls) -> PoolConfig:
        """Build a config from environment variables.

        - DEX_FEE_BPS: Swap fee in basis points (default: 30)
        - DEX_CHECK_INVARIANTS: Enable invariant checks (default: false)
        """
        return cls(
            fee_bps=int(os.environ.get("DEX_FEE_BPS", str(DEFAULT_FEE_BPS))),
            check_invariants=os.environ.get("DEX_CHECK_INVARIANTS", "false").lower() in _TRUTHY,
        )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
