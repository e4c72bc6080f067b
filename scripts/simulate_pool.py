#!/usr/bin/env python3
"""CLI script for running a seeded constant product pool scenario.

Usage:
    # 100/100 pool, 50 random swaps of up to 5 tokens
    python scripts/simulate_pool.py --seed-a 100 --seed-b 100 --swaps 50 --swap-size 5

    # Zero-fee pool with debug logging
    python scripts/simulate_pool.py --fee-bps 0 -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path

import structlog

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dex.config import PoolConfig  # noqa: E402
from dex.simulation import ONE, run_simulation  # noqa: E402

logger = structlog.get_logger()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Simulate liquidity provision and random swaps on a constant product pool",
    )
    parser.add_argument(
        "--seed-a",
        type=int,
        default=100,
        help="Initial deposit of asset A in whole tokens (default: 100)",
    )
    parser.add_argument(
        "--seed-b",
        type=int,
        default=100,
        help="Initial deposit of asset B in whole tokens (default: 100)",
    )
    parser.add_argument(
        "--swaps",
        type=int,
        default=20,
        help="Number of random swaps (default: 20)",
    )
    parser.add_argument(
        "--swap-size",
        type=int,
        default=5,
        help="Maximum swap input in whole tokens (default: 5)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for the swap sequence (default: 0)",
    )
    parser.add_argument(
        "--fee-bps",
        type=int,
        default=30,
        help="Swap fee in basis points (default: 30)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )

    if args.seed_a <= 0 or args.seed_b <= 0 or args.swap_size <= 0 or args.swaps < 0:
        print("Error: seed amounts and swap size must be positive", file=sys.stderr)
        return 1

    try:
        config = PoolConfig(fee_bps=args.fee_bps)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    result = run_simulation(
        args.seed_a * ONE,
        args.seed_b * ONE,
        args.swaps,
        args.swap_size * ONE,
        rng_seed=args.seed,
        config=config,
    )

    print(json.dumps(result.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
