"""Two-asset constant product liquidity pool.

The pool owns two reserves, a share supply and a participant -> shares
mapping. Four operations mutate it (add_liquidity, remove_liquidity,
swap_a_for_b, swap_b_for_a); everything else is a read.

Every mutating operation is atomic:
1. Validate inputs and compute all amounts against the current state
2. Inside a rollback scope, perform transfers and write the new state
3. On any failure restore the saved state and reverse completed transfers
4. Publish the event record once the mutation has committed

All of this runs under the pool lock, so no operation observes another's
partial update.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from functools import partial

import structlog

from dex.config import DEFAULT_POOL_CONFIG, PoolConfig
from dex.custody import AssetCustody
from dex.errors import (
    InsufficientShares,
    InvalidAmount,
    InvariantViolation,
    ReserveOverflow,
    RollbackError,
    ZeroMintedShares,
    ZeroOutput,
)
from dex.events import EventSink, NullSink
from dex.invariants import assert_invariants
from dex.math import amounts_for_shares, get_amount_out, shares_for_deposit, spot_price
from dex.models.events import LiquidityAdded, LiquidityRemoved, PoolEvent, Swap
from dex.models.snapshot import PoolSnapshot
from dex.safe_int import S, SafeInt, Uint256Overflow

logger = structlog.get_logger()


@dataclass
class _PoolState:
    reserve_a: int = 0
    reserve_b: int = 0
    total_shares: int = 0
    # Zero balances are removed, never stored
    shares: dict[str, int] = field(default_factory=dict)

    def copy(self) -> _PoolState:
        return replace(self, shares=dict(self.shares))


class _UndoLog:
    """Compensating transfers for the transfers an operation has completed."""

    def __init__(self) -> None:
        self._steps: list[tuple[str, Callable[[], None]]] = []

    def record(self, description: str, compensate: Callable[[], None]) -> None:
        self._steps.append((description, compensate))

    def unwind(self) -> list[Exception]:
        """Run compensations newest first; return the ones that failed."""
        failures: list[Exception] = []
        for description, compensate in reversed(self._steps):
            try:
                compensate()
            except Exception as exc:
                logger.error("rollback_transfer_failed", step=description, error=str(exc))
                failures.append(exc)
        self._steps.clear()
        return failures


def _require_participant(participant: str) -> None:
    if not isinstance(participant, str) or not participant:
        raise ValueError(f"Participant must be a non-empty string: {participant!r}")


def _require_amount(name: str, amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError(f"{name} must be int, got {type(amount).__name__}")
    if amount <= 0:
        raise InvalidAmount(f"{name} must be positive: {amount}")


def _checked(name: str, value: SafeInt) -> int:
    try:
        return value.to_uint256()
    except Uint256Overflow as exc:
        raise ReserveOverflow(f"{name} would exceed uint256: {value}") from exc


class Pool:
    """Constant product pool for one asset pair.

    Share minting for deposits into a funded pool is driven by the A side
    only: floor(amount_a * total_shares / reserve_a). Depositing off the
    current reserve ratio is not corrected or refunded; any excess becomes a
    donation to existing holders. There is no slippage or ratio check, so
    callers must size deposits themselves.
    """

    def __init__(
        self,
        custody_a: AssetCustody,
        custody_b: AssetCustody,
        *,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        events: EventSink | None = None,
    ) -> None:
        if custody_a.asset == custody_b.asset:
            raise ValueError(f"Pool assets must differ: {custody_a.asset}")
        self._custody_a = custody_a
        self._custody_b = custody_b
        self._config = config
        self._events: EventSink = events if events is not None else NullSink()
        self._state = _PoolState()
        # Re-entrant so event sinks may read the pool from publish()
        self._lock = threading.RLock()

    # --- Identity and configuration ---

    @property
    def asset_a(self) -> str:
        return self._custody_a.asset

    @property
    def asset_b(self) -> str:
        return self._custody_b.asset

    @property
    def pair(self) -> str:
        return f"{self.asset_a}/{self.asset_b}"

    @property
    def config(self) -> PoolConfig:
        return self._config

    # --- Reads ---

    def reserves(self) -> tuple[int, int]:
        """Current (reserve_a, reserve_b)."""
        with self._lock:
            return self._state.reserve_a, self._state.reserve_b

    @property
    def total_shares(self) -> int:
        with self._lock:
            return self._state.total_shares

    def shares_of(self, participant: str) -> int:
        with self._lock:
            return self._state.shares.get(participant, 0)

    def price(self) -> int:
        """reserve_b * price_scale // reserve_a, or 0 when the pool is empty.

        Zero is a "no liquidity" sentinel, never a real price.
        """
        with self._lock:
            return spot_price(
                self._state.reserve_a, self._state.reserve_b, self._config.price_scale
            )

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Price a swap against arbitrary reserves using this pool's fee.

        Raises:
            EmptyPool: If either reserve is zero
        """
        return get_amount_out(amount_in, reserve_in, reserve_out, self._config.fee_multiplier)

    def quote_out(self, asset_in: str, amount_in: int) -> int:
        """Output a swap of `amount_in` of `asset_in` would receive right now.

        Raises:
            ValueError: If asset_in is not one of the pool's assets
            EmptyPool: If the pool has no liquidity
        """
        if not isinstance(amount_in, int) or isinstance(amount_in, bool):
            raise TypeError(f"amount_in must be int, got {type(amount_in).__name__}")
        with self._lock:
            reserve_in, reserve_out = self._directed_reserves(asset_in)
            return self.get_amount_out(amount_in, reserve_in, reserve_out)

    def snapshot(self) -> PoolSnapshot:
        """Validated copy of the current accounting state."""
        with self._lock:
            return PoolSnapshot(
                asset_a=self.asset_a,
                asset_b=self.asset_b,
                reserve_a=self._state.reserve_a,
                reserve_b=self._state.reserve_b,
                total_shares=self._state.total_shares,
                shares=dict(self._state.shares),
            )

    # --- Liquidity ---

    def add_liquidity(self, provider: str, amount_a: int, amount_b: int) -> int:
        """Deposit both assets and mint shares to `provider`.

        Returns:
            Number of shares minted

        Raises:
            InvalidAmount: If either amount is not positive
            ZeroMintedShares: If the deposit is too small to mint a share
            ReserveOverflow: If the new reserves would exceed uint256
            TransferError: If either pull fails (nothing is kept)
        """
        _require_participant(provider)
        _require_amount("amount_a", amount_a)
        _require_amount("amount_b", amount_b)

        with self._lock:
            state = self._state
            minted = shares_for_deposit(amount_a, amount_b, state.reserve_a, state.total_shares)
            if minted == 0:
                raise ZeroMintedShares(
                    f"Deposit ({amount_a}, {amount_b}) mints no shares against "
                    f"reserve_a={state.reserve_a} total_shares={state.total_shares}"
                )
            reserve_a = _checked("reserve_a", S(state.reserve_a) + amount_a)
            reserve_b = _checked("reserve_b", S(state.reserve_b) + amount_b)
            total_shares = _checked("total_shares", S(state.total_shares) + minted)

            with self._atomic("add_liquidity") as undo:
                self._pull(undo, self._custody_a, provider, amount_a)
                self._pull(undo, self._custody_b, provider, amount_b)
                state = self._state
                state.reserve_a = reserve_a
                state.reserve_b = reserve_b
                state.total_shares = total_shares
                state.shares[provider] = state.shares.get(provider, 0) + minted

            logger.info(
                "liquidity_added",
                pair=self.pair,
                provider=provider,
                amount_a=amount_a,
                amount_b=amount_b,
                shares_minted=minted,
                total_shares=total_shares,
            )
            self._publish(
                LiquidityAdded(
                    provider=provider, amount_a=amount_a, amount_b=amount_b, shares_minted=minted
                )
            )
        return minted

    def remove_liquidity(self, provider: str, shares_burned: int) -> tuple[int, int]:
        """Burn `provider`'s shares for a pro-rata cut of both reserves.

        Burning every outstanding share empties the pool exactly; the next
        deposit then sets a fresh initial price.

        Returns:
            (amount_a, amount_b) paid out

        Raises:
            InvalidAmount: If shares_burned is not positive
            InsufficientShares: If provider holds fewer shares
            TransferError: If either push fails (state is restored)
        """
        _require_participant(provider)
        _require_amount("shares_burned", shares_burned)

        with self._lock:
            state = self._state
            held = state.shares.get(provider, 0)
            if held < shares_burned:
                raise InsufficientShares(provider, shares_burned, held)

            amount_a, amount_b = amounts_for_shares(
                shares_burned, state.reserve_a, state.reserve_b, state.total_shares
            )

            with self._atomic("remove_liquidity") as undo:
                state = self._state
                state.reserve_a = (S(state.reserve_a) - amount_a).value
                state.reserve_b = (S(state.reserve_b) - amount_b).value
                state.total_shares = (S(state.total_shares) - shares_burned).value
                remaining = held - shares_burned
                if remaining:
                    state.shares[provider] = remaining
                else:
                    del state.shares[provider]
                self._push(undo, self._custody_a, provider, amount_a)
                self._push(undo, self._custody_b, provider, amount_b)

            logger.info(
                "liquidity_removed",
                pair=self.pair,
                provider=provider,
                amount_a=amount_a,
                amount_b=amount_b,
                shares_burned=shares_burned,
                total_shares=self._state.total_shares,
            )
            self._publish(
                LiquidityRemoved(
                    provider=provider,
                    amount_a=amount_a,
                    amount_b=amount_b,
                    shares_burned=shares_burned,
                )
            )
        return amount_a, amount_b

    # --- Swaps ---

    def swap_a_for_b(self, trader: str, amount_in: int) -> int:
        """Sell `amount_in` of asset A for asset B. Returns the B received."""
        return self._swap(trader, amount_in, a_to_b=True)

    def swap_b_for_a(self, trader: str, amount_in: int) -> int:
        """Sell `amount_in` of asset B for asset A. Returns the A received."""
        return self._swap(trader, amount_in, a_to_b=False)

    def _swap(self, trader: str, amount_in: int, *, a_to_b: bool) -> int:
        """Exact-input swap in either direction.

        Raises:
            InvalidAmount: If amount_in is not positive
            EmptyPool: If the pool has no liquidity
            ZeroOutput: If the output rounds down to zero
            ReserveOverflow: If the input reserve would exceed uint256
            TransferError: If the pull or push fails (state is restored)
        """
        _require_participant(trader)
        _require_amount("amount_in", amount_in)

        if a_to_b:
            custody_in, custody_out = self._custody_a, self._custody_b
        else:
            custody_in, custody_out = self._custody_b, self._custody_a

        with self._lock:
            reserve_in, reserve_out = self._directed_reserves(custody_in.asset)
            amount_out = self.get_amount_out(amount_in, reserve_in, reserve_out)
            if amount_out == 0:
                raise ZeroOutput(
                    f"Swap of {amount_in} {custody_in.asset} rounds to zero "
                    f"against reserves ({reserve_in}, {reserve_out})"
                )
            new_reserve_in = _checked(f"reserve of {custody_in.asset}", S(reserve_in) + amount_in)
            new_reserve_out = (S(reserve_out) - amount_out).value

            with self._atomic("swap") as undo:
                self._pull(undo, custody_in, trader, amount_in)
                state = self._state
                if a_to_b:
                    state.reserve_a, state.reserve_b = new_reserve_in, new_reserve_out
                else:
                    state.reserve_b, state.reserve_a = new_reserve_in, new_reserve_out
                if self._config.check_invariants and (
                    new_reserve_in * new_reserve_out < reserve_in * reserve_out
                ):
                    raise InvariantViolation(
                        [
                            f"constant product decreased: {reserve_in}*{reserve_out} -> "
                            f"{new_reserve_in}*{new_reserve_out}"
                        ]
                    )
                self._push(undo, custody_out, trader, amount_out)

            logger.info(
                "swap_executed",
                pair=self.pair,
                trader=trader,
                asset_in=custody_in.asset,
                asset_out=custody_out.asset,
                amount_in=amount_in,
                amount_out=amount_out,
            )
            self._publish(
                Swap(
                    trader=trader,
                    asset_in=custody_in.asset,
                    asset_out=custody_out.asset,
                    amount_in=amount_in,
                    amount_out=amount_out,
                )
            )
        return amount_out

    # --- Internals ---

    def _directed_reserves(self, asset_in: str) -> tuple[int, int]:
        """Get reserves ordered as (reserve_in, reserve_out)."""
        if asset_in == self.asset_a:
            return self._state.reserve_a, self._state.reserve_b
        if asset_in == self.asset_b:
            return self._state.reserve_b, self._state.reserve_a
        raise ValueError(f"Asset {asset_in} not in pool {self.pair}")

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[_UndoLog]:
        """Rollback scope for one mutating operation. Caller holds the lock."""
        saved = self._state.copy()
        undo = _UndoLog()
        try:
            yield undo
            if self._config.check_invariants:
                assert_invariants(self._raw_snapshot())
        except BaseException as exc:
            self._state = saved
            failures = undo.unwind()
            logger.warning(
                "pool_operation_rolled_back",
                pair=self.pair,
                operation=operation,
                error=type(exc).__name__,
                detail=str(exc),
            )
            if failures and isinstance(exc, Exception):
                raise RollbackError(operation, failures) from exc
            raise

    def _pull(self, undo: _UndoLog, custody: AssetCustody, source: str, amount: int) -> None:
        custody.pull(source, amount)
        undo.record(
            f"refund {amount} {custody.asset} to {source}", partial(custody.push, source, amount)
        )

    def _push(self, undo: _UndoLog, custody: AssetCustody, recipient: str, amount: int) -> None:
        custody.push(recipient, amount)
        undo.record(
            f"reclaim {amount} {custody.asset} from {recipient}",
            partial(custody.pull, recipient, amount),
        )

    def _raw_snapshot(self) -> PoolSnapshot:
        # Unvalidated so that out-of-range values reach the invariant checker
        return PoolSnapshot.model_construct(
            asset_a=self.asset_a,
            asset_b=self.asset_b,
            reserve_a=self._state.reserve_a,
            reserve_b=self._state.reserve_b,
            total_shares=self._state.total_shares,
            shares=dict(self._state.shares),
        )

    def _publish(self, event: PoolEvent) -> None:
        # Already committed: a failing sink is logged, never raised to the caller
        try:
            self._events.publish(event)
        except Exception:
            logger.exception("event_publish_failed", pair=self.pair, kind=event.kind)
