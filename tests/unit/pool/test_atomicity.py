"""Tests for all-or-nothing behaviour when transfers fail."""

import pytest

from dex.config import PoolConfig
from dex.constants import UINT256_MAX
from dex.custody import LedgerCustody, TokenLedger
from dex.errors import ReserveOverflow, RollbackError, TransferError
from dex.events import EventLog
from dex.pool import Pool
from tests.helpers import ALICE, ONE, OWNER, POOL, STARTING_BALANCE, TOKEN_A, TOKEN_B


class FlakyCustody(LedgerCustody):
    """LedgerCustody that refuses chosen calls.

    fail_pulls / fail_pushes hold 1-based call numbers that should fail.
    """

    def __init__(self, ledger, account, fail_pulls=(), fail_pushes=()):
        super().__init__(ledger, account)
        self.fail_pulls = set(fail_pulls)
        self.fail_pushes = set(fail_pushes)
        self.pulls = 0
        self.pushes = 0

    def pull(self, source, amount):
        self.pulls += 1
        if self.pulls in self.fail_pulls:
            raise TransferError(self.asset, source, amount, "pull refused")
        super().pull(source, amount)

    def push(self, recipient, amount):
        self.pushes += 1
        if self.pushes in self.fail_pushes:
            raise TransferError(self.asset, recipient, amount, "push refused")
        super().push(recipient, amount)


def build(custody_a_kwargs=None, custody_b_kwargs=None):
    ledger_a, ledger_b = TokenLedger(TOKEN_A), TokenLedger(TOKEN_B)
    for account in (OWNER, ALICE):
        ledger_a.mint(account, STARTING_BALANCE)
        ledger_b.mint(account, STARTING_BALANCE)
    custody_a = FlakyCustody(ledger_a, POOL, **(custody_a_kwargs or {}))
    custody_b = FlakyCustody(ledger_b, POOL, **(custody_b_kwargs or {}))
    events = EventLog()
    pool = Pool(custody_a, custody_b, config=PoolConfig(check_invariants=True), events=events)
    return pool, ledger_a, ledger_b, custody_a, custody_b, events


class TestTransferFailures:
    """A failed transfer leaves pool state and balances untouched."""

    def test_second_pull_failure_refunds_first(self):
        """If pulling B fails, the A already pulled is returned."""
        pool, ledger_a, ledger_b, _, _, events = build(custody_b_kwargs={"fail_pulls": [1]})
        with pytest.raises(TransferError):
            pool.add_liquidity(OWNER, 10 * ONE, 10 * ONE)
        assert pool.reserves() == (0, 0)
        assert pool.total_shares == 0
        assert ledger_a.balance_of(OWNER) == STARTING_BALANCE
        assert ledger_a.balance_of(POOL) == 0
        assert len(events) == 0

    def test_insufficient_balance_aborts_deposit(self):
        """A provider without enough B cannot deposit."""
        pool, ledger_a, _, _, _, _ = build()
        with pytest.raises(TransferError):
            pool.add_liquidity(OWNER, 10 * ONE, STARTING_BALANCE + 1)
        assert pool.snapshot().is_empty
        assert ledger_a.balance_of(OWNER) == STARTING_BALANCE

    def test_swap_push_failure_refunds_input(self):
        """If paying out fails, the trader's input is refunded and reserves restored."""
        pool, ledger_a, ledger_b, _, _, events = build(custody_b_kwargs={"fail_pushes": [1]})
        pool.add_liquidity(OWNER, 100 * ONE, 100 * ONE)
        before = pool.snapshot()
        with pytest.raises(TransferError):
            pool.swap_a_for_b(ALICE, ONE)
        assert pool.snapshot() == before
        assert ledger_a.balance_of(ALICE) == STARTING_BALANCE
        assert ledger_b.balance_of(ALICE) == STARTING_BALANCE
        assert ledger_a.balance_of(POOL) == 100 * ONE
        assert len(events.swaps) == 0

    def test_remove_second_push_failure_reclaims_first(self):
        """If pushing B fails, A is pulled back and shares are restored."""
        pool, ledger_a, ledger_b, _, _, events = build(custody_b_kwargs={"fail_pushes": [1]})
        pool.add_liquidity(OWNER, 10 * ONE, 10 * ONE)
        before = pool.snapshot()
        with pytest.raises(TransferError):
            pool.remove_liquidity(OWNER, pool.shares_of(OWNER))
        assert pool.snapshot() == before
        assert ledger_a.balance_of(POOL) == 10 * ONE
        assert ledger_a.balance_of(OWNER) == STARTING_BALANCE - 10 * ONE
        assert len(events.withdrawals) == 0

    def test_pool_usable_after_failure(self):
        """A rolled-back operation does not poison later ones."""
        pool, _, _, _, _, _ = build(custody_b_kwargs={"fail_pushes": [1]})
        pool.add_liquidity(OWNER, 100 * ONE, 100 * ONE)
        with pytest.raises(TransferError):
            pool.swap_a_for_b(ALICE, ONE)
        assert pool.swap_a_for_b(ALICE, ONE) == 987158034397061298

    def test_failed_compensation_raises_rollback_error(self):
        """If the refund itself fails, RollbackError chains the original error."""
        # A: first pull succeeds, refund (first push) fails. B: first pull fails.
        pool, _, _, _, _, _ = build(
            custody_a_kwargs={"fail_pushes": [1]},
            custody_b_kwargs={"fail_pulls": [1]},
        )
        with pytest.raises(RollbackError) as exc_info:
            pool.add_liquidity(OWNER, 10 * ONE, 10 * ONE)
        assert isinstance(exc_info.value.__cause__, TransferError)
        assert len(exc_info.value.failures) == 1
        assert exc_info.value.operation == "add_liquidity"
        assert pool.snapshot().is_empty


    def test_custody_account_cannot_deposit(self):
        """The pool's own account is not a provider; nothing is minted from thin air."""
        pool, ledger_a, ledger_b, _, _, events = build()
        pool.add_liquidity(OWNER, 100 * ONE, 100 * ONE)
        before = pool.snapshot()
        with pytest.raises(TransferError):
            pool.add_liquidity(POOL, 100 * ONE, 100 * ONE)
        assert pool.snapshot() == before
        assert pool.shares_of(POOL) == 0
        assert (ledger_a.balance_of(POOL), ledger_b.balance_of(POOL)) == (100 * ONE, 100 * ONE)
        assert len(events) == 1

    def test_custody_account_cannot_swap(self):
        pool, _, ledger_b, _, _, _ = build()
        pool.add_liquidity(OWNER, 100 * ONE, 100 * ONE)
        with pytest.raises(TransferError):
            pool.swap_a_for_b(POOL, ONE)
        assert pool.reserves() == (100 * ONE, 100 * ONE)
        assert ledger_b.balance_of(POOL) == 100 * ONE

    def test_interrupt_mid_operation_restores_state(self):
        """A KeyboardInterrupt after the first pull still refunds it."""

        class InterruptingCustody(LedgerCustody):
            def pull(self, source, amount):
                raise KeyboardInterrupt

        ledger_a, ledger_b = TokenLedger(TOKEN_A), TokenLedger(TOKEN_B)
        ledger_a.mint(OWNER, STARTING_BALANCE)
        ledger_b.mint(OWNER, STARTING_BALANCE)
        pool = Pool(LedgerCustody(ledger_a, POOL), InterruptingCustody(ledger_b, POOL))
        with pytest.raises(KeyboardInterrupt):
            pool.add_liquidity(OWNER, 10 * ONE, 10 * ONE)
        assert pool.snapshot().is_empty
        assert ledger_a.balance_of(OWNER) == STARTING_BALANCE
        assert ledger_a.balance_of(POOL) == 0


class TestOverflow:
    """Reserves are bounded by uint256."""

    def test_deposit_beyond_uint256_rejected(self):
        ledger_a, ledger_b = TokenLedger(TOKEN_A), TokenLedger(TOKEN_B)
        ledger_a.mint(OWNER, UINT256_MAX + 10)
        ledger_b.mint(OWNER, UINT256_MAX + 10)
        pool = Pool(LedgerCustody(ledger_a, POOL), LedgerCustody(ledger_b, POOL))
        pool.add_liquidity(OWNER, UINT256_MAX, 1)
        before = pool.snapshot()
        with pytest.raises(ReserveOverflow):
            pool.add_liquidity(OWNER, 2**130, 1)
        assert pool.snapshot() == before
        assert ledger_a.balance_of(POOL) == UINT256_MAX

    def test_swap_beyond_uint256_rejected(self):
        ledger_a, ledger_b = TokenLedger(TOKEN_A), TokenLedger(TOKEN_B)
        ledger_a.mint(OWNER, UINT256_MAX + 10)
        ledger_b.mint(OWNER, UINT256_MAX)
        pool = Pool(LedgerCustody(ledger_a, POOL), LedgerCustody(ledger_b, POOL))
        pool.add_liquidity(OWNER, UINT256_MAX - ONE, UINT256_MAX // 2)
        with pytest.raises(ReserveOverflow):
            pool.swap_a_for_b(OWNER, 2 * ONE)
        assert pool.reserves() == (UINT256_MAX - ONE, UINT256_MAX // 2)


class TestConstruction:
    def test_same_asset_twice_rejected(self):
        ledger = TokenLedger(TOKEN_A)
        with pytest.raises(ValueError):
            Pool(LedgerCustody(ledger, POOL), LedgerCustody(ledger, POOL))
