"""Asset custody collaborators.

The pool never moves balances itself. For each of its two assets it holds an
AssetCustody that pulls deposits/swap inputs from participants and pushes
withdrawals/swap outputs to them. Either call raises TransferError on
failure, which aborts the pool operation.

TokenLedger is an in-memory ERC20-style balance book; LedgerCustody binds a
ledger to the pool's own custody account, which can never be the other side
of a transfer.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

import structlog

from dex.errors import TransferError

logger = structlog.get_logger()


@runtime_checkable
class AssetCustody(Protocol):
    """Transfer collaborator for one asset."""

    @property
    def asset(self) -> str:
        """Identifier of the asset this custody moves."""
        ...

    def pull(self, source: str, amount: int) -> None:
        """Move `amount` from `source` into pool custody.

        Raises:
            TransferError: If the transfer cannot complete
        """
        ...

    def push(self, recipient: str, amount: int) -> None:
        """Move `amount` from pool custody to `recipient`.

        Raises:
            TransferError: If the transfer cannot complete
        """
        ...


class TokenLedger:
    """Thread-safe balance book for a single fungible asset."""

    def __init__(self, asset: str) -> None:
        if not asset:
            raise ValueError("Asset identifier must be non-empty")
        self.asset = asset
        self._balances: dict[str, int] = {}
        self._total_supply = 0
        self._lock = threading.Lock()

    def balance_of(self, account: str) -> int:
        with self._lock:
            return self._balances.get(account, 0)

    @property
    def total_supply(self) -> int:
        with self._lock:
            return self._total_supply

    def mint(self, account: str, amount: int) -> None:
        """Create `amount` new units in `account`."""
        if amount < 0:
            raise ValueError(f"Cannot mint negative amount: {amount}")
        with self._lock:
            self._balances[account] = self._balances.get(account, 0) + amount
            self._total_supply += amount

    def transfer(self, source: str, recipient: str, amount: int) -> None:
        """Move `amount` from `source` to `recipient`.

        Raises:
            TransferError: If amount is negative or source balance is short
        """
        if amount < 0:
            raise TransferError(self.asset, source, amount, "negative amount")
        with self._lock:
            balance = self._balances.get(source, 0)
            if balance < amount:
                logger.debug(
                    "ledger_transfer_rejected",
                    asset=self.asset,
                    source=source,
                    recipient=recipient,
                    amount=amount,
                    balance=balance,
                )
                raise TransferError(
                    self.asset, source, amount, f"insufficient balance ({balance})"
                )
            self._balances[source] = balance - amount
            self._balances[recipient] = self._balances.get(recipient, 0) + amount


class LedgerCustody:
    """AssetCustody backed by a TokenLedger account owned by the pool."""

    def __init__(self, ledger: TokenLedger, account: str) -> None:
        if not account:
            raise ValueError("Custody account must be non-empty")
        self.ledger = ledger
        self.account = account

    @property
    def asset(self) -> str:
        return self.ledger.asset

    @property
    def held(self) -> int:
        """Balance currently in pool custody."""
        return self.ledger.balance_of(self.account)

    def pull(self, source: str, amount: int) -> None:
        if source == self.account:
            raise TransferError(self.asset, source, amount, "source is the custody account")
        self.ledger.transfer(source, self.account, amount)

    def push(self, recipient: str, amount: int) -> None:
        if recipient == self.account:
            raise TransferError(self.asset, recipient, amount, "recipient is the custody account")
        self.ledger.transfer(self.account, recipient, amount)
