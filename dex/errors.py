"""Pool error classes.

Every failure leaves the pool state unchanged. None of these are retryable
as-is: the caller must re-issue the operation with corrected inputs.
"""


class PoolError(Exception):
    """Base error for pool operations."""

    pass


class InvalidAmount(PoolError):
    """A supplied amount is zero (or negative) where a positive amount is required."""

    pass


class ZeroMintedShares(PoolError):
    """A deposit's share mint rounds down to zero."""

    pass


class InsufficientShares(PoolError):
    """Withdrawal requests more shares than the caller owns."""

    def __init__(self, participant: str, requested: int, available: int) -> None:
        super().__init__(
            f"{participant} holds {available} shares, cannot burn {requested}"
        )
        self.participant = participant
        self.requested = requested
        self.available = available


class EmptyPool(PoolError):
    """Pricing requested against a reserve pair where either side is zero."""

    pass


class ZeroOutput(PoolError):
    """A swap's computed output rounds down to zero."""

    pass


class ReserveOverflow(PoolError):
    """A reserve or share balance would leave the uint256 range."""

    pass


class TransferError(PoolError):
    """An asset custody collaborator refused a pull or push."""

    def __init__(self, asset: str, participant: str, amount: int, reason: str) -> None:
        super().__init__(f"{asset} transfer of {amount} for {participant} failed: {reason}")
        self.asset = asset
        self.participant = participant
        self.amount = amount
        self.reason = reason


class RollbackError(PoolError):
    """Reversing the transfers of a failed operation did not fully succeed.

    Raised from the original failure. ``failures`` holds the errors raised
    by the compensating transfers, in the order they were attempted.
    """

    def __init__(self, operation: str, failures: list[Exception]) -> None:
        super().__init__(
            f"{operation}: {len(failures)} compensating transfer(s) failed during rollback"
        )
        self.operation = operation
        self.failures = failures


class InvariantViolation(PoolError):
    """Pool state breaks one of the accounting invariants."""

    def __init__(self, violations: list[str]) -> None:
        super().__init__("; ".join(violations))
        self.violations = violations
