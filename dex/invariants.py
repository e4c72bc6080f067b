"""Accounting invariants over a pool snapshot.

- Either all of reserve_a, reserve_b, total_shares are zero or none are
- total_shares equals the sum of per-participant balances
- No participant holds more than total_shares

The constant product check is per-swap and lives with the swap itself.
"""

from __future__ import annotations

from dex.errors import InvariantViolation
from dex.models.snapshot import PoolSnapshot
from dex.safe_int import S


def find_violations(snapshot: PoolSnapshot) -> list[str]:
    """Return a description of every broken invariant (empty if none)."""
    violations: list[str] = []

    empties = (snapshot.reserve_a == 0, snapshot.reserve_b == 0, snapshot.total_shares == 0)
    if any(empties) and not all(empties):
        violations.append(
            "pool partially funded: "
            f"reserves=({snapshot.reserve_a}, {snapshot.reserve_b}) "
            f"total_shares={snapshot.total_shares}"
        )

    held = sum(snapshot.shares.values())
    if held != snapshot.total_shares:
        violations.append(f"total_shares={snapshot.total_shares} but participants hold {held}")

    for participant, balance in snapshot.shares.items():
        if balance > snapshot.total_shares:
            violations.append(
                f"{participant} holds {balance} > total_shares={snapshot.total_shares}"
            )

    for name, value in (
        ("reserve_a", snapshot.reserve_a),
        ("reserve_b", snapshot.reserve_b),
        ("total_shares", snapshot.total_shares),
    ):
        if not S(value).is_uint256():
            violations.append(f"{name}={value} outside uint256")

    return violations


def assert_invariants(snapshot: PoolSnapshot) -> None:
    """Raise InvariantViolation if the snapshot breaks any invariant."""
    violations = find_violations(snapshot)
    if violations:
        raise InvariantViolation(violations)
