"""Constant product pool math.

The pool keeps x * y = k across swaps, pricing only (10000 - fee_bps)/10000
of every input so that the retained fee grows k. Share accounting mints
against the reserve ratio and burns pro rata.

All functions are pure and work on plain ints; intermediate products are
computed at full precision before any floor division.
"""

from __future__ import annotations

from dex.constants import DEFAULT_FEE_BPS, FEE_BASE
from dex.errors import EmptyPool, InvalidAmount
from dex.safe_int import S

DEFAULT_FEE_MULTIPLIER = FEE_BASE - DEFAULT_FEE_BPS


def isqrt(y: int) -> int:
    """Floor square root via Newton's method.

    Seeded at y // 2 + 1, the iterate decreases monotonically to the
    largest z with z * z <= y.
    """
    if y < 0:
        raise ValueError(f"isqrt of negative number: {y}")
    if y > 3:
        z = y
        x = y // 2 + 1
        while x < z:
            z = x
            x = (y // x + x) // 2
        return z
    if y != 0:
        return 1
    return 0


def get_amount_out(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Calculate swap output using the constant product formula.

    Formula: amount_out = (in * fee * res_out) / (res_in * 10000 + in * fee)

    With the default fee (9970) this is exactly the classic
    (in * 997 * res_out) / (res_in * 1000 + in * 997). The result is always
    strictly below reserve_out.

    Args:
        amount_in: Input token amount
        reserve_in: Reserve of input token in pool
        reserve_out: Reserve of output token in pool
        fee_multiplier: Fee multiplier (default 9970 for 0.3% fee)

    Returns:
        Output token amount (0 for a zero input)

    Raises:
        EmptyPool: If either reserve is zero
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise EmptyPool(f"Cannot price against reserves ({reserve_in}, {reserve_out})")
    if amount_in < 0:
        raise InvalidAmount(f"Swap input cannot be negative: {amount_in}")

    amount_in_with_fee = S(amount_in) * fee_multiplier
    numerator = amount_in_with_fee * reserve_out
    denominator = S(reserve_in) * FEE_BASE + amount_in_with_fee

    return (numerator // denominator).value


def get_amount_in(
    amount_out: int,
    reserve_in: int,
    reserve_out: int,
    fee_multiplier: int = DEFAULT_FEE_MULTIPLIER,
) -> int:
    """Calculate the input required to receive at least amount_out.

    Formula: amount_in = (res_in * out * 10000) / ((res_out - out) * fee) + 1

    Rounds up, so get_amount_out(get_amount_in(x)) >= x.

    Raises:
        EmptyPool: If either reserve is zero
        InvalidAmount: If amount_out is not in (0, reserve_out)
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise EmptyPool(f"Cannot price against reserves ({reserve_in}, {reserve_out})")
    if amount_out <= 0:
        raise InvalidAmount(f"Desired output must be positive: {amount_out}")
    if amount_out >= reserve_out:
        raise InvalidAmount(f"Desired output {amount_out} drains reserve {reserve_out}")

    numerator = S(reserve_in) * amount_out * FEE_BASE
    denominator = (S(reserve_out) - amount_out) * fee_multiplier

    return ((numerator // denominator) + 1).value


def shares_for_deposit(amount_a: int, amount_b: int, reserve_a: int, total_shares: int) -> int:
    """Shares minted for depositing (amount_a, amount_b).

    The first deposit mints floor(sqrt(amount_a * amount_b)) and fixes the
    initial price. Later deposits mint floor(amount_a * total_shares / reserve_a):
    only the A side is priced, so B deposited beyond the current ratio is
    not rewarded and accrues to existing holders.
    """
    if total_shares == 0:
        return isqrt((S(amount_a) * amount_b).value)
    return S(amount_a).mul_div(total_shares, reserve_a).value


def amounts_for_shares(
    shares: int, reserve_a: int, reserve_b: int, total_shares: int
) -> tuple[int, int]:
    """Pro-rata claim on both reserves for burning `shares` (floored)."""
    amount_a = S(shares).mul_div(reserve_a, total_shares).value
    amount_b = S(shares).mul_div(reserve_b, total_shares).value
    return amount_a, amount_b


def spot_price(reserve_a: int, reserve_b: int, scale: int) -> int:
    """Price of A in units of B as a fixed-point ratio; 0 means no liquidity."""
    if reserve_a == 0:
        return 0
    return S(reserve_b).mul_div(scale, reserve_a).value
