"""
Constant Product Market Maker (CPMM) pricing.

Algorithm Design:
- Type: Fixed-Point Integer Arithmetic / Deterministic Rounding
- Time Complexity: O(1) per swap operation
- Invariant: After each swap, x' * y' >= x * y

Swap semantics (exact input):
    fee_total = floor(amount_in * fee_bps / 10_000)
    net_in = amount_in - fee_total
    amount_out = floor(reserve_out * net_in / (reserve_in + net_in))

Post-swap reserves:
    new_reserve_in = reserve_in + net_in + lp_fee   (treasury fee leaves the pool)
    new_reserve_out = reserve_out - amount_out

Because net_in / (reserve_in + net_in) < 1, amount_out < reserve_out for every
valid swap: the output reserve is never drained.
"""

from __future__ import annotations

import decimal
from dataclasses import dataclass
from decimal import Decimal

from ..state.balances import Amount
from .errors import EmptyPool, InvalidAmount
from .fees import FeePolicy, SwapFee, split_swap_fee

# get_liquidity_ratio() is reported with 18 decimal places.
RATIO_DECIMALS = 18
RATIO_SCALE = 10**RATIO_DECIMALS

# Enough digits for ratios of uint256-sized reserves.
DECIMAL_HIGH_PREC_CONTEXT = decimal.Context(prec=78)


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class SwapExactInResult:
    amount_out: int
    fee: SwapFee
    new_reserve_in: int
    new_reserve_out: int
    k_before: int
    k_after: int


def get_amount_out(*, reserve_in: Amount, reserve_out: Amount, net_in: Amount) -> Amount:
    """
    Constant-product output for an already fee-adjusted input (floor rounding).
    """
    for name, v in (("reserve_in", reserve_in), ("reserve_out", reserve_out), ("net_in", net_in)):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative: {v}")
    denominator = reserve_in + net_in
    if denominator == 0:
        raise EmptyPool("cannot price against an empty reserve")
    return (reserve_out * net_in) // denominator


def swap_exact_in(
    *,
    reserve_in: Amount,
    reserve_out: Amount,
    amount_in: Amount,
    policy: FeePolicy,
) -> SwapExactInResult:
    """
    Exact-in swap quote + post-state.

    Raises:
        InvalidAmount: amount_in is not positive, or too small to produce output
        EmptyPool: either reserve is zero
    """
    for name, v in (
        ("reserve_in", reserve_in),
        ("reserve_out", reserve_out),
        ("amount_in", amount_in),
    ):
        _require_int(name, v)

    if reserve_in < 0 or reserve_out < 0:
        raise ValueError(f"Reserves must be non-negative: ({reserve_in}, {reserve_out})")
    if amount_in <= 0:
        raise InvalidAmount(f"amount_in must be positive: {amount_in}")
    if reserve_in == 0 or reserve_out == 0:
        raise EmptyPool("cannot swap against an empty reserve")

    k_before = reserve_in * reserve_out

    fee = split_swap_fee(amount_in, policy)
    if fee.net_in <= 0:
        raise InvalidAmount(f"amount_in {amount_in} leaves nothing after a {fee.fee_total} fee")

    amount_out = get_amount_out(reserve_in=reserve_in, reserve_out=reserve_out, net_in=fee.net_in)
    if amount_out <= 0:
        raise InvalidAmount(f"amount_out is zero (trade of {amount_in} too small)")
    if amount_out >= reserve_out:
        raise AssertionError("amount_out would drain reserve_out")

    new_reserve_in = reserve_in + fee.net_in + fee.lp_fee
    new_reserve_out = reserve_out - amount_out
    k_after = new_reserve_in * new_reserve_out

    # Floor rounding on amount_out guarantees this; a failure here is a bug, not bad input.
    if k_after < k_before:
        raise AssertionError(f"Invariant violation: new_k ({k_after}) < old_k ({k_before})")

    return SwapExactInResult(
        amount_out=amount_out,
        fee=fee,
        new_reserve_in=new_reserve_in,
        new_reserve_out=new_reserve_out,
        k_before=k_before,
        k_after=k_after,
    )


def liquidity_ratio(reserve_a: Amount, reserve_b: Amount) -> int:
    """
    Price of B in units of A as an 18-decimal fixed-point integer:
        floor(reserve_a * 10**18 / reserve_b)
    """
    _require_int("reserve_a", reserve_a)
    _require_int("reserve_b", reserve_b)
    if reserve_b == 0:
        raise EmptyPool("liquidity ratio is undefined for an empty pool")
    return (reserve_a * RATIO_SCALE) // reserve_b


def ratio_to_decimal(ratio: int) -> Decimal:
    """Render a fixed-point ratio from `liquidity_ratio` as an exact Decimal."""
    _require_int("ratio", ratio)
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        return Decimal(ratio).scaleb(-RATIO_DECIMALS)
