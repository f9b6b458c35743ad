"""
LP accounting: issuance and redemption of the pool's claim asset.

Rounding rules:
- Deposits into a funded pool mint `min(floor(used_a * lp_supply / reserve_a),
  floor(used_b * lp_supply / reserve_b))`, always in favor of the pool.
- The bootstrap deposit mints `isqrt(amount_a * amount_b)`, the integer
  geometric mean; the offered amounts fix the pool's initial price.
- Withdrawals return `floor(lp_amount * reserve / lp_supply)` of each asset,
  except the final withdrawal (`lp_amount == lp_supply`), which returns the
  reserves in full so a drained pool holds exactly zero.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..state.balances import Amount
from ..state.pools import BPS_DENOM
from .errors import EmptyPool, InsufficientShare, InvalidAmount, RatioMismatch


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class OptimalLiquidityResult:
    amount_a_used: int
    amount_b_used: int
    amount_a_refund: int
    amount_b_refund: int


@dataclass(frozen=True)
class MintLiquidityResult:
    liquidity_minted: int
    amount_a_used: int
    amount_b_used: int
    new_reserve_a: int
    new_reserve_b: int
    new_lp_supply: int


@dataclass(frozen=True)
class BurnLiquidityResult:
    amount_a_out: int
    amount_b_out: int
    new_reserve_a: int
    new_reserve_b: int
    new_lp_supply: int


def optimal_liquidity(
    *,
    reserve_a: Amount,
    reserve_b: Amount,
    amount_a_desired: Amount,
    amount_b_desired: Amount,
) -> OptimalLiquidityResult:
    """
    Compute ratio-preserving used amounts and the excess left with the caller.

    For an empty pool, uses everything and refunds nothing.
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("amount_a_desired", amount_a_desired),
        ("amount_b_desired", amount_b_desired),
    ):
        _require_int(name, v)

    if reserve_a < 0 or reserve_b < 0:
        raise ValueError("reserves must be non-negative")
    if amount_a_desired <= 0 or amount_b_desired <= 0:
        raise InvalidAmount(
            f"Deposit amounts must be positive: ({amount_a_desired}, {amount_b_desired})"
        )

    if reserve_a == 0 or reserve_b == 0:
        return OptimalLiquidityResult(
            amount_a_used=amount_a_desired,
            amount_b_used=amount_b_desired,
            amount_a_refund=0,
            amount_b_refund=0,
        )

    amount_b_optimal = (amount_a_desired * reserve_b) // reserve_a
    if amount_b_optimal <= amount_b_desired:
        amount_a_used = amount_a_desired
        amount_b_used = amount_b_optimal
    else:
        amount_a_used = (amount_b_desired * reserve_a) // reserve_b
        amount_b_used = amount_b_desired

    if amount_a_used <= 0 or amount_b_used <= 0:
        raise InvalidAmount(
            f"Deposit ({amount_a_desired}, {amount_b_desired}) is too small "
            f"for reserves ({reserve_a}, {reserve_b})"
        )
    if amount_a_used > amount_a_desired or amount_b_used > amount_b_desired:
        raise AssertionError("used amounts exceed desired amounts")

    return OptimalLiquidityResult(
        amount_a_used=amount_a_used,
        amount_b_used=amount_b_used,
        amount_a_refund=amount_a_desired - amount_a_used,
        amount_b_refund=amount_b_desired - amount_b_used,
    )


def check_ratio_tolerance(opt: OptimalLiquidityResult, tolerance_bps: int) -> None:
    """
    Reject a deposit whose trimmed side leaves more than `tolerance_bps` of the
    offered amount unused.
    """
    _require_int("tolerance_bps", tolerance_bps)
    if not (0 <= tolerance_bps <= BPS_DENOM):
        raise ValueError(f"tolerance_bps must be in [0, {BPS_DENOM}]: {tolerance_bps}")
    for name, refund, used in (
        ("amount_a", opt.amount_a_refund, opt.amount_a_used),
        ("amount_b", opt.amount_b_refund, opt.amount_b_used),
    ):
        offered = refund + used
        if refund * BPS_DENOM > tolerance_bps * offered:
            raise RatioMismatch(
                f"{name} offer of {offered} is off the pool price: "
                f"{refund} would go unused (tolerance {tolerance_bps} bps)"
            )


def mint_liquidity_initial(*, amount_a: Amount, amount_b: Amount) -> int:
    """
    Bootstrap mint: `isqrt(amount_a * amount_b)`.

    Integer square root keeps the result exact for arbitrarily large inputs.
    """
    _require_int("amount_a", amount_a)
    _require_int("amount_b", amount_b)
    if amount_a <= 0 or amount_b <= 0:
        raise InvalidAmount(f"Initial deposits must be positive: ({amount_a}, {amount_b})")
    return math.isqrt(amount_a * amount_b)


def mint_liquidity(
    *,
    reserve_a: Amount,
    reserve_b: Amount,
    lp_supply: Amount,
    amount_a_desired: Amount,
    amount_b_desired: Amount,
    ratio_tolerance_bps: Optional[int] = None,
) -> MintLiquidityResult:
    """
    Mint LP for a deposit.

    Raises:
        InvalidAmount: non-positive amounts, or a deposit that would mint nothing
        RatioMismatch: tolerance is set and the offer is too far off the pool price
    """
    for name, v in (
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("lp_supply", lp_supply),
    ):
        _require_int(name, v)
        if v < 0:
            raise ValueError(f"{name} must be non-negative: {v}")

    if lp_supply == 0:
        if reserve_a != 0 or reserve_b != 0:
            raise ValueError("cannot mint initial liquidity when reserves are non-zero")
        minted = mint_liquidity_initial(amount_a=amount_a_desired, amount_b=amount_b_desired)
        return MintLiquidityResult(
            liquidity_minted=minted,
            amount_a_used=amount_a_desired,
            amount_b_used=amount_b_desired,
            new_reserve_a=amount_a_desired,
            new_reserve_b=amount_b_desired,
            new_lp_supply=minted,
        )

    if reserve_a == 0 or reserve_b == 0:
        raise EmptyPool("cannot mint into an empty pool when lp_supply > 0")

    opt = optimal_liquidity(
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        amount_a_desired=amount_a_desired,
        amount_b_desired=amount_b_desired,
    )
    if ratio_tolerance_bps is not None:
        check_ratio_tolerance(opt, ratio_tolerance_bps)

    liquidity_a = (opt.amount_a_used * lp_supply) // reserve_a
    liquidity_b = (opt.amount_b_used * lp_supply) // reserve_b
    minted = min(liquidity_a, liquidity_b)
    if minted <= 0:
        raise InvalidAmount("liquidity_minted is zero (deposit too small)")

    return MintLiquidityResult(
        liquidity_minted=minted,
        amount_a_used=opt.amount_a_used,
        amount_b_used=opt.amount_b_used,
        new_reserve_a=reserve_a + opt.amount_a_used,
        new_reserve_b=reserve_b + opt.amount_b_used,
        new_lp_supply=lp_supply + minted,
    )


def burn_liquidity(
    *,
    lp_amount: Amount,
    reserve_a: Amount,
    reserve_b: Amount,
    lp_supply: Amount,
) -> BurnLiquidityResult:
    """
    Burn LP for the underlying assets (floor rounding, full payout on the last burn).
    """
    for name, v in (
        ("lp_amount", lp_amount),
        ("reserve_a", reserve_a),
        ("reserve_b", reserve_b),
        ("lp_supply", lp_supply),
    ):
        _require_int(name, v)

    if lp_amount <= 0:
        raise InvalidAmount(f"LP amount must be positive: {lp_amount}")
    if reserve_a < 0 or reserve_b < 0:
        raise ValueError("reserves must be non-negative")
    if lp_supply <= 0:
        raise EmptyPool("pool has no outstanding LP supply")
    if lp_amount > lp_supply:
        raise InsufficientShare(f"Cannot burn more LP than supply: {lp_amount} > {lp_supply}")

    if lp_amount == lp_supply:
        amount_a_out, amount_b_out = reserve_a, reserve_b
    else:
        amount_a_out = (lp_amount * reserve_a) // lp_supply
        amount_b_out = (lp_amount * reserve_b) // lp_supply
    if amount_a_out <= 0 or amount_b_out <= 0:
        raise InvalidAmount(f"burning {lp_amount} LP would return nothing of one asset")

    return BurnLiquidityResult(
        amount_a_out=amount_a_out,
        amount_b_out=amount_b_out,
        new_reserve_a=reserve_a - amount_a_out,
        new_reserve_b=reserve_b - amount_b_out,
        new_lp_supply=lp_supply - lp_amount,
    )
