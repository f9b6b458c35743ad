"""
Pool transitions (functional core).

Each operation is a pure function of the pre-state and its inputs. It returns
a `Transition` describing the next state, the result handed back to the
caller, the event to publish, and the ledger effects the shell must apply.
Nothing here touches the ledger or mutates its arguments, so a rejected
operation cannot leave anything half-applied.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from ..state.balances import Account, Amount, AssetId
from ..state.pools import PoolState, Side
from .cpmm import swap_exact_in
from .errors import EmptyPool, InsufficientShare, InvalidAmount, SlippageExceeded, UnsupportedAsset
from .events import LiquidityAdded, LiquidityRemoved, SwapExecuted
from .fees import FeePolicy
from .liquidity import burn_liquidity, mint_liquidity
from .types import (
    AddLiquidityResult,
    LedgerOp,
    LedgerOpKind,
    Operation,
    RemoveLiquidityResult,
    SwapResult,
    Transition,
)


def _require_positive(name: str, value: Amount) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")
    if value <= 0:
        raise InvalidAmount(f"{name} must be positive: {value}")


def resolve_side(state: PoolState, asset: AssetId) -> Side:
    """Map an asset identifier to the pool slot it occupies."""
    side = state.side_of(asset)
    if side is None:
        raise UnsupportedAsset(f"Asset {asset!r} not in pool {state.pool_id}")
    return side


def add_liquidity(
    state: PoolState,
    provider: Account,
    amount_a: Amount,
    amount_b: Amount,
    *,
    ratio_tolerance_bps: Optional[int] = None,
) -> Transition:
    """
    Deposit up to (amount_a, amount_b) at the current pool price.

    Only the ratio-matched part of the offer is pulled; the excess stays with
    the provider.
    """
    _require_positive("amount_a", amount_a)
    _require_positive("amount_b", amount_b)

    mint = mint_liquidity(
        reserve_a=state.reserve_a,
        reserve_b=state.reserve_b,
        lp_supply=state.lp_supply,
        amount_a_desired=amount_a,
        amount_b_desired=amount_b,
        ratio_tolerance_bps=ratio_tolerance_bps,
    )

    next_state = replace(
        state,
        reserve_a=mint.new_reserve_a,
        reserve_b=mint.new_reserve_b,
        lp_supply=mint.new_lp_supply,
    )
    return Transition(
        operation=Operation.ADD_LIQUIDITY,
        state=next_state,
        result=AddLiquidityResult(
            lp_minted=mint.liquidity_minted,
            amount_a=mint.amount_a_used,
            amount_b=mint.amount_b_used,
        ),
        event=LiquidityAdded(
            provider=provider,
            amount_a=mint.amount_a_used,
            amount_b=mint.amount_b_used,
            lp_minted=mint.liquidity_minted,
        ),
        ledger_ops=(
            LedgerOp(LedgerOpKind.PULL, state.asset_a, provider, mint.amount_a_used),
            LedgerOp(LedgerOpKind.PULL, state.asset_b, provider, mint.amount_b_used),
            LedgerOp(LedgerOpKind.MINT, state.lp_asset, provider, mint.liquidity_minted),
        ),
    )


def remove_liquidity(
    state: PoolState,
    provider: Account,
    lp_amount: Amount,
    *,
    lp_balance: Amount,
) -> Transition:
    """
    Redeem `lp_amount` of the provider's claim for a proportional share of both reserves.

    `lp_balance` is the provider's LP balance as read from the ledger.
    """
    _require_positive("lp_amount", lp_amount)
    if lp_amount > lp_balance:
        raise InsufficientShare(
            f"{provider} holds {lp_balance} LP, cannot redeem {lp_amount}"
        )
    if lp_amount > state.lp_supply:
        raise InsufficientShare(
            f"Cannot burn more LP than supply: {lp_amount} > {state.lp_supply}"
        )

    burn = burn_liquidity(
        lp_amount=lp_amount,
        reserve_a=state.reserve_a,
        reserve_b=state.reserve_b,
        lp_supply=state.lp_supply,
    )

    next_state = replace(
        state,
        reserve_a=burn.new_reserve_a,
        reserve_b=burn.new_reserve_b,
        lp_supply=burn.new_lp_supply,
    )
    return Transition(
        operation=Operation.REMOVE_LIQUIDITY,
        state=next_state,
        result=RemoveLiquidityResult(amount_a=burn.amount_a_out, amount_b=burn.amount_b_out),
        event=LiquidityRemoved(
            provider=provider,
            amount_a=burn.amount_a_out,
            amount_b=burn.amount_b_out,
            lp_burned=lp_amount,
        ),
        ledger_ops=(
            LedgerOp(LedgerOpKind.BURN, state.lp_asset, provider, lp_amount),
            LedgerOp(LedgerOpKind.PUSH, state.asset_a, provider, burn.amount_a_out),
            LedgerOp(LedgerOpKind.PUSH, state.asset_b, provider, burn.amount_b_out),
        ),
    )


def swap(
    state: PoolState,
    trader: Account,
    side_in: Side,
    amount_in: Amount,
    *,
    min_amount_out: Amount = 0,
) -> Transition:
    """
    Sell exactly `amount_in` of the `side_in` asset for the other asset.

    The treasury share of the fee is pushed to the treasury; the rest of the
    input stays in reserve.
    """
    _require_positive("amount_in", amount_in)
    if not isinstance(min_amount_out, int) or isinstance(min_amount_out, bool) or min_amount_out < 0:
        raise InvalidAmount(f"min_amount_out must be a non-negative int: {min_amount_out}")
    if state.lp_supply == 0:
        raise EmptyPool(f"pool {state.pool_id} has no liquidity")

    reserve_in, reserve_out = state.reserves_for(side_in)
    quote = swap_exact_in(
        reserve_in=reserve_in,
        reserve_out=reserve_out,
        amount_in=amount_in,
        policy=FeePolicy.for_pool(state),
    )
    if quote.amount_out < min_amount_out:
        raise SlippageExceeded(
            f"amount_out ({quote.amount_out}) < min_amount_out ({min_amount_out})"
        )

    asset_in = state.asset_of(side_in)
    asset_out = state.asset_of(side_in.other)
    next_state = state.with_reserves_for(side_in, quote.new_reserve_in, quote.new_reserve_out)

    ledger_ops = [LedgerOp(LedgerOpKind.PULL, asset_in, trader, amount_in)]
    if quote.fee.treasury_fee > 0:
        ledger_ops.append(LedgerOp(LedgerOpKind.PUSH, asset_in, state.treasury, quote.fee.treasury_fee))
    ledger_ops.append(LedgerOp(LedgerOpKind.PUSH, asset_out, trader, quote.amount_out))

    return Transition(
        operation=Operation.SWAP,
        state=next_state,
        result=SwapResult(
            amount_out=quote.amount_out,
            fee_amount=quote.fee.fee_total,
            asset_in=asset_in,
            asset_out=asset_out,
        ),
        event=SwapExecuted(
            trader=trader,
            amount_in=amount_in,
            amount_out=quote.amount_out,
            asset_in=asset_in,
            asset_out=asset_out,
            fee_amount=quote.fee.fee_total,
        ),
        ledger_ops=tuple(ledger_ops),
    )
