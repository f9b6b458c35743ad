"""Invariant checkers for pool state and pool transitions.

State invariants hold for every committed `PoolState`. Transition invariants
compare the pre-state and post-state of one operation. `check_all()` and
`check_transition()` return the list of violated invariant ids (empty = all
pass); the exchange refuses to commit a transition with any violation.
"""

from __future__ import annotations

from typing import Callable

from ..state.pools import PoolState
from .types import Operation


# ---------------------------------------------------------------------------
# State invariants
# ---------------------------------------------------------------------------

def inv_reserves_non_negative(s: PoolState) -> bool:
    return s.reserve_a >= 0 and s.reserve_b >= 0 and s.lp_supply >= 0


def inv_funded_when_supply(s: PoolState) -> bool:
    """Outstanding LP implies both reserves are funded."""
    if s.lp_supply == 0:
        return True
    return s.reserve_a > 0 and s.reserve_b > 0


def inv_empty_when_no_supply(s: PoolState) -> bool:
    """No LP outstanding implies nothing left in reserve (no stranded dust)."""
    if s.lp_supply > 0:
        return True
    return s.reserve_a == 0 and s.reserve_b == 0


STATE_INVARIANTS: dict[str, Callable[[PoolState], bool]] = {
    "inv_reserves_non_negative": inv_reserves_non_negative,
    "inv_funded_when_supply": inv_funded_when_supply,
    "inv_empty_when_no_supply": inv_empty_when_no_supply,
}


def check_all(state: PoolState) -> list[str]:
    """Return list of violated state invariant ids (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in STATE_INVARIANTS.items()
        if not check_fn(state)
    ]


# ---------------------------------------------------------------------------
# Transition invariants
# ---------------------------------------------------------------------------

def trn_config_immutable(pre: PoolState, post: PoolState) -> bool:
    return (
        pre.pool_id == post.pool_id
        and pre.asset_a == post.asset_a
        and pre.asset_b == post.asset_b
        and pre.lp_asset == post.lp_asset
        and pre.treasury == post.treasury
        and pre.fee_bps == post.fee_bps
        and pre.treasury_share_bps == post.treasury_share_bps
    )


def trn_swap_product_non_decreasing(pre: PoolState, post: PoolState) -> bool:
    return post.get_constant_product() >= pre.get_constant_product()


def trn_swap_lp_supply_unchanged(pre: PoolState, post: PoolState) -> bool:
    return post.lp_supply == pre.lp_supply


def trn_add_grows_supply(pre: PoolState, post: PoolState) -> bool:
    return post.lp_supply > pre.lp_supply


def trn_remove_shrinks_supply(pre: PoolState, post: PoolState) -> bool:
    return post.lp_supply < pre.lp_supply


def trn_share_value_non_decreasing(pre: PoolState, post: PoolState) -> bool:
    """
    sqrt(k) / lp_supply never falls: no operation dilutes an uninvolved LP.

    Compared squared to stay in integers: k' * L^2 >= k * L'^2.
    """
    if pre.lp_supply == 0 or post.lp_supply == 0:
        return True
    lhs = post.get_constant_product() * pre.lp_supply * pre.lp_supply
    rhs = pre.get_constant_product() * post.lp_supply * post.lp_supply
    return lhs >= rhs


TransitionCheck = Callable[[PoolState, PoolState], bool]

_COMMON_TRANSITION_INVARIANTS: dict[str, TransitionCheck] = {
    "trn_config_immutable": trn_config_immutable,
    "trn_share_value_non_decreasing": trn_share_value_non_decreasing,
}

TRANSITION_INVARIANTS: dict[Operation, dict[str, TransitionCheck]] = {
    Operation.ADD_LIQUIDITY: {
        **_COMMON_TRANSITION_INVARIANTS,
        "trn_add_grows_supply": trn_add_grows_supply,
    },
    Operation.REMOVE_LIQUIDITY: {
        **_COMMON_TRANSITION_INVARIANTS,
        "trn_remove_shrinks_supply": trn_remove_shrinks_supply,
    },
    Operation.SWAP: {
        **_COMMON_TRANSITION_INVARIANTS,
        "trn_swap_product_non_decreasing": trn_swap_product_non_decreasing,
        "trn_swap_lp_supply_unchanged": trn_swap_lp_supply_unchanged,
    },
}


def check_transition(pre: PoolState, post: PoolState, operation: Operation) -> list[str]:
    """Return violated state + transition invariant ids for one operation."""
    violations = check_all(post)
    violations.extend(
        inv_id
        for inv_id, check_fn in TRANSITION_INVARIANTS[operation].items()
        if not check_fn(pre, post)
    )
    return violations
