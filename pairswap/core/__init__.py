"""
Core exchange algorithms (pure, integer-only)
"""

from .cpmm import RATIO_SCALE, liquidity_ratio, ratio_to_decimal, swap_exact_in
from .errors import (
    EmptyPool,
    InsufficientShare,
    InvalidAmount,
    LedgerFailure,
    PoolError,
    PoolInvariantError,
    RatioMismatch,
    ReentrancyRejected,
    SlippageExceeded,
    UnsupportedAsset,
)
from .events import EventKind, LiquidityAdded, LiquidityRemoved, PoolEvent, SwapExecuted, event_to_dict
from .fees import FeePolicy, SwapFee, split_swap_fee
from .invariants import check_all, check_transition
from .liquidity import burn_liquidity, mint_liquidity, optimal_liquidity
from .transitions import add_liquidity, remove_liquidity, resolve_side, swap
from .types import (
    AddLiquidityResult,
    LedgerOp,
    LedgerOpKind,
    Operation,
    RemoveLiquidityResult,
    SwapResult,
    Transition,
)

__all__ = [
    "RATIO_SCALE",
    "liquidity_ratio",
    "ratio_to_decimal",
    "swap_exact_in",
    "EmptyPool",
    "InsufficientShare",
    "InvalidAmount",
    "LedgerFailure",
    "PoolError",
    "PoolInvariantError",
    "RatioMismatch",
    "ReentrancyRejected",
    "SlippageExceeded",
    "UnsupportedAsset",
    "EventKind",
    "LiquidityAdded",
    "LiquidityRemoved",
    "PoolEvent",
    "SwapExecuted",
    "event_to_dict",
    "FeePolicy",
    "SwapFee",
    "split_swap_fee",
    "check_all",
    "check_transition",
    "burn_liquidity",
    "mint_liquidity",
    "optimal_liquidity",
    "add_liquidity",
    "remove_liquidity",
    "resolve_side",
    "swap",
    "AddLiquidityResult",
    "LedgerOp",
    "LedgerOpKind",
    "Operation",
    "RemoveLiquidityResult",
    "SwapResult",
    "Transition",
]
