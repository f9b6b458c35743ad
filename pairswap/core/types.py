"""Data types shared by the pure transitions and the exchange shell.

All types are frozen dataclasses (immutable). A `Transition` is everything an
operation decides before touching the ledger: the next pool state, the
caller-facing result, the event to publish and the ledger effects to apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Tuple, Union

from ..state.balances import Account, Amount, AssetId
from ..state.pools import PoolState
from .events import PoolEvent


@unique
class Operation(Enum):
    ADD_LIQUIDITY = "add_liquidity"
    REMOVE_LIQUIDITY = "remove_liquidity"
    SWAP = "swap"


@unique
class LedgerOpKind(Enum):
    PULL = "transfer_from"  # account -> pool, against the account's approval
    PUSH = "transfer"       # pool -> account
    MINT = "mint"
    BURN = "burn"


@dataclass(frozen=True)
class LedgerOp:
    """One ledger effect. The pool account is the implicit counterparty of PULL/PUSH."""

    kind: LedgerOpKind
    asset: AssetId
    account: Account
    amount: Amount


@dataclass(frozen=True)
class AddLiquidityResult:
    lp_minted: Amount
    amount_a: Amount
    amount_b: Amount


@dataclass(frozen=True)
class RemoveLiquidityResult:
    amount_a: Amount
    amount_b: Amount


@dataclass(frozen=True)
class SwapResult:
    amount_out: Amount
    fee_amount: Amount
    asset_in: AssetId
    asset_out: AssetId


OperationResult = Union[AddLiquidityResult, RemoveLiquidityResult, SwapResult]


@dataclass(frozen=True)
class Transition:
    operation: Operation
    state: PoolState
    result: OperationResult
    event: PoolEvent
    ledger_ops: Tuple[LedgerOp, ...]
