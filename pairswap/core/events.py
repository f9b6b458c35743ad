"""Records emitted after each committed pool operation.

Events are produced by the pure transitions alongside the next state and are
published by the exchange only once the operation has fully committed; a
rejected operation never emits.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, unique
from typing import Any, ClassVar, Union

from ..state.balances import Account, Amount, AssetId


@unique
class EventKind(Enum):
    LIQUIDITY_ADDED = "LiquidityAdded"
    LIQUIDITY_REMOVED = "LiquidityRemoved"
    SWAP_EXECUTED = "SwapExecuted"


@dataclass(frozen=True)
class LiquidityAdded:
    kind: ClassVar[EventKind] = EventKind.LIQUIDITY_ADDED

    provider: Account
    amount_a: Amount
    amount_b: Amount
    lp_minted: Amount


@dataclass(frozen=True)
class LiquidityRemoved:
    kind: ClassVar[EventKind] = EventKind.LIQUIDITY_REMOVED

    provider: Account
    amount_a: Amount
    amount_b: Amount
    lp_burned: Amount


@dataclass(frozen=True)
class SwapExecuted:
    kind: ClassVar[EventKind] = EventKind.SWAP_EXECUTED

    trader: Account
    amount_in: Amount
    amount_out: Amount
    asset_in: AssetId
    asset_out: AssetId
    fee_amount: Amount


PoolEvent = Union[LiquidityAdded, LiquidityRemoved, SwapExecuted]


def event_to_dict(event: PoolEvent) -> dict[str, Any]:
    """Flatten an event to `{"event": <name>, **fields}`."""
    return {"event": event.kind.value, **asdict(event)}
