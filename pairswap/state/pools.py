"""
Pool state for the two-asset exchange.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Any, Mapping, Optional, Tuple

from .balances import Account, Amount, AssetId


BPS_DENOM = 10_000


@unique
class Side(Enum):
    """Which of the pool's two assets an operation refers to."""
    A = "A"
    B = "B"

    @property
    def other(self) -> "Side":
        return Side.B if self is Side.A else Side.A


def compute_pool_id(asset_a: AssetId, asset_b: AssetId, fee_bps: int) -> str:
    """
    Deterministically compute a pool_id for the given pool parameters.

        pool_id = H("PairswapPool" || asset_a || 0x00 || asset_b || 0x00 || fee_bps)

    Order matters: (A, B) and (B, A) are different pools because the pair
    order fixes the meaning of `get_liquidity_ratio()`.
    """
    if asset_a == asset_b:
        raise ValueError(f"Pool assets must differ: {asset_a!r}")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")

    pool_id_data = (
        b"PairswapPool"
        + asset_a.encode("utf-8")
        + b"\x00"
        + asset_b.encode("utf-8")
        + b"\x00"
        + str(int(fee_bps)).encode("utf-8")
    )
    return "0x" + hashlib.sha256(pool_id_data).hexdigest()


@dataclass(frozen=True)
class PoolState:
    """
    State of a two-asset constant-product pool.

    Attributes:
        pool_id: Deterministic pool identifier (hex string)
        asset_a: Identifier of the first underlying asset
        asset_b: Identifier of the second underlying asset
        lp_asset: Identifier of the LP claim asset on the ledger
        treasury: Account receiving the protocol share of swap fees
        fee_bps: Swap fee in basis points (0-10000), fixed at construction
        treasury_share_bps: Share of each swap fee routed to the treasury
        reserve_a: Reserve held for asset_a
        reserve_b: Reserve held for asset_b
        lp_supply: Total outstanding LP claim
    """
    pool_id: str
    asset_a: AssetId
    asset_b: AssetId
    lp_asset: AssetId
    treasury: Account
    fee_bps: int
    treasury_share_bps: int = BPS_DENOM
    reserve_a: Amount = 0
    reserve_b: Amount = 0
    lp_supply: Amount = 0

    def __post_init__(self) -> None:
        """Validate per-field bounds; cross-field invariants live in core.invariants."""
        if len({self.asset_a, self.asset_b, self.lp_asset}) != 3:
            raise ValueError(
                f"asset_a, asset_b and lp_asset must be distinct: "
                f"({self.asset_a!r}, {self.asset_b!r}, {self.lp_asset!r})"
            )

        for name, v in (
            ("fee_bps", self.fee_bps),
            ("treasury_share_bps", self.treasury_share_bps),
            ("reserve_a", self.reserve_a),
            ("reserve_b", self.reserve_b),
            ("lp_supply", self.lp_supply),
        ):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")

        if self.fee_bps > BPS_DENOM:
            raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {self.fee_bps}")
        if self.treasury_share_bps > BPS_DENOM:
            raise ValueError(
                f"treasury_share_bps must be in [0, {BPS_DENOM}]: {self.treasury_share_bps}"
            )

    @property
    def is_empty(self) -> bool:
        return self.lp_supply == 0

    def asset_of(self, side: Side) -> AssetId:
        return self.asset_a if side is Side.A else self.asset_b

    def side_of(self, asset: AssetId) -> Optional[Side]:
        """Resolve an asset identifier to its slot, or None if not in the pair."""
        if asset == self.asset_a:
            return Side.A
        if asset == self.asset_b:
            return Side.B
        return None

    def reserve_of(self, side: Side) -> Amount:
        return self.reserve_a if side is Side.A else self.reserve_b

    def reserves_for(self, side_in: Side) -> Tuple[Amount, Amount]:
        """Reserves ordered as (reserve_in, reserve_out) for a swap paying `side_in`."""
        return self.reserve_of(side_in), self.reserve_of(side_in.other)

    def with_reserves_for(self, side_in: Side, reserve_in: Amount, reserve_out: Amount) -> "PoolState":
        if side_in is Side.A:
            return replace(self, reserve_a=reserve_in, reserve_b=reserve_out)
        return replace(self, reserve_a=reserve_out, reserve_b=reserve_in)

    def get_constant_product(self) -> int:
        """k = reserve_a * reserve_b."""
        return self.reserve_a * self.reserve_b

    def __repr__(self) -> str:
        return (
            f"PoolState(pool_id={self.pool_id[:16]}..., "
            f"assets=({self.asset_a}, {self.asset_b}), "
            f"reserves=({self.reserve_a}, {self.reserve_b}), "
            f"lp_supply={self.lp_supply}, fee_bps={self.fee_bps})"
        )


def initial_state(
    asset_a: AssetId,
    asset_b: AssetId,
    treasury: Account,
    fee_bps: int,
    *,
    treasury_share_bps: int = BPS_DENOM,
    lp_asset: Optional[AssetId] = None,
) -> PoolState:
    """Return the empty pool for a pair: zero reserves, zero LP supply."""
    pool_id = compute_pool_id(asset_a, asset_b, fee_bps)
    return PoolState(
        pool_id=pool_id,
        asset_a=asset_a,
        asset_b=asset_b,
        lp_asset=lp_asset if lp_asset is not None else f"LP-{pool_id[2:18]}",
        treasury=treasury,
        fee_bps=fee_bps,
        treasury_share_bps=treasury_share_bps,
    )


# Derived from the PoolState field definitions.
STATE_VAR_NAMES: tuple[str, ...] = tuple(PoolState.__dataclass_fields__)


def state_to_dict(state: PoolState) -> dict[str, Any]:
    """Serialize a PoolState to a plain dict."""
    return {name: getattr(state, name) for name in STATE_VAR_NAMES}


def state_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        field_type = PoolState.__dataclass_fields__[name].type
        if field_type in ("int", "Amount"):
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
            kwargs[name] = int(val)
        else:
            if not isinstance(val, str):
                raise TypeError(f"state var {name!r} must be str, got {type(val).__name__}")
            kwargs[name] = val
    state = PoolState(**kwargs)
    if state.pool_id != compute_pool_id(state.asset_a, state.asset_b, state.fee_bps):
        raise ValueError(f"pool_id does not match pool parameters: {state.pool_id}")
    return state
