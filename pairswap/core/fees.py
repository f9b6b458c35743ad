"""
Swap fee policy (deterministic, integer-only).

Each swap pays `fee_total = floor(gross_in * fee_bps / 10_000)`. The fee is
split in two:
- the treasury share, `floor(fee_total * treasury_share_bps / 10_000)`, is
  skimmed to the treasury account;
- the remainder stays in the pool and grows the reserves held for LPs.

Rounding remainders of the split always fall to the LP side, so no fee unit is
ever stranded outside the pool's books.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..state.pools import BPS_DENOM, PoolState


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


@dataclass(frozen=True)
class FeePolicy:
    fee_bps: int
    treasury_share_bps: int = BPS_DENOM

    def __post_init__(self) -> None:
        for name, v in (
            ("fee_bps", self.fee_bps),
            ("treasury_share_bps", self.treasury_share_bps),
        ):
            _require_int(name, v)
            if not (0 <= v <= BPS_DENOM):
                raise ValueError(f"{name} must be in [0, {BPS_DENOM}]: {v}")

    @classmethod
    def for_pool(cls, state: PoolState) -> "FeePolicy":
        return cls(fee_bps=state.fee_bps, treasury_share_bps=state.treasury_share_bps)


@dataclass(frozen=True)
class SwapFee:
    gross_in: int
    fee_total: int
    treasury_fee: int
    lp_fee: int
    net_in: int

    def __post_init__(self) -> None:
        for name, v in (
            ("gross_in", self.gross_in),
            ("fee_total", self.fee_total),
            ("treasury_fee", self.treasury_fee),
            ("lp_fee", self.lp_fee),
            ("net_in", self.net_in),
        ):
            _require_int(name, v)
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.treasury_fee + self.lp_fee != self.fee_total:
            raise AssertionError("fee split does not add up to fee_total")
        if self.fee_total + self.net_in != self.gross_in:
            raise AssertionError("fee_total + net_in does not add up to gross_in")


def compute_fee_total(*, gross_in: int, fee_bps: int) -> int:
    """
    Compute `fee_total = floor(gross_in * fee_bps / 10_000)`.
    """
    _require_int("gross_in", gross_in)
    _require_int("fee_bps", fee_bps)
    if gross_in < 0:
        raise ValueError("gross_in must be non-negative")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]")
    return (gross_in * fee_bps) // BPS_DENOM


def compute_treasury_fee(*, fee_total: int, treasury_share_bps: int) -> int:
    """
    Compute `treasury_fee = floor(fee_total * treasury_share_bps / 10_000)`.
    """
    _require_int("fee_total", fee_total)
    _require_int("treasury_share_bps", treasury_share_bps)
    if fee_total < 0:
        raise ValueError("fee_total must be non-negative")
    if not (0 <= treasury_share_bps <= BPS_DENOM):
        raise ValueError(f"treasury_share_bps must be in [0, {BPS_DENOM}]")
    return (fee_total * treasury_share_bps) // BPS_DENOM


def split_swap_fee(gross_in: int, policy: FeePolicy) -> SwapFee:
    """Charge the pool fee on `gross_in` and split it between treasury and LPs."""
    fee_total = compute_fee_total(gross_in=gross_in, fee_bps=policy.fee_bps)
    treasury_fee = compute_treasury_fee(
        fee_total=fee_total, treasury_share_bps=policy.treasury_share_bps
    )
    return SwapFee(
        gross_in=gross_in,
        fee_total=fee_total,
        treasury_fee=treasury_fee,
        lp_fee=fee_total - treasury_fee,
        net_in=gross_in - fee_total,
    )
