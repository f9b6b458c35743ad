"""
Construction-time configuration for a pool.

Everything here is fixed for the lifetime of the pool: the pair, the
treasury and the fee rate. A config can be built directly, from a mapping,
from a YAML file, or from `PAIRSWAP_*` environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from .state.pools import BPS_DENOM, PoolState, initial_state

ENV_PREFIX = "PAIRSWAP_"


class ConfigError(ValueError):
    """Raised when a pool configuration is missing or malformed."""


@dataclass(frozen=True)
class PoolConfig:
    asset_a: str
    asset_b: str
    treasury: str
    fee_bps: int = 30
    # Share of each swap fee sent to the treasury; the rest stays with LPs.
    treasury_share_bps: int = BPS_DENOM
    # If set, add_liquidity rejects offers leaving more than this share of either side unused.
    ratio_tolerance_bps: Optional[int] = None
    # Ledger account holding the reserves; defaults to the pool id.
    pool_account: Optional[str] = None
    # Ledger asset id of the LP claim; defaults to one derived from the pool id.
    lp_asset: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("asset_a", "asset_b", "treasury"):
            v = getattr(self, name)
            if not isinstance(v, str) or not v.strip():
                raise ConfigError(f"{name} must be a non-empty string")
        if self.asset_a == self.asset_b:
            raise ConfigError(f"asset_a and asset_b must differ: {self.asset_a!r}")

        for name in ("fee_bps", "treasury_share_bps", "ratio_tolerance_bps"):
            v = getattr(self, name)
            if v is None and name == "ratio_tolerance_bps":
                continue
            if not isinstance(v, int) or isinstance(v, bool):
                raise ConfigError(f"{name} must be an int")
            if not (0 <= v <= BPS_DENOM):
                raise ConfigError(f"{name} must be in [0, {BPS_DENOM}]: {v}")

        for name in ("pool_account", "lp_asset"):
            v = getattr(self, name)
            if v is not None and (not isinstance(v, str) or not v.strip()):
                raise ConfigError(f"{name} must be a non-empty string when set")

    def initial_state(self) -> PoolState:
        return initial_state(
            self.asset_a,
            self.asset_b,
            self.treasury,
            self.fee_bps,
            treasury_share_bps=self.treasury_share_bps,
            lp_asset=self.lp_asset,
        )


def _require_mapping(obj: Any, *, name: str) -> Mapping[str, Any]:
    if not isinstance(obj, Mapping):
        raise ConfigError(f"{name} must be a mapping")
    return obj


def _optional_int(obj: Mapping[str, Any], key: str) -> Optional[int]:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, int) or isinstance(v, bool):
        raise ConfigError(f"{key} must be an int")
    return v


def config_from_mapping(obj: Mapping[str, Any]) -> PoolConfig:
    """
    Build a PoolConfig from a plain mapping.

    Accepts either the fields at top level or nested under a `pool` key.
    Unknown keys are rejected so typos do not silently fall back to defaults.
    """
    root = _require_mapping(obj, name="config")
    if "pool" in root:
        root = _require_mapping(root["pool"], name="config.pool")

    known = set(PoolConfig.__dataclass_fields__)
    unknown = sorted(set(root) - known)
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(unknown)}")

    for key in ("asset_a", "asset_b", "treasury"):
        if key not in root:
            raise ConfigError(f"missing required config key: {key}")

    kwargs: dict[str, Any] = {
        "asset_a": root["asset_a"],
        "asset_b": root["asset_b"],
        "treasury": root["treasury"],
        "ratio_tolerance_bps": _optional_int(root, "ratio_tolerance_bps"),
        "pool_account": root.get("pool_account"),
        "lp_asset": root.get("lp_asset"),
    }
    for key in ("fee_bps", "treasury_share_bps"):
        v = _optional_int(root, key)
        if v is not None:
            kwargs[key] = v
    return PoolConfig(**kwargs)


def load_config(path: Path | str) -> PoolConfig:
    """Load a PoolConfig from a YAML file."""
    p = Path(path)
    try:
        raw = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config file {p}: {exc}") from exc
    try:
        obj = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {p}: {exc}") from exc
    return config_from_mapping(_require_mapping(obj, name=str(p)))


def _int_env(environ: Mapping[str, str], name: str) -> Optional[int]:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from exc


def config_from_env(environ: Optional[Mapping[str, str]] = None, *, prefix: str = ENV_PREFIX) -> PoolConfig:
    """
    Build a PoolConfig from environment variables:

        PAIRSWAP_ASSET_A, PAIRSWAP_ASSET_B, PAIRSWAP_TREASURY  (required)
        PAIRSWAP_FEE_BPS, PAIRSWAP_TREASURY_SHARE_BPS, PAIRSWAP_RATIO_TOLERANCE_BPS,
        PAIRSWAP_POOL_ACCOUNT, PAIRSWAP_LP_ASSET  (optional)
    """
    env = os.environ if environ is None else environ
    obj: dict[str, Any] = {}
    for key in ("asset_a", "asset_b", "treasury", "pool_account", "lp_asset"):
        raw = env.get(prefix + key.upper())
        if raw is not None and raw.strip():
            obj[key] = raw.strip()
    for key in ("fee_bps", "treasury_share_bps", "ratio_tolerance_bps"):
        v = _int_env(env, prefix + key.upper())
        if v is not None:
            obj[key] = v
    return config_from_mapping(obj)
