"""
pairswap: a two-asset constant-product exchange engine
"""

from .config import ConfigError, PoolConfig, config_from_env, config_from_mapping, load_config
from .core import (
    EmptyPool,
    InsufficientShare,
    InvalidAmount,
    LedgerFailure,
    LiquidityAdded,
    LiquidityRemoved,
    PoolError,
    PoolInvariantError,
    RatioMismatch,
    ReentrancyRejected,
    SlippageExceeded,
    SwapExecuted,
    UnsupportedAsset,
)
from .integration import Exchange
from .state import InMemoryLedger, PoolState, Side

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "PoolConfig",
    "config_from_env",
    "config_from_mapping",
    "load_config",
    "EmptyPool",
    "InsufficientShare",
    "InvalidAmount",
    "LedgerFailure",
    "LiquidityAdded",
    "LiquidityRemoved",
    "PoolError",
    "PoolInvariantError",
    "RatioMismatch",
    "ReentrancyRejected",
    "SlippageExceeded",
    "SwapExecuted",
    "UnsupportedAsset",
    "Exchange",
    "InMemoryLedger",
    "PoolState",
    "Side",
]
