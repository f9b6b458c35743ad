"""
State management for the pairswap pool
"""

from .balances import AllowanceTable, BalanceTable
from .ledger import (
    AssetLedger,
    InMemoryLedger,
    InsufficientAllowance,
    InsufficientBalance,
    LedgerError,
)
from .pools import PoolState, Side, compute_pool_id, initial_state, state_from_dict, state_to_dict

__all__ = [
    "AllowanceTable",
    "BalanceTable",
    "AssetLedger",
    "InMemoryLedger",
    "InsufficientAllowance",
    "InsufficientBalance",
    "LedgerError",
    "PoolState",
    "Side",
    "compute_pool_id",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
]
