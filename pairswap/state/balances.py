"""
Sparse amount tables backing the in-memory ledger.

Both tables map a tuple key to a non-negative integer and never store zeros,
so two tables holding the same amounts have equal snapshots.
"""

from typing import Dict, Generic, Hashable, Tuple, TypeVar


# Type aliases
Account = str  # opaque account identifier
AssetId = str  # opaque asset identifier
Amount = int  # Non-negative integer (arbitrary precision)

K = TypeVar("K", bound=Hashable)


class _SparseAmounts(Generic[K]):
    """Key -> non-negative amount; a missing key reads as zero."""

    _label = "Amount"

    def __init__(self) -> None:
        self._amounts: Dict[K, Amount] = {}

    def _get(self, key: K) -> Amount:
        return self._amounts.get(key, 0)

    def _set(self, key: K, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"{self._label} cannot be negative: {amount}")
        if amount == 0:
            self._amounts.pop(key, None)
        else:
            self._amounts[key] = amount

    def _shift(self, key: K, delta: Amount) -> None:
        current = self._get(key)
        if current + delta < 0:
            raise ValueError(
                f"Insufficient {self._label.lower()}: {current} + {delta} = {current + delta} < 0"
            )
        self._set(key, current + delta)

    def snapshot(self) -> Dict[K, Amount]:
        """Copy of every non-zero entry."""
        return dict(self._amounts)

    def restore(self, snapshot: Dict[K, Amount]) -> None:
        """Replace the table contents with a prior `snapshot()`."""
        if any(v <= 0 for v in snapshot.values()):
            raise ValueError("snapshot holds non-positive amounts")
        self._amounts = dict(snapshot)

    def __len__(self) -> int:
        return len(self._amounts)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} entries)"


class BalanceTable(_SparseAmounts[Tuple[Account, AssetId]]):
    """Holdings keyed by (account, asset)."""

    _label = "Balance"

    def get(self, account: Account, asset: AssetId) -> Amount:
        return self._get((account, asset))

    def set(self, account: Account, asset: AssetId, amount: Amount) -> None:
        """
        Raises:
            ValueError: If amount is negative
        """
        self._set((account, asset), amount)

    def add(self, account: Account, asset: AssetId, delta: Amount) -> None:
        """Apply a signed delta; refuses to go below zero."""
        self._shift((account, asset), delta)

    def subtract(self, account: Account, asset: AssetId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self._shift((account, asset), -delta)

    def total(self, asset: AssetId) -> Amount:
        """Outstanding supply of `asset` across all holders."""
        return sum(v for (_, a), v in self._amounts.items() if a == asset)

    def get_all_balances(self) -> Dict[Tuple[Account, AssetId], Amount]:
        return self.snapshot()

    def get_balances_for_asset(self, asset: AssetId) -> Dict[Account, Amount]:
        return {acct: v for (acct, a), v in self._amounts.items() if a == asset}

    def verify_non_negative(self) -> bool:
        return all(v >= 0 for v in self._amounts.values())


class AllowanceTable(_SparseAmounts[Tuple[Account, Account, AssetId]]):
    """Spending approvals keyed by (owner, spender, asset)."""

    _label = "Allowance"

    def get(self, owner: Account, spender: Account, asset: AssetId) -> Amount:
        return self._get((owner, spender, asset))

    def set(self, owner: Account, spender: Account, asset: AssetId, amount: Amount) -> None:
        self._set((owner, spender, asset), amount)

    def consume(self, owner: Account, spender: Account, asset: AssetId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Allowance spend must be non-negative: {amount}")
        self._shift((owner, spender, asset), -amount)
