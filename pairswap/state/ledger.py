"""
Asset ledger collaborator.

The exchange engine never owns balances. It talks to an `AssetLedger`, which
holds the two underlying assets and the LP claim asset, and only ever asks it
to move, mint or burn. `InMemoryLedger` is the reference implementation used
by tests and simulations; production deployments plug their own ledger in
behind the same protocol.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List, Protocol, Tuple, runtime_checkable

import structlog

from .balances import Account, AllowanceTable, Amount, AssetId, BalanceTable

logger = structlog.get_logger()

TransferHook = Callable[[AssetId, Account, Account, Amount], None]


class LedgerError(ValueError):
    """Raised by a ledger when it rejects a transfer, mint or burn."""


class InsufficientBalance(LedgerError):
    """Source account does not hold enough of the asset."""


class InsufficientAllowance(LedgerError):
    """Spender has not been approved for enough of the owner's asset."""


@dataclass(frozen=True)
class LedgerCheckpoint:
    """Opaque restore point returned by `InMemoryLedger.checkpoint()`."""

    balances: Dict[Tuple[Account, AssetId], Amount]
    allowances: Dict[Tuple[Account, Account, AssetId], Amount]


@runtime_checkable
class AssetLedger(Protocol):
    """Operations the exchange engine consumes from the asset ledger."""

    def balance_of(self, asset: AssetId, account: Account) -> Amount:
        ...

    def transfer_from(
        self,
        asset: AssetId,
        src: Account,
        dst: Account,
        amount: Amount,
        spender: Account | None = None,
    ) -> None:
        """Move `amount` from `src` to `dst` against a prior approval of `spender` (default `dst`)."""
        ...

    def transfer(self, asset: AssetId, src: Account, dst: Account, amount: Amount) -> None:
        """Move `amount` from `src` to `dst`; the caller is trusted to control `src`."""
        ...

    def mint(self, asset: AssetId, to: Account, amount: Amount) -> None:
        ...

    def burn(self, asset: AssetId, owner: Account, amount: Amount) -> None:
        ...

    def checkpoint(self) -> object:
        """Capture a restore point covering balances and approvals."""
        ...

    def rollback(self, checkpoint: object) -> None:
        """
        Return to `checkpoint` exactly, approvals included.

        Must not invoke transfer callbacks: it undoes effects, it does not move funds.
        """
        ...


def _require_amount(amount: Amount) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise TypeError("amount must be an int")
    if amount < 0:
        raise ValueError(f"amount must be non-negative: {amount}")


class InMemoryLedger:
    """
    Dict-backed ledger with ERC20-style allowances.

    Transfer hooks are invoked with `(asset, src, dst, amount)` once a transfer
    or mint has been validated but before any balance moves; a hook that
    raises aborts the call with the ledger untouched. They model token
    callbacks and are how tests attempt re-entrant calls into the exchange.
    `rollback()` restores a checkpoint without invoking them.
    """

    def __init__(self) -> None:
        self._balances = BalanceTable()
        self._allowances = AllowanceTable()
        self._hooks: List[TransferHook] = []

    # -- queries -------------------------------------------------------------

    def balance_of(self, asset: AssetId, account: Account) -> Amount:
        return self._balances.get(account, asset)

    def allowance(self, asset: AssetId, owner: Account, spender: Account) -> Amount:
        return self._allowances.get(owner, spender, asset)

    def total_supply(self, asset: AssetId) -> Amount:
        return self._balances.total(asset)

    # -- mutations -----------------------------------------------------------

    def add_hook(self, hook: TransferHook) -> None:
        self._hooks.append(hook)

    def approve(self, asset: AssetId, owner: Account, spender: Account, amount: Amount) -> None:
        _require_amount(amount)
        self._allowances.set(owner, spender, asset, amount)

    def transfer(self, asset: AssetId, src: Account, dst: Account, amount: Amount) -> None:
        _require_amount(amount)
        self._move(asset, src, dst, amount)

    def transfer_from(
        self,
        asset: AssetId,
        src: Account,
        dst: Account,
        amount: Amount,
        spender: Account | None = None,
    ) -> None:
        _require_amount(amount)
        spender = dst if spender is None else spender
        allowed = self._allowances.get(src, spender, asset)
        if amount > allowed:
            raise InsufficientAllowance(
                f"{spender} may spend {allowed} of {src}'s {asset}, requested {amount}"
            )
        self._move(asset, src, dst, amount)
        self._allowances.consume(src, spender, asset, amount)

    def mint(self, asset: AssetId, to: Account, amount: Amount) -> None:
        _require_amount(amount)
        self._notify(asset, "", to, amount)
        self._balances.add(to, asset, amount)
        logger.debug("ledger_mint", asset=asset, to=to, amount=amount)

    def burn(self, asset: AssetId, owner: Account, amount: Amount) -> None:
        _require_amount(amount)
        self._check_balance(asset, owner, amount)
        self._balances.subtract(owner, asset, amount)
        logger.debug("ledger_burn", asset=asset, owner=owner, amount=amount)

    def checkpoint(self) -> LedgerCheckpoint:
        return LedgerCheckpoint(
            balances=self._balances.snapshot(),
            allowances=self._allowances.snapshot(),
        )

    def rollback(self, checkpoint: object) -> None:
        if not isinstance(checkpoint, LedgerCheckpoint):
            raise TypeError(f"not a checkpoint of this ledger: {checkpoint!r}")
        self._balances.restore(checkpoint.balances)
        self._allowances.restore(checkpoint.allowances)
        logger.debug("ledger_rollback", entries=len(self._balances))

    # -- internals -----------------------------------------------------------

    def _check_balance(self, asset: AssetId, account: Account, amount: Amount) -> None:
        held = self._balances.get(account, asset)
        if amount > held:
            raise InsufficientBalance(f"{account} holds {held} {asset}, needs {amount}")

    def _move(self, asset: AssetId, src: Account, dst: Account, amount: Amount) -> None:
        self._check_balance(asset, src, amount)
        self._notify(asset, src, dst, amount)
        self._balances.subtract(src, asset, amount)
        self._balances.add(dst, asset, amount)

    def _notify(self, asset: AssetId, src: Account, dst: Account, amount: Amount) -> None:
        for hook in list(self._hooks):
            hook(asset, src, dst, amount)

    def __repr__(self) -> str:
        return f"InMemoryLedger({self._balances!r}, {self._allowances!r})"
