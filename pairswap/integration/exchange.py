"""
Exchange: the imperative shell around the pool transitions.

This is where the pure core meets the asset ledger:
- Computes the full transition from a snapshot of the current pool state.
- Checks state and transition invariants before anything moves (fail-closed).
- Applies the ledger effects in order, rolling the ledger back to its
  pre-operation checkpoint if any of them fails.
- Commits the new pool state and records the event only after every ledger
  effect succeeded; subscribers are notified once the guard is released.

Every public mutating entry point runs under an exclusivity guard. Calls
from other threads are serialized; a nested call from the same thread (for
example from a ledger transfer hook) is rejected with `ReentrancyRejected`
and never observes a half-applied operation.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Tuple, cast

import structlog

from ..config import PoolConfig
from ..core import transitions
from ..core.cpmm import liquidity_ratio
from ..core.errors import LedgerFailure, PoolError, PoolInvariantError, ReentrancyRejected
from ..core.events import EventKind, PoolEvent, event_to_dict
from ..core.invariants import check_all, check_transition
from ..core.types import (
    AddLiquidityResult,
    LedgerOp,
    LedgerOpKind,
    Operation,
    OperationResult,
    RemoveLiquidityResult,
    SwapResult,
    Transition,
)
from ..state.balances import Account, Amount, AssetId
from ..state.ledger import AssetLedger, LedgerError
from ..state.pools import PoolState

logger = structlog.get_logger()

EventSubscriber = Callable[[PoolEvent], None]

_LOG_EVENT_NAMES = {
    EventKind.LIQUIDITY_ADDED: "liquidity_added",
    EventKind.LIQUIDITY_REMOVED: "liquidity_removed",
    EventKind.SWAP_EXECUTED: "swap_executed",
}


class Exchange:
    """
    A single two-asset pool bound to an asset ledger.

    Attributes:
        config: Construction-time pool configuration
        pool_account: Ledger account that holds the reserves
    """

    def __init__(
        self,
        config: PoolConfig,
        ledger: AssetLedger,
        *,
        state: Optional[PoolState] = None,
    ) -> None:
        expected = config.initial_state()
        if state is None:
            state = expected
        elif (state.pool_id, state.lp_asset, state.treasury, state.treasury_share_bps) != (
            expected.pool_id,
            expected.lp_asset,
            expected.treasury,
            expected.treasury_share_bps,
        ):
            raise ValueError(f"state for pool {state.pool_id} does not match config")

        violations = check_all(state)
        if violations:
            raise PoolInvariantError(violations)

        self.config = config
        self.pool_account: Account = config.pool_account or state.pool_id
        self._ledger = ledger
        self._state = state
        self._events: List[PoolEvent] = []
        self._subscribers: List[EventSubscriber] = []
        self._mutex = threading.Lock()
        self._busy_thread: Optional[int] = None

    # -- read accessors ------------------------------------------------------

    @property
    def state(self) -> PoolState:
        """Last committed pool state (never a partially-applied one)."""
        return self._state

    @property
    def events(self) -> Tuple[PoolEvent, ...]:
        return tuple(self._events)

    @property
    def lp_supply(self) -> Amount:
        return self._state.lp_supply

    @property
    def lp_asset(self) -> AssetId:
        return self._state.lp_asset

    def get_reserves(self) -> Tuple[Amount, Amount]:
        s = self._state
        return s.reserve_a, s.reserve_b

    def get_liquidity_ratio(self) -> int:
        """reserve_a / reserve_b as an 18-decimal fixed-point integer."""
        s = self._state
        return liquidity_ratio(s.reserve_a, s.reserve_b)

    def lp_balance_of(self, account: Account) -> Amount:
        return self._ledger.balance_of(self._state.lp_asset, account)

    def quote_swap(self, input_asset: AssetId, input_amount: Amount) -> SwapResult:
        """Preview `swap()` against the current state without moving anything."""
        s = self._state
        side = transitions.resolve_side(s, input_asset)
        return transitions.swap(s, "", side, input_amount).result

    def subscribe(self, subscriber: EventSubscriber) -> None:
        self._subscribers.append(subscriber)

    # -- operations ----------------------------------------------------------

    def add_liquidity(self, provider: Account, amount_a: Amount, amount_b: Amount) -> AddLiquidityResult:
        """
        Deposit up to (amount_a, amount_b); the provider must have approved the
        pool account for both amounts. Returns LP minted and the amounts used.
        """
        def build(s: PoolState) -> Transition:
            return transitions.add_liquidity(
                s, provider, amount_a, amount_b,
                ratio_tolerance_bps=self.config.ratio_tolerance_bps,
            )

        return cast(AddLiquidityResult, self._run(Operation.ADD_LIQUIDITY, provider, build))

    def remove_liquidity(self, provider: Account, lp_amount: Amount) -> RemoveLiquidityResult:
        """Burn `lp_amount` of the provider's LP and return both assets."""
        def build(s: PoolState) -> Transition:
            return transitions.remove_liquidity(
                s, provider, lp_amount,
                lp_balance=self._ledger.balance_of(s.lp_asset, provider),
            )

        return cast(RemoveLiquidityResult, self._run(Operation.REMOVE_LIQUIDITY, provider, build))

    def swap(
        self,
        trader: Account,
        input_asset: AssetId,
        input_amount: Amount,
        *,
        min_amount_out: Amount = 0,
    ) -> SwapResult:
        """Sell exactly `input_amount` of `input_asset`; returns output and fee amounts."""
        def build(s: PoolState) -> Transition:
            side = transitions.resolve_side(s, input_asset)
            return transitions.swap(s, trader, side, input_amount, min_amount_out=min_amount_out)

        return cast(SwapResult, self._run(Operation.SWAP, trader, build))

    # -- internals -----------------------------------------------------------

    @contextmanager
    def _exclusive(self, operation: Operation) -> Iterator[None]:
        if self._busy_thread == threading.get_ident():
            raise ReentrancyRejected(
                f"{operation.value} called while another pool operation is in progress"
            )
        with self._mutex:
            self._busy_thread = threading.get_ident()
            try:
                yield
            finally:
                self._busy_thread = None

    def _run(
        self,
        operation: Operation,
        caller: Account,
        build: Callable[[PoolState], Transition],
    ) -> OperationResult:
        log = logger.bind(pool_id=self._state.pool_id, operation=operation.value, caller=caller)
        try:
            with self._exclusive(operation):
                pre = self._state
                transition = build(pre)

                violations = check_transition(pre, transition.state, operation)
                if violations:
                    raise PoolInvariantError(violations)

                self._preflight(transition.ledger_ops)
                self._apply_ledger_ops(transition.ledger_ops)
                # Event log order matches commit order.
                self._state = transition.state
                self._events.append(transition.event)
        except PoolError as exc:
            log.warning("operation_rejected", error=type(exc).__name__, reason=str(exc))
            raise

        for subscriber in list(self._subscribers):
            subscriber(transition.event)
        log.info(
            _LOG_EVENT_NAMES[transition.event.kind],
            reserve_a=transition.state.reserve_a,
            reserve_b=transition.state.reserve_b,
            lp_supply=transition.state.lp_supply,
            **{k: v for k, v in event_to_dict(transition.event).items() if k != "event"},
        )
        return transition.result

    def _preflight(self, ops: Tuple[LedgerOp, ...]) -> None:
        """Refuse pushes the pool account cannot cover once this operation's pulls land."""
        available: dict[AssetId, Amount] = {}
        for op in ops:
            if op.kind not in (LedgerOpKind.PULL, LedgerOpKind.PUSH):
                continue
            if op.asset not in available:
                available[op.asset] = self._ledger.balance_of(op.asset, self.pool_account)
            if op.kind is LedgerOpKind.PULL:
                available[op.asset] += op.amount
            else:
                available[op.asset] -= op.amount
                if available[op.asset] < 0:
                    raise LedgerFailure(
                        f"pool account {self.pool_account} cannot cover {op.amount} {op.asset}"
                    )

    def _apply_ledger_ops(self, ops: Tuple[LedgerOp, ...]) -> None:
        """
        Apply `ops` in order, all or nothing.

        On any failure the ledger is rolled back to its state before the first
        op, approvals included. Rollback does not go through transfers, so a
        receiver callback that rejected an op cannot also block its undo.
        """
        checkpoint = self._ledger.checkpoint()
        for op in ops:
            try:
                self._execute(op)
            except Exception as exc:
                self._rollback(checkpoint, failed=op)
                if isinstance(exc, PoolError):
                    raise
                if isinstance(exc, LedgerError):
                    raise LedgerFailure(f"{op.kind.value} of {op.amount} {op.asset} failed: {exc}") from exc
                raise LedgerFailure(f"{op.kind.value} of {op.amount} {op.asset} raised {exc!r}") from exc

    def _execute(self, op: LedgerOp) -> None:
        ledger = self._ledger
        if op.kind is LedgerOpKind.PULL:
            ledger.transfer_from(op.asset, op.account, self.pool_account, op.amount, spender=self.pool_account)
        elif op.kind is LedgerOpKind.PUSH:
            ledger.transfer(op.asset, self.pool_account, op.account, op.amount)
        elif op.kind is LedgerOpKind.MINT:
            ledger.mint(op.asset, op.account, op.amount)
        elif op.kind is LedgerOpKind.BURN:
            ledger.burn(op.asset, op.account, op.amount)
        else:  # pragma: no cover - exhaustive over LedgerOpKind
            raise ValueError(f"unknown ledger op: {op.kind}")

    def _rollback(self, checkpoint: object, *, failed: LedgerOp) -> None:
        try:
            self._ledger.rollback(checkpoint)
        except Exception as exc:
            logger.error(
                "ledger_rollback_failed",
                pool_id=self._state.pool_id,
                op=failed.kind.value,
                asset=failed.asset,
                account=failed.account,
                amount=failed.amount,
                error=repr(exc),
            )
            raise LedgerFailure(
                f"ledger left inconsistent: could not roll back after {failed.kind.value} of "
                f"{failed.amount} {failed.asset}"
            ) from exc

    def __repr__(self) -> str:
        return f"Exchange({self._state!r})"
