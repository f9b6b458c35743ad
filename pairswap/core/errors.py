"""Exception types for the exchange engine.

Every error is scoped to the single rejected operation: when one of these is
raised, neither the pool state nor the ledger has changed.
"""

from __future__ import annotations


class PoolError(ValueError):
    """Base class for rejected pool operations."""


class InvalidAmount(PoolError):
    """An amount was zero or negative where a positive amount is required,
    or was too small to produce any output or LP claim."""


class UnsupportedAsset(PoolError):
    """A swap named an asset that is not one of the pool's two assets."""


class RatioMismatch(PoolError):
    """A deposit deviates from the pool price by more than the configured tolerance."""


class SlippageExceeded(RatioMismatch):
    """A swap would deliver less than the caller's minimum output."""


class InsufficientShare(PoolError):
    """A withdrawal exceeds the holder's LP balance or the pool's LP supply."""


class EmptyPool(PoolError):
    """The operation needs reserves and the pool has none."""


class LedgerFailure(PoolError):
    """The asset ledger rejected a transfer, mint or burn."""


class ReentrancyRejected(PoolError):
    """A pool operation was invoked while another one was still in progress."""


class PoolInvariantError(PoolError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
