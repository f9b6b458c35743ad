"""
Exchange integration layer (pool bound to an asset ledger)
"""

from .exchange import EventSubscriber, Exchange

__all__ = [
    "EventSubscriber",
    "Exchange",
]
