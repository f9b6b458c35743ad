"""structlog setup for applications embedding the exchange."""

from __future__ import annotations

import logging

import structlog


def configure_logging(verbose: bool = False, *, renderer: structlog.typing.Processor | None = None) -> None:
    """
    Configure structlog with level, ISO timestamp and a console renderer.

    Pool operations log at INFO; ledger internals log at DEBUG and only show
    with `verbose=True`.
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer if renderer is not None else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )
