"""structlog configuration shared by the synchronizer, ledger and scripts.

Library modules only call :func:`get_logger`; the scripts call
:func:`configure_logging` once at start-up.
"""

import logging
import sys

import structlog


def configure_logging(level: str = "INFO", json: bool = False) -> None:
    """Configure structlog with a level filter and a console or JSON renderer.

    Args:
        level: Standard logging level name (``DEBUG``, ``INFO``, ...).
        json:  Emit one JSON object per line instead of the console renderer.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"unknown log level: {level}")

    renderer = (
        structlog.processors.JSONRenderer()
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str):
    """Return a structlog logger bound to *name* (dotted module path)."""
    return structlog.get_logger(name)
