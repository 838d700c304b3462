"""Structured logging for analysis runs.

Every event logged while a run or a token is being analysed carries the
``run_id`` and ``token`` keys bound by :func:`run_context` and
:func:`token_context`. The bindings live in contextvars, so they follow
each concurrent token task across awaits without leaking into siblings.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

# Libraries that log every request or statement at DEBUG
_QUIET_LOGGERS = ("aiosqlite", "asyncio")


def setup_logging(log_level: str = "INFO", log_format: str = "console") -> None:
    """Configure structlog rendering for the whole process.

    Args:
        log_level: Root level name, e.g. "DEBUG" or "INFO".
        log_format: "json" for machine-readable lines, "console" for
            development. Unknown values fall back to console.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format.lower() == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def run_context(run_id: str) -> Iterator[None]:
    """Tag every event inside the block with the analysis run id."""
    with structlog.contextvars.bound_contextvars(run_id=run_id):
        yield


@contextmanager
def token_context(symbol: str) -> Iterator[None]:
    """Tag every event inside the block with the token being analysed."""
    with structlog.contextvars.bound_contextvars(token=symbol):
        yield


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
