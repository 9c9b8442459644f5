"""Structured logging configuration for duelrank.

Two renderers are supported:
- JSON renderer for services that ship logs to a collector
- Console renderer (Rich-backed when available) for local/CLI use

Request-scoped context (voter token, match id) is carried through
structlog contextvars so that every event emitted while handling one
request shares the same keys.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import structlog
from structlog.contextvars import bind_contextvars, merge_contextvars, reset_contextvars
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    add_log_level,
    format_exc_info,
)


def configure_logging(cli_mode: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog with the renderer matching the runtime.

    Args:
        cli_mode: If True, use the console renderer for human-readable output.
                  If False, emit one JSON object per event.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    processors = [
        merge_contextvars,
        add_log_level,
        TimeStamper(fmt="iso"),
        StackInfoRenderer(),
        format_exc_info,
    ]

    if cli_mode:
        from structlog.dev import ConsoleRenderer
        renderer = ConsoleRenderer(colors=True)
    else:
        renderer = JSONRenderer()

    processors.append(renderer)

    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    """Get a logger instance, named after the calling module when given."""
    if name:
        return structlog.get_logger(name)
    return structlog.get_logger()


@contextmanager
def request_context(**values: Any) -> Iterator[None]:
    """Bind key/value pairs to every log event emitted inside the block.

    Args:
        **values: Context to attach (e.g. voter_id, match_id). None values are dropped.
    """
    tokens = bind_contextvars(**{k: v for k, v in values.items() if v is not None})
    try:
        yield
    finally:
        reset_contextvars(**tokens)
