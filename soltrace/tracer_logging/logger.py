"""
structlog setup for soltrace.

Every record carries `event_type` (the first positional argument), `level`,
`logger` and an ISO-8601 UTC `timestamp`. Records are written to stderr;
stdout belongs to the CLI's JSON output.

Imports nothing else from soltrace, so any module may import it first.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)configure structlog.

    Args:
        level: Minimum level name; LOG_LEVEL env or INFO when omitted.
        fmt: "console" for human-readable lines; anything else renders JSON.
            LOG_FORMAT env when omitted.
    """
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).strip().upper()
    fmt = (fmt or os.getenv("LOG_FORMAT", "json")).strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]
    if fmt == "console":
        # ConsoleRenderer looks for the message under "event"
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.EventRenamer("event_type"))
        processors.append(structlog.processors.JSONRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level_name, logging.INFO)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Module logger with `logger=name` bound.

        logger = get_logger(__name__)
        logger.info("trace_transfer_decoded", account_id=addr, amount=1.5)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_account(account: str) -> structlog.BoundLogger:
    """Logger with account_id bound."""
    return get_logger("soltrace").bind(account_id=account)
