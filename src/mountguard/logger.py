"""Structured logging singleton.

Reads MOUNTGUARD_LOG_LEVEL from the environment directly so the logger is
usable before any config file has been loaded.

Only the "mountguard" stdlib logger is touched; the host's root logger and
global structlog configuration are left alone. Hosts that want mountguard
output in their own handlers can reconfigure logging.getLogger("mountguard").
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

LOGGER_NAME = "mountguard"


def _setup_logging() -> structlog.stdlib.BoundLogger:
    level_name = os.environ.get("MOUNTGUARD_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    # Level lives on the package logger so structlog's filter_by_level works
    stdlib_logger = logging.getLogger(LOGGER_NAME)
    stdlib_logger.setLevel(level)
    if not stdlib_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(handler)
        stdlib_logger.propagate = False

    return structlog.wrap_logger(
        stdlib_logger,
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )


logger = _setup_logging()
