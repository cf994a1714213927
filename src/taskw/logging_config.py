"""structlog setup shared by the CLI and library entry points.

Logs go to stderr so generated output and command results on stdout stay
clean. The level is WARNING unless TASKW_DEBUG is set.
"""

from __future__ import annotations

import logging
import sys

import structlog

from taskw.settings import debug_enabled

_configured = False


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # look up sys.stderr per logger so redirected streams are honoured
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(debug: bool | None = None, force: bool = False) -> None:
    """Configure structlog once per process.

    Args:
        debug: Force debug level on/off. None = read TASKW_DEBUG.
        force: Reconfigure even if already configured.
    """
    global _configured
    if _configured and not force:
        return

    if debug is None:
        debug = debug_enabled()
    level = logging.DEBUG if debug else logging.WARNING

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str | None = None):
    return structlog.get_logger(name)
