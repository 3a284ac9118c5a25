"""loguru setup for the muxwm CLI.

Command output goes to stdout; diagnostics go to stderr through a single
loguru sink.  At the default WARNING level a line reads like a CLI message
(``muxwm WARNING: ...``); at DEBUG (``-dd``) each line also carries a
timestamp and the call site.  SQLAlchemy and i3ipc log through stdlib
``logging``, which is routed into the same sink.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from loguru import logger

_CLI_FORMAT = "<level>muxwm {level}</level>: {message}"
_DEBUG_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> <level>{level: <7}</level> "
    "<cyan>{name}:{function}:{line}</cyan> {message}"
)

# Libraries that chatter at INFO; only their warnings reach the sink.
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "i3ipc")


class _StdlibBridge(logging.Handler):
    """Re-emit stdlib ``logging`` records through loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so {name}/{line} point at the library caller.
        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def level_for_verbosity(base: str, verbosity: int) -> str:
    """Resolve the effective level from the configured one and ``-d`` count."""
    if verbosity >= 2:
        return "DEBUG"
    if verbosity == 1:
        return "INFO"
    return base.upper()


def setup_logging(level: str = "WARNING", *, sink: TextIO | None = None) -> None:
    """Make loguru the only log sink, writing to *sink* (stderr by default).

    Safe to call more than once; each call replaces the previous sink.
    """
    level = level.upper()
    logger.remove()
    logger.add(
        sink if sink is not None else sys.stderr,
        level=level,
        format=_DEBUG_FORMAT if level == "DEBUG" else _CLI_FORMAT,
    )

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logging at {}", level)
