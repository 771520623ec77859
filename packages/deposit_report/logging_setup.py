"""Logging configuration shared by the ``deposit_report`` entrypoints.

``configure_logging`` installs one ``StreamHandler`` on the ``deposit_report``
logger and is called by the CLI at startup. Library modules never attach
handlers themselves; they obtain loggers through ``get_logger`` which keeps the
package silent (``NullHandler``) until an application configures it.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

_PKG_LOGGER_NAME = "deposit_report"
_LEVEL_ENV = "DEPOSIT_REPORT_LOG_LEVEL"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_handler: logging.Handler | None = None


def resolve_level(level: int | str | None) -> int:
    """Translate an int, a level name or a numeric string into a level.

    ``None`` and unrecognized names fall back to ``DEPOSIT_REPORT_LOG_LEVEL``
    and then to ``logging.INFO``.
    """

    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
    env_val = os.getenv(_LEVEL_ENV)
    if env_val and env_val != level:
        return resolve_level(env_val)
    return logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] | None = None,
) -> None:
    """Attach the package handler; repeated calls only adjust the level."""

    global _handler
    logger = logging.getLogger(_PKG_LOGGER_NAME)
    numeric = resolve_level(level)

    if _handler is None:
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        _handler = logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
        logger.addHandler(_handler)
        # Avoid double emission via the root logger.
        logger.propagate = False

    _handler.setLevel(numeric)
    logger.setLevel(numeric)


def get_logger(name: str) -> logging.Logger:
    """Return ``name``'s logger, keeping the package quiet until configured."""

    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "resolve_level"]
