"""Logging setup for link_health.

All modules log through the ``LinkHealth`` logger. Its console handler writes
to *stderr*, leaving *stdout* to the link records; a rotating log file can be
added with ``configure(log_file=...)``.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Union

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOGGER_NAME = "LinkHealth"


def configure(
    *,
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger and set its level."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(log_format)
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    lg.addHandler(console)

    if log_file is not None:
        rotating = RotatingFileHandler(
            filename=str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        rotating.setFormatter(formatter)
        lg.addHandler(rotating)

    lg.propagate = False
    return lg


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "LOGGER_NAME", "DEFAULT_FORMAT"]
