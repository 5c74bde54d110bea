#!/usr/bin/env python3
"""RainBird - a client for the RainBird LNK/SIP irrigation protocol.

Console (and optional file) handlers for the library loggers, coloured via colorlog.
"""

from __future__ import annotations

import logging
import sys
from typing import Final

import colorlog

from .version import VERSION

DEFAULT_FMT: Final = "%(asctime)s.%(msecs)03d %(message)s"
DEFAULT_DATEFMT: Final = "%H:%M:%S"

CONSOLE_FMT: Final = "%(asctime)s.%(msecs)03d %(levelname)-7s %(name)s: "
LOGFILE_FMT: Final = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

LOG_COLOURS: Final[dict[str, str]] = {
    "DEBUG": "white",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "bold_red",
    "CRITICAL": "bold_red",
}


class _LevelFilter(logging.Filter):
    """Pass only the records below (or at/above) a threshold level."""

    def __init__(self, threshold: int, *, below: bool) -> None:
        super().__init__()
        self._threshold = threshold
        self._below = below

    def filter(self, record: logging.LogRecord) -> bool:
        return (record.levelno < self._threshold) is self._below


def set_logging(
    logger: logging.Logger,
    /,
    *,
    level: int = logging.INFO,
    use_color: bool = True,
    file_name: str | None = None,
) -> None:
    """Configure the handlers of a (library) logger.

    Warnings (and worse) go to stderr, and everything else to stdout. If a file name
    is given, all records are also written to it (without colour).
    """

    logger.propagate = False
    logger.setLevel(level)

    for handler in list(logger.handlers):  # is idempotent
        logger.removeHandler(handler)

    formatter: logging.Formatter
    if use_color:
        formatter = colorlog.ColoredFormatter(
            fmt=f"%(log_color)s{CONSOLE_FMT}%(message)s",
            datefmt=DEFAULT_DATEFMT,
            reset=True,
            log_colors=LOG_COLOURS,
        )
    else:
        formatter = logging.Formatter(
            fmt=f"{CONSOLE_FMT}%(message)s", datefmt=DEFAULT_DATEFMT
        )

    for stream, below in ((sys.stderr, False), (sys.stdout, True)):
        handler: logging.Handler = logging.StreamHandler(stream=stream)
        handler.setFormatter(formatter)
        handler.addFilter(_LevelFilter(logging.WARNING, below=below))
        logger.addHandler(handler)

    if file_name:
        handler = logging.FileHandler(file_name)
        handler.setFormatter(logging.Formatter(fmt=LOGFILE_FMT))
        logger.addHandler(handler)

    logger.debug(f"{logger.name}: logging configured (rainbird_tx {VERSION})")
