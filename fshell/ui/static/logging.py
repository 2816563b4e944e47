#!/usr/bin/env python3
# fshell/ui/static/logging.py
from __future__ import annotations
"""
Logging setup for the `fshell` logger tree.

Library modules only call logging.getLogger(__name__); handlers are installed
by the host or the demo entry point through init_logger().

Console records go to stderr, colored by level on a terminal and taken under
PRINT_MUTEX so they never land in the middle of a session's output line.
The optional log file is rotating, plain text, and records everything down
to DEBUG together with the thread that logged it.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fshell.ui.utils import PRINT_MUTEX, colorize, strip_ansi

CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 2_000_000
LOG_FILE_BACKUPS = 3


class ColorizingStreamHandler(logging.StreamHandler):
    _LEVEL_STYLES = {
        logging.DEBUG: ("grey",),
        logging.WARNING: ("yellow",),
        logging.ERROR: ("red",),
        logging.CRITICAL: ("red", "bold"),
    }

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = colorize(
                self.format(record),
                *self._LEVEL_STYLES.get(record.levelno, ()),
                stream=self.stream,
            )
            with PRINT_MUTEX:
                self.stream.write(line + self.terminator)
                self.flush()
        except Exception:
            self.handleError(record)


class PlainFormatter(logging.Formatter):
    """Drops escape codes that handlers or messages may carry into files."""

    def format(self, record: logging.LogRecord) -> str:
        return strip_ansi(super().format(record))


def init_logger(
    name: str = "fshell",
    level: int | str = logging.INFO,
    logfile: str | Path | None = None,
) -> logging.Logger:
    """Attach the console handler (and a rotating file handler) once; later calls only adjust levels."""
    console_level = logging.getLevelName(level.upper()) if isinstance(level, str) else level
    logger = logging.getLogger(name)
    logger.propagate = False

    console = next((h for h in logger.handlers if isinstance(h, ColorizingStreamHandler)), None)
    if console is None:
        console = ColorizingStreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console)
    console.setLevel(console_level)

    has_file = any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
    if logfile and not has_file:
        file_handler = RotatingFileHandler(
            logfile, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(PlainFormatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(file_handler)
        has_file = True

    # The logger itself must pass DEBUG through when a file wants it.
    logger.setLevel(logging.DEBUG if has_file else console_level)
    return logger
