#!/usr/bin/env python3
# fshell/ui/utils/console.py
from __future__ import annotations

import sys
from threading import Lock
from typing import TextIO

# Held for every write that reaches a terminal: session output, status lines and log records.
PRINT_MUTEX = Lock()


def print_line(text: str = "", *, file: TextIO | None = None) -> None:
    """Write one line atomically and flush it."""
    stream = sys.stdout if file is None else file
    with PRINT_MUTEX:
        stream.write(text + "\n")
        stream.flush()
