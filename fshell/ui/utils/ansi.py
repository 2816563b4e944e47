#!/usr/bin/env python3
# fshell/ui/utils/ansi.py
from __future__ import annotations
"""
Terminal color helpers.

Escape codes are only worth emitting to a terminal. colorize() takes the
target stream and returns plain text when that stream is redirected, so
status lines stay clean in log files and pipes.
"""

import functools
import os
import re
from typing import TextIO

_SGR_CODES = {
    "reset": 0,
    "bold": 1,
    "dim": 2,
    "red": 31,
    "green": 32,
    "yellow": 33,
    "magenta": 35,
    "cyan": 36,
    "grey": 90,
}

ANSI = {name: f"\x1b[{code}m" for name, code in _SGR_CODES.items()}

_ESCAPE_SEQUENCE = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


def strip_ansi(text: str) -> str:
    return _ESCAPE_SEQUENCE.sub("", text)


@functools.cache
def enable_windows_vt() -> bool:
    """
    Turn on VT escape processing for the Windows console.

    Returns whether escapes will render. Always True off Windows. The
    answer is computed once per process.
    """
    if os.name != "nt":
        return True
    if os.environ.get("WT_SESSION"):
        return True

    import ctypes

    try:
        kernel32 = ctypes.windll.kernel32  # type: ignore[attr-defined]
        stdout_handle = kernel32.GetStdHandle(-11)
        mode = ctypes.c_uint()
        if not kernel32.GetConsoleMode(stdout_handle, ctypes.byref(mode)):
            return False
        # ENABLE_VIRTUAL_TERMINAL_PROCESSING
        return bool(kernel32.SetConsoleMode(stdout_handle, mode.value | 0x0004))
    except (AttributeError, OSError):
        return False


def supports_ansi(stream: TextIO | None) -> bool:
    """True when `stream` is an interactive terminal that renders escapes."""
    isatty = getattr(stream, "isatty", None)
    try:
        return bool(isatty and isatty()) and enable_windows_vt()
    except ValueError:
        # isatty() on a closed stream
        return False


def colorize(text: str, *styles: str, stream: TextIO | None = None) -> str:
    """
    Wrap text in the named styles ('red', 'bold', ...).

    With `stream` given, styling is skipped unless that stream is a terminal.
    """
    if stream is not None and not supports_ansi(stream):
        return text
    prefix = "".join(ANSI[style] for style in styles if style in ANSI)
    if not prefix:
        return text
    return f"{prefix}{text}{ANSI['reset']}"
