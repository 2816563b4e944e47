#!/usr/bin/env python3
# fshell/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .utils import (
    ANSI,
    strip_ansi,
    enable_windows_vt,
    supports_ansi,
    colorize,
    PRINT_MUTEX,
    print_line,
)
from .static import (
    format_table,
    init_logger,
    ColorizingStreamHandler,
    PlainFormatter,
)

__all__ = [
    "ANSI",
    "strip_ansi",
    "enable_windows_vt",
    "supports_ansi",
    "colorize",
    "PRINT_MUTEX",
    "print_line",
    "format_table",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
]
