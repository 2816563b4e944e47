#!/usr/bin/env python3
# fshell/ui/static/table.py
from __future__ import annotations
"""
Plain-text column layout for listings such as `fhelp`.

    Command  Description
    -------  -----------
    hello    Say hello

Widths ignore ANSI escapes. The last column is never padded, so lines carry
no trailing whitespace into daemon replies.
"""

from typing import Sequence

from fshell.ui.utils import strip_ansi

COLUMN_GAP = "  "


def _visible_width(cell: str) -> int:
    return len(strip_ansi(cell))


def format_table(rows: Sequence[Sequence[object]], headers: Sequence[object] | None = None) -> str:
    """Lay out rows in left-aligned columns, with an underlined header row when given."""
    body = [[str(cell) for cell in row] for row in rows]
    if headers is not None:
        head = [str(h) for h in headers]
        body = [head, ["-" * _visible_width(h) for h in head], *body]
    if not body:
        return ""

    column_count = max(len(row) for row in body)
    widths = [
        max((_visible_width(row[i]) for row in body if i < len(row)), default=0)
        for i in range(column_count)
    ]

    lines = []
    for row in body:
        cells = [
            cell + " " * (widths[i] - _visible_width(cell)) if i < len(row) - 1 else cell
            for i, cell in enumerate(row)
        ]
        lines.append(COLUMN_GAP.join(cells))
    return "\n".join(lines)
