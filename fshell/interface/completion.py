#!/usr/bin/env python3
# fshell/interface/completion.py
from __future__ import annotations
"""
Command line completion utilities.

Suggestions:
- First token: exit words + all registered command names.
- 'fhelp <partial>': registered command names.
"""

from fshell.commands import CommandRegistry
from fshell.errors import ParseError

from .dispatcher import EXIT_WORDS
from .parser import tokenize


def split_current_token(raw_input: str) -> tuple[list[str], str]:
    """
    Return (parts, current_prefix).

    Behavior:
      - Use the shell tokenizer so quoting matches what will be dispatched.
      - If trailing whitespace exists, append an empty token to signal a new one.
      - On unbalanced quotes, fall back to whitespace splitting.
    """
    if not raw_input:
        return [], ""
    try:
        parts = [token.text for token in tokenize(raw_input)]
    except ParseError:
        parts = raw_input.split()
    if raw_input[-1].isspace():
        parts.append("")
    return parts, (parts[-1] if parts else "")


def suggest(registry: CommandRegistry, text_before_cursor: str) -> list[str]:
    """Produce suggestions for the current buffer content."""
    parts, current_prefix = split_current_token(text_before_cursor.lstrip())

    if len(parts) <= 1:
        universe = [*EXIT_WORDS, *registry.names()]
        return sorted(w for w in universe if w.startswith(current_prefix))

    if parts[0] == "fhelp" and len(parts) == 2:
        return sorted(w for w in registry.names() if w.startswith(current_prefix))

    return []
