#!/usr/bin/env python3
# fshell/interface/parser.py
from __future__ import annotations
"""
Input line parsing.

Responsibilities:
- Split a raw line into tokens in a single left-to-right scan.
- Classify tokens into the main command, key=value parameters, flags and
  bare positional arguments.

Grammar:
    line    := command (WS token)*
    token   := key=value | -flag | --flag | arg
Quoting:
    '...' or "..." group text containing whitespace and may appear anywhere
    inside a token (name="Ada Lovelace"). There are no escape sequences.
    An '=' or leading '-' inside quotes is literal.
Duplicates:
    A repeated key keeps its first position and takes the last value.
    A repeated flag is reported once.
"""

import re
from dataclasses import dataclass

from fshell.commands import Flag, Invocation, KeyValue
from fshell.errors import ParseError, UnterminatedQuoteError

_QUOTES = "\"'"
_SPACE_RUN = re.compile(r"\s+")
# A run of characters that need no special handling.
_PLAIN_RUN = re.compile(r"[^\s\"'=]+")


@dataclass(slots=True)
class Token:
    """
    One scanned token.

    Attributes:
        text: Token text with quotes removed.
        split_at: Index in `text` of the first unquoted '=', or -1.
        dashed: True when the token starts with an unquoted '-'.
        column: Offset of the token in the original line.
    """
    text: str
    split_at: int = -1
    dashed: bool = False
    column: int = 0


def tokenize(raw_line: str) -> list[Token]:
    """Split a raw line into tokens. Raises UnterminatedQuoteError on unbalanced quotes."""
    tokens: list[Token] = []
    length = len(raw_line)
    position = 0

    while position < length:
        space = _SPACE_RUN.match(raw_line, position)
        if space:
            position = space.end()
            if position >= length:
                break

        column = position
        pieces: list[str] = []
        width = 0
        split_at = -1
        dashed = raw_line[position] == "-"

        while position < length and not raw_line[position].isspace():
            char = raw_line[position]
            if char in _QUOTES:
                closing = raw_line.find(char, position + 1)
                if closing < 0:
                    raise UnterminatedQuoteError(char, position)
                piece = raw_line[position + 1:closing]
                position = closing + 1
            elif char == "=":
                if split_at < 0:
                    split_at = width
                piece = char
                position += 1
            else:
                run = _PLAIN_RUN.match(raw_line, position)
                piece = run.group()  # type: ignore[union-attr]
                position = run.end()  # type: ignore[union-attr]
            pieces.append(piece)
            width += len(piece)

        tokens.append(Token("".join(pieces), split_at, dashed, column))

    return tokens


def _flag_name(token: Token) -> str | None:
    """Return the flag name for -name / --name tokens, else None."""
    if not token.dashed or token.split_at >= 0:
        return None
    name = token.text[2:] if token.text.startswith("--") else token.text[1:]
    if not name or name.startswith("-"):
        return None
    return name


def parse(raw_line: str) -> Invocation | None:
    """
    Parse a raw line into an Invocation.

    Returns None for an empty or whitespace-only line. Raises ParseError
    (or UnterminatedQuoteError) for malformed input.
    """
    if raw_line is None:
        raise ParseError("no input line")

    tokens = tokenize(raw_line)
    if not tokens:
        return None

    head, *rest = tokens
    if not head.text:
        raise ParseError("empty command name", head.column)

    parameters: dict[str, str] = {}
    flags: dict[str, None] = {}
    args: list[str] = []

    for token in rest:
        if token.split_at > 0:
            key = token.text[:token.split_at]
            parameters[key] = token.text[token.split_at + 1:]
            continue
        name = _flag_name(token)
        if name is not None:
            flags[name] = None
            continue
        args.append(token.text)

    return Invocation(
        main_command=head.text,
        parameters=tuple(KeyValue(k, v) for k, v in parameters.items()),
        flags=tuple(Flag(name) for name in flags),
        args=tuple(args),
        raw=raw_line.strip(),
    )
