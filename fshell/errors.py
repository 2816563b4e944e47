#!/usr/bin/env python3
# fshell/errors.py
from __future__ import annotations
"""
Result codes and the exception hierarchy used inside the engine.

Result values are part of the public contract and keep their numeric order:
new codes may only be appended.

Components raise ShellError subclasses; the Engine boundary and the transport
loops turn them back into Result values so nothing unwinds across a session.
"""

from enum import IntEnum


class Result(IntEnum):
    """Outcome of an API call or a command handler."""

    OK = 0
    INVALID_ARGUMENT = 1
    NOT_INITIALIZED = 2
    ALREADY_REGISTERED = 3
    INTERNAL = 4
    UNSUPPORTED = 5
    NOT_FOUND = 6
    NOT_AUTHENTICATED = 7
    PERMISSION_DENIED = 8
    NOT_IMPLEMENTED = 9

    @property
    def ok(self) -> bool:
        return self is Result.OK

    def describe(self) -> str:
        """Human-readable text for this code."""
        return _DESCRIPTIONS[self]


_DESCRIPTIONS: dict[Result, str] = {
    Result.OK: "success",
    Result.INVALID_ARGUMENT: "invalid argument",
    Result.NOT_INITIALIZED: "not initialized",
    Result.ALREADY_REGISTERED: "already registered",
    Result.INTERNAL: "internal error",
    Result.UNSUPPORTED: "not supported by this build",
    Result.NOT_FOUND: "not found",
    Result.NOT_AUTHENTICATED: "not authenticated",
    Result.PERMISSION_DENIED: "permission denied",
    Result.NOT_IMPLEMENTED: "not implemented",
}


def result_string(result: int) -> str:
    """Return the text for a result code, tolerating codes this build does not know."""
    try:
        return Result(result).describe()
    except ValueError:
        return f"unknown result ({result})"


class ShellError(Exception):
    """Base class for engine errors. `code` is the Result reported to callers."""

    code: Result = Result.INTERNAL

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code.describe())


class InvalidArgumentError(ShellError):
    code = Result.INVALID_ARGUMENT


class NotInitializedError(ShellError):
    code = Result.NOT_INITIALIZED


class AlreadyRegisteredError(ShellError):
    code = Result.ALREADY_REGISTERED


class NotFoundError(ShellError):
    code = Result.NOT_FOUND


class UnsupportedError(ShellError):
    code = Result.UNSUPPORTED


class ParseError(InvalidArgumentError):
    """Raised by the input parser. `column` is 0-based, or -1 when unknown."""

    def __init__(self, message: str, column: int = -1) -> None:
        super().__init__(message)
        self.column = column


class UnterminatedQuoteError(ParseError):
    def __init__(self, quote: str, column: int) -> None:
        super().__init__(f"unterminated quote {quote} at column {column + 1}", column)
        self.quote = quote
