#!/usr/bin/env python3
# fshell/commands/command_types.py
from __future__ import annotations
"""
Command data structures and protocols.

This module defines:
- CommandHandler: the callable protocol for any command implementation.
- CommandResult: a result code plus an optional message for the session.
- Command: a registered command with metadata and a handler.
- Invocation: one parsed input line, handed read-only to the handler.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from fshell.errors import Result


class CommandHandler(Protocol):
    """Protocol for any command function."""

    def __call__(self, cmd: "Invocation", context: Any) -> Any:  # pragma: no cover - signature only
        ...


@dataclass(frozen=True, slots=True)
class KeyValue:
    key: str
    value: str


@dataclass(frozen=True, slots=True)
class Flag:
    name: str
    value: bool = True


@dataclass(frozen=True, slots=True)
class Invocation:
    """
    A parsed command line.

    Attributes:
        main_command: First token of the line.
        parameters: key=value pairs, unique keys, in first-seen order.
        flags: -name / --name switches, unique names.
        args: Remaining bare tokens, in input order.
        raw: The line as it was typed.

    Instances are only valid for the handler call that receives them; the
    engine never keeps a reference after dispatch returns.
    """

    main_command: str
    parameters: tuple[KeyValue, ...] = ()
    flags: tuple[Flag, ...] = ()
    args: tuple[str, ...] = ()
    raw: str = ""

    def get_param(self, key: str) -> str | None:
        for pair in self.parameters:
            if pair.key == key:
                return pair.value
        return None

    def has_flag(self, name: str) -> bool:
        return any(flag.name == name and flag.value for flag in self.flags)

    def params(self) -> dict[str, str]:
        return {pair.key: pair.value for pair in self.parameters}


def get_param(cmd: Invocation | None, key: str | None) -> str | None:
    """Find a parameter value by key. Safe to call with None for either argument."""
    if cmd is None or not key:
        return None
    return cmd.get_param(key)


def has_flag(cmd: Invocation | None, name: str | None) -> bool:
    """Check whether a flag is present. Safe to call with None for either argument."""
    if cmd is None or not name:
        return False
    return cmd.has_flag(name)


@dataclass(slots=True)
class CommandResult:
    """
    Result container a handler may return instead of a bare Result.

    Attributes:
        code: Result reported to the transport.
        message: Text written to the caller's session before reporting.
    """
    code: Result = Result.OK
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.code is Result.OK

    def __str__(self) -> str:
        return self.message if self.message else self.code.describe()


@dataclass(frozen=True, slots=True)
class Command:
    """
    A registered command.

    Important fields:
        name: Unique, case-sensitive command name.
        handler: Callable implementing the command.
        context: Object handed back to the handler on every call.
        help: Short, user-facing description.
        module: Python module where the handler is defined.
    """

    name: str
    handler: CommandHandler
    context: Any = None
    help: str = ""
    module: str = field(default="", repr=False)

    def invoke(self, cmd: Invocation) -> Any:
        """Execute the handler for a parsed invocation."""
        return self.handler(cmd, self.context)
