#!/usr/bin/env python3
# fshell/commands/commands.py
from __future__ import annotations
"""
Command registry and decorator utilities.

This module provides:
- CommandRegistry: per-engine store of commands, in registration order.
- CommandRegistry.command: decorator to register functions with metadata.

Registrations are permanent for the registry's lifetime.
"""

import re
import threading
from typing import Any, Callable, Dict, Optional

from fshell.commands.command_types import Command, CommandHandler
from fshell.errors import AlreadyRegisteredError, InvalidArgumentError

# Names must survive a round trip through the parser as a single bare token.
_INVALID_NAME_CHARS = re.compile(r"[\s\"'=]")


def validate_command_name(name: str) -> None:
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError("command name must be a non-empty string")
    if _INVALID_NAME_CHARS.search(name):
        raise InvalidArgumentError(
            f"command name {name!r} may not contain whitespace, quotes or '='")


class CommandRegistry:
    """Holds all command definitions and provides lookup utilities."""

    def __init__(self) -> None:
        # Insertion order doubles as registration order.
        self._commands_by_name: Dict[str, Command] = {}
        self._write_lock = threading.Lock()

    # ---------------- Registration ----------------

    def register(
        self,
        name: str,
        handler: CommandHandler,
        context: Any = None,
        help: str = "",
    ) -> Command:
        """Register a handler under `name`. Existing names are never overwritten."""
        validate_command_name(name)
        if handler is None or not callable(handler):
            raise InvalidArgumentError(f"handler for {name!r} must be callable")

        command_obj = Command(
            name=name,
            handler=handler,
            context=context,
            help=(help or "").strip(),
            module=getattr(handler, "__module__", "") or "",
        )
        with self._write_lock:
            if name in self._commands_by_name:
                raise AlreadyRegisteredError(f"Command '{name}' already registered.")
            self._commands_by_name[name] = command_obj
        return command_obj

    def command(
        self,
        *,
        name: str | None = None,
        help: str | None = None,
        context: Any = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """
        Decorator to register a function as a command.

        - Function name is transformed from snake_case to kebab-case for `name` if not provided.
        - The docstring is used as help text when `help` is not given.
        """

        def wrapper(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(
                (name or func.__name__).replace("_", "-"),
                func,
                context=context,
                help=help if help is not None else (func.__doc__ or ""),
            )
            return func

        return wrapper

    # ---------------- Lookup ----------------

    def lookup(self, name: str) -> Optional[Command]:
        """Return the command registered under `name`, or None."""
        return self._commands_by_name.get(name)

    def list(self) -> list[Command]:
        """Return all commands in registration order."""
        with self._write_lock:
            return list(self._commands_by_name.values())

    def names(self) -> list[str]:
        """Return all command names for completion and suggestions."""
        with self._write_lock:
            return list(self._commands_by_name.keys())

    def clear(self) -> None:
        """Drop every registration. Only used when the owning engine is destroyed."""
        with self._write_lock:
            self._commands_by_name.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._commands_by_name

    def __len__(self) -> int:
        return len(self._commands_by_name)
