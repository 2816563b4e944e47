#!/usr/bin/env python3
# fshell/commands/__init__.py
from __future__ import annotations
"""
Package for command management and registration.

Provides:
- Data structures and protocols (`Command`, `CommandResult`, `CommandHandler`, `Invocation`).
- The per-engine registry (`CommandRegistry`).
- Read helpers over a parsed invocation (`get_param`, `has_flag`).

This package re-exports public APIs from:
- command_types.py
- commands.py
"""


# Re-export from submodules
from .command_types import (
    Command,
    CommandHandler,
    CommandResult,
    Flag,
    Invocation,
    KeyValue,
    get_param,
    has_flag,
)
from .commands import CommandRegistry, validate_command_name

__all__ = [
    "Command",
    "CommandHandler",
    "CommandResult",
    "Flag",
    "Invocation",
    "KeyValue",
    "get_param",
    "has_flag",
    "CommandRegistry",
    "validate_command_name",
]
