#!/usr/bin/env python3
# fshell/interface/__init__.py
from __future__ import annotations
"""
Package for input parsing, command dispatch and interactive frontends.

Provides:
- Line parsing into invocations (`parse`, `tokenize`).
- Command dispatcher and failure formatting (`Dispatcher`).
- Built-in commands (`register_builtins`).
- Token-aware completion helpers (`suggest`).
- CLI frontends with history and completion (prompt_toolkit / readline / plain / stream).
"""


# Parser first (completion depends on it)
from .parser import Token, tokenize, parse

# Dispatcher / built-ins
from .dispatcher import Dispatcher, HELP_TEXT, EXIT_WORDS
from .builtins import register_builtins, format_command_help, format_command_list

# Completion before CLI (cli depends on it)
from .completion import suggest, split_current_token

from .cli import (
    BaseCLI,
    PlainCLI,
    StreamCLI,
    PromptToolkitCLI,
    ReadlineCLI,
    make_cli,
    HISTORY_FILE_PATH,
    DEFAULT_PROMPT,
)

__all__ = [
    # parser
    "Token",
    "tokenize",
    "parse",
    # dispatcher
    "Dispatcher",
    "HELP_TEXT",
    "EXIT_WORDS",
    "register_builtins",
    "format_command_help",
    "format_command_list",
    # completion
    "suggest",
    "split_current_token",
    # cli
    "BaseCLI",
    "PlainCLI",
    "StreamCLI",
    "PromptToolkitCLI",
    "ReadlineCLI",
    "make_cli",
    "HISTORY_FILE_PATH",
    "DEFAULT_PROMPT",
]
