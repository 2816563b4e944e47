#!/usr/bin/env python3
# fshell/__init__.py
from __future__ import annotations
"""
FShell: an embeddable command-shell engine.

Hosts register named commands, then run either an interactive terminal loop
or a daemon serving clients over a Unix socket. Each terminal or client gets
its own session with isolated output and history.

Only the public surface is re-exported here; subpackages expose their own
APIs through their __init__.py files.
"""

from fshell.capabilities import API_VERSION, Capability, capabilities
from fshell.commands import Command, CommandResult, Invocation, get_param, has_flag
from fshell.config import EngineConfig, load_config
from fshell.engine import Engine, EngineState, ExecutionMode, create, destroy
from fshell.errors import Result, ShellError, result_string

__version__ = "1.0.0"

__all__ = [
    "API_VERSION",
    "Capability",
    "capabilities",
    "Command",
    "CommandResult",
    "Invocation",
    "get_param",
    "has_flag",
    "EngineConfig",
    "load_config",
    "Engine",
    "EngineState",
    "ExecutionMode",
    "create",
    "destroy",
    "Result",
    "ShellError",
    "result_string",
    "__version__",
]
