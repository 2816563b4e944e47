#!/usr/bin/env python3
# fshell/interface/builtins.py
from __future__ import annotations
"""
Commands every engine registers at creation.

  fhelp [command]   list commands, or show one command's details
  history           show the current session's history
"""

from typing import TYPE_CHECKING

from fshell.commands import Invocation
from fshell.errors import NotFoundError, Result
from fshell.ui import format_table

if TYPE_CHECKING:  # pragma: no cover
    from fshell.engine import Engine


def format_command_list(engine: "Engine") -> str:
    rows = [[c.name, c.help or "-"] for c in engine.registry.list()]
    if not rows:
        return "No commands registered."
    return format_table(rows, headers=["Command", "Description"])


def format_command_help(engine: "Engine", name: str) -> str | None:
    command_obj = engine.registry.lookup(name)
    if command_obj is None:
        return None
    lines = [
        f"Name:        {command_obj.name}",
        f"Description: {command_obj.help or '(none)'}",
        f"Module:      {command_obj.module or '(unknown)'}",
    ]
    return "\n".join(lines)


def cmd_fhelp(cmd: Invocation, engine: "Engine") -> Result:
    target = cmd.get_param("name") or (cmd.args[0] if cmd.args else None)
    if not target:
        engine.print(format_command_list(engine))
        return Result.OK
    text = format_command_help(engine, target)
    if text is None:
        engine.print(f"No such command: {target}")
        return Result.NOT_FOUND
    engine.print(text)
    return Result.OK


def cmd_history(cmd: Invocation, engine: "Engine") -> Result:
    session_id = engine.get_current_session()
    if session_id is None:
        return Result.NOT_FOUND
    try:
        entries = engine.sessions.history(session_id)
    except NotFoundError:
        return Result.NOT_FOUND
    engine.print("\n".join(f"{entry.index:>5}  {entry.line}" for entry in entries))
    return Result.OK


def register_builtins(engine: "Engine") -> None:
    engine.registry.register(
        "fhelp", cmd_fhelp, context=engine,
        help="List all commands, or show details (fhelp <command>).")
    engine.registry.register(
        "history", cmd_history, context=engine,
        help="Show commands entered in this session.")
