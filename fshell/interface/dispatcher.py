#!/usr/bin/env python3
# fshell/interface/dispatcher.py
from __future__ import annotations
"""
Command dispatch.

dispatch() resolves a parsed invocation against the registry and runs exactly
one handler, synchronously, with the calling thread bound to the target
session for the duration of the call. Different threads may dispatch at the
same time; one session is only ever driven by its own loop.

Handler return values are normalized:
  None                -> OK
  Result / int code   -> that code, unchanged
  CommandResult       -> its code (its message goes to the session first)
  anything else       -> INTERNAL
A handler that raises a ShellError reports that error's code; any other
exception is logged and reported as INTERNAL.
"""

import difflib
import logging
from typing import Any

from fshell.commands import Command, CommandRegistry, CommandResult, Invocation
from fshell.errors import NotFoundError, Result, ShellError
from fshell.session import SessionManager

logger = logging.getLogger(__name__)

# Short hint appended to unknown command errors
HELP_TEXT = "Type 'fhelp' to list available commands."

# Words handled by the transport loops rather than the registry.
EXIT_WORDS = frozenset({"exit", "quit"})


class Dispatcher:
    """Resolves invocations to registered commands and invokes them."""

    def __init__(self, registry: CommandRegistry, sessions: SessionManager) -> None:
        self._registry = registry
        self._sessions = sessions

    def dispatch(self, invocation: Invocation, session_id: int | None = None) -> Result:
        """Run the handler for `invocation` in the context of `session_id` (None = unbound)."""
        if session_id is not None and not self._sessions.exists(session_id):
            return Result.NOT_FOUND

        try:
            with self._sessions.bound(session_id):
                if session_id is not None:
                    self._sessions.record(session_id, invocation.raw or invocation.main_command)

                command_obj = self._registry.lookup(invocation.main_command)
                if command_obj is None:
                    logger.debug("unknown command %r", invocation.main_command)
                    return Result.NOT_FOUND
                return self._invoke(command_obj, invocation)
        except NotFoundError:
            # Session destroyed between the existence check and binding.
            return Result.NOT_FOUND

    def _invoke(self, command_obj: Command, invocation: Invocation) -> Result:
        try:
            value = command_obj.invoke(invocation)
        except ShellError as exc:
            logger.debug("command %r failed: %s", command_obj.name, exc)
            return exc.code
        except Exception:
            logger.exception("command %r raised", command_obj.name)
            return Result.INTERNAL
        return self._normalize(command_obj, value)

    def _normalize(self, command_obj: Command, value: Any) -> Result:
        if value is None:
            return Result.OK
        if isinstance(value, CommandResult):
            if value.message:
                text = value.message if value.message.endswith("\n") else value.message + "\n"
                self._sessions.route_output(text)
            return self._normalize(command_obj, value.code)
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return Result(value)
            except ValueError:
                pass
        logger.error("command %r returned unsupported value %r", command_obj.name, value)
        return Result.INTERNAL

    def suggest(self, name: str) -> list[str]:
        """Return up to three registered names close to `name`."""
        universe = self._registry.names() + sorted(EXIT_WORDS)
        return difflib.get_close_matches(name, universe, n=3, cutoff=0.6)

    def describe_failure(self, name: str, result: Result) -> str:
        """Render the one-line error a transport shows for a failed dispatch."""
        if result is Result.NOT_FOUND and self._registry.lookup(name) is None:
            matches = self.suggest(name)
            hint = f" Did you mean: {', '.join(matches)}?" if matches else ""
            return f"[error] Unknown command: {name}.{hint} {HELP_TEXT}"
        return f"[error] {name}: {result.describe()}"
