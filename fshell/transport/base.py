#!/usr/bin/env python3
# fshell/transport/base.py
from __future__ import annotations
"""
Shared transport contract and the per-session read/dispatch loop.

A transport supplies raw lines (receive_line) and reports each outcome
(send_result). serve() drives one session:

    check stop flag -> read -> parse -> dispatch -> report -> repeat

The stop flag is checked after a dispatch completes and before blocking on
the next read. Parse and dispatch failures are written to the session as
`[error] ...` lines and the loop continues. End of input, an exit word, a stop
request or an I/O error ends the loop for this session only. A KeyboardInterrupt
raised inside a handler is reported as `[error] interrupted` and the loop
continues.
"""

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Optional

from fshell.errors import ParseError, Result
from fshell.interface import EXIT_WORDS, parse
from fshell.session import Session

if TYPE_CHECKING:  # pragma: no cover
    from fshell.engine import Engine

logger = logging.getLogger(__name__)


class TransportState(StrEnum):
    IDLE = "idle"
    PROMPTING = "prompting"
    READING = "reading"
    DISPATCHING = "dispatching"
    LISTENING = "listening"
    ACCEPTED_CLIENT = "accepted-client"
    CLIENT_CLOSED = "client-closed"
    STOPPED = "stopped"


class Transport:
    """Base class for the interactive terminal and daemon client transports."""

    def __init__(self) -> None:
        self.state = TransportState.IDLE

    def receive_line(self) -> str:  # pragma: no cover - interface
        """Return the next raw line. Raise EOFError at end of input, OSError on I/O failure."""
        raise NotImplementedError

    def send_result(self, result: Result, session: Optional[Session]) -> None:  # pragma: no cover - interface
        raise NotImplementedError

    def handle_line(self, engine: "Engine", line: str, session_id: int) -> Result:
        """Parse and dispatch one line, writing any failure message to the session."""
        session = engine.sessions.get(session_id)
        try:
            invocation = parse(line)
        except ParseError as exc:
            if session is not None:
                session.write(f"[error] {exc}\n")
            return exc.code
        if invocation is None:
            return Result.OK

        result = engine.dispatcher.dispatch(invocation, session_id)
        if result is not Result.OK and session is not None:
            session.write(engine.dispatcher.describe_failure(invocation.main_command, result) + "\n")
        return result

    def serve(self, engine: "Engine", session_id: int) -> Result:
        """Run the loop for one session until it ends. Returns INTERNAL on an I/O failure."""
        while not engine.stop_requested:
            try:
                line = self.receive_line()
            except EOFError:
                break
            except OSError as exc:
                logger.warning("session %d: read failed: %s", session_id, exc)
                return Result.INTERNAL

            if line.strip() in EXIT_WORDS:
                break

            self.state = TransportState.DISPATCHING
            try:
                result = self.handle_line(engine, line, session_id)
            except KeyboardInterrupt:
                # Ctrl-C during a handler cancels that command only.
                logger.info("session %d: command interrupted", session_id)
                result = Result.INTERNAL
                session = engine.sessions.get(session_id)
                if session is not None:
                    session.write("[error] interrupted\n")
            try:
                self.send_result(result, engine.sessions.get(session_id))
            except OSError as exc:
                logger.warning("session %d: reply failed: %s", session_id, exc)
                return Result.INTERNAL
        return Result.OK
