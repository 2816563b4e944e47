#!/usr/bin/env python3
# fshell/transport/interactive.py
from __future__ import annotations
"""
Interactive terminal transport.

States: IDLE -> PROMPTING -> READING -> DISPATCHING -> PROMPTING ... -> STOPPED

A single session writing to the output stream is created at start and bound
to the loop's thread for the loop's whole lifetime; it is unbound and
destroyed on every exit path. Ctrl-C and end of input stop the loop.
"""

import logging
from typing import TYPE_CHECKING, Optional, TextIO

from fshell.errors import Result
from fshell.interface import HELP_TEXT, BaseCLI
from fshell.session import Session, StreamSink

from .base import Transport, TransportState

if TYPE_CHECKING:  # pragma: no cover
    from fshell.engine import Engine

logger = logging.getLogger(__name__)


class InteractiveTransport(Transport):
    def __init__(self, cli: BaseCLI, output: TextIO | None = None) -> None:
        super().__init__()
        self._cli = cli
        self._output = output
        self.session_id: int | None = None

    def receive_line(self) -> str:
        self.state = TransportState.PROMPTING
        try:
            self.state = TransportState.READING
            return self._cli.get_line()
        except KeyboardInterrupt:
            raise EOFError from None

    def send_result(self, result: Result, session: Optional[Session]) -> None:
        # Output and error lines were already streamed to the terminal.
        self.state = TransportState.PROMPTING

    def _banner(self, engine: "Engine") -> str | None:
        if engine.header:
            return engine.header if engine.header.endswith("\n") else engine.header + "\n"
        if engine.config.show_banner:
            return f"{engine.app_name} shell. {HELP_TEXT} Type 'exit' to quit.\n"
        return None

    def run(self, engine: "Engine") -> Result:
        sessions = engine.sessions
        self.session_id = sessions.create_session(StreamSink(self._output), origin="interactive")
        logger.info("interactive session %d started", self.session_id)
        try:
            sessions.bind_thread(self.session_id)
            with self._cli:
                banner = self._banner(engine)
                if banner:
                    sessions.route_output(banner)
                return self.serve(engine, self.session_id)
        finally:
            sessions.unbind_thread()
            sessions.destroy_session(self.session_id)
            self.state = TransportState.STOPPED
            logger.info("interactive session %d closed", self.session_id)
