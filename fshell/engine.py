#!/usr/bin/env python3
# fshell/engine.py
from __future__ import annotations
"""
The engine handle.

An Engine bundles one command registry, one session manager and the
dispatcher between them, plus the execution mode, welcome header and
running/stopped state. Hosts create one, register commands, pick a mode and
call run(), which blocks until stop() is requested.

Every public operation reports a Result instead of raising. After destroy()
they all return NOT_INITIALIZED (print() silently does nothing).

Example:
    engine = Engine("HelloWorld")

    @engine.command(help="Say hello to someone")
    def hello(cmd, context):
        engine.print(f"Hello, {cmd.get_param('name') or 'World'}!")

    engine.set_execution_mode(ExecutionMode.DAEMON, "hello_ctrl")
    engine.run()
    engine.destroy()
"""

import functools
import logging
import threading
from enum import IntEnum, StrEnum
from typing import Any, Callable, Optional, TextIO

from fshell.capabilities import API_VERSION, Capability, capabilities
from fshell.commands import CommandHandler, CommandRegistry
from fshell.config import EngineConfig
from fshell.errors import InvalidArgumentError, NotInitializedError, Result, ShellError
from fshell.interface import Dispatcher, StreamCLI, make_cli, parse, register_builtins
from fshell.session import BufferSink, OutputSink, SessionManager
from fshell.transport import DaemonServer, InteractiveTransport

logger = logging.getLogger(__name__)


class ExecutionMode(IntEnum):
    INTERACTIVE = 0
    DAEMON = 1


class EngineState(StrEnum):
    CREATED = "created"
    RUNNING = "running"
    STOPPED = "stopped"
    DESTROYED = "destroyed"


def _reports_result(method: Callable[..., Any]) -> Callable[..., Result]:
    """Turn NOT_INITIALIZED checks and ShellError exceptions into Result values."""

    @functools.wraps(method)
    def wrapper(self: "Engine", *args: Any, **kwargs: Any) -> Result:
        try:
            self._require_alive()
            value = method(self, *args, **kwargs)
        except ShellError as exc:
            logger.debug("%s failed: %s", method.__name__, exc)
            return exc.code
        return Result.OK if value is None else Result(value)

    return wrapper


class Engine:
    """Owned handle for one embedded command shell."""

    def __init__(
        self,
        app_name: str,
        config: EngineConfig | None = None,
        *,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
    ) -> None:
        if not app_name:
            raise InvalidArgumentError("app_name must be a non-empty string")
        self.app_name = app_name
        self.config = config or EngineConfig()
        self.registry = CommandRegistry()
        self.sessions = SessionManager(self.config.history_limit)
        self.dispatcher = Dispatcher(self.registry, self.sessions)
        self.mode = ExecutionMode.INTERACTIVE
        self.channel = self.config.channel
        self.header: str | None = None
        self.state = EngineState.CREATED
        self._stdin = stdin
        self._stdout = stdout
        # Plain attribute: set from signal handlers and other threads, read by loops.
        self._stop_requested = False
        self._run_lock = threading.Lock()
        register_builtins(self)

    # ---------------- Lifecycle ----------------

    def _require_alive(self) -> None:
        if self.state is EngineState.DESTROYED:
            raise NotInitializedError(f"engine {self.app_name!r} was destroyed")

    @property
    def stop_requested(self) -> bool:
        return self._stop_requested

    @property
    def running(self) -> bool:
        return self.state is EngineState.RUNNING

    def destroy(self) -> None:
        """Stop any running loop and release all sessions and registrations. Idempotent."""
        if self.state is EngineState.DESTROYED:
            return
        self._stop_requested = True
        self.state = EngineState.DESTROYED
        self.sessions.close_all()
        self.registry.clear()
        logger.debug("engine %r destroyed", self.app_name)

    def __enter__(self) -> "Engine":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.destroy()

    # ---------------- Configuration ----------------

    @_reports_result
    def register_header(self, text: str) -> None:
        if text is None:
            raise InvalidArgumentError("header text is required")
        self.header = str(text)

    @_reports_result
    def set_execution_mode(self, mode: ExecutionMode | int, channel_name: str | None = None) -> None:
        """Choose the transport used by run(). channel_name is ignored in interactive mode."""
        if self.running:
            raise InvalidArgumentError("execution mode cannot change while running")
        try:
            self.mode = ExecutionMode(mode)
        except ValueError:
            raise InvalidArgumentError(f"unknown execution mode {mode!r}") from None
        self.channel = channel_name or self.config.channel

    # ---------------- Commands ----------------

    @_reports_result
    def register_command(
        self,
        name: str,
        handler: CommandHandler,
        context: Any = None,
        help: str = "",
    ) -> None:
        self.registry.register(name, handler, context=context, help=help)

    def command(
        self,
        *,
        name: str | None = None,
        help: str | None = None,
        context: Any = None,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of register_command. Raises ShellError on failure."""
        self._require_alive()
        return self.registry.command(name=name, help=help, context=context)

    @_reports_result
    def execute(self, raw_line: str) -> Result:
        """
        Parse and dispatch one line outside any transport loop.

        Output goes to the calling thread's bound session; with no binding it
        is discarded. Empty lines succeed without dispatching.
        """
        if raw_line is None:
            raise InvalidArgumentError("no command line given")
        invocation = parse(raw_line)
        if invocation is None:
            return Result.OK
        return self.dispatcher.dispatch(invocation, self.sessions.get_bound_session())

    # ---------------- Running ----------------

    @_reports_result
    def run(self) -> Result:
        """Run the selected transport; blocks until stopped."""
        if not self._run_lock.acquire(blocking=False):
            logger.warning("engine %r is already running", self.app_name)
            return Result.INTERNAL
        try:
            self.state = EngineState.RUNNING
            logger.info("engine %r running in %s mode", self.app_name, self.mode.name.lower())
            if self.mode is ExecutionMode.DAEMON:
                return self._run_daemon()
            return self._run_interactive()
        finally:
            self._stop_requested = False
            if self.state is EngineState.RUNNING:
                self.state = EngineState.STOPPED
            self._run_lock.release()

    def _run_interactive(self) -> Result:
        prompt = self.config.prompt or f"{self.app_name}> "
        cli = StreamCLI(self._stdin) if self._stdin is not None else make_cli(self.registry, prompt)
        return InteractiveTransport(cli, self._stdout).run(self)

    def _run_daemon(self) -> Result:
        try:
            server = DaemonServer(self, self.channel)
        except OSError as exc:
            logger.error("cannot listen on channel %r: %s", self.channel, exc)
            return Result.INTERNAL
        return server.serve_until_stopped()

    def stop(self) -> Result:
        """
        Request the running loops to stop at their next checkpoint.

        Only sets a flag, so it is safe from signal handlers and other threads.
        A stop requested while not running makes the next run() return at once.
        """
        if self.state is EngineState.DESTROYED:
            return Result.NOT_INITIALIZED
        self._stop_requested = True
        return Result.OK

    # ---------------- Sessions & output ----------------

    def print(self, text: str = "", end: str = "\n") -> None:
        """Write to the calling thread's bound session; discarded when unbound."""
        if self.state is EngineState.DESTROYED:
            return
        self.sessions.route_output(f"{text}{end}")

    def get_current_session(self) -> Optional[int]:
        if self.state is EngineState.DESTROYED:
            return None
        return self.sessions.get_bound_session()

    @_reports_result
    def bind_thread_session(self, session_id: int) -> None:
        self.sessions.bind_thread(session_id)

    @_reports_result
    def unbind_thread_session(self) -> None:
        self.sessions.unbind_thread()

    def create_session(self, sink: OutputSink | None = None) -> Optional[int]:
        """Open a host-managed session (buffered unless a sink is given). None after destroy()."""
        if self.state is EngineState.DESTROYED:
            return None
        return self.sessions.create_session(sink, origin="host")

    @_reports_result
    def destroy_session(self, session_id: int) -> None:
        self.sessions.destroy_session(session_id)

    def session_output(self, session_id: int, *, drain: bool = False) -> str:
        """Buffered output of a session; empty for unknown or streaming sessions."""
        session = self.sessions.get(session_id)
        if session is None or not isinstance(session.sink, BufferSink):
            return ""
        return session.sink.drain() if drain else session.sink.getvalue()

    # ---------------- Queries ----------------

    def api_version(self) -> int:
        return API_VERSION

    @staticmethod
    def capabilities() -> Capability:
        return capabilities()


def create(app_name: str, config: EngineConfig | None = None, **kwargs: Any) -> Engine | None:
    """Create an engine, or return None when it cannot be created."""
    try:
        return Engine(app_name, config, **kwargs)
    except ShellError as exc:
        logger.error("cannot create engine: %s", exc)
        return None


def destroy(engine: Engine | None) -> None:
    """Destroy an engine. Safe to call with None or twice."""
    if engine is not None:
        engine.destroy()
