"""Tests for the daemon transport over a real Unix domain socket.

Each test starts ``engine.run()`` on a background thread, talks to it with
DaemonClient and then stops it, checking that run() returns promptly.
"""

import socket
import tempfile
import threading
import time
from collections.abc import Iterator
from pathlib import Path

import pytest

from fshell.capabilities import daemon_supported
from fshell.commands import Invocation
from fshell.config import EngineConfig
from fshell.engine import Engine, ExecutionMode
from fshell.errors import Result
from fshell.transport import DaemonClient, channel_path

pytestmark = pytest.mark.skipif(not daemon_supported(), reason="needs Unix domain sockets")

GRACE = 5.0


def _wait_for(predicate, timeout: float = GRACE) -> bool:
    """Poll until predicate() is true or the timeout passes."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def _accepting(path: str) -> bool:
    """True once something is listening on the socket path."""
    probe = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    probe.settimeout(0.5)
    try:
        probe.connect(path)
    except OSError:
        return False
    finally:
        probe.close()
    return True


class _RunningDaemon:
    """An engine running in daemon mode on a background thread."""

    def __init__(self, engine: Engine, channel: str) -> None:
        self.engine = engine
        self.channel = channel
        self.result: Result | None = None
        self.thread = threading.Thread(target=self._run, daemon=True)

    def _run(self) -> None:
        self.result = self.engine.run()

    def start(self) -> "_RunningDaemon":
        assert self.engine.set_execution_mode(ExecutionMode.DAEMON, self.channel) is Result.OK
        self.thread.start()
        assert _wait_for(lambda: _accepting(self.channel)), "daemon did not start listening"
        return self

    def stop(self) -> None:
        self.engine.stop()
        self.thread.join(GRACE)
        assert not self.thread.is_alive(), "run() did not return after stop()"


def _daemon_engine() -> Engine:
    """An engine with hello, whoami and a slow command."""
    engine = Engine("Daemon", EngineConfig(poll_interval=0.05))

    def hello(cmd: Invocation, context: Engine) -> None:
        context.print(f"Hello, {cmd.get_param('name') or 'World'}!")

    def whoami(cmd: Invocation, context: Engine) -> None:
        for _ in range(int(cmd.get_param("times") or 1)):
            context.print(f"session {context.get_current_session()}")
            time.sleep(0.001)

    engine.register_command("hello", hello, engine)
    engine.register_command("whoami", whoami, engine)
    return engine


@pytest.fixture
def daemon(channel: str) -> Iterator[_RunningDaemon]:
    """A running daemon, stopped and destroyed afterwards."""
    running = _RunningDaemon(_daemon_engine(), channel).start()
    yield running
    if running.thread.is_alive():
        running.stop()
    running.engine.destroy()


# ---------------------------------------------------------------------------
# Request / reply
# ---------------------------------------------------------------------------


class TestRequests:
    """Verify request handling for a single client."""

    def test_hello(self, daemon: _RunningDaemon) -> None:
        """The canonical request gets its greeting back."""
        with DaemonClient(daemon.channel) as client:
            reply = client.send("hello name=Ada")
        assert reply.result == Result.OK
        assert reply.status == "OK"
        assert reply.output == "Hello, Ada!\n"

    def test_empty_line_gets_ok(self, daemon: _RunningDaemon) -> None:
        """Blank requests still get a reply."""
        with DaemonClient(daemon.channel) as client:
            reply = client.send("")
        assert reply.ok
        assert reply.output == ""

    def test_unknown_command(self, daemon: _RunningDaemon) -> None:
        """Unknown commands report NOT_FOUND with the error line as output."""
        with DaemonClient(daemon.channel) as client:
            reply = client.send("helo")
        assert reply.code is Result.NOT_FOUND
        assert reply.output.startswith("[error] Unknown command: helo.")

    def test_parse_error(self, daemon: _RunningDaemon) -> None:
        """Malformed lines report INVALID_ARGUMENT and keep the connection."""
        with DaemonClient(daemon.channel) as client:
            bad = client.send('hello "oops')
            good = client.send("hello")
        assert bad.code is Result.INVALID_ARGUMENT
        assert "unterminated quote" in bad.output
        assert good.output == "Hello, World!\n"

    def test_history_is_per_connection(self, daemon: _RunningDaemon) -> None:
        """Each connection is its own session with its own history."""
        with DaemonClient(daemon.channel) as first, DaemonClient(daemon.channel) as second:
            first.send("hello")
            second.send("whoami")
            reply = first.send("history")
        assert reply.output.splitlines() == ["    1  hello", "    2  history"]

    def test_session_destroyed_after_disconnect(self, daemon: _RunningDaemon) -> None:
        """Closing the connection releases its session."""
        with DaemonClient(daemon.channel) as client:
            client.send("hello")
            assert daemon.engine.sessions.ids()
        assert _wait_for(lambda: daemon.engine.sessions.ids() == [])


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class TestConcurrentClients:
    """Verify isolation between clients served at the same time."""

    def test_replies_are_isolated(self, daemon: _RunningDaemon) -> None:
        """Two clients dispatching together only see their own output."""
        replies: dict[int, str] = {}
        barrier = threading.Barrier(2)

        def client_thread(slot: int) -> None:
            with DaemonClient(daemon.channel) as client:
                barrier.wait()
                replies[slot] = client.send("whoami times=50").output

        threads = [threading.Thread(target=client_thread, args=(slot,)) for slot in (0, 1)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(GRACE)

        assert len(replies) == 2
        seen = set()
        for output in replies.values():
            lines = output.splitlines()
            assert len(lines) == 50
            assert len(set(lines)) == 1
            seen.add(lines[0])
        assert len(seen) == 2


# ---------------------------------------------------------------------------
# Stopping
# ---------------------------------------------------------------------------


class TestStop:
    """Verify graceful shutdown."""

    def test_stop_with_idle_client(self, daemon: _RunningDaemon) -> None:
        """An idle connected client does not keep run() alive."""
        client = DaemonClient(daemon.channel).connect()
        try:
            client.send("hello")
            daemon.stop()
        finally:
            client.close(say_goodbye=False)
        assert daemon.result is Result.OK
        assert not Path(daemon.channel).exists()
        assert daemon.engine.sessions.ids() == []

    def test_in_flight_dispatch_completes(self, channel: str) -> None:
        """A stop during a dispatch lets it finish and reply."""
        engine = _daemon_engine()
        started = threading.Event()

        def slow(cmd: Invocation, context: Engine) -> None:
            started.set()
            time.sleep(0.3)
            context.print("done")

        engine.register_command("slow", slow, engine)
        running = _RunningDaemon(engine, channel).start()
        replies = []

        def client_thread() -> None:
            with DaemonClient(channel) as client:
                replies.append(client.send("slow"))

        worker = threading.Thread(target=client_thread)
        worker.start()
        assert started.wait(GRACE)
        running.stop()
        worker.join(GRACE)
        engine.destroy()

        assert len(replies) == 1
        assert replies[0].ok
        assert replies[0].output == "done\n"

    def test_run_while_running(self, daemon: _RunningDaemon) -> None:
        """A second run() or a mode change is refused while running."""
        assert daemon.engine.run() is Result.INTERNAL
        assert daemon.engine.set_execution_mode(ExecutionMode.INTERACTIVE) is Result.INVALID_ARGUMENT

    def test_restart_after_stop(self, channel: str) -> None:
        """An engine can serve again after a stop."""
        engine = _daemon_engine()
        _RunningDaemon(engine, channel).start().stop()
        second = _RunningDaemon(engine, channel).start()
        with DaemonClient(channel) as client:
            assert client.send("hello").ok
        second.stop()
        engine.destroy()


# ---------------------------------------------------------------------------
# Channel handling
# ---------------------------------------------------------------------------


class TestChannels:
    """Verify channel naming and socket file handling."""

    def test_bare_name_maps_to_temp_dir(self) -> None:
        """A plain channel name becomes a socket in the temp directory."""
        assert channel_path("myapp_ctrl") == Path(tempfile.gettempdir()) / "myapp_ctrl.sock"

    def test_path_used_as_is(self, channel: str) -> None:
        """A channel that is already a path is not rewritten."""
        assert channel_path(channel) == Path(channel)

    def test_stale_socket_is_replaced(self, channel: str) -> None:
        """A leftover socket file with no listener is reclaimed."""
        leftover = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        leftover.bind(channel)
        leftover.close()
        assert Path(channel).exists()

        engine = _daemon_engine()
        running = _RunningDaemon(engine, channel).start()
        with DaemonClient(channel) as client:
            assert client.send("hello").ok
        running.stop()
        engine.destroy()

    def test_live_channel_is_not_stolen(self, daemon: _RunningDaemon) -> None:
        """A second daemon on the same channel fails to start."""
        other = _daemon_engine()
        other.set_execution_mode(ExecutionMode.DAEMON, daemon.channel)
        assert other.run() is Result.INTERNAL
        other.destroy()
        with DaemonClient(daemon.channel) as client:
            assert client.send("hello").ok
