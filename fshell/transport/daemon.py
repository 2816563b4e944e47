#!/usr/bin/env python3
# fshell/transport/daemon.py
from __future__ import annotations
"""
Daemon / IPC transport over a Unix domain socket.

Server:  LISTENING -> (accept) -> LISTENING ...        -> STOPPED on engine stop
Client:  ACCEPTED_CLIENT -> READING -> DISPATCHING -> READING ... -> CLIENT_CLOSED

Each accepted client gets its own thread and its own session; all of them
share the engine's registry and session manager. The accept loop polls the
engine's stop flag. On stop it shuts down the read side of every client
socket so idle readers wake up, lets any in-flight dispatch finish and reply,
joins every client thread and removes the socket file.
"""

import errno
import logging
import os
import socket
import socketserver
import stat
import tempfile
import threading
from pathlib import Path
from typing import IO, TYPE_CHECKING, Optional

from fshell.capabilities import daemon_supported
from fshell.config import DEFAULT_CHANNEL
from fshell.errors import Result, UnsupportedError
from fshell.session import BufferSink, Session

from .base import Transport, TransportState
from .protocol import MAX_LINE_BYTES, decode_request, encode_reply

if TYPE_CHECKING:  # pragma: no cover
    from fshell.engine import Engine

logger = logging.getLogger(__name__)

# Only defined by socketserver on platforms with AF_UNIX.
_ServerBase = getattr(socketserver, "ThreadingUnixStreamServer", socketserver.ThreadingTCPServer)


def channel_path(channel: str | None = None) -> Path:
    """Map a channel name to its socket path. Names containing a path separator are used as-is."""
    name = channel or DEFAULT_CHANNEL
    if os.sep in name or name.endswith(".sock"):
        return Path(name)
    return Path(tempfile.gettempdir()) / f"{name}.sock"


def _claim_socket_path(path: Path) -> None:
    """Remove a stale socket file; refuse if a live daemon still answers on it."""
    try:
        mode = path.stat().st_mode
    except FileNotFoundError:
        return
    if not stat.S_ISSOCK(mode):
        raise FileExistsError(errno.EEXIST, "channel path exists and is not a socket", str(path))
    probe = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        probe.connect(str(path))
    except OSError:
        path.unlink(missing_ok=True)
    else:
        raise OSError(errno.EADDRINUSE, "another daemon is listening on this channel", str(path))
    finally:
        probe.close()


class SocketTransport(Transport):
    """One daemon client: request lines in, JSON reply frames out."""

    def __init__(self, rfile: IO[bytes], wfile: IO[bytes]) -> None:
        super().__init__()
        self._rfile = rfile
        self._wfile = wfile
        self.state = TransportState.ACCEPTED_CLIENT

    def receive_line(self) -> str:
        self.state = TransportState.READING
        data = self._rfile.readline(MAX_LINE_BYTES + 1)
        if not data:
            raise EOFError
        if len(data) > MAX_LINE_BYTES:
            raise OSError(errno.EMSGSIZE, "request line too long")
        return decode_request(data)

    def send_result(self, result: Result, session: Optional[Session]) -> None:
        output = ""
        if session is not None and isinstance(session.sink, BufferSink):
            output = session.sink.drain()
        self._wfile.write(encode_reply(result, output))
        self._wfile.flush()


class _ClientHandler(socketserver.StreamRequestHandler):
    server: "DaemonServer"

    def handle(self) -> None:
        self.server.serve_client(self)


class DaemonServer(_ServerBase):  # type: ignore[misc, valid-type]
    # Client threads are joined on close so in-flight dispatches can finish.
    daemon_threads = False
    block_on_close = True

    def __init__(self, engine: "Engine", channel: str | None = None, poll_interval: float | None = None) -> None:
        if not daemon_supported():
            raise UnsupportedError("daemon mode needs Unix domain sockets")
        self.engine = engine
        self.path = channel_path(channel)
        self.state = TransportState.IDLE
        self._clients: set[_ClientHandler] = set()
        self._clients_lock = threading.Lock()
        _claim_socket_path(self.path)
        super().__init__(str(self.path), _ClientHandler)
        self.timeout = poll_interval if poll_interval is not None else engine.config.poll_interval

    # ---------------- Accept loop ----------------

    def serve_until_stopped(self) -> Result:
        """Accept clients until the engine's stop flag is set, then shut down gracefully."""
        self.state = TransportState.LISTENING
        logger.info("daemon listening on %s", self.path)
        try:
            while not self.engine.stop_requested:
                self.handle_request()
        finally:
            self.close()
        return Result.OK

    def close(self) -> None:
        self._disconnect_clients()
        self.server_close()  # joins client threads
        self.path.unlink(missing_ok=True)
        self.state = TransportState.STOPPED
        logger.info("daemon on %s stopped", self.path)

    def handle_timeout(self) -> None:
        # Poll tick; the accept loop re-checks the stop flag.
        pass

    def _disconnect_clients(self) -> None:
        with self._clients_lock:
            handlers = list(self._clients)
        for handler in handlers:
            try:
                handler.connection.shutdown(socket.SHUT_RD)
            except OSError:
                pass

    # ---------------- Per-client loop ----------------

    def serve_client(self, handler: _ClientHandler) -> None:
        sessions = self.engine.sessions
        transport = SocketTransport(handler.rfile, handler.wfile)
        session_id = sessions.create_session(BufferSink(), origin="daemon")
        with self._clients_lock:
            self._clients.add(handler)
        logger.debug("client connected, session %d", session_id)
        try:
            sessions.bind_thread(session_id)
            transport.serve(self.engine, session_id)
        finally:
            sessions.unbind_thread()
            sessions.destroy_session(session_id)
            with self._clients_lock:
                self._clients.discard(handler)
            transport.state = TransportState.CLIENT_CLOSED
            logger.debug("client closed, session %d", session_id)
