#!/usr/bin/env python3
# fshell/transport/client.py
from __future__ import annotations
"""Blocking client for the daemon transport."""

import socket
from typing import BinaryIO, Optional

from fshell.config import DEFAULT_CHANNEL

from .daemon import channel_path
from .protocol import ProtocolError, Reply, decode_reply, encode_request


class DaemonClient:
    """
    One persistent connection (one server-side session).

    Usage:
        with DaemonClient("myapp_ctrl") as client:
            reply = client.send("hello name=Ada")
    """

    def __init__(self, channel: str = DEFAULT_CHANNEL, timeout: float | None = 10.0) -> None:
        self.path = channel_path(channel)
        self.timeout = timeout
        self._sock: Optional[socket.socket] = None
        self._rfile: Optional[BinaryIO] = None

    def connect(self) -> "DaemonClient":
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(self.timeout)
        try:
            sock.connect(str(self.path))
        except OSError:
            sock.close()
            raise
        self._sock = sock
        self._rfile = sock.makefile("rb")
        return self

    @property
    def connected(self) -> bool:
        return self._sock is not None

    def send(self, line: str) -> Reply:
        """Send one request line and wait for its reply frame."""
        if self._sock is None or self._rfile is None:
            raise ConnectionError("client is not connected")
        self._sock.sendall(encode_request(line))
        data = self._rfile.readline()
        if not data:
            raise ProtocolError("daemon closed the connection")
        return decode_reply(data)

    def close(self, *, say_goodbye: bool = True) -> None:
        if self._sock is None:
            return
        try:
            if say_goodbye:
                self._sock.sendall(encode_request("exit"))
        except OSError:
            pass
        finally:
            if self._rfile is not None:
                self._rfile.close()
            self._sock.close()
            self._sock = None
            self._rfile = None

    def __enter__(self) -> "DaemonClient":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
