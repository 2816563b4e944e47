#!/usr/bin/env python3
# fshell/session/sinks.py
from __future__ import annotations
"""
Output sinks a session writes to.

Every write call is a single atomic append: text from one print call is never
split by another writer.
"""

import sys
import threading
from typing import Protocol, TextIO

from fshell.ui import PRINT_MUTEX


class OutputSink(Protocol):
    def write(self, text: str) -> None:  # pragma: no cover - signature only
        ...

    def close(self) -> None:  # pragma: no cover - signature only
        ...


class BufferSink:
    """Append-only in-memory buffer. The daemon drains it into reply frames."""

    def __init__(self) -> None:
        self._chunks: list[str] = []
        self._lock = threading.Lock()
        self._closed = False

    def write(self, text: str) -> None:
        with self._lock:
            if not self._closed:
                self._chunks.append(text)

    def getvalue(self) -> str:
        with self._lock:
            return "".join(self._chunks)

    def drain(self) -> str:
        """Return everything written so far and empty the buffer."""
        with self._lock:
            text = "".join(self._chunks)
            self._chunks.clear()
            return text

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._chunks.clear()


class StreamSink:
    """Writes straight to a text stream, sharing the UI print mutex."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def write(self, text: str) -> None:
        with PRINT_MUTEX:
            self.stream.write(text)
            self.stream.flush()

    def close(self) -> None:
        # The stream belongs to the caller.
        pass
