#!/usr/bin/env python3
# fshell/session/session.py
from __future__ import annotations
"""Session record: an isolated output sink plus a bounded command history."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

from .sinks import OutputSink


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    index: int
    line: str
    timestamp: datetime


@dataclass(slots=True)
class Session:
    """
    One terminal or daemon client.

    Attributes:
        id: Unique per engine, never reused.
        sink: Where routed output goes.
        history: Most recent lines dispatched in this session (oldest evicted first).
        created_at: UTC creation time.
        origin: Free-form label of what opened the session.
    """
    id: int
    sink: OutputSink
    history_limit: int = 100
    origin: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    history: deque[HistoryEntry] = field(init=False)
    _dispatched: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.history = deque(maxlen=max(1, self.history_limit))

    def record(self, line: str) -> HistoryEntry:
        """Append a line to the history. Entries are numbered from 1 for the session's lifetime."""
        self._dispatched += 1
        entry = HistoryEntry(self._dispatched, line, datetime.now(timezone.utc))
        self.history.append(entry)
        return entry

    def write(self, text: str) -> None:
        self.sink.write(text)

    def close(self) -> None:
        self.history.clear()
        self.sink.close()
