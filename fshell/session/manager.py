#!/usr/bin/env python3
# fshell/session/manager.py
from __future__ import annotations
"""
Session table and thread-to-session binding.

The binding map is the only ambient state in the engine: a handler calls
engine.print() without a session reference and the calling thread's binding
decides where the text goes. Transport loops bind once per session and always
unbind on their exit path; the dispatcher binds for the duration of a call and
restores whatever binding was there before.

Unbound threads (background workers, host threads) write to a silent discard.
"""

import itertools
import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from fshell.errors import NotFoundError

from .session import HistoryEntry, Session
from .sinks import BufferSink, OutputSink

logger = logging.getLogger(__name__)


def _current_thread_id(thread_id: int | None) -> int:
    return threading.get_ident() if thread_id is None else thread_id


class SessionManager:
    """Creates and destroys sessions and routes output for bound threads."""

    def __init__(self, history_limit: int = 100) -> None:
        self.history_limit = history_limit
        self._sessions: Dict[int, Session] = {}
        self._bindings: Dict[int, int] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # ---------------- Lifecycle ----------------

    def create_session(self, sink: OutputSink | None = None, origin: str = "") -> int:
        """Create a session and return its id. Ids are monotonic and never reused."""
        with self._lock:
            session_id = next(self._ids)
            self._sessions[session_id] = Session(
                id=session_id,
                sink=sink if sink is not None else BufferSink(),
                history_limit=self.history_limit,
                origin=origin,
            )
        logger.debug("session %d created (%s)", session_id, origin or "host")
        return session_id

    def destroy_session(self, session_id: int) -> bool:
        """Release a session. Unknown ids are ignored; returns True if one was removed."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            stale = [tid for tid, sid in self._bindings.items() if sid == session_id]
            for tid in stale:
                del self._bindings[tid]
        session.close()
        logger.debug("session %d destroyed", session_id)
        return True

    def close_all(self) -> None:
        for session_id in self.ids():
            self.destroy_session(session_id)

    def get(self, session_id: int) -> Optional[Session]:
        return self._sessions.get(session_id)

    def exists(self, session_id: int) -> bool:
        return session_id in self._sessions

    def ids(self) -> list[int]:
        with self._lock:
            return list(self._sessions.keys())

    def __len__(self) -> int:
        return len(self._sessions)

    # ---------------- Thread binding ----------------

    def bind_thread(self, session_id: int, thread_id: int | None = None) -> None:
        with self._lock:
            if session_id not in self._sessions:
                raise NotFoundError(f"no session with id {session_id}")
            self._bindings[_current_thread_id(thread_id)] = session_id

    def unbind_thread(self, thread_id: int | None = None) -> None:
        with self._lock:
            self._bindings.pop(_current_thread_id(thread_id), None)

    def get_bound_session(self, thread_id: int | None = None) -> Optional[int]:
        with self._lock:
            return self._bindings.get(_current_thread_id(thread_id))

    @contextmanager
    def bound(self, session_id: int | None) -> Iterator[Optional[Session]]:
        """
        Bind the calling thread to `session_id` (or leave it unbound for None)
        and restore the previous binding on exit.
        """
        thread_id = threading.get_ident()
        with self._lock:
            previous = self._bindings.get(thread_id)
            session = None
            if session_id is None:
                self._bindings.pop(thread_id, None)
            else:
                session = self._sessions.get(session_id)
                if session is None:
                    raise NotFoundError(f"no session with id {session_id}")
                self._bindings[thread_id] = session_id
        try:
            yield session
        finally:
            with self._lock:
                if previous is not None and previous in self._sessions:
                    self._bindings[thread_id] = previous
                else:
                    self._bindings.pop(thread_id, None)

    # ---------------- Output & history ----------------

    def route_output(self, text: str, thread_id: int | None = None) -> bool:
        """Append text to the bound session's sink. Returns False when it was discarded."""
        with self._lock:
            session_id = self._bindings.get(_current_thread_id(thread_id))
            session = self._sessions.get(session_id) if session_id is not None else None
        if session is None:
            return False
        session.write(text)
        return True

    def record(self, session_id: int, line: str) -> Optional[HistoryEntry]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        return session.record(line)

    def history(self, session_id: int) -> list[HistoryEntry]:
        session = self._sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"no session with id {session_id}")
        return list(session.history)
