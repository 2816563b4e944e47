#!/usr/bin/env python3
# fshell/session/__init__.py
from __future__ import annotations
"""
Package for sessions and output routing.

Provides:
- Session records with bounded history (`Session`, `HistoryEntry`).
- Output sinks (`BufferSink`, `StreamSink`).
- The session table and thread binding map (`SessionManager`).
"""


from .sinks import OutputSink, BufferSink, StreamSink
from .session import Session, HistoryEntry
from .manager import SessionManager

__all__ = [
    "OutputSink",
    "BufferSink",
    "StreamSink",
    "Session",
    "HistoryEntry",
    "SessionManager",
]
