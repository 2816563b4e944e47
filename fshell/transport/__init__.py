#!/usr/bin/env python3
# fshell/transport/__init__.py
from __future__ import annotations
"""
Package for the front-ends that feed lines to the dispatcher.

Provides:
- The shared loop and state enum (`Transport`, `TransportState`).
- The interactive terminal loop (`InteractiveTransport`).
- The Unix-socket daemon and its client (`DaemonServer`, `DaemonClient`).
- The daemon wire format (`encode_reply`, `decode_reply`, `Reply`).
"""


from .base import Transport, TransportState
from .protocol import Reply, ProtocolError, encode_request, decode_request, encode_reply, decode_reply
from .interactive import InteractiveTransport
from .daemon import DaemonServer, SocketTransport, channel_path
from .client import DaemonClient

__all__ = [
    "Transport",
    "TransportState",
    "Reply",
    "ProtocolError",
    "encode_request",
    "decode_request",
    "encode_reply",
    "decode_reply",
    "InteractiveTransport",
    "DaemonServer",
    "SocketTransport",
    "channel_path",
    "DaemonClient",
]
