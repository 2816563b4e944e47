#!/usr/bin/env python3
# fshell/capabilities.py
from __future__ import annotations
"""
API version and capability queries.

Both are pure functions of the installed build and platform; nothing here is
mutable process state.
"""

import socket
from enum import IntFlag

API_VERSION_MAJOR = 1
API_VERSION_MINOR = 0
API_VERSION_PATCH = 0

# Layout: 0xMMMMmmpp
API_VERSION = (API_VERSION_MAJOR << 16) | (API_VERSION_MINOR << 8) | API_VERSION_PATCH


class Capability(IntFlag):
    COMMAND_REGISTRATION = 1 << 0
    INTERACTIVE_SHELL = 1 << 1
    PLUGIN_API = 1 << 2
    SIGNAL_SAFE_STOP = 1 << 3
    DAEMON_MODE = 1 << 4


def daemon_supported() -> bool:
    """The daemon transport needs Unix domain sockets."""
    return hasattr(socket, "AF_UNIX")


def capabilities() -> Capability:
    caps = (
        Capability.COMMAND_REGISTRATION
        | Capability.INTERACTIVE_SHELL
        | Capability.SIGNAL_SAFE_STOP
    )
    if daemon_supported():
        caps |= Capability.DAEMON_MODE
    return caps


def format_version(packed: int = API_VERSION) -> str:
    return f"{packed >> 16}.{(packed >> 8) & 0xFF}.{packed & 0xFF}"
