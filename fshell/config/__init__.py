#!/usr/bin/env python3
# fshell/config/__init__.py
from __future__ import annotations
"""
Package for engine configuration.

Provides:
- The validated settings dataclass (`EngineConfig`).
- A loader merging defaults, config files and FSHELL_* environment variables (`load_config`).
"""


from .config import DEFAULT_CHANNEL, DEFAULTS, EngineConfig, load_config

__all__ = [
    "DEFAULT_CHANNEL",
    "DEFAULTS",
    "EngineConfig",
    "load_config",
]
