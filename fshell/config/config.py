#!/usr/bin/env python3
# fshell/config/config.py
from __future__ import annotations
"""
Engine configuration.

Sources, later ones overriding earlier ones:
  1) DEFAULTS
  2) Files in the base directory (CWD unless given), in this order:
     .env, config.ini, config.json, config.toml
  3) FSHELL_* environment variables

File keys may omit the FSHELL_ prefix, and nested sections are flattened, so
`[fshell] channel = "x"` in TOML and `CHANNEL=x` in .env both set
FSHELL_CHANNEL. Unrecognized FSHELL_* keys are kept in EngineConfig.extra.

Recognized keys:
  FSHELL_CHANNEL         daemon channel name or socket path (non-empty)
  FSHELL_HISTORY_LIMIT   per-session history entries (>= 1)
  FSHELL_POLL_INTERVAL   seconds between daemon stop-flag checks (> 0)
  FSHELL_PROMPT          interactive prompt; default "<app>> "
  FSHELL_SHOW_BANNER     print a default banner when no header is registered
  FSHELL_LOG_LEVEL       DEBUG | INFO | WARNING | ERROR | CRITICAL
  FSHELL_LOG_FILE_PATH   rotating log file for the demo entry point
"""

import configparser
import json
import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping

DEFAULT_CHANNEL = "fshell_ctrl"
ENV_PREFIX = "FSHELL_"

DEFAULTS: dict[str, Any] = {
    "FSHELL_CHANNEL": DEFAULT_CHANNEL,
    "FSHELL_HISTORY_LIMIT": 100,
    "FSHELL_POLL_INTERVAL": 0.25,
    "FSHELL_PROMPT": None,
    "FSHELL_SHOW_BANNER": True,
    "FSHELL_LOG_LEVEL": None,
    "FSHELL_LOG_FILE_PATH": None,
}


@dataclass(frozen=True)
class EngineConfig:
    channel: str = DEFAULT_CHANNEL
    history_limit: int = 100
    poll_interval: float = 0.25
    prompt: str | None = None
    show_banner: bool = True
    log_level: str | None = None
    log_file_path: Path | None = None

    extra: dict[str, Any] = field(default_factory=dict)


# ---------- readers ----------

_ENV_LINE = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$")


def _read_env_file(path: Path) -> dict[str, Any]:
    """KEY=VALUE lines; '#' comments, optional `export` and matching quotes allowed."""
    values: dict[str, Any] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        match = _ENV_LINE.match(line)
        if match is None:
            continue
        key, value = match.group(1), match.group(2).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        values[key] = value
    return values


def _read_ini_file(path: Path) -> dict[str, Any]:
    parser = configparser.ConfigParser()
    parser.read(path, encoding="utf-8")
    return {key: value for section in parser.sections() for key, value in parser.items(section)}


def _read_json_file(path: Path) -> dict[str, Any]:
    return _flatten(json.loads(path.read_text(encoding="utf-8")))


def _read_toml_file(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return _flatten(tomllib.load(fh))


_FILE_READERS: tuple[tuple[str, Callable[[Path], dict[str, Any]]], ...] = (
    (".env", _read_env_file),
    ("config.ini", _read_ini_file),
    ("config.json", _read_json_file),
    ("config.toml", _read_toml_file),
)


def _flatten(obj: Any, prefix: str = "") -> dict[str, Any]:
    """{'fshell': {'channel': 'x'}} -> {'fshell_channel': 'x'}"""
    if not isinstance(obj, Mapping):
        return {}
    flat: dict[str, Any] = {}
    for key, value in obj.items():
        name = f"{prefix}_{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, name))
        else:
            flat[name] = value
    return flat


def _with_prefix(values: Mapping[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in values.items():
        key = str(key).upper()
        out[key if key.startswith(ENV_PREFIX) else ENV_PREFIX + key] = value
    return out


def _read_files(base: Path) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for filename, reader in _FILE_READERS:
        path = base / filename
        if not path.is_file():
            continue
        try:
            merged.update(_with_prefix(reader(path)))
        except (OSError, UnicodeDecodeError, ValueError, configparser.Error):
            # json and tomllib decode errors are ValueError subclasses
            continue
    return merged


# ---------- coercion ----------

_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return None if text.strip().lower() in ("", "none") else text


def _channel(value: Any) -> str:
    text = _optional_str(value)
    if text is None:
        raise ValueError("CHANNEL must not be empty")
    return text


def _positive_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    number = int(str(value).strip()) if not isinstance(value, int) else value
    if number < 1:
        raise ValueError(f"expected an integer >= 1, got {value!r}")
    return number


def _positive_float(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"expected a number, got {value!r}")
    number = float(value) if isinstance(value, (int, float)) else float(str(value).strip())
    if number <= 0:
        raise ValueError(f"expected a number > 0, got {value!r}")
    return number


def _boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    word = str(value).strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"expected a boolean, got {value!r}")


def _log_level(value: Any) -> str | None:
    text = _optional_str(value)
    if text is None:
        return None
    if text.upper() not in _LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}, got {text!r}")
    return text.upper()


def _path(value: Any) -> Path | None:
    text = _optional_str(value)
    if text is None:
        return None
    return Path(os.path.expandvars(text)).expanduser().resolve()


# key -> (EngineConfig field, coercion)
_FIELDS: dict[str, tuple[str, Callable[[Any], Any]]] = {
    "FSHELL_CHANNEL": ("channel", _channel),
    "FSHELL_HISTORY_LIMIT": ("history_limit", _positive_int),
    "FSHELL_POLL_INTERVAL": ("poll_interval", _positive_float),
    "FSHELL_PROMPT": ("prompt", _optional_str),
    "FSHELL_SHOW_BANNER": ("show_banner", _boolean),
    "FSHELL_LOG_LEVEL": ("log_level", _log_level),
    "FSHELL_LOG_FILE_PATH": ("log_file_path", _path),
}


def _build(values: Mapping[str, Any]) -> EngineConfig:
    kwargs: dict[str, Any] = {}
    for key, (attr, coerce) in _FIELDS.items():
        try:
            kwargs[attr] = coerce(values.get(key, DEFAULTS[key]))
        except ValueError as exc:
            raise ValueError(f"{key}: {exc}") from exc
    extra = {k: v for k, v in values.items() if k not in _FIELDS}
    return EngineConfig(**kwargs, extra=extra)


def load_config(base: Path | None = None, environ: Mapping[str, str] | None = None) -> EngineConfig:
    """
    Merge all sources into a validated EngineConfig.

    Reads files but never writes them. Raises ValueError naming the offending
    key when a value cannot be used.
    """
    values: dict[str, Any] = dict(DEFAULTS)
    values.update(_read_files(base or Path.cwd()))
    env = os.environ if environ is None else environ
    values.update({k: v for k, v in env.items() if k.startswith(ENV_PREFIX)})
    return _build(values)
