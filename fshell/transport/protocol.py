#!/usr/bin/env python3
# fshell/transport/protocol.py
from __future__ import annotations
"""
Daemon wire format.

Request: one UTF-8 line terminated by '\\n'.
Reply:   one compact JSON object per line:
         {"result": <int>, "status": "<NAME>", "output": "<text>"}
`output` holds everything the session printed during that dispatch,
including `[error] ...` lines written by the transport.
"""

import json
from dataclasses import dataclass

from fshell.errors import InvalidArgumentError, Result, ShellError

MAX_LINE_BYTES = 64 * 1024


class ProtocolError(ShellError):
    code = Result.INTERNAL


@dataclass(frozen=True, slots=True)
class Reply:
    result: int
    output: str = ""
    status: str = ""

    @property
    def ok(self) -> bool:
        return self.result == Result.OK

    @property
    def code(self) -> Result | None:
        """The Result enum member, or None for a code this build does not know."""
        try:
            return Result(self.result)
        except ValueError:
            return None


def encode_request(line: str) -> bytes:
    if "\n" in line or "\r" in line:
        raise InvalidArgumentError("a request must be a single line")
    data = line.encode("utf-8") + b"\n"
    if len(data) > MAX_LINE_BYTES:
        raise InvalidArgumentError(f"request exceeds {MAX_LINE_BYTES} bytes")
    return data


def decode_request(data: bytes) -> str:
    return data.decode("utf-8", errors="replace").rstrip("\r\n")


def encode_reply(result: Result, output: str = "") -> bytes:
    payload = {"result": int(result), "status": Result(result).name, "output": output}
    return json.dumps(payload, separators=(",", ":")).encode("utf-8") + b"\n"


def decode_reply(data: bytes) -> Reply:
    try:
        payload = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ProtocolError(f"malformed reply frame: {exc}") from exc
    if not isinstance(payload, dict) or not isinstance(payload.get("result"), int):
        raise ProtocolError("reply frame has no integer 'result'")
    return Reply(
        result=payload["result"],
        output=str(payload.get("output", "")),
        status=str(payload.get("status", "")),
    )
