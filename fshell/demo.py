#!/usr/bin/env python3
# fshell/demo.py
from __future__ import annotations
"""
Sample commands and the `fshell` command line entry point.

    fshell [shell]                      interactive shell with the sample commands
    fshell daemon [--channel NAME]      serve the sample commands over IPC
    fshell send [--channel NAME] LINE   send one line to a running daemon
"""

import argparse
import platform
import signal
import sys
from typing import Any, Callable, Sequence

from fshell import __version__
from fshell.capabilities import Capability, format_version
from fshell.commands import Invocation
from fshell.config import EngineConfig, load_config
from fshell.engine import Engine, ExecutionMode
from fshell.errors import Result, ShellError
from fshell.transport import DaemonClient
from fshell.ui import colorize, init_logger, print_line

WELCOME_HEADER = (
    "Welcome to the FShell demo!\n"
    "\n"
    "Try these commands:\n"
    "  hello                    - Basic greeting\n"
    "  hello name=John          - Personalized greeting\n"
    "  poke name=Jane -formal   - Formal greeting\n"
    "  poke -excited            - Enthusiastic greeting\n"
    "  stats                    - Show app statistics\n"
    "  fhelp                    - List all commands\n"
    "  exit                     - Quit the shell\n"
)


# ---------- sample commands ----------

def cmd_hello(cmd: Invocation, engine: Engine) -> Result:
    name = cmd.get_param("name")
    if name:
        engine.print(f"Hello, {name}! Welcome to FShell.")
    else:
        engine.print("Hello, World! Welcome to FShell.")
        engine.print("Tip: Try 'hello name=YourName'")
    return Result.OK


def cmd_poke(cmd: Invocation, engine: Engine) -> Result:
    name = cmd.get_param("name") or "Friend"
    formal = cmd.has_flag("formal")
    excited = cmd.has_flag("excited")

    if formal and excited:
        engine.print(f"Good day, {name}! It is truly a pleasure to meet you!")
    elif formal:
        engine.print(f"Good day, {name}. A pleasure to meet you.")
    elif excited:
        engine.print(f"Hey {name}! Great to see you!!!")
    else:
        engine.print(f"Hi {name}, nice to meet you.")
    return Result.OK


def cmd_stats(cmd: Invocation, engine: Engine) -> Result:
    engine.print("=== Application Statistics ===")
    engine.print(f"Shell Version:    {__version__}")
    engine.print(f"API Version:      {format_version(engine.api_version())}")
    engine.print(f"Commands Loaded:  {len(engine.registry)}")
    engine.print(f"Session:          {engine.get_current_session()}")
    engine.print(f"Platform:         {platform.system() or 'Unknown'}")
    engine.print("Status:           Running")
    engine.print("==============================")
    return Result.OK


def build_demo_engine(config: EngineConfig | None = None, **kwargs: Any) -> Engine:
    engine = Engine("HelloWorld", config, **kwargs)
    for name, handler, help_text in (
        ("hello", cmd_hello, "Say hello to someone"),
        ("poke", cmd_poke, "Poke someone with style (try -formal or -excited)"),
        ("stats", cmd_stats, "Display application statistics"),
    ):
        result = engine.register_command(name, handler, engine, help_text)
        if result is not Result.OK:
            raise RuntimeError(f"failed to register {name!r}: {result.describe()}")
    engine.register_header(WELCOME_HEADER)
    return engine


# ---------- entry point ----------

def _status(ok: bool, label: str) -> None:
    tag, color = ("[  OK  ]", "green") if ok else ("[FAILED]", "red")
    print_line(colorize(f"{tag} {label}", color, stream=sys.stderr), file=sys.stderr)


def _step(label: str, fn: Callable[[], Any]) -> Any:
    """Run a startup step with status output."""
    try:
        out = fn()
    except Exception as exc:
        _status(False, f"{label} ({type(exc).__name__}: {exc})")
        raise
    _status(True, label)
    return out


def _describe_capabilities(caps: Capability) -> str:
    return " ".join(flag.name for flag in Capability if flag in caps) or "none"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="fshell", description="FShell demo shell")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="action")
    sub.add_parser("shell", help="Run the interactive shell (default)")
    daemon = sub.add_parser("daemon", help="Serve commands over IPC")
    daemon.add_argument("--channel", default=None, help="IPC channel name or socket path")
    send = sub.add_parser("send", help="Send one line to a running daemon")
    send.add_argument("--channel", default=None, help="IPC channel name or socket path")
    send.add_argument("line", nargs="+", help="Command line to send")
    return parser


def _send(config: EngineConfig, channel: str | None, line: str) -> int:
    try:
        with DaemonClient(channel or config.channel) as client:
            reply = client.send(line)
    except (OSError, ShellError) as exc:
        _status(False, f"send to daemon ({exc})")
        return 1
    if reply.output:
        sys.stdout.write(reply.output)
    return 0 if reply.ok else 1


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    init_logger("fshell", level=config.log_level or "WARNING", logfile=config.log_file_path)

    if args.action == "send":
        return _send(config, args.channel, " ".join(args.line))

    engine = _step("Create engine and register commands", lambda: build_demo_engine(config))
    _step(f"Capabilities: {_describe_capabilities(engine.capabilities())}", lambda: None)

    if args.action == "daemon":
        channel = args.channel or config.channel
        mode_result = engine.set_execution_mode(ExecutionMode.DAEMON, channel)
        if mode_result is Result.OK:
            _status(True, f"Select daemon channel {channel!r}")
        # Ctrl-C stops the daemon; interactive mode leaves it to the line editor.
        signal.signal(signal.SIGINT, lambda signum, frame: engine.stop())
    else:
        mode_result = engine.set_execution_mode(ExecutionMode.INTERACTIVE)
    if mode_result is not Result.OK:
        _status(False, f"Select execution mode ({mode_result.describe()})")
        engine.destroy()
        return 1

    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, lambda signum, frame: engine.stop())

    try:
        result = engine.run()
    finally:
        engine.destroy()

    if result is not Result.OK:
        _status(False, f"Shell exited: {result.describe()}")
        return 1
    return 0
