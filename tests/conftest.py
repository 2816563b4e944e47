"""Shared fixtures for the FShell test suite."""

import shutil
import tempfile
from collections.abc import Iterator
from pathlib import Path

import pytest

from fshell.commands import Invocation
from fshell.engine import Engine


@pytest.fixture
def engine() -> Iterator[Engine]:
    """Yield a fresh engine and destroy it afterwards."""
    shell = Engine("Test")
    yield shell
    shell.destroy()


@pytest.fixture
def hello_engine(engine: Engine) -> Engine:
    """An engine with the canonical ``hello`` command registered."""

    def hello(cmd: Invocation, context: Engine) -> None:
        context.print(f"Hello, {cmd.get_param('name') or 'World'}!")

    engine.register_command("hello", hello, engine, "Say hello")
    return engine


@pytest.fixture
def channel() -> Iterator[str]:
    """A socket path short enough for AF_UNIX limits on every platform."""
    directory = tempfile.mkdtemp(prefix="fsh")
    yield str(Path(directory) / "ctl.sock")
    shutil.rmtree(directory, ignore_errors=True)
