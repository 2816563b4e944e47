"""Tests for the interactive line frontends.

prompt_toolkit runs against a pipe input and a dummy output, so the real
editor (completion, history, key handling) is exercised without a terminal.
"""

import io
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from prompt_toolkit.application import create_app_session
from prompt_toolkit.completion import CompleteEvent
from prompt_toolkit.document import Document
from prompt_toolkit.input import PipeInput, create_pipe_input
from prompt_toolkit.output import DummyOutput

from fshell.engine import Engine
from fshell.interface import cli as cli_module
from fshell.interface import PromptToolkitCLI, ReadlineCLI, StreamCLI, make_cli


@pytest.fixture
def terminal() -> Iterator[PipeInput]:
    """An app session whose keyboard is a pipe the test can type into."""
    with create_pipe_input() as pipe_input:
        with create_app_session(input=pipe_input, output=DummyOutput()):
            yield pipe_input


def _completions(frontend: PromptToolkitCLI, text: str) -> list[tuple[str, int]]:
    """Return (text, start_position) for every completion offered at the end of text."""
    found = frontend.completer.get_completions(Document(text), CompleteEvent(completion_requested=True))
    return [(c.text, c.start_position) for c in found]


class _TtyInput(io.StringIO):
    def isatty(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# prompt_toolkit frontend
# ---------------------------------------------------------------------------


class TestPromptToolkitCLI:
    """Verify the preferred editor."""

    def test_command_name_completion(self, hello_engine: Engine, terminal: PipeInput) -> None:
        """The first token completes to command names, replacing the typed prefix."""
        frontend = PromptToolkitCLI(hello_engine.registry, history_path=None)
        assert _completions(frontend, "he") == [("hello", -2)]

    def test_fhelp_argument_completion(self, hello_engine: Engine, terminal: PipeInput) -> None:
        """The argument of fhelp completes to command names too."""
        frontend = PromptToolkitCLI(hello_engine.registry, history_path=None)
        assert _completions(frontend, "fhelp h") == [("hello", -1), ("history", -1)]

    def test_no_completion_for_other_arguments(self, hello_engine: Engine, terminal: PipeInput) -> None:
        """Ordinary arguments get nothing."""
        frontend = PromptToolkitCLI(hello_engine.registry, history_path=None)
        assert _completions(frontend, "hello na") == []

    def test_get_line_and_history(self, hello_engine: Engine, terminal: PipeInput, tmp_path: Path) -> None:
        """A typed line is returned and saved to the history file."""
        history = tmp_path / "history"
        frontend = PromptToolkitCLI(hello_engine.registry, prompt="t> ", history_path=history)
        with frontend:
            assert history.exists()
            terminal.send_text("hello name=Ada\r")
            assert frontend.get_line() == "hello name=Ada"
        assert "hello name=Ada" in history.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# readline frontend
# ---------------------------------------------------------------------------


class TestReadlineCLI:
    """Verify the fallback editor's completer and history file."""

    def test_completer_and_history_file(
        self, hello_engine: Engine, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Setup installs a completer; teardown writes the history file."""
        readline = pytest.importorskip("readline")
        history = tmp_path / "history"
        monkeypatch.setattr(cli_module, "HISTORY_FILE_PATH", history)
        frontend = ReadlineCLI(hello_engine.registry)
        try:
            with frontend:
                complete = readline.get_completer()
                assert complete("he", 0) == "hello"
                assert complete("he", 1) is None
            assert history.exists()
        finally:
            readline.set_completer(None)


# ---------------------------------------------------------------------------
# Stream frontend and selection
# ---------------------------------------------------------------------------


class TestStreamCLI:
    """Verify the pipe and file reader."""

    def test_lines_then_eof(self) -> None:
        """Lines come back without terminators; the end raises EOFError."""
        frontend = StreamCLI(io.StringIO("hello\r\nstats\n"))
        assert frontend.get_line() == "hello"
        assert frontend.get_line() == "stats"
        with pytest.raises(EOFError):
            frontend.get_line()


class TestMakeCLI:
    """Verify frontend selection."""

    def test_piped_stdin_gets_stream_reader(self, engine: Engine, monkeypatch: pytest.MonkeyPatch) -> None:
        """Non-terminal stdin never gets a line editor."""
        monkeypatch.setattr(sys, "stdin", io.StringIO("hello\n"))
        frontend = make_cli(engine.registry)
        assert isinstance(frontend, StreamCLI)
        assert frontend.get_line() == "hello"

    def test_terminal_gets_prompt_toolkit(
        self, engine: Engine, terminal: PipeInput, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A terminal gets the prompt_toolkit editor."""
        monkeypatch.setattr(sys, "stdin", _TtyInput())
        assert isinstance(make_cli(engine.registry, "t> "), PromptToolkitCLI)
