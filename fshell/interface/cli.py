#!/usr/bin/env python3
# fshell/interface/cli.py
from __future__ import annotations
"""
Interactive input frontends.

Selection order:
    1) prompt_toolkit (completion + persistent history)
    2) readline (basic completion + history)
    3) plain input (last resort)

Every frontend's get_line() returns one line without its terminator and raises
EOFError at end of input.
"""

import sys
from pathlib import Path
from typing import Optional, TextIO

from fshell.commands import CommandRegistry

from .completion import split_current_token, suggest

# History location in the user home directory
HISTORY_FILE_PATH = Path.home() / ".fshell_history"

DEFAULT_PROMPT = "> "


class BaseCLI:
    """
    Base interface for CLI frontends.

    Subclasses implement get_line() and may override setup()/teardown().
    This base also provides context manager support to guarantee teardown.
    """

    def __init__(self, prompt: str = DEFAULT_PROMPT) -> None:
        self.prompt = prompt

    def setup(self) -> None:
        pass

    def get_line(self) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    def teardown(self) -> None:
        pass

    # Context manager helpers
    def __enter__(self) -> "BaseCLI":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()


class PlainCLI(BaseCLI):
    """input() with no completion or history."""

    def get_line(self) -> str:
        return input(self.prompt)


class StreamCLI(BaseCLI):
    """Reads lines from any text stream (pipes, files, io.StringIO)."""

    def __init__(self, stream: TextIO | None = None, prompt: str = "") -> None:
        super().__init__(prompt)
        self._stream = stream if stream is not None else sys.stdin

    def get_line(self) -> str:
        line = self._stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")


# ===== Preferred: prompt_toolkit =====
class PromptToolkitCLI(BaseCLI):
    """Line editor with history and live command-name completion."""

    def __init__(
        self,
        registry: CommandRegistry,
        prompt: str = DEFAULT_PROMPT,
        history_path: Path | None = HISTORY_FILE_PATH,
    ) -> None:
        super().__init__(prompt)
        from prompt_toolkit import PromptSession
        from prompt_toolkit.completion import Completer, Completion
        from prompt_toolkit.history import FileHistory, InMemoryHistory

        self._history_path = history_path

        class _Completer(Completer):
            def get_completions(self, document, complete_event):
                text_before_cursor = document.text_before_cursor
                _, current_prefix = split_current_token(text_before_cursor)
                for word in suggest(registry, text_before_cursor):
                    # replace exactly the current token
                    yield Completion(word, start_position=-len(current_prefix))

        history = FileHistory(str(history_path)) if history_path else InMemoryHistory()
        self.completer = _Completer()
        self._session = PromptSession(history=history, completer=self.completer)

    def setup(self) -> None:
        if self._history_path is not None:
            self._history_path.touch(exist_ok=True)

    def get_line(self) -> str:
        return self._session.prompt(self.prompt)


# ===== Fallback: readline =====
class ReadlineCLI(BaseCLI):
    """Fallback editor with basic completion and history."""

    def __init__(self, registry: CommandRegistry, prompt: str = DEFAULT_PROMPT) -> None:
        super().__init__(prompt)
        import readline  # type: ignore[attr-defined]

        self.readline = readline
        self._registry = registry

    def setup(self) -> None:
        try:
            HISTORY_FILE_PATH.touch(exist_ok=True)
            self.readline.read_history_file(str(HISTORY_FILE_PATH))
        except OSError:
            pass

        # Allow '=' as part of tokens to support key=value input
        self.readline.set_completer_delims(" \t\n")

        def _complete(text_fragment: str, state_index: int) -> Optional[str]:
            buffer_text = self.readline.get_line_buffer()
            matches = [
                word for word in suggest(self._registry, buffer_text)
                if word.startswith(text_fragment)]
            return matches[state_index] if state_index < len(matches) else None

        self.readline.set_completer(_complete)
        self.readline.parse_and_bind("tab: complete")

    def get_line(self) -> str:
        return input(self.prompt)

    def teardown(self) -> None:
        try:
            self.readline.write_history_file(str(HISTORY_FILE_PATH))
        except OSError:
            pass


def make_cli(registry: CommandRegistry, prompt: str = DEFAULT_PROMPT) -> BaseCLI:
    """
    Factory to select the best available CLI frontend at runtime.
    Non-terminal stdin (pipes, files) always gets the stream reader.
    """
    if not sys.stdin.isatty():
        return StreamCLI(sys.stdin)
    try:
        return PromptToolkitCLI(registry, prompt)
    except ImportError:
        try:
            return ReadlineCLI(registry, prompt)
        except ImportError:
            return PlainCLI(prompt)
