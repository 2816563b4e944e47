"""Tests for command dispatch and return-value normalization."""

from typing import Any

from fshell.commands import CommandRegistry, CommandResult, Invocation
from fshell.errors import InvalidArgumentError, Result
from fshell.interface import Dispatcher
from fshell.session import BufferSink, SessionManager


def _setup(handler: Any = None) -> tuple[Dispatcher, SessionManager, int]:
    """Build a dispatcher with one session and an optional ``cmd`` command."""
    registry = CommandRegistry()
    sessions = SessionManager()
    if handler is not None:
        registry.register("cmd", handler, context=sessions)
    return Dispatcher(registry, sessions), sessions, sessions.create_session()


def _output(sessions: SessionManager, session_id: int) -> str:
    session = sessions.get(session_id)
    assert session is not None
    assert isinstance(session.sink, BufferSink)
    return session.sink.getvalue()


class TestLookup:
    """Verify command and session resolution."""

    def test_unknown_command_is_not_found_without_output(self) -> None:
        """The dispatcher itself writes nothing for an unknown command."""
        dispatcher, sessions, session_id = _setup()
        assert dispatcher.dispatch(Invocation("nope", raw="nope"), session_id) is Result.NOT_FOUND
        assert _output(sessions, session_id) == ""

    def test_unknown_session_is_not_found(self) -> None:
        """Dispatching into a missing session fails before lookup."""
        dispatcher, _sessions, _session_id = _setup(lambda cmd, ctx: None)
        assert dispatcher.dispatch(Invocation("cmd"), 999) is Result.NOT_FOUND

    def test_history_records_raw_line(self) -> None:
        """Every dispatched line lands in the session history."""
        dispatcher, sessions, session_id = _setup(lambda cmd, ctx: None)
        dispatcher.dispatch(Invocation("cmd", raw="cmd a=1"), session_id)
        assert [e.line for e in sessions.history(session_id)] == ["cmd a=1"]


class TestNormalization:
    """Verify how handler return values become results."""

    def test_none_is_ok(self) -> None:
        """Returning nothing means success."""
        dispatcher, _sessions, session_id = _setup(lambda cmd, ctx: None)
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.OK

    def test_result_code_passes_through(self) -> None:
        """A Result is reported unchanged."""
        dispatcher, _sessions, session_id = _setup(lambda cmd, ctx: Result.PERMISSION_DENIED)
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.PERMISSION_DENIED

    def test_int_code_is_converted(self) -> None:
        """A plain int maps onto the Result enum."""
        dispatcher, _sessions, session_id = _setup(lambda cmd, ctx: 6)
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.NOT_FOUND

    def test_command_result_message_is_printed(self) -> None:
        """A CommandResult message goes to the session before the code is reported."""
        dispatcher, sessions, session_id = _setup(
            lambda cmd, ctx: CommandResult(Result.INVALID_ARGUMENT, "bad input"))
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.INVALID_ARGUMENT
        assert _output(sessions, session_id) == "bad input\n"

    def test_unsupported_return_is_internal(self) -> None:
        """Strings and other objects are not result codes."""
        dispatcher, _sessions, session_id = _setup(lambda cmd, ctx: "yes")
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.INTERNAL

    def test_handler_exception_is_internal(self) -> None:
        """An unexpected exception never escapes dispatch."""

        def explode(cmd: Invocation, ctx: Any) -> None:
            raise ZeroDivisionError

        dispatcher, _sessions, session_id = _setup(explode)
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.INTERNAL

    def test_shell_error_keeps_its_code(self) -> None:
        """Handlers may raise ShellError subclasses to report a code."""

        def reject(cmd: Invocation, ctx: Any) -> None:
            raise InvalidArgumentError("no")

        dispatcher, _sessions, session_id = _setup(reject)
        assert dispatcher.dispatch(Invocation("cmd"), session_id) is Result.INVALID_ARGUMENT


class TestBinding:
    """Verify the calling thread's binding during and after dispatch."""

    def test_output_routed_to_target_session(self) -> None:
        """The handler's output follows the dispatch target."""

        def speak(cmd: Invocation, sessions: SessionManager) -> None:
            sessions.route_output("hi\n")

        dispatcher, sessions, session_id = _setup(speak)
        dispatcher.dispatch(Invocation("cmd"), session_id)
        assert _output(sessions, session_id) == "hi\n"

    def test_previous_binding_restored_after_error(self) -> None:
        """A failing handler does not leave the thread rebound."""

        def explode(cmd: Invocation, ctx: Any) -> None:
            raise RuntimeError("boom")

        dispatcher, sessions, target = _setup(explode)
        home = sessions.create_session()
        sessions.bind_thread(home)
        dispatcher.dispatch(Invocation("cmd"), target)
        assert sessions.get_bound_session() == home

    def test_unbound_dispatch_discards_output(self) -> None:
        """With no session the handler still runs but its output goes nowhere."""
        calls = []

        def speak(cmd: Invocation, sessions: SessionManager) -> None:
            calls.append(sessions.route_output("hi\n"))

        dispatcher, _sessions, _session_id = _setup(speak)
        assert dispatcher.dispatch(Invocation("cmd"), None) is Result.OK
        assert calls == [False]


class TestFailureMessages:
    """Verify the error lines transports show."""

    def test_unknown_command_suggests_close_names(self) -> None:
        """Typos get a 'Did you mean' hint."""
        registry = CommandRegistry()
        registry.register("hello", lambda cmd, ctx: None)
        dispatcher = Dispatcher(registry, SessionManager())
        message = dispatcher.describe_failure("helo", Result.NOT_FOUND)
        assert message.startswith("[error] Unknown command: helo.")
        assert "Did you mean: hello?" in message

    def test_handler_failure_names_the_code(self) -> None:
        """A registered command that fails reports the code's text."""
        registry = CommandRegistry()
        registry.register("hello", lambda cmd, ctx: None)
        dispatcher = Dispatcher(registry, SessionManager())
        assert dispatcher.describe_failure("hello", Result.NOT_FOUND) == "[error] hello: not found"
