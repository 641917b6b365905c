"""
Tests for the script mode state machine.

Run with:  python -m pytest shell_commands/test_script_mode.py -v
"""

import io

import pytest

from shell_commands.errors import CommandError, ErrorKind, ScriptStackError
from shell_commands.script_mode import ScriptFrame, ScriptModeController


@pytest.fixture
def base():
    return io.StringIO("typed line\n")


@pytest.fixture
def controller(base):
    return ScriptModeController(base)


@pytest.fixture
def scripts(tmp_path):
    """Three small script files: a, b and c."""
    paths = {}
    for name in ("a", "b", "c"):
        path = tmp_path / f"{name}.txt"
        path.write_text(f"first of {name}\nsecond of {name}\n", encoding="utf-8")
        paths[name] = path
    return paths


def assert_consistent(controller, base):
    assert controller.scripted == (controller.depth > 0)
    if controller.depth == 0:
        assert controller.current_source is base
        assert controller.current_frame is None
    else:
        assert controller.current_source is controller.current_frame.source


# ============================================================
# Transitions
# ============================================================

class TestEnterExit:
    """Tests for push/pop discipline."""

    def test_starts_interactive(self, controller, base):
        assert not controller.scripted
        assert controller.depth == 0
        assert controller.current_source is base
        assert controller.active_paths == frozenset()

    def test_enter_pushes_frame(self, controller, scripts):
        frame = controller.enter_script(scripts["a"])
        assert isinstance(frame, ScriptFrame)
        assert frame.path == str(scripts["a"].resolve())
        assert controller.scripted
        assert controller.current_source is frame.source
        assert controller.active_paths == {frame.path}

    def test_mode_follows_stack_for_any_sequence(self, controller, base, scripts):
        steps = [
            ("enter", "a"), ("enter", "b"), ("exit", None), ("enter", "c"),
            ("exit", None), ("exit", None), ("enter", "b"), ("exit", None),
        ]
        for action, name in steps:
            if action == "enter":
                assert isinstance(controller.enter_script(scripts[name]), ScriptFrame)
            else:
                controller.exit_script()
            assert_consistent(controller, base)
        assert controller.depth == 0

    def test_exit_restores_previous_source(self, controller, base, scripts):
        outer = controller.enter_script(scripts["a"])
        controller.enter_script(scripts["b"])
        controller.exit_script()
        assert controller.current_source is outer.source
        controller.exit_script()
        assert controller.current_source is base

    def test_exit_closes_the_script_file(self, controller, scripts):
        frame = controller.enter_script(scripts["a"])
        popped = controller.exit_script()
        assert popped is frame
        assert frame.source.closed

    def test_exit_on_empty_stack_is_internal_error(self, controller):
        with pytest.raises(ScriptStackError):
            controller.exit_script()

    def test_script_can_run_again_after_it_finished(self, controller, scripts):
        controller.enter_script(scripts["a"])
        controller.exit_script()
        assert isinstance(controller.enter_script(scripts["a"]), ScriptFrame)


class TestRecursionGuard:
    """Tests for refusing a script that is already active."""

    def test_direct_recursion_refused(self, controller, scripts):
        controller.enter_script(scripts["a"])
        error = controller.enter_script(scripts["a"])
        assert isinstance(error, CommandError)
        assert error.kind is ErrorKind.RECURSIVE_SCRIPT
        assert controller.depth == 1

    def test_indirect_recursion_leaves_stack_unchanged(self, controller, scripts):
        controller.enter_script(scripts["a"])
        inner = controller.enter_script(scripts["b"])
        before = controller.active_paths

        error = controller.enter_script(scripts["a"])

        assert error.kind is ErrorKind.RECURSIVE_SCRIPT
        assert controller.depth == 2
        assert controller.active_paths == before
        assert controller.current_source is inner.source

    def test_different_spelling_of_same_file(self, controller, scripts, tmp_path, monkeypatch):
        controller.enter_script(scripts["a"])
        monkeypatch.chdir(tmp_path)
        for spelling in ("a.txt", "./a.txt", f"../{tmp_path.name}/a.txt"):
            error = controller.enter_script(spelling)
            assert error.kind is ErrorKind.RECURSIVE_SCRIPT, spelling
        assert controller.depth == 1


class TestScriptNotFound:
    """Tests for unreadable script paths."""

    def test_missing_file(self, controller, tmp_path):
        error = controller.enter_script(tmp_path / "missing.txt")
        assert error.kind is ErrorKind.SCRIPT_NOT_FOUND
        assert not controller.scripted

    def test_directory(self, controller, tmp_path):
        error = controller.enter_script(tmp_path)
        assert error.kind is ErrorKind.SCRIPT_NOT_FOUND
        assert controller.depth == 0


class TestReset:
    def test_reset_returns_to_interactive(self, controller, base, scripts):
        frames = [controller.enter_script(scripts[name]) for name in ("a", "b", "c")]
        controller.reset()
        assert not controller.scripted
        assert controller.current_source is base
        assert controller.active_paths == frozenset()
        assert all(frame.source.closed for frame in frames)

    def test_reset_when_interactive_is_harmless(self, controller, base):
        controller.reset()
        assert_consistent(controller, base)


# ============================================================
# Reading
# ============================================================

class TestReadLine:
    def test_reads_base_source(self, controller):
        assert controller.read_line() == "typed line"
        assert controller.read_line() is None

    def test_reads_script_and_counts_lines(self, controller, scripts):
        frame = controller.enter_script(scripts["a"])
        assert controller.read_line() == "first of a"
        assert controller.read_line() == "second of a"
        assert frame.line_number == 2
        assert controller.read_line() is None
        assert frame.line_number == 2

    def test_windows_line_endings(self, controller, tmp_path):
        path = tmp_path / "crlf.txt"
        path.write_bytes(b"show\r\ninfo\r\n")
        controller.enter_script(path)
        assert controller.read_line() == "show"
        assert controller.read_line() == "info"
