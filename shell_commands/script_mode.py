"""
Script Mode Controller
======================

Tracks which input source the shell is reading from. Think of it as
a stack of open script files sitting on top of the terminal:

    ┌───────────────────────┐
    │ inner.txt   (line 3)  │  ← current_source
    ├───────────────────────┤
    │ outer.txt   (line 7)  │
    ├───────────────────────┤
    │ stdin (base source)   │  never on the stack
    └───────────────────────┘

States
------
    Interactive       stack empty, reading the base source
    Scripted(depth)   stack non-empty, reading the top frame

`scripted` is computed from the stack, never stored, so the two can
not drift apart.

Transitions
-----------
    enter_script(path)  push, unless the file is unreadable
                        (SCRIPT_NOT_FOUND) or its canonical path is
                        already on the stack (RECURSIVE_SCRIPT).
                        A refused push leaves the stack untouched.
    exit_script()       pop the top frame and close its file.
                        Popping an empty stack raises ScriptStackError.
    reset()             drop every frame and return to Interactive.

These three methods are the only way to change the active source.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, TextIO, Union

from shell_commands.errors import CommandError, ErrorKind, ScriptStackError

logger = logging.getLogger(__name__)


@dataclass
class ScriptFrame:
    """One active script: its canonical path and its open file."""
    path: str
    source: TextIO
    line_number: int = 0

    def close(self) -> None:
        try:
            self.source.close()
        except OSError as e:
            logger.warning(f"Error closing script {self.path}: {e}")


def canonical_path(path: Union[str, Path]) -> Path:
    """Resolve a script path to a comparison-stable absolute form.

    Raises
    ------
    OSError
        If the path does not exist.
    """
    return Path(path).expanduser().resolve(strict=True)


class ScriptModeController:
    """Stack of nested script frames over a base interactive source."""

    def __init__(self, base_source: Optional[TextIO] = None, encoding: str = "utf-8"):
        self.base_source = base_source if base_source is not None else sys.stdin
        self.encoding = encoding
        self._stack: list[ScriptFrame] = []
        self._active_paths: set[str] = set()

    # ─── Views ──────────────────────────────────────────────────────

    @property
    def scripted(self) -> bool:
        return bool(self._stack)

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def active_paths(self) -> frozenset[str]:
        return frozenset(self._active_paths)

    @property
    def current_frame(self) -> Optional[ScriptFrame]:
        return self._stack[-1] if self._stack else None

    @property
    def current_source(self) -> TextIO:
        if self._stack:
            return self._stack[-1].source
        return self.base_source

    def read_line(self) -> Optional[str]:
        """Read the next line from the current source.

        Returns the line without its line terminator, or None once the
        source is exhausted.
        """
        line = self.current_source.readline()
        if not line:
            return None
        frame = self.current_frame
        if frame is not None:
            frame.line_number += 1
        return line.rstrip("\r\n")

    # ─── Transitions ────────────────────────────────────────────────

    def enter_script(self, path: Union[str, Path]) -> Union[ScriptFrame, CommandError]:
        """Push a new frame reading from `path`.

        Returns
        -------
        ScriptFrame or CommandError
            The pushed frame, SCRIPT_NOT_FOUND if the file can not be
            opened, or RECURSIVE_SCRIPT if it is already active.
        """
        try:
            resolved = canonical_path(path)
        except (OSError, RuntimeError):
            return CommandError(ErrorKind.SCRIPT_NOT_FOUND, str(path))

        key = str(resolved)
        if key in self._active_paths:
            logger.debug(f"Refusing recursive script: {key}")
            return CommandError(ErrorKind.RECURSIVE_SCRIPT, key)

        try:
            source = open(resolved, "r", encoding=self.encoding)
        except OSError as e:
            logger.debug(f"Cannot open script {key}: {e}")
            return CommandError(ErrorKind.SCRIPT_NOT_FOUND, key)

        frame = ScriptFrame(path=key, source=source)
        self._stack.append(frame)
        self._active_paths.add(key)
        logger.debug(f"Entered script {key} (depth {self.depth})")
        return frame

    def exit_script(self) -> ScriptFrame:
        """Pop the top frame and fall back to the previous source.

        Raises
        ------
        ScriptStackError
            If no script is active.
        """
        if not self._stack:
            raise ScriptStackError("exit_script() called with an empty script stack")
        frame = self._stack.pop()
        self._active_paths.discard(frame.path)
        frame.close()
        logger.debug(f"Left script {frame.path} (depth {self.depth})")
        return frame

    def reset(self) -> None:
        """Drop every frame and return to the base source."""
        while self._stack:
            frame = self._stack.pop()
            frame.close()
        self._active_paths.clear()
