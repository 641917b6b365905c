"""
Console display sink and logging setup.

User-facing text goes through ConsoleDisplay. Diagnostics go through
the standard logging module, configured by configure_logging().
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Optional, TextIO

from shell_commands.errors import CommandError, ErrorKind

if TYPE_CHECKING:
    from shell_commands.script_mode import ScriptModeController


ERROR_MESSAGES = {
    ErrorKind.NO_COMMAND: "No command, try again.",
    ErrorKind.UNKNOWN_COMMAND: "No such command, try again.",
    ErrorKind.ARGUMENT_COUNT_MISMATCH: "Wrong arguments, try again.",
    ErrorKind.ARGUMENT_TYPE_MISMATCH: "Wrong arguments, try again.",
    ErrorKind.SCRIPT_NOT_FOUND: "This script doesn't exist or can't be accessed.",
    ErrorKind.RECURSIVE_SCRIPT: "Script recursion detected, the script was not executed.",
    ErrorKind.CONNECTION_FAILURE: "Couldn't connect to the server. The application will be closed.",
}

# Blank lines inside a script are not worth an error message.
SILENT_IN_SCRIPT = frozenset({ErrorKind.NO_COMMAND})


def configure_logging(verbose: bool = False, quiet: bool = False,
                      log_file: Optional[str] = None) -> None:
    """Set up the root logger from console settings."""
    if verbose:
        level, fmt = logging.DEBUG, '🐛 %(name)s: %(message)s'
    elif quiet:
        level, fmt = logging.WARNING, '⚠️  %(message)s'
    else:
        level, fmt = logging.INFO, 'ℹ️  %(message)s'

    if log_file:
        logging.basicConfig(
            level=level,
            filename=log_file,
            format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        )
    else:
        logging.basicConfig(level=level, format=fmt)


class ConsoleDisplay:
    """Writes prompts, results and errors to the terminal.

    Text marked suppress_when_scripted (prompts, banners) is dropped
    while a script is running. Errors always reach `err`; quiet mode
    only silences ordinary results.
    """

    def __init__(self, script_mode: "ScriptModeController",
                 out: Optional[TextIO] = None, err: Optional[TextIO] = None,
                 quiet: bool = False):
        self.script_mode = script_mode
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.quiet = quiet

    def show(self, text: Optional[str], suppress_when_scripted: bool = False,
             is_error: bool = False) -> None:
        if text is None:
            return
        if suppress_when_scripted and self.script_mode.scripted:
            return
        if is_error:
            print(text, file=self.err, flush=True)
            return
        if self.quiet:
            return
        print(text, file=self.out, flush=True)

    def prompt(self, text: str) -> None:
        """Show an input prompt (no newline). Never shown while scripted."""
        if self.script_mode.scripted:
            return
        print(text, end='', file=self.out, flush=True)

    def show_error(self, error: CommandError) -> None:
        """Report a classified error with the message for its kind."""
        message = ERROR_MESSAGES[error.kind]
        frame = self.script_mode.current_frame
        if frame is not None:
            message = f"{frame.path}:{frame.line_number}: {message}"
            if error.detail:
                message = f"{message} ({error.detail})"
        self.show(
            message,
            suppress_when_scripted=error.kind in SILENT_IN_SCRIPT,
            is_error=True,
        )
