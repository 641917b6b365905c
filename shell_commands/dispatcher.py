"""
Dispatcher
==========

The read-validate-execute loop of the shell.

    current source ──read_line()──► tokenize ──► registry.resolve()
                                                      │
                              descriptor.validate() ◄─┘
                                      │
                 ┌────────────────────┴───────────────────┐
          LOCAL_ONLY                               REMOTE_FORWARDED
      command.run(context)              command.prepare(context)
                 │                      remote.send(serialize(), scripted)
                 └────────────────────┬───────────────────┘
                                      ▼
                               display the outcome

Nested scripts re-enter the same loop: the "execute" command calls
SessionContext.run_script(), which pushes a frame, loops over the
script's lines, and pops the frame in a finally block. The Python
call stack therefore mirrors the script stack, and a
ConnectionFailure raised at any depth unwinds every frame on its way
to run(), which reports it once and ends the session.

Recoverable errors never leave this module: they are CommandError
values, reported through the display, after which the loop reads
the next line of the same source.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from shell_commands.command import Capability, CommandResult
from shell_commands.display import ConsoleDisplay
from shell_commands.errors import CommandError, ConnectionFailure, ErrorKind, ScriptStackError
from shell_commands.registry import CommandRegistry
from shell_commands.script_mode import ScriptModeController

if TYPE_CHECKING:
    from shell_commands.remote import RemoteCallBoundary

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = ('Enter "help" to see available commands. '
                   'Enter "exit" or CTRL + D to close the application')
SHUTDOWN_MESSAGE = "\nThe application will be closed."


def tokenize(line: str) -> list[str]:
    """Split an input line on runs of whitespace."""
    return line.split()


class SessionContext:
    """Session state handed to commands that need more than their arguments.

    Commands never touch the dispatcher directly; they read lines,
    query the mode and start scripts through this object.
    """

    def __init__(self, dispatcher: "Dispatcher", record_attempts: int = 3):
        self._dispatcher = dispatcher
        self.record_attempts = record_attempts

    @property
    def script_mode(self) -> ScriptModeController:
        return self._dispatcher.script_mode

    @property
    def display(self) -> ConsoleDisplay:
        return self._dispatcher.display

    @property
    def registry(self) -> CommandRegistry:
        return self._dispatcher.registry

    @property
    def scripted(self) -> bool:
        return self._dispatcher.script_mode.scripted

    def read_line(self) -> Optional[str]:
        return self._dispatcher.script_mode.read_line()

    def run_script(self, path: Union[str, Path]) -> Optional[CommandError]:
        return self._dispatcher.run_script(path)


class Dispatcher:
    """Owns the registry, the script stack and the remote connection.

    Usage
    -----
        dispatcher = Dispatcher(registry, UdpRemoteClient("127.0.0.1", 5555))
        sys.exit(dispatcher.run())
    """

    def __init__(self, registry: CommandRegistry, remote: "RemoteCallBoundary",
                 script_mode: Optional[ScriptModeController] = None,
                 display: Optional[ConsoleDisplay] = None,
                 prompt: str = "$ ", record_attempts: int = 3):
        self.registry = registry
        self.remote = remote
        self.script_mode = script_mode if script_mode is not None else ScriptModeController()
        self.display = display if display is not None else ConsoleDisplay(self.script_mode)
        self.prompt = prompt
        self.context = SessionContext(self, record_attempts=record_attempts)
        self.finished = False

    def run(self) -> int:
        """Run the session until exit, end of input, or a lost connection.

        Returns
        -------
        int
            Process exit status: 0 after a normal exit or CTRL + C,
            1 after a connection failure. The failure status applies
            to interactive sessions too, not only to scripted ones.
        """
        try:
            self.remote.start()
            self.display.show(WELCOME_MESSAGE, suppress_when_scripted=True)
            self._read_loop()
        except ConnectionFailure as e:
            logger.warning(f"Connection failure at script depth {self.script_mode.depth}: {e}")
            self.script_mode.reset()
            self.display.show_error(CommandError(ErrorKind.CONNECTION_FAILURE))
            self.end_session()
            return 1
        except KeyboardInterrupt:
            self.script_mode.reset()
            self.display.show(SHUTDOWN_MESSAGE)
            self.end_session()
        except ScriptStackError:
            logger.exception("Script stack corrupted")
            raise
        return 0

    def run_script(self, path: Union[str, Path]) -> Optional[CommandError]:
        """Push `path` and process its lines until it is exhausted."""
        frame = self.script_mode.enter_script(path)
        if isinstance(frame, CommandError):
            return frame
        try:
            self._read_loop()
        except UnicodeDecodeError as e:
            logger.debug(f"Abandoning script {frame.path} after line {frame.line_number}: {e}")
            return CommandError(ErrorKind.SCRIPT_NOT_FOUND, frame.path)
        finally:
            self.script_mode.exit_script()
        return None

    def process_line(self, line: str) -> Optional[CommandResult]:
        """Resolve, validate and execute one input line.

        Returns the outcome, or None when the line failed before
        execution (the error has already been reported).
        """
        tokens = tokenize(line)

        descriptor = self.registry.resolve(tokens)
        if isinstance(descriptor, CommandError):
            self._report(descriptor)
            return None

        command = descriptor.validate(tokens)
        if isinstance(command, CommandError):
            self._report(command)
            return None

        if descriptor.capability is Capability.LOCAL_ONLY:
            result = command.run(self.context)
        else:
            error = command.prepare(self.context)
            if error is not None:
                self._report(error)
                return None
            reply = self.remote.send(command.serialize(), self.script_mode.scripted)
            result = CommandResult(command=descriptor.name, summary=reply)

        self._display_result(result)
        return result

    def end_session(self) -> None:
        """Stop reading and release the remote connection."""
        if self.finished:
            return
        self.finished = True
        self.remote.close()

    # ─── Internals ──────────────────────────────────────────────────

    def _read_loop(self) -> None:
        """Process lines from the current source until it runs dry or the session ends."""
        while not self.finished:
            self.display.prompt(self.prompt)
            line = self.script_mode.read_line()
            if line is None:
                if not self.script_mode.scripted:
                    self.display.show(SHUTDOWN_MESSAGE)
                    self.end_session()
                return
            self.process_line(line)

    def _display_result(self, result: CommandResult) -> None:
        if result.is_error:
            self._report(result.error)
        else:
            self.display.show(result.summary)
        if result.terminates_session:
            self.end_session()

    def _report(self, error: CommandError) -> None:
        logger.debug(f"Recoverable error: {error}")
        self.display.show_error(error)
