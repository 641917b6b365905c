"""
Command Abstraction
===================

A command exists in two forms:

    CommandDescriptor   registered once at startup, immutable.
                        Knows the command's name, its help line,
                        its Capability, and how to validate raw
                        tokens into a ready-to-run instance.

    Command instance    produced by validate() for one input line.
                        Either a LocalCommand (run in-process) or a
                        RemoteCommand (serialized and forwarded).

    User types: "remove 42"
                  ↓
    tokens = ["remove", "42"]
                  ↓
    registry.resolve(tokens) → RemoveCommand descriptor
                  ↓
    descriptor.validate(tokens) → RemoteRequest("remove", {"id": 42})
                  ↓
    descriptor.capability is REMOTE_FORWARDED
                  ↓
    remote.send(request.serialize(), scripted) → "Element removed."

The Capability tag is fixed on the descriptor, so the dispatcher
branches on the tag and never has to probe an instance for a run()
method.

Extending
---------
    class HistoryCommand(CommandDescriptor):
        @property
        def name(self) -> str: return "history"

        @property
        def help_text(self) -> str: return "history — Show the last commands"

        @property
        def capability(self) -> Capability:
            return Capability.REMOTE_FORWARDED

        def validate(self, tokens):
            error = expect_arguments(tokens, 0)
            if error is not None:
                return error
            return RemoteRequest(self.name)

    registry.register(HistoryCommand())
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from shell_commands.errors import CommandError, argument_count_mismatch

if TYPE_CHECKING:
    from shell_commands.dispatcher import SessionContext


class Capability(Enum):
    """How a validated command gets executed."""
    LOCAL_ONLY = "local"
    REMOTE_FORWARDED = "remote"


@dataclass
class CommandResult:
    """Outcome of executing one command.

    Attributes
    ----------
    command : str
        Name of the command that produced this outcome.
    summary : str or None
        Text to display. None means the command has nothing to say
        (for instance it only changed session state).
    error : CommandError or None
        Set when the command was recognized and validated but
        failed while running (e.g. the script could not be opened).
    terminates_session : bool
        True when the dispatcher must stop reading lines.
    """
    command: str
    summary: Optional[str] = None
    error: Optional[CommandError] = None
    terminates_session: bool = False

    @property
    def is_error(self) -> bool:
        """Check if this result represents an error."""
        return self.error is not None


class LocalCommand(ABC):
    """A validated command that runs entirely inside the process."""

    @abstractmethod
    def run(self, context: "SessionContext") -> CommandResult:
        ...


class RemoteCommand(ABC):
    """A validated command that is forwarded to the remote peer."""

    name: str

    def prepare(self, context: "SessionContext") -> Optional[CommandError]:
        """Collect any extra input needed before sending.

        Called once by the dispatcher after validation. The default
        needs nothing more than the tokens already parsed.
        """
        return None

    @abstractmethod
    def serialize(self) -> dict[str, Any]:
        """Build the request payload for the remote boundary."""
        ...


@dataclass
class RemoteRequest(RemoteCommand):
    """Plain remote request: a name and already-parsed arguments."""
    name: str
    args: dict[str, Any] = field(default_factory=dict)

    def serialize(self) -> dict[str, Any]:
        return {"command": self.name, "args": dict(self.args)}


Validated = Union[LocalCommand, RemoteCommand, CommandError]


class CommandDescriptor(ABC):
    """Registered definition of one command.

    Required Properties
    -------------------
    name : str
        Command keyword, lowercase. Lookup is case-insensitive.
    help_text : str
        One line for the help listing.
        Convention: "name <args> — Description"
    capability : Capability
        LOCAL_ONLY or REMOTE_FORWARDED.

    Required Methods
    ----------------
    validate(tokens) -> LocalCommand | RemoteCommand | CommandError
        tokens[0] is the command name as typed; the rest are the
        arguments. Must not perform I/O beyond parsing them.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def help_text(self) -> str:
        ...

    @property
    @abstractmethod
    def capability(self) -> Capability:
        ...

    @abstractmethod
    def validate(self, tokens: Sequence[str]) -> Validated:
        ...


def expect_arguments(tokens: Sequence[str], count: int) -> Optional[CommandError]:
    """Check that exactly `count` arguments follow the command name."""
    got = len(tokens) - 1
    if got != count:
        return argument_count_mismatch(count, got)
    return None
