"""
Error Taxonomy
==============

Every failure the shell can report falls into one of the ErrorKind
categories below. They split into two families that travel very
differently through the system:

    Recoverable (values)            Fatal (exceptions)
    --------------------            ------------------
    NO_COMMAND                      ConnectionFailure
    UNKNOWN_COMMAND                 ScriptStackError
    ARGUMENT_COUNT_MISMATCH
    ARGUMENT_TYPE_MISMATCH
    SCRIPT_NOT_FOUND
    RECURSIVE_SCRIPT

Recoverable errors are returned as CommandError values. The dispatcher
inspects them, reports them through the display, and reads the next
line from the same source. Nothing is unwound.

ConnectionFailure is raised by the remote boundary. It has to climb
out through every nested script frame, so it stays an exception.

ScriptStackError means the script stack was popped while empty. That
is a bug in the caller, never a user mistake.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorKind(Enum):
    """Classification of a failure, used to choose the user message."""
    NO_COMMAND = "no_command"
    UNKNOWN_COMMAND = "unknown_command"
    ARGUMENT_COUNT_MISMATCH = "argument_count_mismatch"
    ARGUMENT_TYPE_MISMATCH = "argument_type_mismatch"
    SCRIPT_NOT_FOUND = "script_not_found"
    RECURSIVE_SCRIPT = "recursive_script"
    CONNECTION_FAILURE = "connection_failure"


@dataclass(frozen=True)
class CommandError:
    """A recoverable, classified failure.

    Attributes
    ----------
    kind : ErrorKind
        Category of the failure.
    detail : str
        Optional extra context (offending token, script path).
        Empty when the category says it all.
    """
    kind: ErrorKind
    detail: str = ""

    def __str__(self) -> str:
        if self.detail:
            return f"{self.kind.value}: {self.detail}"
        return self.kind.value


def argument_count_mismatch(expected: int, got: int) -> CommandError:
    return CommandError(
        ErrorKind.ARGUMENT_COUNT_MISMATCH,
        f"expected {expected} argument(s), got {got}",
    )


def argument_type_mismatch(detail: str) -> CommandError:
    return CommandError(ErrorKind.ARGUMENT_TYPE_MISMATCH, detail)


class ConnectionFailure(Exception):
    """The remote peer is unreachable or the transport was lost."""

    kind = ErrorKind.CONNECTION_FAILURE


class ScriptStackError(RuntimeError):
    """Internal contract violation in the script stack (e.g. popping it empty)."""
