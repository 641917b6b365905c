"""
Collection Commands
===================

Everything the collection server knows how to do. These commands are
REMOTE_FORWARDED: the shell only checks their arguments, builds the
payload, and prints whatever text the server sends back.

    info                         collection type, size, creation date
    show                         every element
    clear                        remove every element
    shuffle                      shuffle the element order
    group                        count elements grouped by height
    print_birthdays              birthdays in descending order
    remove <id>                  remove the element with that id
    count_by_birthday <date>     count elements born on that date
    add                          add a person (record follows)
    add_if_max                   add if greater than the current maximum
    add_if_min                   add if smaller than the current minimum
    update <id>                  replace the element with that id

What "greater" and "smaller" mean for people is decided by the
server, not here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Sequence

from shell_commands.command import (
    Capability,
    CommandDescriptor,
    RemoteCommand,
    RemoteRequest,
    Validated,
    expect_arguments,
)
from shell_commands.errors import CommandError, argument_type_mismatch
from shell_commands.records import PersonRecord, RecordReader, parse_birthday

if TYPE_CHECKING:
    from shell_commands.dispatcher import SessionContext


class RemoteCommandDescriptor(CommandDescriptor):
    """Base for descriptors whose commands go to the server."""

    @property
    def capability(self) -> Capability:
        return Capability.REMOTE_FORWARDED


def parse_id(text: str) -> Optional[int]:
    try:
        return int(text)
    except ValueError:
        return None


# ─── Commands without arguments ─────────────────────────────────────

class SimpleRemoteCommand(RemoteCommandDescriptor):
    """A server command that takes no arguments."""

    def __init__(self, name: str, description: str):
        self._name = name
        self._description = description

    @property
    def name(self) -> str:
        return self._name

    @property
    def help_text(self) -> str:
        return f"{self._name} — {self._description}"

    def validate(self, tokens: Sequence[str]) -> Validated:
        return expect_arguments(tokens, 0) or RemoteRequest(self._name)


SIMPLE_COMMANDS = (
    ("info", "Show information about the collection"),
    ("show", "Show every element of the collection"),
    ("clear", "Remove every element of the collection"),
    ("shuffle", "Shuffle the elements of the collection"),
    ("group", "Count elements grouped by height"),
    ("print_birthdays", "Show birthdays in descending order"),
)


# ─── Commands with arguments ────────────────────────────────────────

class RemoveCommand(RemoteCommandDescriptor):
    @property
    def name(self) -> str:
        return "remove"

    @property
    def help_text(self) -> str:
        return "remove <id> — Remove the element with the given id"

    def validate(self, tokens: Sequence[str]) -> Validated:
        error = expect_arguments(tokens, 1)
        if error is not None:
            return error
        element_id = parse_id(tokens[1])
        if element_id is None:
            return argument_type_mismatch(f"id must be an integer, got '{tokens[1]}'")
        return RemoteRequest(self.name, {"id": element_id})


class CountByBirthdayCommand(RemoteCommandDescriptor):
    @property
    def name(self) -> str:
        return "count_by_birthday"

    @property
    def help_text(self) -> str:
        return "count_by_birthday <YYYY-MM-DD> — Count elements born on that date"

    def validate(self, tokens: Sequence[str]) -> Validated:
        error = expect_arguments(tokens, 1)
        if error is not None:
            return error
        try:
            birthday = parse_birthday(tokens[1])
        except ValueError as e:
            return argument_type_mismatch(str(e))
        return RemoteRequest(self.name, {"birthday": birthday.isoformat()})


# ─── Commands carrying a person record ──────────────────────────────

@dataclass
class PersonRequest(RemoteCommand):
    """A request whose person record is read after validation."""
    name: str
    args: dict[str, Any] = field(default_factory=dict)
    person: Optional[PersonRecord] = None

    def prepare(self, context: "SessionContext") -> Optional[CommandError]:
        result = RecordReader(context.record_attempts).read(context)
        if isinstance(result, CommandError):
            return result
        self.person = result
        return None

    def serialize(self) -> dict[str, Any]:
        if self.person is None:
            raise RuntimeError(f"{self.name}: serialize() called before prepare()")
        args = dict(self.args)
        args["person"] = self.person.to_dict()
        return {"command": self.name, "args": args}


class AddPersonCommand(RemoteCommandDescriptor):
    """add, add_if_max and add_if_min: no arguments, then a record."""

    def __init__(self, name: str, description: str):
        self._name = name
        self._description = description

    @property
    def name(self) -> str:
        return self._name

    @property
    def help_text(self) -> str:
        return f"{self._name} — {self._description}"

    def validate(self, tokens: Sequence[str]) -> Validated:
        return expect_arguments(tokens, 0) or PersonRequest(self._name)


ADD_COMMANDS = (
    ("add", "Add a new person to the collection"),
    ("add_if_max", "Add a person if greater than the largest element"),
    ("add_if_min", "Add a person if smaller than the smallest element"),
)


class UpdateCommand(RemoteCommandDescriptor):
    @property
    def name(self) -> str:
        return "update"

    @property
    def help_text(self) -> str:
        return "update <id> — Replace the element with the given id"

    def validate(self, tokens: Sequence[str]) -> Validated:
        error = expect_arguments(tokens, 1)
        if error is not None:
            return error
        element_id = parse_id(tokens[1])
        if element_id is None:
            return argument_type_mismatch(f"id must be an integer, got '{tokens[1]}'")
        return PersonRequest(self.name, {"id": element_id})


def collection_commands() -> list[CommandDescriptor]:
    """Every server-side command, ready to register."""
    commands: list[CommandDescriptor] = [
        SimpleRemoteCommand(name, description) for name, description in SIMPLE_COMMANDS
    ]
    commands.extend(AddPersonCommand(name, description) for name, description in ADD_COMMANDS)
    commands.extend([RemoveCommand(), CountByBirthdayCommand(), UpdateCommand()])
    return commands
