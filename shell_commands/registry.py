"""
Command Registry
================

Maps normalized command names to CommandDescriptor instances.

Normalization is trim + lower-case, so "ADD ", "add" and " Add"
all select the same descriptor.

Registration happens at startup; afterwards the registry is only
read, so it can be shared freely.
"""

from __future__ import annotations

from typing import Sequence, Union

from shell_commands.command import CommandDescriptor
from shell_commands.errors import CommandError, ErrorKind


def normalize_name(name: str) -> str:
    return name.strip().lower()


class CommandRegistry:
    """Lookup table from command name to descriptor.

    Usage
    -----
        registry = CommandRegistry()
        registry.register(ExitCommand())

        descriptor = registry.resolve(["EXIT"])
        if isinstance(descriptor, CommandError):
            report(descriptor)
    """

    def __init__(self):
        self._commands: dict[str, CommandDescriptor] = {}

    def register(self, descriptor: CommandDescriptor) -> None:
        """Register a command descriptor.

        Raises
        ------
        ValueError
            If the normalized name is empty or already registered.
        """
        key = normalize_name(descriptor.name)
        if not key:
            raise ValueError("Command name cannot be empty")
        if key in self._commands:
            raise ValueError(
                f"Command name collision: '{key}' is already registered"
            )
        self._commands[key] = descriptor

    def resolve(self, tokens: Sequence[str]) -> Union[CommandDescriptor, CommandError]:
        """Find the descriptor selected by the first token.

        Returns
        -------
        CommandDescriptor or CommandError
            NO_COMMAND when there are no tokens or the first one is
            blank, UNKNOWN_COMMAND when the name is not registered.
        """
        if not tokens:
            return CommandError(ErrorKind.NO_COMMAND)
        key = normalize_name(tokens[0])
        if not key:
            return CommandError(ErrorKind.NO_COMMAND)
        descriptor = self._commands.get(key)
        if descriptor is None:
            return CommandError(ErrorKind.UNKNOWN_COMMAND, key)
        return descriptor

    def list_commands(self) -> list[tuple[str, str]]:
        """Return (name, help_text) for all registered commands, sorted by name."""
        return sorted(
            ((name, descriptor.help_text) for name, descriptor in self._commands.items()),
            key=lambda item: item[0],
        )

    def __contains__(self, name: str) -> bool:
        return normalize_name(name) in self._commands

    def __len__(self) -> int:
        return len(self._commands)
