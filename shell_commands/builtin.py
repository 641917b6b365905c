"""
Built-in Commands
=================

Commands that never leave the process:

    help              list every registered command
    exit              end the session
    execute <path>    run the commands in a script file

All three are LOCAL_ONLY. "execute" is the only one that starts
script mode, and the only descriptor allowed to look at the file
system, which it does when it runs, not while validating.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from shell_commands.command import (
    Capability,
    CommandDescriptor,
    CommandResult,
    LocalCommand,
    Validated,
    expect_arguments,
)

if TYPE_CHECKING:
    from shell_commands.dispatcher import SessionContext


# ─── help ───────────────────────────────────────────────────────────

class ShowHelp(LocalCommand):
    def run(self, context: "SessionContext") -> CommandResult:
        lines = ["Available commands:"]
        lines.extend(f"  {help_text}" for _, help_text in context.registry.list_commands())
        return CommandResult(command="help", summary="\n".join(lines))


class HelpCommand(CommandDescriptor):
    @property
    def name(self) -> str:
        return "help"

    @property
    def help_text(self) -> str:
        return "help — Show the available commands"

    @property
    def capability(self) -> Capability:
        return Capability.LOCAL_ONLY

    def validate(self, tokens: Sequence[str]) -> Validated:
        return expect_arguments(tokens, 0) or ShowHelp()


# ─── exit ───────────────────────────────────────────────────────────

class EndSession(LocalCommand):
    def run(self, context: "SessionContext") -> CommandResult:
        return CommandResult(command="exit", terminates_session=True)


class ExitCommand(CommandDescriptor):
    """Ends the session. The dispatcher closes the remote connection."""

    @property
    def name(self) -> str:
        return "exit"

    @property
    def help_text(self) -> str:
        return "exit — Close the application (same as CTRL + D)"

    @property
    def capability(self) -> Capability:
        return Capability.LOCAL_ONLY

    def validate(self, tokens: Sequence[str]) -> Validated:
        return expect_arguments(tokens, 0) or EndSession()


# ─── execute ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RunScript(LocalCommand):
    path: str

    def run(self, context: "SessionContext") -> CommandResult:
        """Run the script; open/recursion failures come back as the result's error."""
        error = context.run_script(self.path)
        return CommandResult(command="execute", error=error)


class ExecuteScriptCommand(CommandDescriptor):
    """Reads and runs commands from a file, one per line.

    Scripts may execute other scripts, but never one that is
    already running further up the chain.
    """

    @property
    def name(self) -> str:
        return "execute"

    @property
    def help_text(self) -> str:
        return "execute <file> — Run the commands in a script file"

    @property
    def capability(self) -> Capability:
        return Capability.LOCAL_ONLY

    def validate(self, tokens: Sequence[str]) -> Validated:
        return expect_arguments(tokens, 1) or RunScript(tokens[1])
