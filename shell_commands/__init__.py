"""
Collection Shell Command System
===============================

The command dispatch and script-execution engine behind the
collection shell. Every line the user types (or a script supplies)
is tokenized, matched against a registry of command descriptors,
validated, and then either run locally or forwarded to the
collection server.

Architecture Overview
---------------------
    ┌──────────────┐   ┌──────────────┐   ┌──────────────────┐
    │ stdin /      │──►│  Dispatcher  │──►│ CommandRegistry  │
    │ script files │   │  read loop   │   │ name → descriptor│
    └──────▲───────┘   └──────┬───────┘   └──────────────────┘
           │                  │
    ┌──────┴────────┐   ┌─────▼──────────┐   ┌──────────────────┐
    │ ScriptMode    │   │ LOCAL_ONLY     │   │ REMOTE_FORWARDED │
    │ Controller    │◄──│ help/exit/     │   │ RemoteCall-      │
    │ (frame stack) │   │ execute        │   │ Boundary (UDP)   │
    └───────────────┘   └────────────────┘   └──────────────────┘

Module Structure
----------------
    shell_commands/
    ├── __init__.py       ← This file. Builds the default registry.
    ├── errors.py         ← ErrorKind, CommandError, ConnectionFailure.
    ├── command.py        ← Capability, CommandDescriptor, CommandResult.
    ├── registry.py       ← CommandRegistry (case-insensitive lookup).
    ├── script_mode.py    ← ScriptModeController (nested scripts).
    ├── dispatcher.py     ← Dispatcher loop and SessionContext.
    ├── remote.py         ← RemoteCallBoundary, UdpRemoteClient.
    ├── display.py        ← ConsoleDisplay, logging setup.
    ├── records.py        ← PersonRecord and its line-by-line reader.
    ├── builtin.py        ← help, exit, execute.
    └── collection.py     ← add, remove, show, ... (server commands).

Adding a Command
----------------
Subclass CommandDescriptor (see command.py), give it a name, help
text and capability, implement validate(), and register it:

    registry.register(MyCommand())

Dependencies
------------
Standard library only inside this package. Configuration files are
read by config_manager (PyYAML) at the project root.
"""

from shell_commands.builtin import ExecuteScriptCommand, ExitCommand, HelpCommand
from shell_commands.collection import collection_commands
from shell_commands.command import Capability, CommandResult
from shell_commands.dispatcher import Dispatcher
from shell_commands.errors import CommandError, ConnectionFailure, ErrorKind
from shell_commands.registry import CommandRegistry


def build_default_registry() -> CommandRegistry:
    """Create a registry holding every built-in and collection command."""
    registry = CommandRegistry()
    registry.register(HelpCommand())
    registry.register(ExitCommand())
    registry.register(ExecuteScriptCommand())
    for descriptor in collection_commands():
        registry.register(descriptor)
    return registry


# ─── The default registry with all commands ─────────────────────────

registry = build_default_registry()

__all__ = [
    'registry',
    'build_default_registry',
    'Capability',
    'CommandError',
    'CommandRegistry',
    'CommandResult',
    'ConnectionFailure',
    'Dispatcher',
    'ErrorKind',
]
