#!/usr/bin/env python3
"""
Collection Shell - terminal client for the collection server
- Line-oriented commands typed at the prompt or read from script files
- Nested scripts with recursion detection ("execute <file>")
- Local commands (help, exit, execute) run in-process
- Collection commands forwarded to the server over UDP as JSON
- Operator configuration files in YAML

Keyboard / Script Input → Dispatcher → CommandRegistry → descriptor.validate()
	→ LOCAL_ONLY: command.run(context)
	→ REMOTE_FORWARDED: UdpRemoteClient.send() → server reply printed

Startup Order

1. Configuration "What do we need?"
	YAML file, then command line overrides (config_manager.setup_configuration)

2. Logging "How loud are we?"
	configure_logging() from the console section

3. Connection and loop "Let's go"
	UdpRemoteClient, default command registry, Dispatcher.run()

Exit status is 0 after "exit" or CTRL + D, 1 if the server could not
be reached or the connection was lost, 2 for invalid options.
"""

import sys
import logging

from config_manager import setup_configuration

from shell_commands import build_default_registry
from shell_commands.dispatcher import Dispatcher
from shell_commands.display import ConsoleDisplay, configure_logging
from shell_commands.remote import UdpRemoteClient
from shell_commands.script_mode import ScriptModeController

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
	"""Parse configuration, connect, and run the shell until it ends"""
	config, should_exit, _ = setup_configuration(argv)
	if should_exit:
		return 0

	configure_logging(
		verbose=config.console.verbose,
		quiet=config.console.quiet,
		log_file=config.console.log_file
	)
	logger.debug(f"Server: {config.network.host}:{config.network.port} (timeout {config.network.timeout}s)")

	script_mode = ScriptModeController(sys.stdin)
	display = ConsoleDisplay(script_mode, quiet=config.console.quiet)
	remote = UdpRemoteClient(
		host=config.network.host,
		port=config.network.port,
		timeout=config.network.timeout,
		buffer_size=config.network.buffer_size
	)

	dispatcher = Dispatcher(
		build_default_registry(),
		remote,
		script_mode=script_mode,
		display=display,
		prompt=config.shell.prompt,
		record_attempts=config.shell.record_attempts
	)
	return dispatcher.run()


if __name__ == "__main__":
	sys.exit(main())
