#!/usr/bin/env python3
"""
Configuration system for the Collection Shell
Supports YAML files, CLI overrides, and programmatic access
"""

import yaml
import argparse
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from copy import deepcopy
import logging


@dataclass
class NetworkConfig:
	"""Where the collection server lives"""
	host: str = "127.0.0.1"
	port: int = 5555
	timeout: float = 5.0        # seconds to wait for each reply
	buffer_size: int = 65535    # largest reply datagram accepted

	def to_dict(self) -> Dict[str, Any]:
		return {
			'host': self.host,
			'port': self.port,
			'timeout': self.timeout,
			'buffer_size': self.buffer_size
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'NetworkConfig':
		return cls(
			host=data.get('host', '127.0.0.1'),
			port=data.get('port', 5555),
			timeout=data.get('timeout', 5.0),
			buffer_size=data.get('buffer_size', 65535)
		)


@dataclass
class ShellSettings:
	"""Interactive shell behavior"""
	prompt: str = "$ "
	record_attempts: int = 3    # tries per record field before giving up (interactive only)

	def to_dict(self) -> Dict[str, Any]:
		return {
			'prompt': self.prompt,
			'record_attempts': self.record_attempts
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'ShellSettings':
		return cls(
			prompt=data.get('prompt', '$ '),
			record_attempts=data.get('record_attempts', 3)
		)


@dataclass
class ConsoleConfig:
	"""Console messages logging level configuration"""
	verbose: bool = False
	quiet: bool = False
	log_file: Optional[str] = None

	def to_dict(self) -> Dict[str, Any]:
		return {
			'verbose': self.verbose,
			'quiet': self.quiet,
			'log_file': self.log_file
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'ConsoleConfig':
		return cls(
			verbose=data.get('verbose', False),
			quiet=data.get('quiet', False),
			log_file=data.get('log_file')
		)


@dataclass
class ShellConfig:
	"""Complete configuration for the Collection Shell"""
	network: NetworkConfig = field(default_factory=NetworkConfig)
	shell: ShellSettings = field(default_factory=ShellSettings)
	console: ConsoleConfig = field(default_factory=ConsoleConfig)

	# Metadata
	config_version: str = "1.0"
	description: str = "Collection Shell Configuration"

	def to_dict(self) -> Dict[str, Any]:
		"""Convert to dictionary for YAML serialization"""
		return {
			'config_version': self.config_version,
			'description': self.description,
			'network': self.network.to_dict(),
			'shell': self.shell.to_dict(),
			'console': self.console.to_dict(),
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> 'ShellConfig':
		"""Create from dictionary (YAML loading), missing sections keep defaults"""
		config = cls()

		if 'config_version' in data:
			config.config_version = str(data['config_version'])
		if 'description' in data:
			config.description = data['description']

		if isinstance(data.get('network'), dict):
			config.network = NetworkConfig.from_dict(data['network'])
		if isinstance(data.get('shell'), dict):
			config.shell = ShellSettings.from_dict(data['shell'])
		if isinstance(data.get('console'), dict):
			config.console = ConsoleConfig.from_dict(data['console'])

		return config


class ConfigurationManager:
	"""
	Manages configuration loading, merging, and validation
	"""

	def __init__(self, config_file: str = "collection_shell.yaml"):
		self.config_file = config_file
		self.config: Optional[ShellConfig] = None
		self.config_file_path: Optional[Path] = None

		self.logger = logging.getLogger(__name__)

		# Standard config file locations (in order of preference)
		self.config_search_paths = [
			Path.cwd() / "collection_shell.yaml",  # Current directory
			Path.cwd() / "config" / "collection_shell.yaml",  # Config subdirectory
			Path.home() / ".config" / "collection_shell" / "config.yaml",  # User config
			Path("/etc/collection_shell/config.yaml"),  # System config (Linux)
		]

	def load_config(self, config_file: Optional[str] = None) -> ShellConfig:
		"""
		Load configuration from file with fallback chain

		Args:
			config_file: Specific config file path, or None for auto-discovery

		Returns:
			Loaded configuration object (defaults if nothing usable was found)
		"""
		self.config = ShellConfig()

		if config_file:
			config_path = Path(config_file)
			if config_path.exists():
				self.config = self._load_yaml_file(config_path)
				self.config_file_path = config_path
				self.logger.info(f"Loaded config from: {config_path}")
			else:
				self.logger.warning(f"Config file not found: {config_path}")
				self.logger.info("Using default configuration")
		else:
			for path in self.config_search_paths:
				if path.exists():
					self.config = self._load_yaml_file(path)
					self.config_file_path = path
					self.logger.info(f"Auto-discovered config: {path}")
					break
			else:
				self.logger.debug("No config file found, using defaults")

		return self.config

	def _load_yaml_file(self, file_path: Path) -> ShellConfig:
		"""Load configuration from a YAML file, falling back to defaults on error"""
		try:
			with open(file_path, 'r', encoding='utf-8') as f:
				yaml_data = yaml.safe_load(f) or {}
		except (OSError, yaml.YAMLError) as e:
			self.logger.error(f"Error loading config file {file_path}: {e}")
			return ShellConfig()

		if not isinstance(yaml_data, dict):
			self.logger.error(f"Config file {file_path} does not contain a mapping")
			return ShellConfig()

		for key in yaml_data:
			if key not in ('config_version', 'description', 'network', 'shell', 'console'):
				self.logger.warning(f"Unknown config key '{key}' in {file_path}")

		return ShellConfig.from_dict(yaml_data)

	def merge_cli_args(self, args: argparse.Namespace) -> ShellConfig:
		"""
		Merge CLI arguments into configuration (CLI takes precedence)

		Args:
			args: Parsed command line arguments

		Returns:
			Updated configuration
		"""
		if self.config is None:
			self.config = ShellConfig()

		# Network settings
		if getattr(args, 'host', None):
			self.config.network.host = args.host
		if getattr(args, 'port', None) is not None:
			self.config.network.port = args.port
		if getattr(args, 'timeout', None) is not None:
			self.config.network.timeout = args.timeout

		# Console settings
		if getattr(args, 'verbose', False):
			self.config.console.verbose = True
		if getattr(args, 'quiet', False):
			self.config.console.quiet = True
		if getattr(args, 'log_file', None):
			self.config.console.log_file = args.log_file

		return self.config

	def validate_config(self) -> tuple[bool, list[str]]:
		"""
		Validate configuration for common issues

		Returns:
			(is_valid, list_of_errors)
		"""
		errors = []
		network = self.config.network
		shell = self.config.shell
		console = self.config.console

		if not isinstance(network.host, str) or not network.host.strip():
			errors.append("Server host must be set")

		if not isinstance(network.port, int) or not (1 <= network.port <= 65535):
			errors.append(f"Invalid server port: {network.port}")

		if not isinstance(network.timeout, (int, float)) or network.timeout <= 0:
			errors.append(f"Invalid timeout: {network.timeout}. Must be greater than 0")

		if not isinstance(network.buffer_size, int) or not (512 <= network.buffer_size <= 65535):
			errors.append(f"Invalid buffer size: {network.buffer_size}. Must be between 512 and 65535")

		if not isinstance(shell.prompt, str) or not shell.prompt:
			errors.append("Prompt cannot be empty")

		if not isinstance(shell.record_attempts, int) or shell.record_attempts < 1:
			errors.append(f"Invalid record attempts: {shell.record_attempts}. Must be at least 1")

		if console.verbose and console.quiet:
			errors.append("Verbose and quiet modes cannot both be enabled")

		return len(errors) == 0, errors

	def get_config(self) -> ShellConfig:
		"""Get current configuration"""
		return deepcopy(self.config)

	def save_config(self, file_path: Optional[str] = None) -> bool:
		"""
		Save current configuration to YAML file

		Args:
			file_path: Target file path, or None to use loaded file path

		Returns:
			True if saved successfully
		"""
		if file_path:
			target_path = Path(file_path)
		elif self.config_file_path:
			target_path = self.config_file_path
		else:
			target_path = Path(self.config_file)

		try:
			target_path.parent.mkdir(parents=True, exist_ok=True)

			with open(target_path, 'w', encoding='utf-8') as f:
				f.write("# Collection Shell Configuration\n")
				f.write("# Generated configuration file\n")
				f.write(f"# Version: {self.config.config_version}\n\n")

				yaml.dump(self.config.to_dict(), f,
						  default_flow_style=False,
						  sort_keys=False,
						  indent=2)

			self.logger.info(f"Configuration saved to: {target_path}")
			return True

		except OSError as e:
			self.logger.error(f"Error saving config to {target_path}: {e}")
			return False

	def create_sample_config(self, file_path: str = "collection_shell_sample.yaml") -> bool:
		"""Create a sample configuration file with comments"""
		try:
			with open(file_path, 'w', encoding='utf-8') as f:
				f.write(self._generate_sample_yaml())
			return True

		except OSError as e:
			self.logger.error(f"Error creating sample config: {e}")
			return False

	def _generate_sample_yaml(self) -> str:
		"""Generate sample YAML with comments"""
		return """# Collection Shell Configuration File
# Values given on the command line override the ones in this file.

# =============================================================================
# COLLECTION SERVER
# =============================================================================
network:
  host: "127.0.0.1"               # Server host name or address
  port: 5555                      # Server UDP port
  timeout: 5.0                    # Seconds to wait for each reply
  buffer_size: 65535              # Largest reply accepted (bytes)

# =============================================================================
# SHELL
# =============================================================================
shell:
  prompt: "$ "                    # Interactive prompt
  record_attempts: 3              # Tries per record field (interactive only)

# =============================================================================
# CONSOLE MESSAGES LOGGING LEVEL
# =============================================================================
console:
  verbose: false                  # Verbose output (debug logging)
  quiet: false                    # Quiet mode (errors only)
  log_file: null                  # Write log records to this file instead

# =============================================================================
# CONFIGURATION METADATA
# =============================================================================
config_version: "1.0"
description: "Collection Shell Configuration"
"""


def create_argument_parser() -> argparse.ArgumentParser:
	"""Argument parser for the shell"""
	parser = argparse.ArgumentParser(
		description='Collection Shell',
		formatter_class=argparse.RawDescriptionHelpFormatter,
		epilog="""
Examples:
  %(prog)s                                 # Connect with default settings
  %(prog)s -H 192.168.1.100 -p 6000        # Connect to a specific server
  %(prog)s -c my_config.yaml               # Use specific config file
  %(prog)s --create-config sample.yaml     # Create sample config file

Configuration:
  Configuration is loaded in this order (later overrides earlier):
  1. Built-in defaults
  2. Configuration file (YAML)
  3. Command line arguments

  Config file search order:
  - collection_shell.yaml (current directory)
  - config/collection_shell.yaml
  - ~/.config/collection_shell/config.yaml
  - /etc/collection_shell/config.yaml
		"""
	)

	# Configuration file handling
	config_group = parser.add_argument_group('Configuration')
	config_group.add_argument(
		'-c', '--config',
		type=str,
		help='Configuration file path (YAML format)'
	)
	config_group.add_argument(
		'--create-config',
		type=str,
		metavar='FILE',
		help='Create sample configuration file and exit'
	)
	config_group.add_argument(
		'--save-config',
		type=str,
		metavar='FILE',
		help='Save current configuration to file'
	)

	# Network settings
	network_group = parser.add_argument_group('Network Settings')
	network_group.add_argument(
		'-H', '--host',
		type=str,
		help='Collection server host'
	)
	network_group.add_argument(
		'-p', '--port',
		type=int,
		help='Collection server port'
	)
	network_group.add_argument(
		'-t', '--timeout',
		type=float,
		help='Seconds to wait for each server reply'
	)

	# Debug settings
	debug_group = parser.add_argument_group('Debug Options')
	debug_group.add_argument(
		'-v', '--verbose',
		action='store_true',
		help='Enable verbose debug output'
	)
	debug_group.add_argument(
		'-q', '--quiet',
		action='store_true',
		help='Quiet mode (minimal output)'
	)
	debug_group.add_argument(
		'--log-file',
		type=str,
		help='Log file path'
	)

	return parser


def setup_configuration(argv=None) -> tuple[Optional[ShellConfig], bool, Optional[ConfigurationManager]]:
	"""
	Setup configuration system with CLI integration

	Args:
		argv: Command line arguments (None for sys.argv)

	Returns:
		(config_object, should_exit, config_manager)
	"""
	parser = create_argument_parser()
	args = parser.parse_args(argv)

	# Handle special commands first
	if args.create_config:
		manager = ConfigurationManager()
		if manager.create_sample_config(args.create_config):
			print(f"Sample configuration created: {args.create_config}")
			print(f"Edit the file and run again with: -c {args.create_config}")
		return None, True, None

	manager = ConfigurationManager()
	manager.load_config(args.config)

	# CLI overrides config file
	config = manager.merge_cli_args(args)

	is_valid, errors = manager.validate_config()
	if not is_valid:
		parser.exit(2, "Configuration errors:\n" + "".join(f"  ✗ {error}\n" for error in errors))

	if args.save_config:
		if manager.save_config(args.save_config):
			print(f"Configuration saved to: {args.save_config}")

	return config, False, manager
