"""Command runner for coordinating CLI execution.

Manages logging configuration, component creation, system cleanup and
error handling for command execution.
"""

from __future__ import annotations

import click

from DnsdbFlex.cli.commands import SearchCommand
from DnsdbFlex.config import AppConfig
from DnsdbFlex.core.errors import ConfigError, ResourceExhaustion
from DnsdbFlex.core.query import QueryDescriptor
from DnsdbFlex.protocol import ProtocolDecoder
from DnsdbFlex.renderers import create_presenter
from DnsdbFlex.services import create_search_service
from DnsdbFlex.utils.log import configure_logging, log


class CommandRunner:
    """Orchestrates command execution with proper resource management."""

    def __init__(self, config: AppConfig, *, verbosity: int = 0) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
            verbosity: Number of ``-d`` flags given.
        """
        self.config = config
        self.verbosity = verbosity

    def run_search(self, descriptor: QueryDescriptor, action: str) -> int:
        """Execute the search command.

        Args:
            descriptor: Validated search parameters.
            action: The CLI command name (e.g., 'search').

        Returns:
            Process exit status of the search.

        Raises:
            click.Abort: When the system cannot be configured or the run
                fails outright.
        """
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
            quiet=self.config.output.quiet,
            verbosity=self.verbosity,
        )
        try:
            search_service = create_search_service(self.config)
        except ConfigError as e:
            log.error("%s", e)
            raise click.Abort from e

        command = SearchCommand(
            config=self.config,
            descriptor=descriptor,
            search_service=search_service,
            decoder=ProtocolDecoder(create_presenter(self.config)),
        )
        try:
            return command.execute()
        except ResourceExhaustion as e:
            log.error("out of memory: %s", e)
            raise click.Abort from e
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Search failed: %s", e)
            raise click.Abort from e
        finally:
            search_service.close()
