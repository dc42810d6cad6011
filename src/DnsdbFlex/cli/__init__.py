"""CLI package for DnsdbFlex command orchestration.

This package contains the modular CLI components for the search command:
option parsing, the runner, and the command itself.
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from DnsdbFlex.cli.runner import CommandRunner
from DnsdbFlex.cli.ui import cli


def main() -> None:
    """Run DnsdbFlex CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
