"""CLI commands for permguard.

This package contains all subcommand implementations.
"""

from permguard.cli.commands import check, config, run

__all__ = ["check", "config", "run"]
