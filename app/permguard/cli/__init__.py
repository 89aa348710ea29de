"""CLI package for permguard.

This package contains the Typer application and all subcommands.
"""

from permguard.cli.main import app

__all__ = ["app"]
