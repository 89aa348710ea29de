"""Allow running as ``python -m permguard``."""

from permguard.cli.main import app

app()
