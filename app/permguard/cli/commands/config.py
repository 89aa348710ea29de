"""Config commands.

Show, locate and initialize the daemon configuration file.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape
from rich.table import Table

from permguard.config.loader import ConfigError, require_config, save_config
from permguard.config.models import get_default_config
from permguard.core.paths import get_config_path
from permguard.utils.formatting import console, format_mode, print_error, print_success

app = typer.Typer(
    help="Show or initialize the configuration.",
    no_args_is_help=True,
)

ConfigPathOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Config file (default: ~/.config/permguard/config.toml).",
    ),
]


@app.command()
def show(config_path: ConfigPathOption = None) -> None:
    """Show the effective configuration (creating defaults if missing)."""
    config = require_config(config_path)

    table = Table(title="permguard configuration", show_header=False, border_style="border")
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("Config file", escape(str(config_path or get_config_path())))
    table.add_row("Target mode", format_mode(config.target_mode))
    table.add_row("Watch roots", escape("\n".join(str(p) for p in config.watch_roots)) or "-")
    table.add_row("Ignore roots", escape("\n".join(str(p) for p in config.ignore_roots)) or "-")
    table.add_row("Check interval", f"{config.check_interval_seconds}s")
    table.add_row("Settle window", f"{config.settle_ms}ms")
    table.add_row("Enforce directories", "yes" if config.enforce_directories else "no")

    console.print(table)


@app.command()
def path() -> None:
    """Print the default config file path."""
    typer.echo(str(get_config_path()))


@app.command()
def init(
    config_path: ConfigPathOption = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config file with default settings."""
    target = config_path or get_config_path()

    if target.exists() and not force:
        print_error(f"Config already exists: {target} (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        written = save_config(get_default_config(), target)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Wrote default config to {written}")
