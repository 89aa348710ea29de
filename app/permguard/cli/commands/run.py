"""Run command implementation.

Starts the enforcement daemon in the foreground. Startup problems (bad
configuration, missing watch directory, watcher installation failure)
exit with code 1; Ctrl-C exits with code 0.
"""

from pathlib import Path
from typing import Annotated

import typer

from permguard.config.loader import require_config
from permguard.core.logs import setup_logging
from permguard.daemon.events import WatchError
from permguard.daemon.service import StartupError, run_daemon
from permguard.utils.formatting import print_error, print_info

app = typer.Typer(
    help="Run the permission enforcement daemon.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def run_command(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (default: ~/.config/permguard/config.toml).",
        ),
    ] = None,
    interval: Annotated[
        int | None,
        typer.Option(
            "--interval",
            "-i",
            min=1,
            help="Override seconds between scheduled checks.",
        ),
    ] = None,
    settle_ms: Annotated[
        int | None,
        typer.Option(
            "--settle-ms",
            min=0,
            max=60_000,
            help="Override the debounce window after file changes.",
        ),
    ] = None,
) -> None:
    """Watch the configured directories and enforce the target mode."""
    obj = ctx.obj or {}
    setup_logging(verbose=obj.get("verbose", False), quiet=obj.get("quiet", False))

    config = require_config(config_path)

    overrides: dict[str, int] = {}
    if interval is not None:
        overrides["check_interval_seconds"] = interval
    if settle_ms is not None:
        overrides["settle_ms"] = settle_ms
    if overrides:
        config = config.model_copy(update=overrides)

    try:
        run_daemon(config)
    except (StartupError, WatchError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    except KeyboardInterrupt:
        print_info("Interrupted, shutting down.")
        raise typer.Exit(code=0) from None
