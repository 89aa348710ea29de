"""permguard command line.

``permguard run`` starts the daemon in the foreground, ``permguard check``
performs a single pass, and ``permguard config`` manages the config file.
"""

from typing import Annotated

import typer

from permguard import __version__
from permguard.cli.commands import check, config, run

app = typer.Typer(
    name="permguard",
    help="Keep file permissions under watched directories at a fixed mode.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
app.add_typer(run.app, name="run")
app.add_typer(check.app, name="check")
app.add_typer(config.app, name="config")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"permguard version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=_show_version,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log every scanned, ignored and changed path."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only log warnings and errors."),
    ] = False,
) -> None:
    """Continuously enforce a file permission mode.

    Every file below the watch directories that drifts from the configured
    mode is reset, on a fixed schedule and shortly after any change.
    """
    # Read by subcommands when they set up logging
    ctx.obj = {"verbose": verbose, "quiet": quiet}


if __name__ == "__main__":
    app()
