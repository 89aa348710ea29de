"""Rich console output for the permguard CLI.

Daemon diagnostics go through ``logging`` (see ``permguard.core.logs``);
this module only covers what the CLI commands print for the user.
"""

from __future__ import annotations

import sys

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from permguard.enforcement.models import PermissionActionResult

THEME = Theme(
    {
        "muted": "#b2bec3",
        "header": "bold #69B9A1",
        "border": "#29526d",
        "success": "#03b971",
        "warning": "#f5b332",
        "error": "#f53263",
        "info": "#0ec1c8",
        "mode.ok": "#03b971",
        "mode.bad": "#f53263",
    }
)


def _make_console(*, stderr: bool = False) -> Console:
    # Hex colors need truecolor; leave detection to Rich when not a terminal
    stream = sys.stderr if stderr else sys.stdout
    color_system = "truecolor" if stream.isatty() else None
    return Console(theme=THEME, stderr=stderr, color_system=color_system)


console = _make_console()
err_console = _make_console(stderr=True)


def format_mode(mode: int) -> str:
    """Format a permission mode as three octal digits (e.g. ``644``)."""
    return f"{mode & 0o777:03o}"


def create_violation_table(title: str = "Permission Violations") -> Table:
    """Create an empty table for per-path permission results.

    Columns: path, observed mode, target mode and the outcome. Fill rows
    with ``format_result_row``.
    """
    table = Table(
        title=title,
        header_style="header",
        border_style="border",
        row_styles=["", "on grey7"],
    )
    table.add_column("Path", no_wrap=True)
    table.add_column("Mode", justify="right", width=6)
    table.add_column("Target", justify="right", width=6)
    table.add_column("Result", style="muted")
    return table


def format_result_row(result: PermissionActionResult) -> tuple[str, str, str, str]:
    """Render one enforcer result as a violation table row.

    Paths and error messages are escaped; they may contain square brackets.
    """
    if result.dry_run:
        outcome = "[muted]would fix[/]"
    elif result.success:
        outcome = "[success]fixed[/]"
    else:
        outcome = f"[error]{escape(result.error or 'failed')}[/]"
    return (
        escape(result.path),
        f"[mode.bad]{format_mode(result.old_mode)}[/]",
        f"[mode.ok]{format_mode(result.new_mode)}[/]",
        outcome,
    )


def print_info(message: str) -> None:
    console.print(f"[info]{message}[/]")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")


def print_warning(message: str) -> None:
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    err_console.print(f"[error]Error:[/] {message}")
