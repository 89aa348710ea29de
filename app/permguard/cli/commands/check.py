"""One-shot permission check.

Runs a single reconciliation pass over all watch directories and reports
the paths whose mode differs from the target. Nothing is changed unless
--fix is given.
"""

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
from rich.markup import escape

from permguard.config.loader import require_config
from permguard.core.logs import setup_logging
from permguard.enforcement.models import PassReport
from permguard.enforcement.reconciler import Reconciler
from permguard.utils.formatting import (
    console,
    create_violation_table,
    format_mode,
    format_result_row,
    print_error,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Check watched directories once and optionally fix them.",
    invoke_without_command=True,
)


class OutputFormat(str, Enum):
    """Output format options for the check report."""

    TABLE = "table"
    JSON = "json"


@app.callback(invoke_without_command=True)
def check_command(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Config file (default: ~/.config/permguard/config.toml).",
        ),
    ] = None,
    fix: Annotated[
        bool,
        typer.Option("--fix", help="Apply the target mode to violating paths."),
    ] = False,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Scan all watch directories for permission drift."""
    obj = ctx.obj or {}
    setup_logging(verbose=obj.get("verbose", False), quiet=True)

    config = require_config(config_path)
    report = Reconciler(config, dry_run=not fix).run_pass()

    if output_format == OutputFormat.JSON:
        _print_json(report, config.target_mode, fixed=fix)
    else:
        _print_report(report, config.target_mode, fixed=fix)

    # Exit with error if any root or change failed
    if not report.ok:
        raise typer.Exit(code=1)


# === Private helper functions ===


def _print_report(report: PassReport, target_mode: int, *, fixed: bool) -> None:
    """Display the pass report as a Rich table plus summary."""
    for root_error in report.root_errors:
        print_error(escape(root_error.error))

    if not report.violations:
        if report.roots_scanned:
            print_success(
                f"All {len(report.roots_scanned)} watch root(s) compliant "
                f"with mode {format_mode(target_mode)}."
            )
        return

    title = "Permission Changes" if fixed else "Permission Violations"
    table = create_violation_table(title=title)
    for result in report.results:
        table.add_row(*format_result_row(result))
    console.print(table)

    console.print(f"\n[dim]Found {len(report.violations)} violation(s)[/dim]")
    if fixed:
        console.print(f"[dim]Fixed {report.fixed}, failed {report.failed}[/dim]")
    else:
        print_warning("Run with --fix to apply the target mode.")


def _print_json(report: PassReport, target_mode: int, *, fixed: bool) -> None:
    """Display the pass report as JSON."""
    data = {
        "target_mode": format_mode(target_mode),
        "fixed": fixed,
        "roots_scanned": report.roots_scanned,
        "root_errors": [{"root": e.root, "error": e.error} for e in report.root_errors],
        "violations": [
            {
                "path": r.path,
                "mode": format_mode(r.old_mode),
                "success": r.success,
                "error": r.error,
                "dry_run": r.dry_run,
            }
            for r in report.results
        ],
    }
    console.print_json(json.dumps(data))
