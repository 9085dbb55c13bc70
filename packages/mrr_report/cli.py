"""Command line entry point: ``mrr-report build --csv-path <export.csv>``.

:func:`cmd_build_report` does the work and returns an exit code, so it can be
called from Python as well. The Typer ``app`` wraps it and turns I/O and CSV
problems into a single ``Error: ...`` line on stderr with exit status 1.
"""

from __future__ import annotations

import csv
import sys
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .api import build_report_from_csv
from .logging_setup import configure_logging, get_logger
from .render import render_text, report_to_csv

_logger = get_logger("mrr_report.cli")


class OutputFormat(StrEnum):
    TEXT = "text"
    CSV = "csv"


def cmd_build_report(
    csv_path: str | Path,
    *,
    period_label: str | None = None,
    output_format: OutputFormat = OutputFormat.TEXT,
    output_path: str | Path | None = None,
) -> int:
    """Build an MRR changes report from a CSV export and emit it.

    Behavior
    --------
    - Reads ``csv_path`` (headers ``Company Name``, ``Type``,
      ``Total MRR Delta``) into raw records.
    - Derives the period label from the filename unless ``period_label`` is
      given.
    - Consolidates the records and renders the report as a text table or CSV.
    - Writes to ``output_path`` when given, otherwise to stdout.

    Errors are written to stderr and the function returns ``1``. On success,
    returns ``0``.
    """

    try:
        report = build_report_from_csv(csv_path, period_label=period_label)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
        return 1
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
        return 1
    except csv.Error as e:
        print(f"Error: Failed to parse CSV: {e}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as e:
        print(f"Error: '{csv_path}' is not valid UTF-8 text: {e}", file=sys.stderr)
        return 1

    rendered = report_to_csv(report) if output_format == OutputFormat.CSV else render_text(report)

    if output_path is None:
        sys.stdout.write(rendered)
        return 0

    try:
        Path(output_path).write_text(rendered, encoding="utf-8")
    except OSError as e:
        print(f"Error: Failed to write '{output_path}': {e}", file=sys.stderr)
        return 1
    _logger.info("wrote %d rows to %s", len(report.rows), output_path)
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Consolidate an MRR delta CSV export into a classified changes report. "
        "Loads settings from a local .env before running."
    ),
)


# Shared by the annotation on `build_report_cmd`; existence is checked by
# `cmd_build_report` so missing files get the same `Error:` line everywhere.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to an MRR delta CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)


@app.command("build")
def build_report_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    period_label: str | None = typer.Option(
        None, help="Report period label (defaults to one derived from the filename)."
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.TEXT, "--format", help="Output format: text table or CSV."
    ),
    output: Path | None = typer.Option(
        None, help="Write the report to this file instead of stdout.", dir_okay=False
    ),
) -> None:
    """Build the MRR changes report for one CSV export."""

    rc = cmd_build_report(
        csv_path,
        period_label=period_label,
        output_format=output_format,
        output_path=output,
    )
    if rc != 0:
        raise typer.Exit(rc)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Prepare the process before any subcommand runs.

    Settings from a `.env` in the working directory fill in environment
    variables the shell has not set, so `MRR_REPORT_LOG_LEVEL` can live there.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

    # Handlers go on the package logger; module loggers propagate to it.
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


def main() -> None:  # pragma: no cover - console script shim
    app()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m mrr_report.cli`
    app()
