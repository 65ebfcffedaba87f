"""CLI entry point for spreadsheet-report."""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table as RichTable

from spreadsheet_report import (
    DEFAULT_SHEET,
    FILTERED_SHEET,
    SUMMARY_COLUMNS,
    TRUCK_COLUMN,
    __version__,
)
from spreadsheet_report.distinct import collect_distinct_column_values
from spreadsheet_report.filtering import filter_rows_by_column
from spreadsheet_report.io import file_sha256, write_json
from spreadsheet_report.models import FilterReport, RunManifest, SummaryReport
from spreadsheet_report.summary import summarize_columns, summarize_groups

app = typer.Typer(
    name="sreport",
    help="spreadsheet-report — Filter truck sheets and append column totals.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

# Hard failures raised by the library for unreadable input or failed writes.
_IO_ERRORS = (FileNotFoundError, ValueError, OSError)


def _noop(*_args: object, **_kwargs: object) -> None:
    return None


def _printer(quiet: bool) -> Callable[..., None]:
    return _noop if quiet else console.print


def _err(msg: str) -> None:
    console.print(f"[red]x[/red] {msg}")


# ── Helpers ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"spreadsheet-report v{__version__}")
        raise typer.Exit()


def _safe_file_stem(name: str, used: set[str]) -> str:
    stem = re.sub(r"[^A-Za-z0-9_.-]+", "_", name.strip()).strip("._") or "truck"
    candidate = stem
    suffix = 1
    while candidate.lower() in used:
        suffix += 1
        candidate = f"{stem}_{suffix}"
    used.add(candidate.lower())
    return candidate


def _unique_ignoring_case(names: Sequence[str]) -> list[str]:
    """Keep the first spelling of names that differ only by case."""
    first: dict[str, str] = {}
    for name in names:
        first.setdefault(name.lower(), name)
    return list(first.values())


def _fail_soft(report: FilterReport | SummaryReport) -> NoReturn:
    """Print the soft-failure reasons of *report* and exit with code 2."""
    for warning in report.warnings:
        _err(warning)
    if report.missing_columns:
        console.print(f"  Missing: {', '.join(report.missing_columns)}")
    raise typer.Exit(code=2)


def _fail_hard(exc: Exception) -> NoReturn:
    _err(str(exc))
    raise typer.Exit(code=2)


def _fail_unexpected(exc: Exception) -> NoReturn:
    _err(f"Unexpected internal error: {exc}")
    raise typer.Exit(code=1)


def _totals_table(report: SummaryReport, title: str) -> RichTable:
    tbl = RichTable(title=title, show_lines=True)
    tbl.add_column("Group", style="bold")
    for name in report.columns:
        tbl.add_column(name, justify="right")
    for group in report.groups:
        tbl.add_row(group.label, *(f"{group.sums[name]:,.2f}" for name in report.columns))
    return tbl


def _print_warnings(echo: Callable[..., None], warnings: Sequence[str]) -> None:
    for w in warnings:
        echo(f"  [yellow]![/yellow] {w}")


# ── Callbacks ────────────────────────────────────────────────────


@app.callback()
def main(
    version: bool | None = typer.Option(
        None, "--version", "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """spreadsheet-report CLI."""


# ── filter command ───────────────────────────────────────────────


@app.command("filter")
def filter_cmd(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the source XLSX file.",
    ),
    output_file: Path = typer.Option(
        ..., "--output", "-o",
        help="Path of the filtered XLSX file to create (overwritten if present).",
    ),
    value: str = typer.Option(
        ..., "--value", "-v",
        help="Value to match, case-insensitive (e.g. a truck name).",
    ),
    sheet: str = typer.Option(DEFAULT_SHEET, "--sheet", "-s", help="Sheet to read."),
    column: str = typer.Option(TRUCK_COLUMN, "--column", "-c", help="Column to match on."),
    output_sheet: str = typer.Option(
        FILTERED_SHEET, "--output-sheet", help="Sheet name in the output file."
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Copy the header and every row whose COLUMN equals VALUE to a new file."""
    echo = _printer(quiet)
    echo(f"[blue]>[/blue] Filtering {input_file} on {column} = {value!r} …")
    try:
        report = filter_rows_by_column(
            input_file, sheet, output_file, value, column=column, output_sheet=output_sheet
        )
    except _IO_ERRORS as exc:
        _fail_hard(exc)
    except Exception as exc:
        _fail_unexpected(exc)

    if not report.ok:
        _fail_soft(report)

    _print_warnings(echo, report.warnings)
    echo(f"  {report.rows_out} of {report.rows_in} rows matched")
    echo(f"  Filtered rows have been written to {report.output_path}")


# ── summarize command ────────────────────────────────────────────


@app.command()
def summarize(
    file: Path = typer.Option(
        ..., "--file", "-f",
        help="XLSX file to summarize in place.",
    ),
    sheet: str = typer.Option(FILTERED_SHEET, "--sheet", "-s", help="Sheet to summarize."),
    columns: list[str] | None = typer.Option(
        None, "--column", "-c",
        help=f"Column to sum (repeatable). Default: {', '.join(SUMMARY_COLUMNS)}.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Append one row with the sum of each column below the data."""
    echo = _printer(quiet)
    cols = columns or list(SUMMARY_COLUMNS)
    try:
        report = summarize_columns(file, sheet_name=sheet, columns=cols)
    except _IO_ERRORS as exc:
        _fail_hard(exc)
    except Exception as exc:
        _fail_unexpected(exc)

    if not report.ok:
        _fail_soft(report)

    names = ", ".join(f"'{c}'" for c in cols)
    echo(f"  Sum of {names} columns has been added to row {report.groups[0].row}.")
    if not quiet:
        console.print(_totals_table(report, "Column Totals"))


# ── summarize-groups command ─────────────────────────────────────


@app.command("summarize-groups")
def summarize_groups_cmd(
    file: Path = typer.Option(
        ..., "--file", "-f",
        help="XLSX file to summarize in place.",
    ),
    sheet: str = typer.Option(FILTERED_SHEET, "--sheet", "-s", help="Sheet to summarize."),
    group_column: str = typer.Option(
        TRUCK_COLUMN, "--group-column", "-g", help="Column holding the group keys."
    ),
    keys: list[str] | None = typer.Option(
        None, "--key", "-k",
        help="Group key (repeatable, output follows this order). "
        "Default: every distinct value of the group column.",
    ),
    columns: list[str] | None = typer.Option(
        None, "--column", "-c",
        help=f"Column to sum (repeatable). Default: {', '.join(SUMMARY_COLUMNS)}.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Append one 'Total for <key>' row per group key after a blank row."""
    echo = _printer(quiet)
    cols = columns or list(SUMMARY_COLUMNS)
    try:
        group_keys = keys or collect_distinct_column_values(file, sheet, group_column)
        report = summarize_groups(
            file, group_keys, sheet_name=sheet, group_column=group_column, columns=cols
        )
    except _IO_ERRORS as exc:
        _fail_hard(exc)
    except Exception as exc:
        _fail_unexpected(exc)

    if not report.ok:
        _fail_soft(report)

    _print_warnings(echo, report.warnings)
    echo(f"  {len(report.groups)} group total row(s) appended to {file}")
    if not quiet and report.groups:
        console.print(_totals_table(report, "Group Totals"))


# ── distinct command ─────────────────────────────────────────────


@app.command()
def distinct(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the source XLSX file.",
    ),
    sheet: str = typer.Option(DEFAULT_SHEET, "--sheet", "-s", help="Sheet to read."),
    column: str = typer.Option(TRUCK_COLUMN, "--column", "-c", help="Column to scan."),
) -> None:
    """List the distinct non-blank text values of a column, one per line."""
    try:
        values = collect_distinct_column_values(input_file, sheet, column)
    except _IO_ERRORS as exc:
        _fail_hard(exc)
    except Exception as exc:
        _fail_unexpected(exc)

    if not values:
        console.print(f"[yellow]![/yellow] No values found in column {column!r}")
        return
    for value in values:
        console.print(value, markup=False, highlight=False)


# ── run command ──────────────────────────────────────────────────


@app.command()
def run(
    input_file: Path = typer.Option(
        ..., "--input", "-i",
        help="Path to the source XLSX file.",
    ),
    out_dir: Path = typer.Option(
        Path("output"), "--out-dir", "-o",
        help="Directory receiving one report per truck + run_manifest.json.",
    ),
    sheet: str = typer.Option(DEFAULT_SHEET, "--sheet", "-s", help="Sheet to read."),
    trucks: list[str] | None = typer.Option(
        None, "--truck", "-t",
        help="Truck to report on (repeatable). Default: every truck in the sheet.",
    ),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress informational output."),
) -> None:
    """Filter the sheet by each truck and append totals to each truck's file."""
    echo = _printer(quiet)
    created_at = datetime.now(timezone.utc).isoformat()

    if not quiet:
        console.print(Panel(
            f"[bold]spreadsheet-report[/bold] v{__version__}\n"
            f"Input:  {input_file}\nOutput: {out_dir}",
            title="Run Start", border_style="blue",
        ))

    try:
        echo("[blue]>[/blue] Reading truck names …")
        names = _unique_ignoring_case(
            trucks or collect_distinct_column_values(input_file, sheet, TRUCK_COLUMN)
        )
        if not names:
            _err(f"No trucks found in column {TRUCK_COLUMN!r} of sheet {sheet!r}")
            raise typer.Exit(code=2)
        echo(f"  {len(names)} truck(s): {', '.join(names)}")

        manifest = RunManifest(
            version=__version__,
            input_path=str(input_file.resolve()),
            sheet_name=sheet,
            output_dir=str(out_dir.resolve()),
            created_at_utc=created_at,
            sha256=file_sha256(input_file),
            trucks=names,
        )

        used: set[str] = set()
        for name in names:
            target = out_dir / f"{_safe_file_stem(name, used)}.xlsx"
            echo(f"[blue]>[/blue] {name} -> {target}")
            filtered = filter_rows_by_column(input_file, sheet, target, name)
            manifest.filters[name] = filtered
            if not filtered.ok:
                write_json(out_dir / "run_manifest.json", manifest.to_dict())
                _fail_soft(filtered)
            _print_warnings(echo, filtered.warnings)

            summary = summarize_columns(target)
            manifest.summaries[name] = summary
            if not summary.ok:
                write_json(out_dir / "run_manifest.json", manifest.to_dict())
                _fail_soft(summary)
            echo(f"  {filtered.rows_out} row(s), totals on row {summary.groups[0].row}")

        manifest_path = write_json(out_dir / "run_manifest.json", manifest.to_dict())
        echo(f"  Manifest -> {manifest_path}")
    except typer.Exit:
        raise
    except _IO_ERRORS as exc:
        _fail_hard(exc)
    except Exception as exc:
        _fail_unexpected(exc)

    if not quiet:
        console.print(Panel(
            f"[green]Done[/green] — {len(names)} truck report(s) -> {out_dir}",
            title="Run Complete", border_style="green",
        ))
