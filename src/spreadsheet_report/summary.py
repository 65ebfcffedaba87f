"""Column summaries — append total rows to a sheet and rewrite it in place."""

from __future__ import annotations

from collections.abc import Hashable, Sequence
from pathlib import Path

import pandas as pd
from openpyxl.worksheet.worksheet import Worksheet

from spreadsheet_report import (
    FILTERED_SHEET,
    GROUP_LABEL_PREFIX,
    SUMMARY_COLUMNS,
    TRUCK_COLUMN,
)
from spreadsheet_report.cells import (
    StyleSnapshot,
    find_columns,
    header_cells,
    is_numeric,
    numeric_value,
    string_value,
)
from spreadsheet_report.io import open_workbook, save_workbook
from spreadsheet_report.models import GroupTotals, SummaryReport

_GROUP_KEY = "__group__"
_ALL_ROWS = "__all__"
MISSING_COLUMNS_MSG = "Required column(s) not found."

# ── Aggregation (pure) ──────────────────────────────────────────


def compute_group_totals(
    row_keys: Sequence[Hashable | None],
    rows: Sequence[Sequence[float]],
    columns: Sequence[str],
    keys: Sequence[Hashable],
) -> dict[Hashable, dict[str, float]]:
    """Sum *rows* per key, returning totals for every key in *keys* order.

    ``row_keys[i]`` is the group of ``rows[i]``; rows whose key is not in
    *keys* are ignored. Keys without rows total ``0.0``.
    """
    cols = list(columns)
    frame = pd.DataFrame(list(rows), columns=cols, dtype="float64")
    frame.insert(0, _GROUP_KEY, pd.Series(list(row_keys), index=frame.index, dtype="object"))
    frame = frame[frame[_GROUP_KEY].isin(list(keys))]
    sums = (
        frame.groupby(_GROUP_KEY, sort=False)[cols]
        .sum()
        .reindex(list(keys), fill_value=0.0)
    )
    return {key: {col: float(sums.at[key, col]) for col in cols} for key in keys}


def compute_column_totals(
    rows: Sequence[Sequence[float]], columns: Sequence[str]
) -> dict[str, float]:
    """Sum every column of *rows*; the one-group case of :func:`compute_group_totals`."""
    totals = compute_group_totals([_ALL_ROWS] * len(rows), rows, columns, [_ALL_ROWS])
    return totals[_ALL_ROWS]


# ── Sheet scanning ───────────────────────────────────────────────


def _scan_values(
    ws: Worksheet, col_map: dict[str, int]
) -> tuple[list[list[float]], dict[str, StyleSnapshot]]:
    """Read numeric contributions per data row and the first numeric style per column.

    Date cells count as numbers here, by their Excel serial.
    """
    rows: list[list[float]] = []
    styles: dict[str, StyleSnapshot] = {}
    for cells in ws.iter_rows(min_row=2, max_row=ws.max_row):
        values: list[float] = []
        for name, idx in col_map.items():
            cell = cells[idx - 1]
            values.append(numeric_value(cell))
            if name not in styles and is_numeric(cell):
                styles[name] = StyleSnapshot.capture(cell)
        rows.append(values)
    return rows, styles


def _row_keys(ws: Worksheet, group_idx: int) -> list[str | None]:
    keys: list[str | None] = []
    for (cell,) in ws.iter_rows(
        min_row=2, max_row=ws.max_row, min_col=group_idx, max_col=group_idx
    ):
        text = string_value(cell)
        keys.append(text.strip() if text is not None else None)
    return keys


def _write_sums(
    ws: Worksheet,
    row: int,
    col_map: dict[str, int],
    sums: dict[str, float],
    styles: dict[str, StyleSnapshot],
) -> None:
    for name, idx in col_map.items():
        cell = ws.cell(row=row, column=idx, value=sums[name])
        style = styles.get(name)
        if style is not None:
            style.apply(cell)


# ── Public API ───────────────────────────────────────────────────


def summarize_sheet(ws: Worksheet, columns: Sequence[str] = SUMMARY_COLUMNS) -> SummaryReport:
    """Append one row holding the sum of each of *columns* below the data."""
    found, missing = find_columns(header_cells(ws), columns, strip=True)
    if missing:
        return SummaryReport(
            columns=list(columns), missing_columns=missing, warnings=[MISSING_COLUMNS_MSG]
        )

    col_map = {name: found[name] for name in columns}
    rows, styles = _scan_values(ws, col_map)
    totals = compute_column_totals(rows, list(col_map))

    sum_row = ws.max_row + 1
    _write_sums(ws, sum_row, col_map, totals, styles)

    return SummaryReport(
        rows_in=len(rows),
        columns=list(columns),
        groups=[GroupTotals(key=None, label="Total", row=sum_row, sums=totals)],
    )


def summarize_sheet_groups(
    ws: Worksheet,
    keys: Sequence[str],
    *,
    group_column: str = TRUCK_COLUMN,
    columns: Sequence[str] = SUMMARY_COLUMNS,
) -> SummaryReport:
    """Append one ``Total for <key>`` row per key, after a blank row."""
    found, missing = find_columns(header_cells(ws), [group_column, *columns], strip=True)
    if missing:
        return SummaryReport(
            columns=list(columns), missing_columns=missing, warnings=[MISSING_COLUMNS_MSG]
        )

    ordered_keys = list(dict.fromkeys(keys))
    col_map = {name: found[name] for name in columns}
    rows, styles = _scan_values(ws, col_map)
    row_keys = _row_keys(ws, found[group_column])
    totals = compute_group_totals(row_keys, rows, list(col_map), ordered_keys)

    report = SummaryReport(rows_in=len(rows), columns=list(columns))
    if not ordered_keys:
        report.warnings.append("No group keys supplied; nothing appended")
        return report

    # one blank row between the data and the group totals
    out_row = ws.max_row + 2
    for key in ordered_keys:
        label = f"{GROUP_LABEL_PREFIX}{key}"
        ws.cell(row=out_row, column=1, value=label)
        _write_sums(ws, out_row, col_map, totals[key], styles)
        report.groups.append(GroupTotals(key=key, label=label, row=out_row, sums=totals[key]))
        out_row += 1
    return report


def summarize_columns(
    path: Path,
    *,
    sheet_name: str = FILTERED_SHEET,
    columns: Sequence[str] = SUMMARY_COLUMNS,
) -> SummaryReport:
    """Append the column totals to *sheet_name* of *path* and save it in place.

    A missing sheet or column leaves the file untouched.
    """
    with open_workbook(path) as wb:
        if sheet_name not in wb.sheetnames:
            return SummaryReport(
                columns=list(columns),
                missing_sheet=sheet_name,
                warnings=[f"Sheet {sheet_name!r} not found."],
            )
        report = summarize_sheet(wb[sheet_name], columns)
        if report.ok:
            save_workbook(wb, path)
    return report


def summarize_groups(
    path: Path,
    keys: Sequence[str],
    *,
    sheet_name: str = FILTERED_SHEET,
    group_column: str = TRUCK_COLUMN,
    columns: Sequence[str] = SUMMARY_COLUMNS,
) -> SummaryReport:
    """Append per-key totals to *sheet_name* of *path* and save it in place.

    Summary rows follow the order of *keys*, not the order rows appear in.
    """
    with open_workbook(path) as wb:
        if sheet_name not in wb.sheetnames:
            return SummaryReport(
                columns=list(columns),
                missing_sheet=sheet_name,
                warnings=[f"Sheet {sheet_name!r} not found."],
            )
        report = summarize_sheet_groups(
            wb[sheet_name], keys, group_column=group_column, columns=columns
        )
        if report.ok and report.groups:
            save_workbook(wb, path)
    return report
