"""Distinct value collection — discover group keys such as truck names."""

from __future__ import annotations

from pathlib import Path

from openpyxl.worksheet.worksheet import Worksheet

from spreadsheet_report import TRUCK_COLUMN
from spreadsheet_report.cells import find_column, header_cells, string_value
from spreadsheet_report.io import open_workbook


def distinct_values(ws: Worksheet, column: str = TRUCK_COLUMN) -> list[str] | None:
    """Return the sorted distinct non-blank text values of *column*.

    The header is matched case-insensitively after trimming, like the
    summary operations that consume these values as group keys.

    Returns None when *column* is not in the header row.
    """
    col_idx = find_column(header_cells(ws), column, strip=True)
    if col_idx is None:
        return None

    seen: set[str] = set()
    for (cell,) in ws.iter_rows(min_row=2, max_row=ws.max_row, min_col=col_idx, max_col=col_idx):
        text = string_value(cell)
        if text is None:
            continue
        text = text.strip()
        if text:
            seen.add(text)
    return sorted(seen)


def collect_distinct_column_values(
    input_path: Path, sheet_name: str, column: str = TRUCK_COLUMN
) -> list[str]:
    """Collect distinct text values of *column*; empty when sheet or column is missing."""
    with open_workbook(input_path) as wb:
        if sheet_name not in wb.sheetnames:
            return []
        return distinct_values(wb[sheet_name], column) or []
