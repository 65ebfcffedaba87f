"""Row filter — copy the header and every matching row into a new workbook."""

from __future__ import annotations

from pathlib import Path

from openpyxl import Workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.worksheet.worksheet import Worksheet

from spreadsheet_report import DEFAULT_SHEET, FILTERED_SHEET, TRUCK_COLUMN
from spreadsheet_report.cells import copy_cell, find_column, header_cells, string_value
from spreadsheet_report.io import open_workbook, save_workbook
from spreadsheet_report.models import FilterReport


def _copy_row(cells: tuple, out_ws: Worksheet, out_row: int) -> None:
    for cell in cells:
        if isinstance(cell, MergedCell):
            continue
        if cell.value is None and not cell.has_style:
            continue
        copy_cell(cell, out_ws.cell(row=out_row, column=cell.column))


def filter_sheet(
    ws: Worksheet,
    value: str,
    *,
    column: str = TRUCK_COLUMN,
    output_sheet: str = FILTERED_SHEET,
) -> tuple[Workbook | None, FilterReport]:
    """Build a workbook holding the header of *ws* and its matching rows.

    Returns ``(None, report)`` when *column* is not in the header.
    """
    headers = header_cells(ws)
    col_idx = find_column(headers, column)
    if col_idx is None:
        report = FilterReport(
            missing_columns=[column],
            warnings=[f"{column} column not found."],
        )
        return None, report

    out_wb = Workbook()
    active_sheet = out_wb.active
    if active_sheet is not None:
        out_wb.remove(active_sheet)  # remove default sheet
    out_ws = out_wb.create_sheet(title=output_sheet)

    _copy_row(headers, out_ws, 1)

    wanted = value.lower()
    rows_in = 0
    out_row = 2
    for cells in ws.iter_rows(min_row=2, max_row=ws.max_row):
        rows_in += 1
        text = string_value(cells[col_idx - 1])
        if text is None or text.lower() != wanted:
            continue
        _copy_row(cells, out_ws, out_row)
        out_row += 1

    report = FilterReport(rows_in=rows_in, rows_out=out_row - 2)
    if report.rows_out == 0:
        report.warnings.append(f"No rows matched {column} = {value!r}; wrote header only")
    return out_wb, report


def filter_rows_by_column(
    input_path: Path,
    sheet_name: str,
    output_path: Path,
    value: str,
    *,
    column: str = TRUCK_COLUMN,
    output_sheet: str = FILTERED_SHEET,
) -> FilterReport:
    """Write rows of *sheet_name* whose *column* equals *value* to *output_path*.

    The match is case-insensitive and untrimmed. A missing sheet or column
    is reported on the returned :class:`FilterReport` and nothing is
    written; unreadable input and failed writes raise.
    """
    with open_workbook(input_path) as wb:
        if sheet_name not in wb.sheetnames:
            return FilterReport(
                missing_sheet=sheet_name,
                warnings=[f"Sheet {sheet_name!r} not found."],
            )
        out_wb, report = filter_sheet(
            wb[sheet_name], value, column=column, output_sheet=output_sheet
        )

    if out_wb is None:
        return report
    report.output_path = str(save_workbook(out_wb, output_path))
    return report


def filter_by_truck(
    input_path: Path,
    output_path: Path,
    truck: str,
    *,
    sheet_name: str = DEFAULT_SHEET,
) -> FilterReport:
    """Shorthand for filtering on the ``Truck`` column."""
    return filter_rows_by_column(input_path, sheet_name, output_path, truck)
