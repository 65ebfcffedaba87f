"""Tests for appending column and group totals in place."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from conftest import HEADER, ROWS, write_book
from openpyxl import load_workbook

from spreadsheet_report.filtering import filter_rows_by_column
from spreadsheet_report.summary import (
    compute_column_totals,
    compute_group_totals,
    summarize_columns,
    summarize_groups,
)

COLS = ["Rate", "Gross Pay", "Total"]


def _values(path: Path, sheet: str = "FilteredData") -> list[tuple]:
    return list(load_workbook(path)[sheet].iter_rows(values_only=True))


# ── Pure aggregation ─────────────────────────────────────────────


def test_compute_column_totals_sums_every_column() -> None:
    totals = compute_column_totals([[10, 20, 30], [1, 1, 1]], COLS)

    assert totals == {"Rate": 11.0, "Gross Pay": 21.0, "Total": 31.0}


def test_compute_column_totals_empty_is_zero() -> None:
    assert compute_column_totals([], COLS) == {"Rate": 0.0, "Gross Pay": 0.0, "Total": 0.0}


def test_compute_column_totals_ignores_row_order() -> None:
    rows = [[1.5, 2, 3], [4, 5.25, 6], [7, 8, 9.75]]

    assert compute_column_totals(rows, COLS) == compute_column_totals(rows[::-1], COLS)


def test_compute_group_totals_follows_key_order_and_ignores_unknown() -> None:
    totals = compute_group_totals(
        ["A", "B", "A", None, "C"],
        [[10, 20, 30], [5, 5, 10], [1, 1, 1], [100, 100, 100], [7, 7, 7]],
        COLS,
        ["B", "A", "Z"],
    )

    assert list(totals) == ["B", "A", "Z"]
    assert totals["A"] == {"Rate": 11.0, "Gross Pay": 21.0, "Total": 31.0}
    assert totals["B"] == {"Rate": 5.0, "Gross Pay": 5.0, "Total": 10.0}
    assert totals["Z"] == {"Rate": 0.0, "Gross Pay": 0.0, "Total": 0.0}


# ── Single total row ─────────────────────────────────────────────


def test_summarize_filtered_result_appends_total_row(truck_xlsx: Path, tmp_path: Path) -> None:
    out = tmp_path / "out.xlsx"
    filter_rows_by_column(truck_xlsx, "Sheet1", out, "A")

    report = summarize_columns(out)

    assert report.ok
    assert report.rows_in == 2
    assert report.totals_for(None) == {"Rate": 11.0, "Gross Pay": 21.0, "Total": 31.0}
    assert report.groups[0].row == 4
    assert _values(out) == [
        tuple(HEADER),
        ("A", 10, 20, 30),
        ("A", 1, 1, 1),
        (None, 11, 21, 31),
    ]


def test_summarize_non_numeric_cells_count_as_zero(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx",
        [("A", None, 2, 3), ("A", "n/a", 4, "=B2"), ("A", True, 6, 9)],
        sheet="FilteredData",
    )

    report = summarize_columns(path)

    assert report.totals_for(None) == {"Rate": 0.0, "Gross Pay": 12.0, "Total": 12.0}
    assert _values(path)[-1] == (None, 0, 12, 12)


def test_summarize_adds_date_cells_by_excel_serial(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx",
        [("A", 1, 1, datetime(2024, 1, 1)), ("A", 2, 2, 5)],
        sheet="FilteredData",
    )
    wb = load_workbook(path)
    wb["FilteredData"]["D2"].number_format = "yyyy-mm-dd"
    wb.save(path)

    report = summarize_columns(path)

    assert report.totals_for(None) == {"Rate": 3.0, "Gross Pay": 3.0, "Total": 45297.0}
    ws = load_workbook(path)["FilteredData"]
    total = ws.cell(row=report.groups[0].row, column=4)
    assert total.number_format == "yyyy-mm-dd"
    assert total.is_date


def test_summarize_matches_trimmed_headers_any_case(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx",
        [(1, 2, 3)],
        header=["  TOTAL", "rate ", " Gross pay "],
        sheet="FilteredData",
    )

    report = summarize_columns(path)

    assert report.totals_for(None) == {"Rate": 2.0, "Gross Pay": 3.0, "Total": 1.0}
    assert _values(path)[-1] == (1, 2, 3)


def test_summarize_carries_first_numeric_style(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx",
        [("A", "x", 1, 1), ("A", 5, 2, 2), ("A", 6, 3, 3)],
        sheet="FilteredData",
    )
    wb = load_workbook(path)
    ws = wb["FilteredData"]
    ws["B3"].number_format = "0.00"
    ws["B4"].number_format = "0.0000"
    wb.save(path)

    report = summarize_columns(path)

    ws = load_workbook(path)["FilteredData"]
    assert ws.cell(row=report.groups[0].row, column=2).number_format == "0.00"
    assert ws.cell(row=report.groups[0].row, column=3).number_format == "General"


def test_summarize_missing_column_leaves_file_untouched(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx", [("A", 1, 2)], header=["Truck", "Rate", "Total"], sheet="FilteredData"
    )
    before = path.read_bytes()

    report = summarize_columns(path)

    assert not report.ok
    assert report.missing_columns == ["Gross Pay"]
    assert report.warnings == ["Required column(s) not found."]
    assert path.read_bytes() == before


def test_summarize_missing_sheet_leaves_file_untouched(truck_xlsx: Path) -> None:
    before = truck_xlsx.read_bytes()

    report = summarize_columns(truck_xlsx)

    assert report.missing_sheet == "FilteredData"
    assert truck_xlsx.read_bytes() == before


def test_summarize_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        summarize_columns(tmp_path / "missing.xlsx")


# ── Grouped totals ───────────────────────────────────────────────


def test_summarize_groups_appends_rows_after_blank_gap(filtered_xlsx: Path) -> None:
    report = summarize_groups(filtered_xlsx, ["A", "B"])

    assert report.ok
    assert [g.key for g in report.groups] == ["A", "B"]
    assert report.totals_for("A") == {"Rate": 11.0, "Gross Pay": 21.0, "Total": 31.0}
    assert report.totals_for("B") == {"Rate": 5.0, "Gross Pay": 5.0, "Total": 10.0}
    assert _values(filtered_xlsx) == [
        tuple(HEADER),
        *ROWS,
        (None, None, None, None),
        ("Total for A", 11, 21, 31),
        ("Total for B", 5, 5, 10),
    ]


def test_summarize_groups_uses_supplied_key_order(filtered_xlsx: Path) -> None:
    report = summarize_groups(filtered_xlsx, ["B", "A", "B"])

    assert [g.label for g in report.groups] == ["Total for B", "Total for A"]
    assert [g.row for g in report.groups] == [6, 7]


def test_summarize_groups_trims_row_keys(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx", [(" A ", 1, 1, 1), ("A", 2, 2, 2), ("a", 4, 4, 4)], sheet="FilteredData"
    )

    report = summarize_groups(path, ["A"])

    assert report.totals_for("A") == {"Rate": 3.0, "Gross Pay": 3.0, "Total": 3.0}


def test_summarize_groups_missing_group_column(tmp_path: Path) -> None:
    path = write_book(
        tmp_path / "f.xlsx", [(1, 2, 3)], header=COLS, sheet="FilteredData"
    )
    before = path.read_bytes()

    report = summarize_groups(path, ["A"])

    assert report.missing_columns == ["Truck"]
    assert path.read_bytes() == before


def test_summarize_groups_missing_sheet(truck_xlsx: Path) -> None:
    report = summarize_groups(truck_xlsx, ["A"], sheet_name="Other")

    assert report.missing_sheet == "Other"
    assert report.warnings == ["Sheet 'Other' not found."]


def test_summarize_groups_without_keys_writes_nothing(filtered_xlsx: Path) -> None:
    before = filtered_xlsx.read_bytes()

    report = summarize_groups(filtered_xlsx, [])

    assert report.ok
    assert report.groups == []
    assert filtered_xlsx.read_bytes() == before
