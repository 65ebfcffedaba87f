from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

HEADER = ["Truck", "Rate", "Gross Pay", "Total"]
ROWS = [("A", 10, 20, 30), ("B", 5, 5, 10), ("A", 1, 1, 1)]


def write_book(
    path: Path,
    rows: Sequence[Sequence[Any]],
    *,
    header: Sequence[Any] = HEADER,
    sheet: str = "Sheet1",
) -> Path:
    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.title = sheet
    ws.append(list(header))
    for row in rows:
        ws.append(list(row))
    wb.save(path)
    return path


@pytest.fixture
def truck_xlsx(tmp_path: Path) -> Path:
    """Three-row truck sheet: A(10,20,30), B(5,5,10), A(1,1,1)."""
    return write_book(tmp_path / "trucks.xlsx", ROWS)


@pytest.fixture
def filtered_xlsx(tmp_path: Path) -> Path:
    """The three truck rows already on a ``FilteredData`` sheet."""
    return write_book(tmp_path / "filtered.xlsx", ROWS, sheet="FilteredData")
