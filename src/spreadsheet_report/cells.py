"""Cell-level helpers — typing, style snapshots, copying, header lookup."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from copy import copy
from dataclasses import dataclass
from enum import Enum
from numbers import Number
from typing import Any

from openpyxl.cell.cell import Cell, MergedCell
from openpyxl.styles import Alignment, Border, Font, PatternFill, Protection
from openpyxl.utils.datetime import to_excel
from openpyxl.worksheet.worksheet import Worksheet

# ── Cell typing ──────────────────────────────────────────────────


class CellKind(str, Enum):
    string = "string"
    numeric = "numeric"
    date = "date"
    boolean = "boolean"
    formula = "formula"
    error = "error"
    blank = "blank"


def cell_kind(cell: Cell | MergedCell | None) -> CellKind:
    """Classify *cell* the way Excel stores it, not the way Python sees it."""
    if cell is None or isinstance(cell, MergedCell):
        return CellKind.blank
    value = cell.value
    if value is None:
        return CellKind.blank
    data_type = cell.data_type
    if data_type == "f":
        return CellKind.formula
    if data_type == "b" or isinstance(value, bool):
        return CellKind.boolean
    if data_type == "e":
        return CellKind.error
    if cell.is_date:
        return CellKind.date
    if data_type == "n" and isinstance(value, Number):
        return CellKind.numeric
    if isinstance(value, str):
        return CellKind.string
    return CellKind.blank


def is_numeric(cell: Cell | MergedCell | None) -> bool:
    """True for numbers, including date-formatted numbers."""
    return cell_kind(cell) in (CellKind.numeric, CellKind.date)


def numeric_value(cell: Cell | MergedCell | None) -> float:
    """Return the number stored in *cell*, else ``0.0``.

    Dates count as their Excel serial number in the workbook's epoch.
    """
    kind = cell_kind(cell)
    if kind is CellKind.numeric:
        return float(cell.value)  # type: ignore[arg-type, union-attr]
    if kind is CellKind.date:
        return float(to_excel(cell.value, cell.parent.parent.epoch))  # type: ignore[union-attr]
    return 0.0


def string_value(cell: Cell | MergedCell | None) -> str | None:
    """Return the text of a string cell, else None."""
    if cell_kind(cell) is CellKind.string:
        return str(cell.value)  # type: ignore[union-attr]
    return None


# ── Styles ───────────────────────────────────────────────────────


@dataclass(frozen=True)
class StyleSnapshot:
    """Opaque copy of a cell's formatting, portable across workbooks.

    openpyxl keeps styles as indexes into per-workbook tables, so each
    component is cloned rather than sharing ``cell._style``.
    """

    font: Font
    fill: PatternFill
    border: Border
    alignment: Alignment
    protection: Protection
    number_format: str

    @classmethod
    def capture(cls, cell: Cell) -> StyleSnapshot:
        return cls(
            font=copy(cell.font),
            fill=copy(cell.fill),
            border=copy(cell.border),
            alignment=copy(cell.alignment),
            protection=copy(cell.protection),
            number_format=cell.number_format,
        )

    def apply(self, cell: Cell) -> None:
        cell.font = copy(self.font)
        cell.fill = copy(self.fill)
        cell.border = copy(self.border)
        cell.alignment = copy(self.alignment)
        cell.protection = copy(self.protection)
        cell.number_format = self.number_format


def copy_cell(source: Cell, target: Cell) -> None:
    """Copy the value of *source* into *target* by kind, then clone its style.

    Formulas travel as expression text and are not evaluated. Error and
    blank cells carry no value.
    """
    kind = cell_kind(source)
    if kind is CellKind.string:
        target.value = str(source.value)
        # text such as "=x" must stay text instead of turning into a formula
        target.data_type = "s"
    elif kind in (CellKind.numeric, CellKind.date, CellKind.formula):
        target.value = source.value
    elif kind is CellKind.boolean:
        target.value = bool(source.value)

    if source.has_style:
        StyleSnapshot.capture(source).apply(target)


# ── Header lookup ────────────────────────────────────────────────


def header_cells(ws: Worksheet) -> tuple[Any, ...]:
    return tuple(next(ws.iter_rows(min_row=1, max_row=1), ()))


def find_column(headers: Iterable[Any], name: str, *, strip: bool = False) -> int | None:
    """Return the 1-based column of the first header equal to *name*.

    Matching is case-insensitive; with *strip* the header text is trimmed
    first. Non-text headers never match.
    """
    wanted = name.lower()
    for cell in headers:
        text = string_value(cell)
        if text is None:
            continue
        if strip:
            text = text.strip()
        if text.lower() == wanted:
            return int(cell.column)
    return None


def find_columns(
    headers: Sequence[Any], names: Iterable[str], *, strip: bool = False
) -> tuple[dict[str, int], list[str]]:
    """Resolve every name in *names*; return ``(found, missing)``."""
    found: dict[str, int] = {}
    missing: list[str] = []
    for name in names:
        index = find_column(headers, name, strip=strip)
        if index is None:
            missing.append(name)
        else:
            found[name] = index
    return found, missing
