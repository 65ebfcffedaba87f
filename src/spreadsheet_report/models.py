"""Report dataclasses returned by the filter and summary operations."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from numbers import Integral
from typing import Any


def _to_non_negative_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise TypeError(f"{field_name} must be an integer")
    result = int(value)
    if result < 0:
        raise ValueError(f"{field_name} must be >= 0")
    return result


def _to_string_list(values: Sequence[Any] | None, field_name: str) -> list[str]:
    if values is None:
        return []
    if isinstance(values, str):
        raise TypeError(f"{field_name} must be a sequence of strings")
    normalized: list[str] = []
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"{field_name} items must be strings")
        normalized.append(item)
    return normalized


@dataclass
class FilterReport:
    """Outcome of copying matching rows into a new workbook.

    ``rows_in`` counts the data rows scanned, ``rows_out`` the rows copied.
    When the sheet or the key column is missing nothing is written and
    ``output_path`` stays empty.
    """

    rows_in: int = 0
    rows_out: int = 0
    output_path: str = ""
    missing_sheet: str = ""
    missing_columns: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.rows_out = _to_non_negative_int(self.rows_out, "rows_out")
        self.missing_columns = _to_string_list(self.missing_columns, "missing_columns")
        self.warnings = _to_string_list(self.warnings, "warnings")
        if self.rows_out > self.rows_in:
            raise ValueError("rows_out must be <= rows_in")

    @property
    def ok(self) -> bool:
        return not self.missing_sheet and not self.missing_columns

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "rows_out": self.rows_out,
            "output_path": self.output_path,
            "missing_sheet": self.missing_sheet,
            "missing_columns": list(self.missing_columns),
            "warnings": list(self.warnings),
        }


@dataclass
class GroupTotals:
    """One appended summary row. ``key`` is None for the single total row."""

    key: str | None
    label: str
    row: int
    sums: dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.row = _to_non_negative_int(self.row, "row")

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "row": self.row,
            "sums": dict(self.sums),
        }


@dataclass
class SummaryReport:
    """Outcome of appending total rows to a sheet in place."""

    rows_in: int = 0
    columns: list[str] = field(default_factory=list)
    groups: list[GroupTotals] = field(default_factory=list)
    missing_sheet: str = ""
    missing_columns: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.rows_in = _to_non_negative_int(self.rows_in, "rows_in")
        self.columns = _to_string_list(self.columns, "columns")
        self.missing_columns = _to_string_list(self.missing_columns, "missing_columns")
        self.warnings = _to_string_list(self.warnings, "warnings")

    @property
    def ok(self) -> bool:
        return not self.missing_sheet and not self.missing_columns

    def totals_for(self, key: str | None) -> dict[str, float]:
        for group in self.groups:
            if group.key == key:
                return dict(group.sums)
        raise KeyError(key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "rows_in": self.rows_in,
            "columns": list(self.columns),
            "groups": [group.to_dict() for group in self.groups],
            "missing_sheet": self.missing_sheet,
            "missing_columns": list(self.missing_columns),
            "warnings": list(self.warnings),
        }


@dataclass
class RunManifest:
    """Audit-trail manifest for a per-truck batch run."""

    tool: str = "spreadsheet-report"
    version: str = ""
    input_path: str = ""
    sheet_name: str = ""
    output_dir: str = ""
    created_at_utc: str = ""
    sha256: str = ""
    trucks: list[str] = field(default_factory=list)
    filters: dict[str, FilterReport] = field(default_factory=dict)
    summaries: dict[str, SummaryReport] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.trucks = _to_string_list(self.trucks, "trucks")

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool": self.tool,
            "version": self.version,
            "input_path": self.input_path,
            "sheet_name": self.sheet_name,
            "output_dir": self.output_dir,
            "created_at_utc": self.created_at_utc,
            "sha256": self.sha256,
            "trucks": list(self.trucks),
            "filters": {name: rep.to_dict() for name, rep in self.filters.items()},
            "summaries": {name: rep.to_dict() for name, rep in self.summaries.items()},
        }
