"""spreadsheet-report — Filter truck sheets and append column totals."""

__version__ = "0.1.0"

DEFAULT_SHEET: str = "Sheet1"
FILTERED_SHEET: str = "FilteredData"
TRUCK_COLUMN: str = "Truck"
SUMMARY_COLUMNS: tuple[str, ...] = ("Rate", "Gross Pay", "Total")
GROUP_LABEL_PREFIX: str = "Total for "
