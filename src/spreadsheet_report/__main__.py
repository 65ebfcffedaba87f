"""Allow ``python -m spreadsheet_report``."""

from __future__ import annotations

from spreadsheet_report import cli

if __name__ == "__main__":
    cli.app()
