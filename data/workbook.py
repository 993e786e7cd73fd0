"""Tabular input: worksheets addressed by (row, column), values as strings.

The importer only sees WorkbookTable/SheetTable. Sources:
  - .xlsx/.xlsm  via openpyxl (data_only=True, computed values)
  - .csv         one sheet named after the file stem
  - directory    one sheet per *.csv file
  - in-memory    WorkbookTable.from_rows({...})
"""

import csv
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Iterable, Optional

from openpyxl.utils import get_column_letter

from data.errors import ExcelParsingError

_EXCEL_SUFFIXES = {".xlsx", ".xlsm"}


def cell_to_str(value: Any) -> Optional[str]:
    """Render a raw cell value the way the spreadsheet displays it.

    None stays None. Integral floats lose their ".0" so "2.0" parses as a
    choice number.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        return value.isoformat(sep=" ", timespec="seconds")
    if isinstance(value, (date, time)):
        return value.isoformat()
    # Rich-text objects from openpyxl expose the text differently
    plain_attr = getattr(value, "plain", None)
    if isinstance(plain_attr, str):
        return plain_attr
    return str(value)


class SheetTable:
    """One worksheet as a materialized grid (1-based access)."""

    def __init__(self, name: str, rows: Iterable[Iterable[Any]]) -> None:
        self.name = name
        self._rows: list[list[Any]] = [list(r) for r in rows]
        self._dimension = self._compute_dimension()

    def _compute_dimension(self) -> Optional[tuple[int, int]]:
        """(rows, columns) of the populated region, trailing blanks ignored."""
        last_row = 0
        last_col = 0
        for r_idx, row in enumerate(self._rows, 1):
            for c_idx, value in enumerate(row, 1):
                if value is None or (isinstance(value, str) and value == ""):
                    continue
                last_row = max(last_row, r_idx)
                last_col = max(last_col, c_idx)
        if last_row == 0:
            return None
        return last_row, last_col

    @property
    def dimension(self) -> Optional[tuple[int, int]]:
        """None when the sheet has no populated cell at all."""
        return self._dimension

    @property
    def max_row(self) -> int:
        return self._dimension[0] if self._dimension else 0

    @property
    def max_column(self) -> int:
        return self._dimension[1] if self._dimension else 0

    @property
    def address(self) -> Optional[str]:
        """Range address like "A1:I12"."""
        if self._dimension is None:
            return None
        rows, cols = self._dimension
        return f"A1:{get_column_letter(cols)}{rows}"

    def raw_value(self, row: int, col: int) -> Any:
        if row < 1 or col < 1 or row > len(self._rows):
            return None
        cells = self._rows[row - 1]
        if col > len(cells):
            return None
        return cells[col - 1]

    def cell_value(self, row: int, col: int) -> Optional[str]:
        """String representation of a cell, None when empty or out of range."""
        return cell_to_str(self.raw_value(row, col))

    def __repr__(self) -> str:
        return f"SheetTable({self.name!r}, {self.address or 'empty'})"


class WorkbookTable:
    """Ordered collection of named worksheets."""

    def __init__(self, sheets: Iterable[SheetTable]) -> None:
        self.sheets: list[SheetTable] = list(sheets)

    @property
    def sheet_names(self) -> list[str]:
        return [s.name for s in self.sheets]

    def get_sheet(self, name: str) -> Optional[SheetTable]:
        """Sheet with exactly this name, or None."""
        for sheet in self.sheets:
            if sheet.name == name:
                return sheet
        return None

    def __len__(self) -> int:
        return len(self.sheets)

    def __iter__(self):
        return iter(self.sheets)

    # ── Constructors ────────────────────────────────────────────────────────

    @classmethod
    def from_rows(cls, sheets: dict[str, list[list[Any]]]) -> "WorkbookTable":
        """{"SheetName": [[header, ...], [value, ...], ...]} → WorkbookTable."""
        return cls(SheetTable(name, rows) for name, rows in sheets.items())

    @classmethod
    def from_openpyxl(cls, wb) -> "WorkbookTable":
        return cls(
            SheetTable(ws.title, ws.iter_rows(values_only=True))
            for ws in wb.worksheets
        )

    @classmethod
    def open(cls, path: Path) -> "WorkbookTable":
        """Read an Excel file, a CSV file or a directory of CSV files."""
        path = Path(path)
        if not path.exists():
            raise ExcelParsingError(f"File not found: {path}")
        if path.is_dir():
            csv_files = sorted(path.glob("*.csv"))
            return cls(SheetTable(p.stem, _read_csv(p)) for p in csv_files)
        if path.stat().st_size == 0:
            raise ExcelParsingError(f"Excel file is empty: {path}")
        suffix = path.suffix.lower()
        if suffix == ".csv":
            return cls([SheetTable(path.stem, _read_csv(path))])
        if suffix in _EXCEL_SUFFIXES:
            return cls.from_openpyxl(_load_workbook(path))
        raise ExcelParsingError(
            f"Unknown file format: {path}. "
            "Expected .xlsx, .csv or a directory of CSV files."
        )


def _load_workbook(path: Path):
    import openpyxl
    from openpyxl.utils.exceptions import InvalidFileException
    from zipfile import BadZipFile

    try:
        return openpyxl.load_workbook(str(path), data_only=True)
    except (InvalidFileException, BadZipFile, KeyError, OSError) as e:
        raise ExcelParsingError(f"Could not open Excel file {path}: {e}") from e


def _read_csv(path: Path) -> list[list[Any]]:
    with open(path, encoding="utf-8-sig", newline="") as f:
        return [
            [v if v != "" else None for v in row]
            for row in csv.reader(f)
        ]
