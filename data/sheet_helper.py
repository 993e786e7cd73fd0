"""Column resolver: header row → column index, exact or by substring."""

from typing import Optional

from config.schema import ColumnRef
from data.errors import MissingColumnError
from data.workbook import SheetTable


class SheetHelper:
    """Looks up columns of one sheet by their header text (row 1).

    Exact lookups use a header → column map; a repeated header keeps the
    last column. Pattern lookups scan headers left to right and return the
    first one containing the pattern.
    """

    def __init__(self, sheet: Optional[SheetTable]) -> None:
        self._sheet = sheet
        self._column_map: dict[str, int] = {}
        self._headers: list[tuple[int, str]] = []
        if sheet is None or sheet.dimension is None:
            return

        for col in range(1, sheet.max_column + 1):
            header = sheet.cell_value(1, col)
            if header is None or not header.strip():
                continue
            self._headers.append((col, header))
            self._column_map[header] = col

    @property
    def headers(self) -> list[tuple[int, str]]:
        """(column, header) pairs in column order."""
        return list(self._headers)

    @property
    def header_names(self) -> list[str]:
        return [h for _, h in self._headers]

    # ── Lookups ──────────────────────────────────────────────────────────────

    def column_index(self, header_name: str) -> Optional[int]:
        if not header_name:
            return None
        return self._column_map.get(header_name)

    def column_index_by_pattern(self, pattern: str) -> Optional[int]:
        if not pattern:
            return None
        for col, header in self._headers:
            if pattern in header:
                return col
        return None

    def resolve(self, ref: Optional[ColumnRef]) -> Optional[int]:
        """Column index for a configured reference (exact or pattern)."""
        if ref is None:
            return None
        if ref.is_pattern:
            return self.column_index_by_pattern(ref.pattern)
        return self.column_index(ref.name)

    def require(self, ref: ColumnRef, sheet_name: Optional[str] = None) -> int:
        col = self.resolve(ref)
        if col is None:
            raise MissingColumnError(
                str(ref), self.header_names,
                sheet_name=sheet_name or (self._sheet.name if self._sheet else None),
            )
        return col

    # ── Cell access ──────────────────────────────────────────────────────────

    def cell_value(self, row: int, header_name: str) -> Optional[str]:
        col = self.column_index(header_name)
        if col is None:
            return None
        return self._sheet.cell_value(row, col)

    def cell_value_by_pattern(self, row: int, pattern: str) -> Optional[str]:
        col = self.column_index_by_pattern(pattern)
        if col is None:
            return None
        return self._sheet.cell_value(row, col)

    def cell_value_by_index(self, row: int, col: int) -> Optional[str]:
        if self._sheet is None:
            return None
        return self._sheet.cell_value(row, col)

    def value(self, row: int, ref: Optional[ColumnRef]) -> Optional[str]:
        col = self.resolve(ref)
        if col is None:
            return None
        return self._sheet.cell_value(row, col)
