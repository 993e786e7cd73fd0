"""Structural dump of a workbook for schema authoring.

Lists every sheet with its dimensions, header row and first data row.
Best effort: never validates against an EventSchema and never raises for
odd sheet contents.
"""

import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from data.workbook import SheetTable, WorkbookTable

logger = logging.getLogger(__name__)


class CellEntry(BaseModel):
    column: int          # 1-based
    value: Optional[str] = None


class SheetStructure(BaseModel):
    name: str
    dimensions: Optional[str] = None     # "A1:I12", None for empty sheets
    row_count: int = 0
    column_count: int = 0
    headers: list[CellEntry] = Field(default_factory=list)
    sample_row: list[CellEntry] = Field(default_factory=list)


class WorkbookStructure(BaseModel):
    worksheet_count: int = 0
    worksheets: list[SheetStructure] = Field(default_factory=list)

    def save_json(self, path: Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.model_dump_json(indent=2))


def _row_entries(sheet: SheetTable, row: int) -> list[CellEntry]:
    return [
        CellEntry(column=col, value=sheet.cell_value(row, col))
        for col in range(1, sheet.max_column + 1)
    ]


def _sheet_structure(sheet: SheetTable) -> SheetStructure:
    structure = SheetStructure(name=sheet.name, dimensions=sheet.address)
    if sheet.dimension is None:
        return structure
    structure.row_count = sheet.max_row
    structure.column_count = sheet.max_column
    structure.headers = _row_entries(sheet, 1)
    if sheet.max_row >= 2:
        structure.sample_row = _row_entries(sheet, 2)
    return structure


def dump_structure(workbook: WorkbookTable) -> WorkbookStructure:
    """Summarizes every sheet of the workbook."""
    result = WorkbookStructure(worksheet_count=len(workbook))
    for sheet in workbook:
        try:
            result.worksheets.append(_sheet_structure(sheet))
        except (ValueError, TypeError) as e:
            logger.warning(f"Could not describe sheet {sheet.name}: {e}")
            result.worksheets.append(SheetStructure(name=sheet.name))
    return result


def write_structure_dump(workbook: WorkbookTable, path: Path) -> WorkbookStructure:
    """Writes the structural dump as indented JSON and returns it."""
    structure = dump_structure(workbook)
    structure.save_json(path)
    logger.info(f"Structure dump written to {path} ({structure.worksheet_count} sheets)")
    return structure
