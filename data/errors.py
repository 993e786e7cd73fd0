"""Error types for the registration import.

All parsing errors derive from ExcelParsingError so callers can catch the
whole family at the importer boundary. Each error carries enough context
(sheet, row, column, available alternatives) to fix the source file without
re-running with extra logging.
"""

from typing import Optional


class ExcelParsingError(Exception):
    """Catch-all parsing failure with optional location context."""

    def __init__(
        self,
        message: str,
        sheet_name: Optional[str] = None,
        row_number: Optional[int] = None,
        column_name: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.sheet_name = sheet_name
        self.row_number = row_number
        self.column_name = column_name

    def __str__(self) -> str:
        context = []
        if self.sheet_name:
            context.append(f"sheet '{self.sheet_name}'")
        if self.row_number is not None:
            context.append(f"row {self.row_number}")
        if self.column_name:
            context.append(f"column '{self.column_name}'")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class MissingSheetError(ExcelParsingError):
    """A required worksheet is not present in the workbook."""

    def __init__(self, sheet_name: str, available_sheets: list[str]) -> None:
        super().__init__(
            f"Required sheet '{sheet_name}' not found in Excel file. "
            f"Available sheets: {', '.join(available_sheets) or 'none'}",
        )
        self.sheet_name = sheet_name
        self.available_sheets = list(available_sheets)

    def __str__(self) -> str:
        return self.message


class MissingColumnError(ExcelParsingError):
    """A configured column (exact header or pattern) cannot be resolved."""

    def __init__(
        self,
        expected: str,
        available_columns: list[str],
        sheet_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Column '{expected}' not found. "
            f"Available columns: {', '.join(available_columns) or 'none'}",
            sheet_name=sheet_name,
            column_name=expected,
        )
        self.expected = expected
        self.available_columns = list(available_columns)


class InvalidWorkshopFormatError(ExcelParsingError):
    """A workshop cell does not follow the 'Workshop Name (Leader Name)' format."""

    def __init__(
        self,
        cell_value: str,
        expected_format: str = "WorkshopName (LeaderName)",
        sheet_name: Optional[str] = None,
        row_number: Optional[int] = None,
        column_name: Optional[str] = None,
    ) -> None:
        super().__init__(
            f"Workshop cell '{cell_value}' does not match format '{expected_format}'",
            sheet_name=sheet_name,
            row_number=row_number,
            column_name=column_name,
        )
        self.cell_value = cell_value
        self.expected_format = expected_format


class SchemaValidationError(ExcelParsingError):
    """The event schema cannot be loaded or is invalid."""

    def __init__(self, message: str, schema_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.schema_name = schema_name


class MissingResourceError(SchemaValidationError):
    """The schema resource file does not exist."""

    def __init__(self, resource_name: str) -> None:
        super().__init__(
            f"Could not find schema resource: {resource_name}",
            schema_name=resource_name,
        )
        self.resource_name = resource_name
