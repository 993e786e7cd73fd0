"""Import of registration exports: roster + period sheets → workshops.

Roster sheet:   one row per attendee → {class_selection_id: Attendee}
Period sheets:  one row per registration; every configured workshop column
                is one duration segment. Selections with the same
                (period, name, leader, duration) collapse into one Workshop.

Column layout comes entirely from the EventSchema. Recovery happens at the
narrowest scope: a bad cell skips that cell, a bad row skips that row, a
missing period sheet skips that period.
"""

import logging
from pathlib import Path
from typing import Optional

from config.manager import load_default_schema
from config.schema import EventSchema, PeriodSheetConfig
from data.errors import (
    ExcelParsingError,
    InvalidWorkshopFormatError,
    MissingSheetError,
)
from data.sheet_helper import SheetHelper
from data.workbook import SheetTable, WorkbookTable
from data.workshop_format import parse_workshop_cell
from models.attendee import Attendee
from models.import_report import ImportReport
from models.period import Period
from models.workshop import Workshop, WorkshopDuration, WorkshopKey, WorkshopSelection

logger = logging.getLogger(__name__)

# What a single malformed row or cell can raise
_ROW_ERRORS = (ExcelParsingError, ValueError, TypeError)


def _text(value: Optional[str]) -> str:
    return value.strip() if value is not None else ""


def _parse_int(raw: Optional[str], default: int) -> int:
    """Integer cell value; default when blank or not a number."""
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _fallback_id(first_name: str, last_name: str) -> str:
    """Synthesized attendee key when the export has no selection id."""
    return f"{first_name}{last_name}".replace(" ", "")


class ExcelImporter:
    """Builds the workshop roster from a registration workbook.

    One importer may be reused for several files but not concurrently:
    parse() rebuilds all per-run state (attendees, workshops, report).
    """

    def __init__(self, schema: Optional[EventSchema] = None) -> None:
        self.schema = schema
        self.report = ImportReport()

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.report.warnings.append(message)

    def _load_schema(self) -> EventSchema:
        if self.schema is None:
            self.schema = load_default_schema()
        return self.schema

    # ── Roster ──────────────────────────────────────────────────────────────

    def load_attendees(
        self, workbook: WorkbookTable, schema: EventSchema
    ) -> dict[str, Attendee]:
        """Reads the roster sheet into {class_selection_id: Attendee}.

        Rows without first and last name are skipped (blank trailing rows).
        A blank selection id is replaced by FirstName+LastName without
        spaces. Duplicate ids: the later row wins. Without any resolvable
        name column the roster is empty (warning), as is an empty sheet.

        Raises:
            MissingSheetError: roster sheet not in the workbook.
        """
        sheet_config = schema.class_selection_sheet
        sheet = workbook.get_sheet(sheet_config.sheet_name)
        if sheet is None:
            available = workbook.sheet_names
            logger.warning(
                f"ClassSelection sheet '{sheet_config.sheet_name}' not found. "
                f"Available sheets: {', '.join(available)}")
            raise MissingSheetError(sheet_config.sheet_name, available)

        attendees: dict[str, Attendee] = {}
        if sheet.dimension is None:
            logger.warning(f"ClassSelection sheet '{sheet.name}' is empty")
            return attendees

        helper = SheetHelper(sheet)
        id_ref = sheet_config.column("selection_id")
        first_ref = sheet_config.column("first_name")
        last_ref = sheet_config.column("last_name")
        email_ref = sheet_config.column("email")
        age_ref = sheet_config.column("age")

        if sheet.max_row >= 2:
            if helper.resolve(first_ref) is None and helper.resolve(last_ref) is None:
                expected = " / ".join(
                    str(r) for r in (first_ref, last_ref) if r is not None) or "first_name / last_name"
                self._warn(
                    f"Sheet '{sheet.name}': name columns '{expected}' not found, "
                    f"no attendees loaded. Available columns: {', '.join(helper.header_names)}")
                return attendees
            if helper.resolve(id_ref) is None:
                self._warn(
                    f"Sheet '{sheet.name}': selection id column "
                    f"'{id_ref or 'selection_id'}' not found, using name-based ids")

        for row in range(2, sheet.max_row + 1):
            try:
                selection_id = _text(helper.value(row, id_ref))
                first_name = _text(helper.value(row, first_ref))
                last_name = _text(helper.value(row, last_ref))

                if not first_name and not last_name:
                    continue

                if not selection_id:
                    selection_id = _fallback_id(first_name, last_name)
                    logger.debug(
                        f"Generated fallback ID for attendee: "
                        f"{first_name} {last_name} -> {selection_id}")

                attendees[selection_id] = Attendee(
                    class_selection_id=selection_id,
                    first_name=first_name,
                    last_name=last_name,
                    email=_text(helper.value(row, email_ref)),
                    age=_text(helper.value(row, age_ref)),
                )
            except _ROW_ERRORS as e:
                self._warn(f"Failed to parse attendee data at row {row} in {sheet.name}: {e}")

        return attendees

    # ── Period sheets ───────────────────────────────────────────────────────

    def collect_workshops(
        self,
        sheet: SheetTable,
        period_config: PeriodSheetConfig,
        attendees: dict[str, Attendee],
    ) -> list[Workshop]:
        """Aggregates the selections of one period sheet into workshops.

        Returns the workshops in first-seen order. An empty sheet yields [].

        Raises:
            ExcelParsingError: the sheet as a whole could not be processed.
        """
        if sheet.dimension is None:
            logger.debug(f"Sheet {sheet.name} has no populated cells (empty sheet)")
            return []

        try:
            helper = SheetHelper(sheet)
            period = Period.from_sheet_name(
                period_config.sheet_name, period_config.display_name)

            missing = [
                wc.column_name for wc in period_config.workshop_columns
                if helper.column_index(wc.column_name) is None
            ]
            if missing:
                self._warn(
                    f"Sheet '{sheet.name}': workshop columns not found: {', '.join(missing)}")

            workshops: dict[WorkshopKey, Workshop] = {}
            # (selection_id, choice_number) → first row, to spot double registrations
            seen: dict[tuple[str, int], int] = {}

            for row in range(2, sheet.max_row + 1):
                try:
                    self._collect_row(
                        helper, sheet.name, row, period, period_config,
                        attendees, workshops, seen)
                except _ROW_ERRORS as e:
                    self._warn(f"Failed to process row {row} in sheet {sheet.name}: {e}")

            return list(workshops.values())
        except ExcelParsingError:
            raise
        except Exception as e:
            logger.error(f"Failed to collect workshops from sheet {sheet.name}: {e}")
            raise ExcelParsingError(
                f"Failed to collect workshops from sheet '{sheet.name}'. "
                "Please verify the sheet structure.",
                sheet_name=sheet.name,
            ) from e

    def _collect_row(
        self,
        helper: SheetHelper,
        sheet_name: str,
        row: int,
        period: Period,
        period_config: PeriodSheetConfig,
        attendees: dict[str, Attendee],
        workshops: dict[WorkshopKey, Workshop],
        seen: dict[tuple[str, int], int],
    ) -> None:
        selection_id = _text(helper.value(row, period_config.column("selection_id")))
        choice_number = _parse_int(
            helper.value(row, period_config.column("choice_number")), default=1)
        if choice_number < 1:
            choice_number = 1
        registration_id = _parse_int(
            helper.value(row, period_config.column("registration_id")), default=0)

        attendee: Optional[Attendee] = None
        produced = 0

        for wc in period_config.workshop_columns:
            try:
                cell = helper.cell_value(row, wc.column_name)
                if cell is None or not cell.strip():
                    continue

                listing = parse_workshop_cell(cell)
                if not listing.is_valid:
                    logger.debug(
                        f"Skipping empty workshop name at row {row}, column {wc.column_name}")
                    raise InvalidWorkshopFormatError(
                        cell, sheet_name=sheet_name, row_number=row,
                        column_name=wc.column_name)

                if attendee is None:
                    attendee = self._resolve_attendee(
                        helper, sheet_name, row, period_config, selection_id, attendees)

                duration = WorkshopDuration(start_day=wc.start_day, end_day=wc.end_day)
                selection = WorkshopSelection(
                    class_selection_id=attendee.class_selection_id,
                    workshop_name=listing.name,
                    first_name=attendee.first_name,
                    last_name=attendee.last_name,
                    full_name=attendee.full_name,
                    choice_number=choice_number,
                    duration=duration,
                    registration_id=registration_id,
                )

                key = WorkshopKey(
                    period=period.sheet_name,
                    name=listing.name,
                    leader=listing.leader,
                    start_day=duration.start_day,
                    end_day=duration.end_day,
                )
                existing = workshops.get(key)
                if existing is not None:
                    existing.selections.append(selection)
                else:
                    workshops[key] = Workshop(
                        name=listing.name,
                        leader=listing.leader,
                        period=period,
                        duration=duration,
                        selections=[selection],
                    )
                produced += 1
            except _ROW_ERRORS as e:
                self._warn(
                    f"Failed to parse workshop data at row {row}, column "
                    f"{wc.column_name} in sheet {sheet_name}: {e}")

        if produced and selection_id:
            dup_key = (selection_id, choice_number)
            first_row = seen.get(dup_key)
            if first_row is None:
                seen[dup_key] = row
            else:
                self._warn(
                    f"Sheet '{sheet_name}': selection id {selection_id} with choice "
                    f"{choice_number} appears in rows {first_row} and {row}; "
                    "both selections are kept")

    def _resolve_attendee(
        self,
        helper: SheetHelper,
        sheet_name: str,
        row: int,
        period_config: PeriodSheetConfig,
        selection_id: str,
        attendees: dict[str, Attendee],
    ) -> Attendee:
        """Roster attendee for this row, or one built from the row itself."""
        first_name = _text(helper.value(row, period_config.column("first_name")))
        last_name = _text(helper.value(row, period_config.column("last_name")))
        lookup_id = selection_id or _fallback_id(first_name, last_name)
        if not lookup_id:
            raise ExcelParsingError(
                "Row has neither a selection id nor attendee names",
                sheet_name=sheet_name, row_number=row)

        attendee = attendees.get(lookup_id)
        if attendee is not None:
            return attendee

        logger.debug(f"Attendee {lookup_id} not in roster, using names from {sheet_name} row {row}")
        return Attendee(
            class_selection_id=lookup_id,
            first_name=first_name,
            last_name=last_name,
        )

    # ── Full import ─────────────────────────────────────────────────────────

    def parse(self, workbook: WorkbookTable) -> list[Workshop]:
        """Parses all period sheets of a workbook into workshops.

        Raises:
            SchemaValidationError: schema missing or invalid.
            MissingSheetError:     roster sheet missing.
            ExcelParsingError:     empty workbook or any other fatal error.
        """
        if workbook is None or len(workbook) == 0:
            raise ExcelParsingError("Excel file contains no worksheets")
        logger.debug(f"Workbook loaded with {len(workbook)} worksheets")

        schema = self._load_schema()
        self.report = ImportReport(event_name=schema.event_name)
        logger.info(f"Loaded schema for event: {schema.event_name}")

        try:
            attendees = self.load_attendees(workbook, schema)
            self.report.attendee_count = len(attendees)
            logger.info(
                f"Loaded {len(attendees)} attendees from "
                f"{schema.class_selection_sheet.sheet_name} sheet")
            if not attendees:
                logger.warning(
                    "No attendees found in ClassSelection sheet - "
                    "workshop parsing may be incomplete")

            all_workshops: list[Workshop] = []
            for period_config in schema.period_sheets:
                sheet = workbook.get_sheet(period_config.sheet_name)
                if sheet is None:
                    logger.warning(f"Could not find period sheet: {period_config.sheet_name}")
                    self.report.skipped_periods.append(period_config.sheet_name)
                    continue

                logger.debug(f"Processing period sheet: {sheet.name}")
                workshops = self.collect_workshops(sheet, period_config, attendees)
                all_workshops.extend(workshops)
                logger.debug(f"Found {len(workshops)} workshops in {sheet.name}")
        except ExcelParsingError:
            raise
        except Exception as e:
            logger.error(f"Failed to parse workshops: {e}")
            raise ExcelParsingError(
                "Failed to parse workshops. Please verify the Excel file "
                "structure matches the expected schema."
            ) from e

        self.report.workshop_count = len(all_workshops)
        self.report.selection_count = sum(len(w.selections) for w in all_workshops)
        logger.info(f"Total workshops parsed: {len(all_workshops)}")
        return all_workshops

    def parse_file(self, path: Path) -> list[Workshop]:
        """Opens an .xlsx/.csv file (or CSV directory) and parses it."""
        path = Path(path)
        if path.is_file():
            logger.info(f"Starting Excel import: {path} ({path.stat().st_size} bytes)")
        else:
            logger.info(f"Starting import: {path}")
        workshops = self.parse(WorkbookTable.open(path))
        logger.info(f"Excel import completed successfully, {len(workshops)} workshops parsed")
        return workshops


def import_from_excel(
    path: Path, schema: Optional[EventSchema] = None
) -> tuple[list[Workshop], ImportReport]:
    """Imports workshops from a registration export.

    Args:
        path:   Excel file (.xlsx), CSV file or directory of CSV files
        schema: Event schema; the bundled schema when None

    Returns:
        (workshops, ImportReport)

    Raises:
        ExcelParsingError: On fatal import errors.
    """
    importer = ExcelImporter(schema)
    workshops = importer.parse_file(path)
    return workshops, importer.report
