"""Tests for the registration import (roster + period sheets → workshops)."""

import json
import logging
from pathlib import Path

import openpyxl
import pytest

from config.manager import load_default_schema
from config.schema import EventSchema
from data.errors import ExcelParsingError, MissingSheetError
from data.excel_import import ExcelImporter, import_from_excel
from data.structure_dump import dump_structure, write_structure_dump
from data.workbook import SheetTable, WorkbookTable
from models.workshop import WorkshopDuration

ROSTER_HEADER = ["ClassSelection_Id", "Name_First", "Name_Last", "Email", "Age"]
PERIOD_HEADER = [
    "ClassSelection_Id",
    "2025WinterAdventureClassRegist_Id",
    "AttendeeName_First",
    "AttendeeName_Last",
    "ChoiceNumber",
    "_4dayClasses",
    "_2dayClassesFirst2Days",
    "_2dayClassesSecond2Days",
]


def _roster(*rows) -> list[list]:
    return [ROSTER_HEADER, *[list(r) for r in rows]]


def _period(*rows) -> list[list]:
    return [PERIOD_HEADER, *[list(r) for r in rows]]


def _make_workbook() -> WorkbookTable:
    """Two attendees, both choosing Pottery in the morning (choice 1 and 2)."""
    return WorkbookTable.from_rows({
        "ClassSelection": _roster(
            ["SEL001", "Alice", "Johnson", "alice@example.org", 34],
            ["SEL002", "Bob", "Lee", "bob@example.org", 12],
        ),
        "MorningFirstPeriod": _period(
            ["SEL001", 101, "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None],
            ["SEL002", 102, "Bob", "Lee", 2, "Pottery (Jane Doe)", None, None],
        ),
    })


# ─── END TO END ───────────────────────────────────────────────────────────────

class TestParse:
    def test_two_attendees_one_workshop(self):
        workshops = ExcelImporter().parse(_make_workbook())

        assert len(workshops) == 1
        w = workshops[0]
        assert w.name == "Pottery"
        assert w.leader == "Jane Doe"
        assert w.duration == WorkshopDuration(start_day=1, end_day=4)
        assert w.period.sheet_name == "MorningFirstPeriod"
        assert w.period.display_name == "Morning First Period"

        by_id = {s.class_selection_id: s for s in w.selections}
        assert set(by_id) == {"SEL001", "SEL002"}
        assert by_id["SEL001"].choice_number == 1
        assert by_id["SEL002"].choice_number == 2
        assert by_id["SEL001"].full_name == "Alice Johnson"
        assert by_id["SEL002"].registration_id == 102
        assert [s.class_selection_id for s in w.first_choices] == ["SEL001"]

    def test_selections_carry_workshop_duration(self):
        workshops = ExcelImporter().parse(_make_workbook())
        for w in workshops:
            for s in w.selections:
                assert s.duration == w.duration
                assert s.workshop_name == w.name

    def test_missing_period_sheets_are_skipped(self):
        importer = ExcelImporter()
        importer.parse(_make_workbook())
        assert importer.report.skipped_periods == ["MorningSecondPeriod", "AfternoonPeriod"]
        assert importer.report.attendee_count == 2
        assert importer.report.workshop_count == 1
        assert importer.report.selection_count == 2
        assert importer.report.event_name == "Winter Adventure"

    def test_same_name_different_duration_is_separate(self):
        wb = WorkbookTable.from_rows({
            "ClassSelection": _roster(["SEL001", "Alice", "Johnson", "", ""]),
            "MorningFirstPeriod": _period(
                ["SEL001", 1, "Alice", "Johnson", 1, None, "Pottery (Jane Doe)", "Pottery (Jane Doe)"],
            ),
        })
        workshops = ExcelImporter().parse(wb)
        assert [(w.duration.start_day, w.duration.end_day) for w in workshops] == [(1, 2), (3, 4)]

    def test_same_workshop_in_two_periods_is_separate(self):
        row = ["SEL001", 1, "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None]
        wb = WorkbookTable.from_rows({
            "ClassSelection": _roster(["SEL001", "Alice", "Johnson", "", ""]),
            "MorningFirstPeriod": _period(row),
            "AfternoonPeriod": _period(row),
        })
        workshops = ExcelImporter().parse(wb)
        assert len(workshops) == 2
        assert {w.period.sheet_name for w in workshops} == {"MorningFirstPeriod", "AfternoonPeriod"}

    def test_workshop_keys_are_unique(self):
        wb = WorkbookTable.from_rows({
            "ClassSelection": _roster(
                ["SEL001", "Alice", "Johnson", "", ""],
                ["SEL002", "Bob", "Lee", "", ""],
                ["SEL003", "Cara", "Diaz", "", ""],
            ),
            "MorningFirstPeriod": _period(
                ["SEL001", 1, "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None],
                ["SEL002", 2, "Bob", "Lee", 1, "Pottery (John Roe)", None, None],
                ["SEL003", 3, "Cara", "Diaz", 1, "Pottery (Jane Doe)", None, None],
            ),
        })
        workshops = ExcelImporter().parse(wb)
        keys = [w.key for w in workshops]
        assert len(keys) == len(set(keys)) == 2
        assert sum(len(w.selections) for w in workshops) == 3

    def test_parse_is_repeatable(self):
        importer = ExcelImporter()
        wb = _make_workbook()
        first = importer.parse(wb)
        second = importer.parse(wb)
        assert [w.model_dump() for w in first] == [w.model_dump() for w in second]
        assert importer.report.selection_count == 2

    def test_no_worksheets_is_fatal(self):
        with pytest.raises(ExcelParsingError, match="no worksheets"):
            ExcelImporter().parse(WorkbookTable([]))

    def test_missing_roster_sheet(self):
        wb = WorkbookTable.from_rows({"MorningFirstPeriod": _period()})
        with pytest.raises(MissingSheetError) as exc_info:
            ExcelImporter().parse(wb)
        assert exc_info.value.sheet_name == "ClassSelection"
        assert exc_info.value.available_sheets == ["MorningFirstPeriod"]

    def test_empty_period_sheet(self):
        wb = WorkbookTable.from_rows({
            "ClassSelection": _roster(["SEL001", "Alice", "Johnson", "", ""]),
            "MorningFirstPeriod": [],
        })
        assert ExcelImporter().parse(wb) == []

    def test_no_attendees_logs_warning(self, caplog):
        wb = WorkbookTable.from_rows({
            "ClassSelection": [ROSTER_HEADER],
            "MorningFirstPeriod": _period(
                ["SEL009", 1, "Dana", "Fox", 1, "Pottery (Jane Doe)", None, None],
            ),
        })
        with caplog.at_level(logging.WARNING, logger="data.excel_import"):
            workshops = ExcelImporter().parse(wb)
        assert "No attendees found" in caplog.text
        # Names come from the period sheet itself
        assert workshops[0].selections[0].full_name == "Dana Fox"


# ─── ROSTER ───────────────────────────────────────────────────────────────────

class TestLoadAttendees:
    def _load(self, *rows):
        wb = WorkbookTable.from_rows({"ClassSelection": _roster(*rows)})
        importer = ExcelImporter()
        return importer.load_attendees(wb, load_default_schema()), importer

    def test_attendee_fields(self):
        attendees, _ = self._load(["SEL001", "Alice", "Johnson", "alice@example.org", 34])
        a = attendees["SEL001"]
        assert a.full_name == "Alice Johnson"
        assert a.email == "alice@example.org"
        assert a.age == "34"

    def test_later_duplicate_wins(self):
        attendees, _ = self._load(
            ["SEL001", "Alice", "Johnson", "", ""],
            ["SEL001", "Alicia", "Johnson", "", ""],
        )
        assert len(attendees) == 1
        assert attendees["SEL001"].first_name == "Alicia"

    def test_fallback_id(self):
        attendees, _ = self._load(["", "Mary Ann", "Smith", "", ""])
        assert "MaryAnnSmith" in attendees
        assert attendees["MaryAnnSmith"].class_selection_id == "MaryAnnSmith"

    def test_blank_rows_skipped(self):
        attendees, _ = self._load(
            ["SEL001", "Alice", "Johnson", "", ""],
            ["SEL002", None, None, "ghost@example.org", ""],
            [None, None, None, None, None],
        )
        assert list(attendees) == ["SEL001"]

    def test_missing_name_columns(self):
        wb = WorkbookTable.from_rows({
            "ClassSelection": [["ClassSelection_Id", "Email"], ["SEL001", "a@example.org"]],
        })
        importer = ExcelImporter()
        attendees = importer.load_attendees(wb, load_default_schema())
        assert attendees == {}
        assert any("Name_First / Name_Last" in msg and "Email" in msg
                   for msg in importer.report.warnings)

    def test_renamed_name_columns_still_parse_periods(self):
        wb = WorkbookTable.from_rows({
            "ClassSelection": [
                ["ClassSelection_Id", "FirstName2026", "LastName2026", "Email", "Age"],
                ["SEL001", "Alice", "Johnson", "", ""],
            ],
            "MorningFirstPeriod": _period(
                ["SEL001", 1, "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None],
            ),
        })
        importer = ExcelImporter()
        workshops = importer.parse(wb)
        assert len(workshops) == 1
        assert workshops[0].selections[0].full_name == "Alice Johnson"
        assert importer.report.attendee_count == 0
        assert any("FirstName2026" in msg for msg in importer.report.warnings)

    def test_failing_row_is_skipped(self):
        class _BrokenCell:
            def __str__(self):
                raise ValueError("unreadable cell")

        wb = WorkbookTable.from_rows({"ClassSelection": _roster(
            ["SEL001", _BrokenCell(), "Johnson", "", ""],
            ["SEL002", "Bob", "Lee", "", ""],
        )})
        importer = ExcelImporter()
        attendees = importer.load_attendees(wb, load_default_schema())
        assert list(attendees) == ["SEL002"]
        assert any("row 2" in msg for msg in importer.report.warnings)

    def test_empty_roster_sheet(self):
        wb = WorkbookTable.from_rows({"ClassSelection": []})
        assert ExcelImporter().load_attendees(wb, load_default_schema()) == {}


# ─── WORKSHOP COLLECTOR ───────────────────────────────────────────────────────

class TestCollectWorkshops:
    def _collect(self, *rows, attendees=None):
        importer = ExcelImporter(load_default_schema())
        sheet = SheetTable("MorningFirstPeriod", _period(*rows))
        config = load_default_schema().get_period_config("MorningFirstPeriod")
        return importer.collect_workshops(sheet, config, attendees or {}), importer

    def test_unparseable_choice_number_defaults_to_one(self):
        workshops, _ = self._collect(
            ["SEL001", 1, "Alice", "Johnson", "ABC", "Pottery (Jane Doe)", None, None],
        )
        assert workshops[0].selections[0].choice_number == 1

    def test_blank_choice_number_defaults_to_one(self):
        workshops, _ = self._collect(
            ["SEL001", 1, "Alice", "Johnson", None, "Pottery (Jane Doe)", None, None],
        )
        assert workshops[0].selections[0].choice_number == 1

    def test_float_choice_number(self):
        workshops, _ = self._collect(
            ["SEL001", 1, "Alice", "Johnson", 2.0, "Pottery (Jane Doe)", None, None],
        )
        assert workshops[0].selections[0].choice_number == 2

    def test_unparseable_registration_id(self):
        workshops, _ = self._collect(
            ["SEL001", "n/a", "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None],
        )
        assert workshops[0].selections[0].registration_id == 0

    def test_malformed_cell_skips_only_that_cell(self):
        workshops, importer = self._collect(
            ["SEL001", 1, "Alice", "Johnson", 1, "(Jane Doe)", "Knitting (Sam Poe)", None],
            ["SEL002", 2, "Bob", "Lee", 1, "Pottery (Jane Doe)", None, None],
        )
        assert sorted(w.name for w in workshops) == ["Knitting", "Pottery"]
        assert any("(Jane Doe)" in msg for msg in importer.report.warnings)

    def test_cell_without_leader(self):
        workshops, _ = self._collect(
            ["SEL001", 1, "Alice", "Johnson", 1, "Open Studio", None, None],
        )
        assert workshops[0].name == "Open Studio"
        assert workshops[0].leader == ""

    def test_row_without_identity_is_skipped(self):
        workshops, importer = self._collect(
            [None, 1, None, None, 1, "Pottery (Jane Doe)", None, None],
            ["SEL002", 2, "Bob", "Lee", 1, "Pottery (Jane Doe)", None, None],
        )
        assert len(workshops) == 1
        assert [s.class_selection_id for s in workshops[0].selections] == ["SEL002"]
        assert importer.report.warnings

    def test_unknown_id_without_names_uses_id_as_name(self):
        workshops, _ = self._collect(
            ["SEL404", 1, None, None, 1, "Pottery (Jane Doe)", None, None],
        )
        selection = workshops[0].selections[0]
        assert selection.class_selection_id == "SEL404"
        assert selection.full_name == "SEL404"

    def test_roster_names_take_precedence(self):
        from models.attendee import Attendee
        attendees = {"SEL001": Attendee(
            class_selection_id="SEL001", first_name="Alicia", last_name="Johnson")}
        workshops, _ = self._collect(
            ["SEL001", 1, "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None],
            attendees=attendees,
        )
        assert workshops[0].selections[0].first_name == "Alicia"

    def test_fallback_id_matches_roster(self):
        from models.attendee import Attendee
        attendees = {"MaryAnnSmith": Attendee(
            class_selection_id="MaryAnnSmith", first_name="Mary Ann", last_name="Smith",
            email="mary@example.org")}
        workshops, _ = self._collect(
            [None, 1, "Mary Ann", "Smith", 1, "Pottery (Jane Doe)", None, None],
            attendees=attendees,
        )
        assert workshops[0].selections[0].class_selection_id == "MaryAnnSmith"

    def test_duplicate_selection_is_kept_with_warning(self):
        workshops, importer = self._collect(
            ["SEL001", 1, "Alice", "Johnson", 1, "Pottery (Jane Doe)", None, None],
            ["SEL001", 2, "Alice", "Johnson", 1, "Knitting (Sam Poe)", None, None],
        )
        assert sum(len(w.selections) for w in workshops) == 2
        assert any("SEL001" in msg and "both selections are kept" in msg
                   for msg in importer.report.warnings)

    def test_missing_workshop_column_warns(self):
        importer = ExcelImporter(load_default_schema())
        sheet = SheetTable("MorningFirstPeriod", [
            ["ClassSelection_Id", "ChoiceNumber", "_4dayClasses"],
            ["SEL001", 1, "Pottery (Jane Doe)"],
        ])
        config = load_default_schema().get_period_config("MorningFirstPeriod")
        workshops = importer.collect_workshops(sheet, config, {})
        assert len(workshops) == 1
        assert any("_2dayClassesFirst2Days" in msg for msg in importer.report.warnings)


# ─── FILES ────────────────────────────────────────────────────────────────────

class TestImportFromFile:
    def _write_xlsx(self, path: Path) -> Path:
        wb = openpyxl.Workbook()
        roster = wb.active
        roster.title = "ClassSelection"
        roster.append(ROSTER_HEADER)
        roster.append(["SEL001", "Alice", "Johnson", "alice@example.org", 34])
        roster.append(["SEL002", "Bob", "Lee", "bob@example.org", 12])
        period = wb.create_sheet("AfternoonPeriod")
        period.append(PERIOD_HEADER)
        period.append(["SEL001", 201, "Alice", "Johnson", 1, None, "Snowshoe Hike (Jane Doe and John Smith)", None])
        period.append(["SEL002", 202, "Bob", "Lee", 1, None, "Snowshoe Hike (Jane Doe and John Smith)", None])
        wb.save(str(path))
        return path

    def test_xlsx(self, tmp_path: Path):
        path = self._write_xlsx(tmp_path / "registrations.xlsx")
        workshops, report = import_from_excel(path)
        assert len(workshops) == 1
        w = workshops[0]
        assert w.leader == "Jane Doe and John Smith"
        assert w.duration == WorkshopDuration(start_day=1, end_day=2)
        assert w.period.display_name == "Afternoon Period"
        assert [s.registration_id for s in w.selections] == [201, 202]
        assert report.skipped_periods == ["MorningFirstPeriod", "MorningSecondPeriod"]

    def test_csv_directory(self, tmp_path: Path):
        (tmp_path / "ClassSelection.csv").write_text(
            ",".join(ROSTER_HEADER) + "\nSEL001,Alice,Johnson,,\n", encoding="utf-8")
        (tmp_path / "MorningSecondPeriod.csv").write_text(
            ",".join(PERIOD_HEADER) + "\nSEL001,7,Alice,Johnson,1,,,Pottery (Jane Doe)\n",
            encoding="utf-8")
        workshops, _ = import_from_excel(tmp_path)
        assert len(workshops) == 1
        assert workshops[0].duration == WorkshopDuration(start_day=3, end_day=4)

    def test_custom_schema(self, tmp_path: Path):
        schema = EventSchema.model_validate({
            "event_name": "Spring Camp",
            "total_days": 2,
            "class_selection_sheet": {
                "sheet_name": "Roster",
                "columns": {"selection_id": "Id", "first_name": "First", "last_name": "Last"},
            },
            "period_sheets": [{
                "sheet_name": "Morning",
                "columns": {"selection_id": "Id", "choice_number": "Choice"},
                "workshop_columns": [{"column_name": "Class", "start_day": 1, "end_day": 2}],
            }],
        })
        wb = WorkbookTable.from_rows({
            "Roster": [["Id", "First", "Last"], ["A1", "Eve", "Ng"]],
            "Morning": [["Id", "Choice", "Class"], ["A1", 1, "Canoeing (Lou Bay)"]],
        })
        importer = ExcelImporter(schema)
        workshops = importer.parse(wb)
        assert workshops[0].selections[0].full_name == "Eve Ng"
        assert importer.report.event_name == "Spring Camp"
        assert importer.report.is_clean

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ExcelParsingError):
            import_from_excel(tmp_path / "missing.xlsx")


# ─── STRUCTURE DUMP ───────────────────────────────────────────────────────────

class TestStructureDump:
    def test_dump(self):
        structure = dump_structure(_make_workbook())
        assert structure.worksheet_count == 2
        roster = structure.worksheets[0]
        assert roster.name == "ClassSelection"
        assert roster.dimensions == "A1:E3"
        assert roster.row_count == 3
        assert [h.value for h in roster.headers] == ROSTER_HEADER
        assert roster.sample_row[0].value == "SEL001"
        assert roster.sample_row[4].value == "34"

    def test_dump_empty_sheet(self):
        structure = dump_structure(WorkbookTable.from_rows({"Empty": []}))
        sheet = structure.worksheets[0]
        assert sheet.dimensions is None
        assert sheet.headers == []
        assert sheet.sample_row == []

    def test_write_dump(self, tmp_path: Path):
        path = tmp_path / "out" / "structure.json"
        write_structure_dump(_make_workbook(), path)
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["worksheet_count"] == 2
        assert data["worksheets"][1]["name"] == "MorningFirstPeriod"
        assert data["worksheets"][1]["headers"][1]["value"] == "2025WinterAdventureClassRegist_Id"
