from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ─── COLUMN REFERENCES ───

class ColumnRef(BaseModel):
    """Where to find one column role in a sheet.

    Exactly one of ``name`` (exact header) or ``pattern`` (substring of the
    header) is set. Patterns let year-prefixed headers such as
    "2024WinterAdventureClassRegist_Id" match a stable text.
    """
    model_config = ConfigDict(frozen=True)

    # Exact header text
    name: str = ""
    # Substring that must appear in the header
    pattern: str = ""

    @property
    def is_pattern(self) -> bool:
        return bool(self.pattern)

    @property
    def text(self) -> str:
        """Header or pattern text, whichever is configured."""
        return self.pattern or self.name

    def __str__(self) -> str:
        return f"*{self.pattern}*" if self.is_pattern else self.name


def _coerce_columns(value):
    """Accept "Header" or {"pattern": "..."} for every column role."""
    if not isinstance(value, dict):
        return value
    result = {}
    for role, ref in value.items():
        if isinstance(ref, str):
            result[role] = {"name": ref}
        elif isinstance(ref, dict) and "pattern" in ref:
            result[role] = {"pattern": ref.get("pattern") or ""}
        else:
            result[role] = ref
    return result


class _SheetConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Exact worksheet name
    sheet_name: str
    # Column role → header reference
    columns: dict[str, ColumnRef] = Field(default_factory=dict)

    @field_validator("columns", mode="before")
    @classmethod
    def _normalize_columns(cls, v):
        return _coerce_columns(v)

    def column(self, role: str) -> Optional[ColumnRef]:
        """Configured reference for a role, or None."""
        ref = self.columns.get(role)
        if ref is None or not ref.text:
            return None
        return ref

    def get_column_name(self, role: str) -> str:
        """Header or pattern text for a role; "" when not configured."""
        ref = self.columns.get(role)
        return ref.text if ref is not None else ""


# ─── ROSTER SHEET ───

class ClassSelectionSheetConfig(_SheetConfig):
    """Roster sheet listing every attendee once.

    Roles: selection_id, first_name, last_name, email, age.
    """


# ─── PERIOD SHEETS ───

class WorkshopColumnConfig(BaseModel):
    """One workshop column of a period sheet = one duration segment."""
    model_config = ConfigDict(frozen=True)

    # Header of the column holding "Workshop (Leader)" cells
    column_name: str
    # First day of the offering, 1-based
    start_day: int = Field(ge=1)
    # Last day of the offering (inclusive)
    end_day: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_day_order(self):
        if self.start_day > self.end_day:
            raise ValueError(
                f"Workshop column '{self.column_name}': start_day {self.start_day} "
                f"> end_day {self.end_day}")
        return self


class PeriodSheetConfig(_SheetConfig):
    """One period sheet (e.g. MorningFirstPeriod).

    Roles: selection_id, choice_number, registration_id, first_name, last_name.
    """
    # Human-readable period name; derived from sheet_name when empty
    display_name: str = ""
    # Duration segments offered in this period
    workshop_columns: list[WorkshopColumnConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_columns(self):
        seen = set()
        for wc in self.workshop_columns:
            if wc.column_name in seen:
                raise ValueError(
                    f"Period sheet '{self.sheet_name}': workshop column "
                    f"'{wc.column_name}' configured twice")
            seen.add(wc.column_name)
        return self


class WorkshopFormatConfig(BaseModel):
    """Documented format of a workshop cell (display only)."""
    model_config = ConfigDict(frozen=True)

    pattern: str = "WorkshopName (LeaderName)"
    description: str = ""


# ─── EVENT SCHEMA ───

class EventSchema(BaseModel):
    """Complete, read-only description of one event's spreadsheet layout."""
    model_config = ConfigDict(frozen=True)

    event_name: str
    # Number of event days; every workshop column must fit inside
    total_days: int = Field(ge=1, description="Number of event days")
    class_selection_sheet: ClassSelectionSheetConfig
    period_sheets: list[PeriodSheetConfig] = Field(default_factory=list)
    workshop_format: WorkshopFormatConfig = Field(default_factory=WorkshopFormatConfig)

    @model_validator(mode="after")
    def validate_workshop_days(self):
        """Every duration segment lies within [1, total_days] and period
        sheet names are unique."""
        seen: set[str] = set()
        for ps in self.period_sheets:
            if ps.sheet_name in seen:
                raise ValueError(f"Period sheet '{ps.sheet_name}' configured twice")
            seen.add(ps.sheet_name)
            for wc in ps.workshop_columns:
                if wc.end_day > self.total_days:
                    raise ValueError(
                        f"Period sheet '{ps.sheet_name}', column '{wc.column_name}': "
                        f"end_day {wc.end_day} exceeds total_days {self.total_days}")
        return self

    @property
    def period_sheet_names(self) -> list[str]:
        return [ps.sheet_name for ps in self.period_sheets]

    def get_period_config(self, sheet_name: str) -> Optional[PeriodSheetConfig]:
        for ps in self.period_sheets:
            if ps.sheet_name == sheet_name:
                return ps
        return None
