"""Data models for workshops and workshop selections (Pydantic v2)."""

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from models.period import Period


class WorkshopDuration(BaseModel):
    """Day range a workshop offering runs across (inclusive).

    Immutable (frozen=True) so two separately built durations compare equal
    and can be used as dict keys.
    """
    model_config = ConfigDict(frozen=True)

    start_day: int = Field(ge=1)
    end_day: int = Field(ge=1)

    @model_validator(mode="after")
    def _check_order(self):
        if self.start_day > self.end_day:
            raise ValueError(
                f"start_day ({self.start_day}) > end_day ({self.end_day})")
        return self

    @property
    def number_of_days(self) -> int:
        return self.end_day - self.start_day + 1

    @property
    def description(self) -> str:
        """Display text: "Day 2" for single-day offerings, otherwise "Days 1-4"."""
        if self.number_of_days == 1:
            return f"Day {self.start_day}"
        return f"Days {self.start_day}-{self.end_day}"

    def __str__(self) -> str:
        return self.description


class WorkshopSelection(BaseModel):
    """One attendee's registration into one workshop offering."""

    class_selection_id: str
    workshop_name: str
    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    choice_number: int = 1        # 1 = enrolled / first choice, ≥2 = backup
    duration: WorkshopDuration
    registration_id: int = 0      # 0 when the export had no usable id

    @property
    def is_first_choice(self) -> bool:
        return self.choice_number <= 1


class WorkshopKey(NamedTuple):
    """Identity of a workshop offering.

    Same name and leader in a different period or with a different duration
    is a different workshop.
    """

    period: str
    name: str
    leader: str
    start_day: int
    end_day: int


class Workshop(BaseModel):
    """A unique offering with all selections that reference it."""

    name: str
    leader: str = ""
    period: Period
    duration: WorkshopDuration
    selections: list[WorkshopSelection] = Field(default_factory=list)

    @property
    def key(self) -> WorkshopKey:
        return WorkshopKey(
            period=self.period.sheet_name,
            name=self.name,
            leader=self.leader,
            start_day=self.duration.start_day,
            end_day=self.duration.end_day,
        )

    @property
    def first_choices(self) -> list[WorkshopSelection]:
        """Selections with choice number 1 (the enrolled participants)."""
        return [s for s in self.selections if s.is_first_choice]

    @property
    def backups(self) -> list[WorkshopSelection]:
        """Selections with choice number ≥ 2 (alternates)."""
        return [s for s in self.selections if not s.is_first_choice]

    def __str__(self) -> str:
        leader = f" ({self.leader})" if self.leader else ""
        return f"{self.name}{leader}, {self.period}, {self.duration}"
