"""Check of the daily timetable before schedules are rendered.

Independent of the registration import: works only on the timeslot list
it is given.
"""

import logging
from datetime import time
from pathlib import Path

from pydantic import BaseModel, ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from data.errors import MissingResourceError, SchemaValidationError
from models.timeslot import TimeSlotDto

logger = logging.getLogger(__name__)


class TimeslotValidationResult(BaseModel):
    has_overlapping: bool = False
    has_unconfigured: bool = False    # a period without start or end time

    @property
    def is_valid(self) -> bool:
        return not self.has_overlapping and not self.has_unconfigured

    def print_rich(self) -> None:
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        status = (
            "[bold green]✓ VALID[/bold green]"
            if self.is_valid
            else "[bold red]✗ INVALID[/bold red]"
        )
        lines = [status]
        if self.has_unconfigured:
            lines.append("[red]• A period has no start or end time[/red]")
        if self.has_overlapping:
            lines.append("[red]• Timeslots overlap or share a start time[/red]")
        console.print(Panel("\n".join(lines), title="Timeslot check", border_style="cyan"))


class TimeslotValidator:
    """Flags unconfigured periods and overlapping timeslots."""

    def validate(self, timeslots: list[TimeSlotDto]) -> TimeslotValidationResult:
        ordered = sorted(
            timeslots,
            key=lambda t: t.start_time if t.start_time is not None else time.max,
        )

        has_unconfigured = any(
            t.is_period and (t.start_time is None or t.end_time is None)
            for t in ordered
        )

        has_overlapping = False
        for current, following in zip(ordered, ordered[1:]):
            if (
                current.start_time is not None
                and following.start_time is not None
                and current.start_time == following.start_time
            ):
                has_overlapping = True
                break
            if (
                current.end_time is not None
                and following.start_time is not None
                and current.end_time > following.start_time
            ):
                has_overlapping = True
                break

        if has_overlapping:
            logger.debug("Timeslot overlap detected")
        if has_unconfigured:
            logger.debug("Period timeslot without start or end time")
        return TimeslotValidationResult(
            has_overlapping=has_overlapping,
            has_unconfigured=has_unconfigured,
        )


def validate_timeslots(timeslots: list[TimeSlotDto]) -> TimeslotValidationResult:
    return TimeslotValidator().validate(timeslots)


def load_timeslots(path: Path) -> list[TimeSlotDto]:
    """Reads a YAML or JSON list of timeslots.

    Times are "HH:MM" strings; missing or null times stay unconfigured.

    Raises:
        MissingResourceError:  file does not exist.
        SchemaValidationError: not a list or invalid entries.
    """
    path = Path(path)
    if not path.exists():
        raise MissingResourceError(str(path))
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = YAML(typ="safe").load(f)
    except (OSError, YAMLError) as e:
        raise SchemaValidationError(f"Could not read timeslots: {e}", str(path)) from e

    if not isinstance(raw, list):
        raise SchemaValidationError("Timeslot file must contain a list", str(path))
    try:
        return [TimeSlotDto.model_validate(entry) for entry in raw]
    except ValidationError as e:
        raise SchemaValidationError(f"Invalid timeslot entry: {e}", str(path)) from e
