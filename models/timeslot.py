"""Data model for a schedule timeslot as supplied by the schedule editor."""

from datetime import time
from typing import Optional

from pydantic import BaseModel


class TimeSlotDto(BaseModel):
    """One entry of the daily timetable.

    Period entries (is_period=True) must be fully configured before a
    schedule is rendered; custom activities may leave their times open.
    """

    id: str = ""
    label: str = ""
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_period: bool = False

    @property
    def time_range(self) -> str:
        """Display range such as "9:00 AM - 10:30 AM"; "?" marks a missing end."""
        if self.start_time is None:
            return ""
        start = _format_time(self.start_time)
        if self.end_time is None:
            return f"{start} - ?"
        return f"{start} - {_format_time(self.end_time)}"


def _format_time(t: time) -> str:
    hour = t.hour % 12 or 12
    suffix = "AM" if t.hour < 12 else "PM"
    return f"{hour}:{t.minute:02d} {suffix}"
