from models.attendee import Attendee
from models.import_report import ImportReport
from models.period import Period
from models.timeslot import TimeSlotDto
from models.workshop import Workshop, WorkshopDuration, WorkshopKey, WorkshopSelection

__all__ = [
    "Attendee",
    "ImportReport",
    "Period",
    "TimeSlotDto",
    "Workshop",
    "WorkshopDuration",
    "WorkshopKey",
    "WorkshopSelection",
]
