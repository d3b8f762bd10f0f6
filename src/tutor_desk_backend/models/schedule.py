'''
Pydantic models for the weekly timetable: time slots, entries and the grid.
'''
import re
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..database.db_enums import DayOfWeek
from .lesson import StudentBrief

TIME_SLOT_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

DEFAULT_TIME_SLOTS = [f"{hour:02d}:00" for hour in range(8, 21)]


def normalize_time_slots(slots: list[str]) -> list[str]:
    """
    Validates every slot as HH:MM and returns them distinct and sorted.
    Raises ValueError on the first malformed slot.
    """
    cleaned = set()
    for slot in slots:
        slot = slot.strip()
        if not TIME_SLOT_PATTERN.match(slot):
            raise ValueError(f"Invalid time slot '{slot}', expected HH:MM.")
        cleaned.add(slot)
    return sorted(cleaned)


class TimeSlotsUpdate(BaseModel):
    time_slots: list[str] = Field(..., min_length=1)

    @field_validator('time_slots')
    @classmethod
    def validate_slots(cls, value: list[str]) -> list[str]:
        return normalize_time_slots(value)


class TimeSlotsRead(BaseModel):
    teacher_id: UUID
    time_slots: list[str]

    model_config = ConfigDict(from_attributes=True)


class ScheduleEntryCreate(BaseModel):
    student_id: UUID
    subject: str = Field(..., min_length=1)
    day_of_week: DayOfWeek
    time_slot: str

    @field_validator('time_slot')
    @classmethod
    def validate_slot(cls, value: str) -> str:
        value = value.strip()
        if not TIME_SLOT_PATTERN.match(value):
            raise ValueError(f"Invalid time slot '{value}', expected HH:MM.")
        return value


class ScheduleEntryRead(BaseModel):
    id: UUID
    teacher_id: UUID
    student_id: UUID
    subject: str
    day_of_week: str
    time_slot: str
    created_at: datetime
    student: StudentBrief

    model_config = ConfigDict(from_attributes=True)


class ScheduleGridRow(BaseModel):
    time_slot: str
    # One cell per weekday, Monday first. Empty string when nothing is booked.
    cells: list[str]


class ScheduleGrid(BaseModel):
    days: list[DayOfWeek] = Field(default_factory=DayOfWeek.ordered)
    rows: list[ScheduleGridRow] = []
