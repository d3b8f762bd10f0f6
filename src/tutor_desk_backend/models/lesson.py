'''
Pydantic models for lessons and their lifecycle requests.
'''
from datetime import datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from ..database.db_enums import DayOfWeek, LessonStatus, LessonState


class StudentBrief(BaseModel):
    id: UUID
    full_name: str

    model_config = ConfigDict(from_attributes=True)


class LessonCreate(BaseModel):
    student_id: UUID
    subject: str = Field(..., min_length=1)
    day_of_week: DayOfWeek
    start_time: time
    price_per_hour: Decimal = Field(..., ge=0)


class LessonPostpone(BaseModel):
    """Both fields are required together."""
    postponed_to: datetime
    reason: str = Field(..., min_length=1)

    @field_validator('reason')
    @classmethod
    def reason_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("A postpone reason is required.")
        return value


class LessonRead(BaseModel):
    id: UUID
    student_id: UUID
    subject: str
    # Stored as text; may hold a value outside DayOfWeek
    day_of_week: str
    start_time: time
    price_per_hour: Decimal
    status: Optional[LessonStatus] = None
    postponed_to: Optional[datetime] = None
    postpone_reason: Optional[str] = None
    created_at: datetime
    student: Optional[StudentBrief] = None

    model_config = ConfigDict(from_attributes=True)

    @computed_field
    @property
    def state(self) -> LessonState:
        return LessonState.from_status(self.status.value if self.status else None)


class DayLessons(BaseModel):
    day: DayOfWeek
    lessons: list[LessonRead]


class WeeklyLessons(BaseModel):
    """Lessons partitioned into the seven weekday buckets, Monday first."""
    days: list[DayLessons]
    dropped_count: int = 0
