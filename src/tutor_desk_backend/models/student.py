'''
Pydantic models for students and the lessons entered alongside them.
'''
from datetime import datetime, time
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import DayOfWeek


class StudentLessonInput(BaseModel):
    """A weekly lesson entered as part of the student form."""
    subject: str = Field(..., min_length=1)
    day_of_week: DayOfWeek
    start_time: time
    price_per_hour: Decimal = Field(..., ge=0)


class StudentCreate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    grade: Optional[str] = None
    phone: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    lessons: list[StudentLessonInput] = []


class StudentUpdate(BaseModel):
    """
    Partial update of a student.
    When 'lessons' is sent, the student's lesson set is replaced by it.
    """
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    grade: Optional[str] = None
    phone: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    lessons: Optional[list[StudentLessonInput]] = None


class StudentRead(BaseModel):
    id: UUID
    teacher_id: UUID
    full_name: str
    grade: Optional[str] = None
    phone: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
