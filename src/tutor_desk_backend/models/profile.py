'''
Pydantic models for the teacher profile and its summary counters.
'''
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class TeacherProfileRead(BaseModel):
    id: UUID
    user_id: UUID
    full_name: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TeacherProfileUpdate(BaseModel):
    """
    Partial update of the editable profile fields.
    Only the fields that were sent are applied.
    """
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = None
    subject: Optional[str] = None


class ProfileStats(BaseModel):
    total_students: int = 0
    total_lessons: int = 0
    completed_lessons: int = 0
    total_earnings: Decimal = Decimal("0")
