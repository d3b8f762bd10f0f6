'''
Pydantic models for lesson reminders.
'''
from datetime import datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel

from ..database.db_enums import NotificationType


class NotificationRead(BaseModel):
    id: UUID
    type: NotificationType
    read: bool
    created_at: datetime
    student_id: UUID
    lesson_id: UUID
    student_name: str
    lesson_subject: str
    lesson_day: Optional[str] = None
    lesson_start_time: Optional[time] = None
    message: str


class NotificationSnapshot(BaseModel):
    """What one poll hands to the client."""
    notifications: list[NotificationRead]
    unread_count: int
    play_sound: bool = False
