'''
Input structures for the generated documents.
'''
from datetime import date
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from ..database.db_enums import LessonState


class InvoiceLine(BaseModel):
    date: date
    time: Optional[str] = None
    subject: str = Field(..., min_length=1)
    duration: Decimal = Field(Decimal("1"), gt=0)
    price: Decimal = Field(..., ge=0)

    @computed_field
    @property
    def line_total(self) -> Decimal:
        return self.duration * self.price


class InvoiceData(BaseModel):
    student_name: str = Field(..., min_length=1)
    teacher_name: str = Field(..., min_length=1)
    signature: str = ""
    lines: list[InvoiceLine] = Field(..., min_length=1)

    @computed_field
    @property
    def total(self) -> Decimal:
        return sum((line.line_total for line in self.lines), Decimal("0"))


class InvoiceDraftRequest(BaseModel):
    """Pre-fills invoice lines from a student's completed lessons."""
    student_id: UUID
    signature: str = ""


class StudentReportLesson(BaseModel):
    date: date
    subject: str
    state: LessonState


class StudentReportData(BaseModel):
    student_name: str
    grade: Optional[str] = None
    teacher_name: str
    total_lessons: int
    completed_lessons: int
    progress_percent: int = Field(..., ge=0, le=100)
    total_hours: int
    # Reported for reference, never used in any total
    average_price: Decimal
    lessons: list[StudentReportLesson]
    evaluation: str = ""
    signature: str = Field(..., min_length=1)


class StudentReportRequest(BaseModel):
    evaluation: str = ""
    signature: str = Field(..., min_length=1)
