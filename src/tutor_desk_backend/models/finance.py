'''
Pydantic models for payments, the dashboard counters and the financial report.
'''
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import PaymentMethod, PaymentStatus, LessonState, ReportRange
from .lesson import StudentBrief

# --- 1. API Input Models (for POST/PATCH) ---

class PaymentCreate(BaseModel):
    student_id: UUID
    amount: Decimal = Field(..., gt=0)
    payment_date: date
    payment_method: PaymentMethod
    status: PaymentStatus = PaymentStatus.PENDING
    description: Optional[str] = None


class PaymentUpdate(BaseModel):
    """All fields optional for PATCH."""
    amount: Optional[Decimal] = Field(None, gt=0)
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None
    description: Optional[str] = None


# --- 2. API Output Models (for GET) ---

class PaymentRead(BaseModel):
    id: UUID
    student_id: UUID
    amount: Decimal
    payment_date: date
    payment_method: PaymentMethod
    status: PaymentStatus
    description: Optional[str] = None
    created_at: datetime
    student: Optional[StudentBrief] = None

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    total_students: int = 0
    active_classes: int = 0
    completed_lessons: int = 0
    estimated_income: Decimal = Decimal("0")
    monthly_income: Decimal = Decimal("0")
    success_rate: int = 0


class PaymentMethodBreakdown(BaseModel):
    method: str
    count: int
    total: Decimal


class DailyIncomePoint(BaseModel):
    day: date
    amount: Decimal


class MonthlyIncomePoint(BaseModel):
    month: int = Field(..., ge=1, le=12)
    amount: Decimal


class LessonStatusPoint(BaseModel):
    status: LessonState
    count: int = Field(..., ge=0)


class FinancialReport(BaseModel):
    """
    Income figures for the selected range plus chart series.
    'monthly_series' always covers January..December of the current year.
    """
    range: ReportRange
    start_date: date
    end_date: date
    total_income: Decimal
    monthly_income: Decimal
    yearly_income: Decimal
    payment_methods: list[PaymentMethodBreakdown]
    daily_series: list[DailyIncomePoint]
    monthly_series: list[MonthlyIncomePoint]
    lesson_status_series: list[LessonStatusPoint]
    total_lessons: int
    completed_lessons: int
    total_students: int
