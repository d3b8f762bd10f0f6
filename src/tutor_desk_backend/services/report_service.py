'''
Dashboard counters, the financial report and per-student progress.
Rows are fetched here; all arithmetic lives in core.aggregation.
'''
from datetime import date, datetime
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core import aggregation
from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import ReportRange
from ..models import finance as finance_models
from ..models import documents as document_models
from ..common.config import settings
from ..common.logger import log
from .student_service import StudentService
from .lesson_service import LessonService
from .payment_service import PaymentService


def local_today() -> date:
    return datetime.now(settings.tz).date()


class ReportService:
    """
    Service for every aggregated view. "No rows" always produces zeros and
    empty series; only database failures propagate.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        student_service: Annotated[StudentService, Depends(StudentService)],
        lesson_service: Annotated[LessonService, Depends(LessonService)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        self.db = db
        self.student_service = student_service
        self.lesson_service = lesson_service
        self.payment_service = payment_service

    async def get_dashboard_stats_for_api(
        self,
        teacher: db_models.TeacherProfiles,
        today: Optional[date] = None
    ) -> finance_models.DashboardStats:
        log.info(f"Teacher {teacher.id} requesting dashboard stats.")
        try:
            students = await self.student_service.get_students_internal(teacher)
            lessons = await self.lesson_service.get_lessons_internal(teacher)
            payments = await self.payment_service.get_payments_internal(teacher)
            return aggregation.build_dashboard_stats(len(students), lessons, payments, today or local_today())
        except Exception as e:
            log.error(f"Error in get_dashboard_stats_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def get_financial_report_for_api(
        self,
        teacher: db_models.TeacherProfiles,
        report_range: ReportRange = ReportRange.MONTH,
        today: Optional[date] = None
    ) -> finance_models.FinancialReport:
        log.info(f"Teacher {teacher.id} requesting the {report_range.value} financial report.")
        try:
            students = await self.student_service.get_students_internal(teacher)
            lessons = await self.lesson_service.get_lessons_internal(teacher)
            payments = await self.payment_service.get_payments_internal(teacher)
            return aggregation.build_financial_report(
                payments, lessons, len(students), report_range, today or local_today()
            )
        except Exception as e:
            log.error(f"Error in get_financial_report_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def get_student_report_internal(
        self,
        student_id: UUID,
        teacher: db_models.TeacherProfiles,
        request: document_models.StudentReportRequest
    ) -> document_models.StudentReportData:
        log.info(f"Teacher {teacher.id} building the progress report of student {student_id}.")
        student = await self.student_service.get_student_internal(student_id, teacher)
        lessons = await self.lesson_service.get_student_lessons_internal(student.id)
        return aggregation.build_student_report(
            student,
            lessons,
            teacher_name=teacher.full_name,
            signature=request.signature,
            tz=settings.tz,
            evaluation=request.evaluation,
        )

    async def get_invoice_draft_for_api(
        self,
        student_id: UUID,
        teacher: db_models.TeacherProfiles,
        signature: str = ""
    ) -> document_models.InvoiceData | None:
        """Invoice pre-filled from the student's completed lessons, or None if there are none."""
        log.info(f"Teacher {teacher.id} drafting an invoice for student {student_id}.")
        student = await self.student_service.get_student_internal(student_id, teacher)
        lessons = await self.lesson_service.get_student_lessons_internal(student.id)
        return aggregation.build_invoice_draft(
            student.full_name, teacher.full_name, lessons, settings.tz, signature=signature
        )
