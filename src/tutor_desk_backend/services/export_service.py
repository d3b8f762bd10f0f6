'''
Turns report data into downloadable files: invoices, progress reports, the
weekly timetable and the full data export.
'''
import json
from dataclasses import dataclass
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends

from ..core import documents
from ..database import models as db_models
from ..database.db_enums import ExportFormat
from ..models import documents as document_models
from ..models.student import StudentRead
from ..models.lesson import LessonRead
from ..models.finance import PaymentRead
from ..common.logger import log
from .report_service import ReportService, local_today
from .schedule_service import ScheduleService
from .settings_service import SettingsService
from .student_service import StudentService
from .lesson_service import LessonService
from .payment_service import PaymentService

JSON_MEDIA_TYPE = "application/json"


@dataclass
class ExportedFile:
    content: bytes
    filename: str
    media_type: str = documents.DOCX_MEDIA_TYPE


class ExportService:
    """
    Service for document generation. Labels follow the language stored in
    the teacher's settings.
    """
    def __init__(
        self,
        report_service: Annotated[ReportService, Depends(ReportService)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)],
        student_service: Annotated[StudentService, Depends(StudentService)],
        lesson_service: Annotated[LessonService, Depends(LessonService)],
        payment_service: Annotated[PaymentService, Depends(PaymentService)]
    ):
        self.report_service = report_service
        self.schedule_service = schedule_service
        self.settings_service = settings_service
        self.student_service = student_service
        self.lesson_service = lesson_service
        self.payment_service = payment_service

    async def _language_of(self, teacher: db_models.TeacherProfiles) -> str:
        user_settings = await self.settings_service.get_settings_internal(teacher.user_id)
        return user_settings.language

    async def export_invoice(
        self,
        data: document_models.InvoiceData,
        teacher: db_models.TeacherProfiles
    ) -> ExportedFile:
        log.info(f"Teacher {teacher.id} exporting an invoice for '{data.student_name}' ({len(data.lines)} lines).")
        try:
            language = await self._language_of(teacher)
            doc = documents.build_invoice_document(data, language)
            return ExportedFile(
                content=documents.document_to_bytes(doc),
                filename=documents.invoice_filename(data.student_name, local_today()),
            )
        except Exception as e:
            log.error(f"Error in export_invoice for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def export_student_report(
        self,
        student_id: UUID,
        teacher: db_models.TeacherProfiles,
        request: document_models.StudentReportRequest
    ) -> ExportedFile:
        report = await self.report_service.get_student_report_internal(student_id, teacher, request)
        language = await self._language_of(teacher)
        doc = documents.build_student_report_document(report, language)
        return ExportedFile(
            content=documents.document_to_bytes(doc),
            filename=documents.student_report_filename(report.student_name, local_today()),
        )

    async def export_schedule(self, teacher: db_models.TeacherProfiles) -> ExportedFile:
        log.info(f"Teacher {teacher.id} exporting the weekly schedule.")
        try:
            grid = await self.schedule_service.get_grid_for_api(teacher)
            language = await self._language_of(teacher)
            doc = documents.build_schedule_document(grid, language)
            return ExportedFile(
                content=documents.document_to_bytes(doc),
                filename=documents.schedule_filename(local_today()),
            )
        except Exception as e:
            log.error(f"Error in export_schedule for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def collect_export_sections(self, teacher: db_models.TeacherProfiles, include: dict[str, bool]) -> dict[str, list]:
        sections: dict[str, list] = {}
        if include.get("students"):
            students = await self.student_service.get_students_internal(teacher)
            sections["students"] = [StudentRead.model_validate(s).model_dump(mode="json") for s in students]
        if include.get("lessons"):
            lessons = await self.lesson_service.get_lessons_internal(teacher)
            sections["lessons"] = [LessonRead.model_validate(l).model_dump(mode="json") for l in lessons]
        if include.get("payments"):
            payments = await self.payment_service.get_payments_internal(teacher)
            sections["payments"] = [PaymentRead.model_validate(p).model_dump(mode="json") for p in payments]
        return sections

    async def export_data(
        self,
        teacher: db_models.TeacherProfiles,
        export_format: Optional[ExportFormat] = None
    ) -> ExportedFile:
        """
        Full data export. Which sections are included comes from the export
        settings; the format does too unless `export_format` overrides it.
        """
        log.info(f"Teacher {teacher.id} requesting a full data export.")
        try:
            user_settings = await self.settings_service.get_settings_internal(teacher.user_id)
            prefs = user_settings.data_export
            fmt = export_format or prefs.format
            sections = await self.collect_export_sections(teacher, {
                "students": prefs.include_students,
                "lessons": prefs.include_lessons,
                "payments": prefs.include_payments,
            })

            today = local_today()
            if fmt == ExportFormat.DOCX:
                doc = documents.build_data_export_document(sections, user_settings.language)
                return ExportedFile(
                    content=documents.document_to_bytes(doc),
                    filename=documents.export_filename("docx", today),
                )

            payload = {"exported_at": today.isoformat(), **sections}
            return ExportedFile(
                content=json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8"),
                filename=documents.export_filename("json", today),
                media_type=JSON_MEDIA_TYPE,
            )
        except Exception as e:
            log.error(f"Error in export_data for teacher {teacher.id}: {e}", exc_info=True)
            raise
