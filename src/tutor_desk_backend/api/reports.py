'''
API endpoints for the dashboard, the financial report and per-student progress.
'''
from typing import Annotated
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..database import models as db_models
from ..database.db_enums import ReportRange
from ..models import finance as finance_models
from ..models import documents as document_models
from ..services.security import get_current_teacher
from ..services.report_service import ReportService


class ReportsAPI:
    """
    A class to encapsulate the read-only aggregated views.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/reports",
            tags=["Reports"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/dashboard",
                self.get_dashboard,
                methods=["GET"],
                response_model=finance_models.DashboardStats)

        self.router.add_api_route(
                "/financial",
                self.get_financial_report,
                methods=["GET"],
                response_model=finance_models.FinancialReport)

        self.router.add_api_route(
                "/students/{student_id}",
                self.get_student_report,
                methods=["POST"],
                response_model=document_models.StudentReportData)

        self.router.add_api_route(
                "/invoice-draft",
                self.get_invoice_draft,
                methods=["POST"],
                response_model=document_models.InvoiceData)

    async def get_dashboard(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        report_service: Annotated[ReportService, Depends(ReportService)]
    ):
        """
        Students, active classes, completed lessons, income and success rate.
        """
        return await report_service.get_dashboard_stats_for_api(teacher)

    async def get_financial_report(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        report_service: Annotated[ReportService, Depends(ReportService)],
        report_range: Annotated[ReportRange, Query(alias="range")] = ReportRange.MONTH
    ):
        """
        Report for the current month or year.
        """
        return await report_service.get_financial_report_for_api(teacher, report_range)

    async def get_student_report(
        self,
        student_id: UUID,
        request_data: document_models.StudentReportRequest,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        report_service: Annotated[ReportService, Depends(ReportService)]
    ):
        return await report_service.get_student_report_internal(student_id, teacher, request_data)

    async def get_invoice_draft(
        self,
        draft_request: document_models.InvoiceDraftRequest,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        report_service: Annotated[ReportService, Depends(ReportService)]
    ):
        """
        Invoice lines pre-filled from the student's completed lessons.
        """
        draft = await report_service.get_invoice_draft_for_api(
            draft_request.student_id, teacher, draft_request.signature
        )
        if draft is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="This student has no completed lessons to invoice."
            )
        return draft

# Instantiate the class and export its router
reports_api = ReportsAPI()
router = reports_api.router
