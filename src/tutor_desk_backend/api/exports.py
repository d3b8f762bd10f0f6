'''
API endpoints that return generated files (.docx or .json).
'''
from typing import Annotated, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query, Response

from ..core.documents import attachment_headers
from ..database import models as db_models
from ..database.db_enums import ExportFormat
from ..models import documents as document_models
from ..services.security import get_current_teacher
from ..services.export_service import ExportService, ExportedFile


def file_response(exported: ExportedFile) -> Response:
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers=attachment_headers(exported.filename)
    )


class ExportsAPI:
    """
    A class to encapsulate the document downloads.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/exports",
            tags=["Exports"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/invoice",
                self.export_invoice,
                methods=["POST"])

        self.router.add_api_route(
                "/students/{student_id}/report",
                self.export_student_report,
                methods=["POST"])

        self.router.add_api_route(
                "/schedule",
                self.export_schedule,
                methods=["GET"])

        self.router.add_api_route(
                "/data",
                self.export_data,
                methods=["GET"])

    async def export_invoice(
        self,
        invoice_data: document_models.InvoiceData,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        export_service: Annotated[ExportService, Depends(ExportService)]
    ):
        """
        Renders the (possibly edited) invoice as a Word document.
        """
        return file_response(await export_service.export_invoice(invoice_data, teacher))

    async def export_student_report(
        self,
        student_id: UUID,
        request_data: document_models.StudentReportRequest,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        export_service: Annotated[ExportService, Depends(ExportService)]
    ):
        return file_response(await export_service.export_student_report(student_id, teacher, request_data))

    async def export_schedule(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        export_service: Annotated[ExportService, Depends(ExportService)]
    ):
        return file_response(await export_service.export_schedule(teacher))

    async def export_data(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        export_service: Annotated[ExportService, Depends(ExportService)],
        export_format: Annotated[Optional[ExportFormat], Query(alias="format")] = None
    ):
        """
        Students, lessons and payments as selected in the export settings.
        `format` overrides the stored export format.
        """
        return file_response(await export_service.export_data(teacher, export_format))

# Instantiate the class and export its router
exports_api = ExportsAPI()
router = exports_api.router
