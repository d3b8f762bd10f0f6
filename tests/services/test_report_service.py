'''
Tests for ReportService over real rows.
'''
import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from pprint import pprint
from fastapi import HTTPException

from src.tutor_desk_backend.services.report_service import ReportService
from src.tutor_desk_backend.database import models as db_models
from src.tutor_desk_backend.database.db_enums import LessonState, ReportRange
from src.tutor_desk_backend.models.documents import StudentReportRequest
from tests.database import factories
from tests.constants import FIXED_TODAY, TEST_STUDENT_NAME, TEST_TEACHER_NAME


@pytest.mark.anyio
class TestReportService:

    async def test_dashboard_stats(
        self,
        db_session,
        report_service: ReportService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_student_orm: db_models.Students,
        test_unrelated_student_orm: db_models.Students
    ):
        print("\n--- Testing get_dashboard_stats_for_api ---")
        factories.LessonFactory(student=test_student_orm, status="completed", price_per_hour=Decimal("150.00"))
        factories.LessonFactory(student=test_student_orm, status="completed", price_per_hour=Decimal("150.00"))
        factories.LessonFactory(student=test_student_orm, price_per_hour=Decimal("200.00"))
        factories.LessonFactory(student=test_unrelated_student_orm, status="completed")
        factories.PaymentFactory(student=test_student_orm, amount=Decimal("300.00"), payment_date=date(2025, 3, 1))
        factories.PaymentFactory(student=test_student_orm, amount=Decimal("50.00"), payment_date=date(2025, 2, 28))
        await db_session.flush()

        stats = await report_service.get_dashboard_stats_for_api(test_teacher_orm, today=FIXED_TODAY)
        pprint(stats.model_dump())

        assert stats.total_students == 1
        assert stats.estimated_income == Decimal("300.00")
        assert stats.active_classes == 1
        assert stats.success_rate == 67
        assert stats.monthly_income == Decimal("300.00")

    async def test_empty_financial_report(
        self,
        report_service: ReportService,
        test_teacher_orm: db_models.TeacherProfiles
    ):
        report = await report_service.get_financial_report_for_api(test_teacher_orm, ReportRange.YEAR, today=FIXED_TODAY)
        assert report.total_income == Decimal("0")
        assert report.payment_methods == []
        assert len(report.monthly_series) == 12
        assert report.total_students == 0

    async def test_student_report(
        self,
        db_session,
        report_service: ReportService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_student_orm: db_models.Students
    ):
        print("\n--- Testing get_student_report_internal ---")
        factories.LessonFactory(
            student=test_student_orm, status="completed", subject="Fizik",
            created_at=datetime(2025, 3, 2, 22, 0, tzinfo=timezone.utc)
        )
        factories.LessonFactory(student=test_student_orm, subject="Kimya", created_at=datetime(2025, 3, 10, tzinfo=timezone.utc))
        await db_session.flush()

        report = await report_service.get_student_report_internal(
            test_student_orm.id, test_teacher_orm, StudentReportRequest(signature="A.Y.", evaluation="İyi")
        )
        pprint(report.model_dump())

        assert report.student_name == TEST_STUDENT_NAME
        assert report.teacher_name == TEST_TEACHER_NAME
        assert report.progress_percent == 50
        assert [lesson.subject for lesson in report.lessons] == ["Kimya", "Fizik"]
        # 22:00 UTC on the 2nd is the 3rd in Istanbul
        assert report.lessons[1].date == date(2025, 3, 3)
        assert report.lessons[1].state == LessonState.COMPLETED

    async def test_student_report_for_foreign_student_is_404(
        self,
        report_service: ReportService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_unrelated_student_orm: db_models.Students
    ):
        with pytest.raises(HTTPException) as e:
            await report_service.get_student_report_internal(
                test_unrelated_student_orm.id, test_teacher_orm, StudentReportRequest(signature="x")
            )
        assert e.value.status_code == 404

    async def test_invoice_draft(
        self,
        db_session,
        report_service: ReportService,
        test_teacher_orm: db_models.TeacherProfiles,
        test_student_orm: db_models.Students
    ):
        assert await report_service.get_invoice_draft_for_api(test_student_orm.id, test_teacher_orm) is None

        factories.LessonFactory(student=test_student_orm, status="completed", price_per_hour=Decimal("250.00"))
        await db_session.flush()

        draft = await report_service.get_invoice_draft_for_api(test_student_orm.id, test_teacher_orm, signature="A.Y.")
        assert draft.total == Decimal("250.00")
        assert draft.signature == "A.Y."
        assert draft.teacher_name == TEST_TEACHER_NAME
