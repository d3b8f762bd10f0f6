'''
Pytest configuration for the FastAPI application.

This file sets up fixtures for:
1. Forcing the application into TEST_MODE before any code is imported.
2. A fresh in-memory SQLite database (foreign keys enforced) per test.
3. An httpx AsyncClient bound to the app, sharing the test's session.
4. Instances of all service classes, pre-injected with the test db session
   and a mocked storage service.
'''
import os

# Must happen before the application modules read their settings
os.environ["TEST_MODE"] = "True"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["DATABASE_URL_TEST"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("STORAGE_URL", "https://storage.test")
os.environ.setdefault("STORAGE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("TIMEZONE", "Europe/Istanbul")

import pytest
import httpx
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine

# --- Application Imports ---
from src.tutor_desk_backend.main import app
from src.tutor_desk_backend.common.config import settings
from src.tutor_desk_backend.database.engine import build_engine, build_session_factory, get_db_session
from src.tutor_desk_backend.database import models as db_models
from src.tutor_desk_backend.services.storage_service import StorageService
from src.tutor_desk_backend.services.user_service import UserService
from src.tutor_desk_backend.services.profile_service import ProfileService
from src.tutor_desk_backend.services.student_service import StudentService
from src.tutor_desk_backend.services.lesson_service import LessonService
from src.tutor_desk_backend.services.payment_service import PaymentService
from src.tutor_desk_backend.services.schedule_service import ScheduleService
from src.tutor_desk_backend.services.resource_service import ResourceService
from src.tutor_desk_backend.services.notification_service import NotificationService
from src.tutor_desk_backend.services.settings_service import SettingsService
from src.tutor_desk_backend.services.report_service import ReportService
from src.tutor_desk_backend.services.export_service import ExportService

from tests.database import factories
from tests.constants import (
    TEST_USER_ID,
    TEST_TEACHER_ID,
    TEST_TEACHER_EMAIL,
    TEST_TEACHER_NAME,
    TEST_STUDENT_ID,
    TEST_STUDENT_NAME,
    TEST_UNRELATED_USER_ID,
    TEST_UNRELATED_TEACHER_ID,
    TEST_UNRELATED_STUDENT_ID,
)


@pytest.fixture(scope="session")
def anyio_backend():
    """
    Override the default 'anyio_backend' fixture.
    1. Forces the backend to 'asyncio'.
    2. Promotes the scope to 'session'.
    """
    return "asyncio"


# --- 1. Database ---

@pytest.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    assert settings.TEST_MODE is True, "TEST_MODE was not set to True!"
    engine = build_engine(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(db_models.Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """
    One session per test, shared by services, factories and the API client.
    The whole database is thrown away with the engine afterwards.
    """
    session_factory = build_session_factory(db_engine)
    session = session_factory()
    factories.test_db_session = session
    try:
        yield session
    finally:
        factories.test_db_session = None
        await session.rollback()
        await session.close()


# --- 2. Mocks ---

@pytest.fixture(scope="function")
def mock_storage_service() -> StorageService:
    """Provides a mock StorageService; no HTTP is made."""
    mock_service = MagicMock(spec=StorageService)
    mock_service.upload = AsyncMock(side_effect=lambda bucket, path, content, content_type="application/octet-stream": path)
    mock_service.download = AsyncMock(return_value=b"file-content")
    mock_service.remove = AsyncMock(return_value=True)
    return mock_service


# --- 3. API client ---

@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, mock_storage_service: StorageService) -> AsyncGenerator[httpx.AsyncClient, None]:
    """
    AsyncClient over ASGITransport. `get_db_session` is overridden to
    hand out the test session (flushed, never committed) so the test can
    see and seed the same data the endpoints do.
    """
    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        # No rollback here: it would discard the test's own seeded rows
        yield db_session
        await db_session.flush()

    app.dependency_overrides[get_db_session] = override_get_db_session
    app.dependency_overrides[StorageService] = lambda: mock_storage_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


# --- 4. SERVICE FIXTURES ---

@pytest.fixture(scope="function")
def user_service(db_session: AsyncSession) -> UserService:
    return UserService(db=db_session)

@pytest.fixture(scope="function")
def profile_service(db_session: AsyncSession, mock_storage_service: StorageService) -> ProfileService:
    return ProfileService(db=db_session, storage_service=mock_storage_service)

@pytest.fixture(scope="function")
def student_service(db_session: AsyncSession) -> StudentService:
    return StudentService(db=db_session)

@pytest.fixture(scope="function")
def lesson_service(db_session: AsyncSession, student_service: StudentService) -> LessonService:
    return LessonService(db=db_session, student_service=student_service)

@pytest.fixture(scope="function")
def payment_service(db_session: AsyncSession, student_service: StudentService) -> PaymentService:
    return PaymentService(db=db_session, student_service=student_service)

@pytest.fixture(scope="function")
def schedule_service(db_session: AsyncSession, student_service: StudentService) -> ScheduleService:
    return ScheduleService(db=db_session, student_service=student_service)

@pytest.fixture(scope="function")
def resource_service(db_session: AsyncSession, mock_storage_service: StorageService) -> ResourceService:
    return ResourceService(db=db_session, storage_service=mock_storage_service)

@pytest.fixture(scope="function")
def notification_service(db_session: AsyncSession) -> NotificationService:
    return NotificationService(db=db_session)

@pytest.fixture(scope="function")
def settings_service(db_session: AsyncSession) -> SettingsService:
    return SettingsService(db=db_session)

@pytest.fixture(scope="function")
def report_service(
    db_session: AsyncSession,
    student_service: StudentService,
    lesson_service: LessonService,
    payment_service: PaymentService
) -> ReportService:
    return ReportService(
        db=db_session,
        student_service=student_service,
        lesson_service=lesson_service,
        payment_service=payment_service
    )

@pytest.fixture(scope="function")
def export_service(
    report_service: ReportService,
    schedule_service: ScheduleService,
    settings_service: SettingsService,
    student_service: StudentService,
    lesson_service: LessonService,
    payment_service: PaymentService
) -> ExportService:
    return ExportService(
        report_service=report_service,
        schedule_service=schedule_service,
        settings_service=settings_service,
        student_service=student_service,
        lesson_service=lesson_service,
        payment_service=payment_service
    )


# --- 5. DATA FIXTURES ---

@pytest.fixture(scope="function")
async def test_user_orm(db_session: AsyncSession) -> db_models.Users:
    user = factories.UserFactory(id=TEST_USER_ID, email=TEST_TEACHER_EMAIL)
    await db_session.flush()
    return user

@pytest.fixture(scope="function")
async def test_teacher_orm(db_session: AsyncSession, test_user_orm: db_models.Users) -> db_models.TeacherProfiles:
    """The main teacher profile, owned by test_user_orm."""
    teacher = factories.TeacherProfileFactory(id=TEST_TEACHER_ID, user=test_user_orm, full_name=TEST_TEACHER_NAME)
    await db_session.flush()
    return teacher

@pytest.fixture(scope="function")
async def test_student_orm(db_session: AsyncSession, test_teacher_orm: db_models.TeacherProfiles) -> db_models.Students:
    student = factories.StudentFactory(id=TEST_STUDENT_ID, teacher=test_teacher_orm, full_name=TEST_STUDENT_NAME)
    await db_session.flush()
    return student

@pytest.fixture(scope="function")
async def test_unrelated_teacher_orm(db_session: AsyncSession) -> db_models.TeacherProfiles:
    """A second teacher whose rows must never leak into the main teacher's views."""
    user = factories.UserFactory(id=TEST_UNRELATED_USER_ID)
    teacher = factories.TeacherProfileFactory(id=TEST_UNRELATED_TEACHER_ID, user=user)
    await db_session.flush()
    return teacher

@pytest.fixture(scope="function")
async def test_unrelated_student_orm(
    db_session: AsyncSession,
    test_unrelated_teacher_orm: db_models.TeacherProfiles
) -> db_models.Students:
    student = factories.StudentFactory(id=TEST_UNRELATED_STUDENT_ID, teacher=test_unrelated_teacher_orm)
    await db_session.flush()
    return student
