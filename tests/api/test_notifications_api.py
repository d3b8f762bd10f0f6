'''
API tests for the reminder feed and the websocket handshake.
'''
import asyncio
import pytest
import httpx
from unittest.mock import MagicMock
from uuid import uuid4
from pprint import pprint
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool

from src.tutor_desk_backend.main import app
from src.tutor_desk_backend.services.security import JWTHandler
from src.tutor_desk_backend.database.engine import build_session_factory, get_session_factory
from src.tutor_desk_backend.services.notification_service import NotificationPoller
from src.tutor_desk_backend.database import models as db_models
from tests.database import factories


def auth_headers_for_user(user: db_models.Users) -> dict[str, str]:
    token = JWTHandler.create_access_token(subject=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.anyio
class TestNotificationsAPI:

    async def test_feed_and_mark_read(
        self,
        db_session,
        client: httpx.AsyncClient,
        test_user_orm: db_models.Users,
        test_student_orm: db_models.Students
    ):
        print("\n--- Testing GET /notifications/ and mark read ---")
        lesson = factories.LessonFactory(student=test_student_orm, subject="Fizik")
        notification = factories.NotificationFactory(lesson=lesson)
        factories.NotificationFactory(lesson=lesson, type="1_day")
        await db_session.flush()
        headers = auth_headers_for_user(test_user_orm)

        response = await client.get("/notifications/", headers=headers)
        pprint(response.json())
        assert response.status_code == 200
        assert response.json()["unread_count"] == 2
        assert response.json()["play_sound"] is False

        response = await client.post(f"/notifications/{notification.id}/read", headers=headers)
        assert response.status_code == 204

        response = await client.get("/notifications/", headers=headers)
        assert response.json()["unread_count"] == 1

    async def test_mark_read_unknown_is_404(
        self,
        client: httpx.AsyncClient,
        test_user_orm: db_models.Users,
        test_teacher_orm: db_models.TeacherProfiles
    ):
        response = await client.post(f"/notifications/{uuid4()}/read", headers=auth_headers_for_user(test_user_orm))
        assert response.status_code == 404

    async def test_feed_uses_settings_language(
        self,
        db_session,
        client: httpx.AsyncClient,
        test_user_orm: db_models.Users,
        test_student_orm: db_models.Students
    ):
        factories.NotificationFactory(lesson=factories.LessonFactory(student=test_student_orm, subject="Physics"))
        await db_session.flush()
        headers = auth_headers_for_user(test_user_orm)
        await client.put("/settings/", json={"language": "en"}, headers=headers)

        response = await client.get("/notifications/", headers=headers)
        assert response.json()["notifications"][0]["message"].startswith("Your Physics lesson")


class TestNotificationsSocket:

    def test_bad_token_closes_with_policy_violation(self):
        app.dependency_overrides[get_session_factory] = lambda: MagicMock()
        try:
            test_client = TestClient(app)
            with pytest.raises(WebSocketDisconnect) as e:
                with test_client.websocket_connect("/notifications/ws?token=not-a-jwt") as websocket:
                    websocket.receive_json()
            assert e.value.code == 1008
        finally:
            app.dependency_overrides.clear()

    @pytest.fixture
    def file_session_factory(self, tmp_path):
        """
        A file-backed SQLite database the websocket handler can open its own
        sessions on. Seeded with one teacher, one student and two unread reminders.
        """
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'reminders.db'}", poolclass=NullPool)
        session_factory = build_session_factory(engine)

        user = factories.UserFactory.build(email="socket.teacher@example.com")
        teacher = factories.TeacherProfileFactory.build(user=user)
        lesson = factories.LessonFactory.build(student=factories.StudentFactory.build(teacher=teacher))
        first = factories.NotificationFactory.build(lesson=lesson)
        second = factories.NotificationFactory.build(lesson=lesson, type="1_day")

        async def seed():
            async with engine.begin() as conn:
                await conn.run_sync(db_models.Base.metadata.create_all)
            async with session_factory() as session:
                session.add_all([user, teacher, lesson.student, lesson, first, second])
                await session.commit()

        asyncio.run(seed())
        try:
            yield session_factory, user, first
        finally:
            asyncio.run(engine.dispose())

    def test_snapshot_mark_read_and_teardown(self, mocker, file_session_factory):
        print("\n--- Testing the authenticated reminder websocket ---")
        session_factory, user, first = file_session_factory
        stop_spy = mocker.spy(NotificationPoller, "stop")
        app.dependency_overrides[get_session_factory] = lambda: session_factory
        try:
            test_client = TestClient(app)
            token = JWTHandler.create_access_token(subject=user.email)
            with test_client.websocket_connect(f"/notifications/ws?token={token}") as websocket:
                snapshot = websocket.receive_json()
                pprint(snapshot)
                assert snapshot["unread_count"] == 2
                assert snapshot["play_sound"] is True

                # A malformed frame is answered, the feed stays open
                websocket.send_text("not json")
                assert websocket.receive_json() == {"error": "Invalid message."}

                websocket.send_json({"action": "mark_read", "id": str(first.id)})
                snapshot = websocket.receive_json()
                assert snapshot["unread_count"] == 1

                # Marking the same reminder again never drops below the real count
                websocket.send_json({"action": "mark_read", "id": str(first.id)})
                snapshot = websocket.receive_json()
                assert snapshot["unread_count"] == 1

                websocket.send_json({"action": "mark_read", "id": "not-a-uuid"})
                assert websocket.receive_json() == {"error": "Invalid notification id."}

            assert stop_spy.call_count >= 1
        finally:
            app.dependency_overrides.clear()

        async def read_flag():
            async with session_factory() as session:
                return await session.scalar(
                    select(db_models.Notifications.read).where(db_models.Notifications.id == first.id)
                )

        assert asyncio.run(read_flag()) is True
