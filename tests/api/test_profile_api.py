'''
API tests for the teacher profile endpoints.
'''
import pytest
import httpx
from pprint import pprint

from src.tutor_desk_backend.services.security import JWTHandler
from src.tutor_desk_backend.database import models as db_models
from tests.database import factories
from tests.constants import TEST_TEACHER_NAME


def auth_headers_for_user(user: db_models.Users) -> dict[str, str]:
    token = JWTHandler.create_access_token(subject=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.anyio
class TestProfileAPI:

    async def test_profile_is_created_for_new_account(self, db_session, client: httpx.AsyncClient):
        print("\n--- Testing GET /profile/ for a new account ---")
        user = factories.UserFactory(email="zehra@example.com")
        await db_session.flush()

        response = await client.get("/profile/", headers=auth_headers_for_user(user))
        pprint(response.json())
        assert response.status_code == 200
        assert response.json()["full_name"] == "zehra"

    async def test_update_and_stats(
        self,
        db_session,
        client: httpx.AsyncClient,
        test_user_orm: db_models.Users,
        test_student_orm: db_models.Students
    ):
        factories.LessonFactory(student=test_student_orm, status="completed")
        await db_session.flush()
        headers = auth_headers_for_user(test_user_orm)

        response = await client.patch("/profile/", json={"subject": "Kimya"}, headers=headers)
        assert response.status_code == 200
        assert response.json()["subject"] == "Kimya"
        assert response.json()["full_name"] == TEST_TEACHER_NAME

        response = await client.get("/profile/stats", headers=headers)
        assert response.json()["total_students"] == 1
        assert response.json()["completed_lessons"] == 1

    async def test_avatar_upload_and_remove(
        self,
        client: httpx.AsyncClient,
        mock_storage_service,
        test_user_orm: db_models.Users,
        test_teacher_orm: db_models.TeacherProfiles
    ):
        headers = auth_headers_for_user(test_user_orm)
        response = await client.post(
            "/profile/avatar", files={"file": ("me.png", b"\x89PNG", "image/png")}, headers=headers
        )
        assert response.status_code == 200
        assert response.json()["avatar_url"].endswith("_me.png")

        response = await client.delete("/profile/avatar", headers=headers)
        assert response.status_code == 200
        assert response.json()["avatar_url"] is None
        mock_storage_service.remove.assert_awaited_once()

    async def test_avatar_must_be_image(
        self,
        client: httpx.AsyncClient,
        test_user_orm: db_models.Users,
        test_teacher_orm: db_models.TeacherProfiles
    ):
        response = await client.post(
            "/profile/avatar", files={"file": ("cv.pdf", b"%PDF", "application/pdf")}, headers=auth_headers_for_user(test_user_orm)
        )
        assert response.status_code == 400
