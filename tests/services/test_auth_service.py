'''
Tests for UserService, LoginService and token resolution.
'''
import pytest
from datetime import datetime, timedelta, timezone
from pprint import pprint
from jose import jwt
from fastapi import HTTPException
from fastapi.security import OAuth2PasswordRequestForm

from src.tutor_desk_backend.services.user_service import UserService
from src.tutor_desk_backend.services.auth_service import LoginService
from src.tutor_desk_backend.services.security import JWTHandler, resolve_user_from_token
from src.tutor_desk_backend.common.security_utils import HashedPassword
from src.tutor_desk_backend.common.config import settings
from src.tutor_desk_backend.database import models as db_models
from src.tutor_desk_backend.models import user as user_models
from tests.constants import TEST_PASSWORD, TEST_TEACHER_EMAIL


def login_form(username: str, password: str) -> OAuth2PasswordRequestForm:
    return OAuth2PasswordRequestForm(username=username, password=password, scope="")


@pytest.mark.anyio
class TestUserService:

    async def test_create_user_lowercases_email(self, user_service: UserService):
        print("\n--- Testing create_user ---")
        user = await user_service.create_user(user_models.UserCreate(email="New.Teacher@Example.com", password="secret1"))
        pprint(user_models.UserRead.model_validate(user).model_dump())

        assert user.email == "new.teacher@example.com"
        assert HashedPassword.verify("secret1", user.password)
        assert await user_service.get_user_by_email("NEW.TEACHER@example.com") is not None

    async def test_duplicate_email_is_409(self, user_service: UserService, test_user_orm: db_models.Users):
        with pytest.raises(HTTPException) as e:
            await user_service.create_user(user_models.UserCreate(email=TEST_TEACHER_EMAIL.upper(), password="secret1"))
        assert e.value.status_code == 409


@pytest.mark.anyio
class TestLoginService:

    async def test_login_success(self, user_service: UserService, test_user_orm: db_models.Users):
        token = await LoginService(user_service).login_user(login_form(TEST_TEACHER_EMAIL, TEST_PASSWORD))
        assert token.token_type == "bearer"
        assert JWTHandler.decode_token(token.access_token).sub == TEST_TEACHER_EMAIL

    async def test_wrong_password_is_401(self, user_service: UserService, test_user_orm: db_models.Users):
        with pytest.raises(HTTPException) as e:
            await LoginService(user_service).login_user(login_form(TEST_TEACHER_EMAIL, "wrong-password"))
        assert e.value.status_code == 401

    async def test_inactive_user_is_400(self, db_session, user_service: UserService, test_user_orm: db_models.Users):
        test_user_orm.is_active = False
        await db_session.flush()
        with pytest.raises(HTTPException) as e:
            await LoginService(user_service).login_user(login_form(TEST_TEACHER_EMAIL, TEST_PASSWORD))
        assert e.value.status_code == 400


@pytest.mark.anyio
class TestTokenResolution:

    async def test_valid_token(self, user_service: UserService, test_user_orm: db_models.Users):
        token = JWTHandler.create_access_token(subject=test_user_orm.email)
        user = await resolve_user_from_token(token, user_service)
        assert user.id == test_user_orm.id

    @pytest.mark.parametrize("token", ["", "not-a-jwt"])
    async def test_bad_tokens_are_401(self, user_service: UserService, token):
        with pytest.raises(HTTPException) as e:
            await resolve_user_from_token(token, user_service)
        assert e.value.status_code == 401

    async def test_unknown_subject_is_401(self, user_service: UserService):
        token = JWTHandler.create_access_token(subject="ghost@example.com")
        with pytest.raises(HTTPException) as e:
            await resolve_user_from_token(token, user_service)
        assert e.value.status_code == 401

    async def test_token_of_another_type_is_rejected(self):
        claims = {"sub": TEST_TEACHER_EMAIL, "exp": datetime.now(timezone.utc) + timedelta(minutes=5), "typ": "password_reset"}
        token = jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)
        assert JWTHandler.decode_token(token) is None

    async def test_expired_token_is_rejected(self):
        token = JWTHandler.create_access_token(subject=TEST_TEACHER_EMAIL, expires_delta=timedelta(seconds=-5))
        assert JWTHandler.decode_token(token) is None


@pytest.mark.anyio
class TestPasswordMaintenance:

    async def test_outdated_hash_is_upgraded_on_login(self, mocker, user_service: UserService, test_user_orm: db_models.Users):
        print("\n--- Testing hash upgrade on login ---")
        new_hash = HashedPassword.get_hash(TEST_PASSWORD)
        mocker.patch.object(HashedPassword, "verify_and_update", return_value=(True, new_hash))

        token = await LoginService(user_service).login_user(login_form(TEST_TEACHER_EMAIL, TEST_PASSWORD))

        assert token.expires_in > 0
        assert test_user_orm.password == new_hash

    async def test_login_email_is_case_insensitive(self, user_service: UserService, test_user_orm: db_models.Users):
        token = await LoginService(user_service).login_user(login_form(f"  {TEST_TEACHER_EMAIL.upper()} ", TEST_PASSWORD))
        assert JWTHandler.decode_token(token.access_token).sub == TEST_TEACHER_EMAIL

    async def test_change_password(self, user_service: UserService, test_user_orm: db_models.Users):
        await user_service.change_password_for_api(
            test_user_orm, user_models.PasswordChange(current_password=TEST_PASSWORD, new_password="new-secret")
        )
        assert HashedPassword.verify("new-secret", test_user_orm.password)

    async def test_change_password_wrong_current_is_400(self, user_service: UserService, test_user_orm: db_models.Users):
        old_hash = test_user_orm.password
        with pytest.raises(HTTPException) as e:
            await user_service.change_password_for_api(
                test_user_orm, user_models.PasswordChange(current_password="guess", new_password="new-secret")
            )
        assert e.value.status_code == 400
        assert test_user_orm.password == old_hash


def test_new_password_must_differ():
    with pytest.raises(ValueError):
        user_models.PasswordChange(current_password="same-one", new_password="same-one")
