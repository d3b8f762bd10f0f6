'''
Login: checks the credentials and issues the bearer token.
'''
from typing import Annotated
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from .security import JWTHandler
from .user_service import UserService
from ..common.config import settings
from ..common.security_utils import HashedPassword
from ..models import token as token_models
from ..common.logger import log

INVALID_LOGIN = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Incorrect email or password",
    headers={"WWW-Authenticate": "Bearer"},
)


class LoginService:
    """
    Exchanges an email and password for an access token.
    A stored hash made with outdated settings is re-hashed on a successful login.
    """
    def __init__(
        self,
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        self.user_service = user_service

    async def login_user(self, form_data: OAuth2PasswordRequestForm) -> token_models.Token:
        email = form_data.username.strip().lower()
        log.info(f"Login attempt for {email}")

        user = await self.user_service.get_user_by_email(email)
        if not user:
            log.warning(f"Login failed for {email}: no such account.")
            raise INVALID_LOGIN

        valid, new_hash = HashedPassword.verify_and_update(form_data.password, user.password)
        if not valid:
            log.warning(f"Login failed for {email}: wrong password.")
            raise INVALID_LOGIN

        if not user.is_active:
            log.warning(f"Login refused for {email}: account is inactive.")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user.")

        if new_hash:
            log.info(f"Upgrading the password hash of user {user.id}.")
            await self.user_service.set_password_hash(user, new_hash)

        token = JWTHandler.create_access_token(subject=user.email)
        log.info(f"Login successful for {email}")
        return token_models.Token(
            access_token=token,
            expires_in=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
