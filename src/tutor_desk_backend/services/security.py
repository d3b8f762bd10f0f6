'''
JWT handling and the dependencies that resolve the caller.
'''
from datetime import datetime, timedelta, timezone
from typing import Optional, Annotated
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from ..common.config import settings
from ..models.token import TokenPayload
from ..common.logger import log
from ..database import models as db_models
from .user_service import UserService
from .profile_service import ProfileService

ACCESS_TOKEN_TYPE = "access"


class JWTHandler:
    """
    Signs and reads the bearer tokens. The subject is the account email;
    tokens carry their type so that other signed payloads are never
    accepted as logins.
    """
    @staticmethod
    def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
        issued_at = datetime.now(timezone.utc)
        lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        claims = {
            "sub": str(subject),
            "iat": issued_at,
            "exp": issued_at + lifetime,
            "typ": ACCESS_TOKEN_TYPE,
        }
        return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

    @staticmethod
    def decode_token(token: str) -> TokenPayload | None:
        """Returns None for an expired, tampered or malformed token."""
        if not token:
            return None
        try:
            claims = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            payload = TokenPayload(**claims)
        except (JWTError, ValueError) as e:
            log.warning(f"Rejected bearer token: {e}")
            return None
        if payload.typ != ACCESS_TOKEN_TYPE:
            log.warning(f"Rejected bearer token of type {payload.typ!r}.")
            return None
        return payload


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Could not validate credentials",
    headers={"WWW-Authenticate": "Bearer"},
)


async def resolve_user_from_token(token: str, user_service: UserService) -> db_models.Users:
    """
    Decodes the token and loads its active user. Raises 401 otherwise.
    Shared by the bearer dependency and the websocket handshake.
    """
    token_data = JWTHandler.decode_token(token)
    if not token_data or not token_data.sub:
        log.warning("JWT decode failed or invalid token structure.")
        raise CREDENTIALS_EXCEPTION

    user = await user_service.get_user_by_email(token_data.sub)

    if user is None:
        log.warning(f"User '{token_data.sub}' not found during token verification.")
        raise CREDENTIALS_EXCEPTION

    if not user.is_active:
        log.warning(f"User '{token_data.sub}' is not active.")
        raise CREDENTIALS_EXCEPTION

    log.info(f"JWT verified successfully for user: {user.email}")
    return user


async def verify_token_and_get_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    user_service: Annotated[UserService, Depends(UserService)]
    ) -> db_models.Users:
    """
    Dependency: verifies the bearer token and returns the account.
    """
    return await resolve_user_from_token(token, user_service)


async def get_current_teacher(
    current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
    profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ) -> db_models.TeacherProfiles:
    """
    Dependency: the teacher profile of the caller, created on first use.
    Every teacher-scoped query filters by this profile's id.
    """
    return await profile_service.get_or_create_profile(current_user)
