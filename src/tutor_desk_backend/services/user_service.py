'''
Account lookups, creation and password changes.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..common.logger import log
from ..common.security_utils import HashedPassword
from ..models import user as user_models


class UserService:
    """
    Base service for user-related database operations.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_user_by_email(self, email: str) -> db_models.Users | None:
        log.info(f"Fetching user for email: {email}")
        try:
            stmt = select(db_models.Users).filter(db_models.Users.email == email.lower())
            result = await self.db.execute(stmt)
            return result.scalars().first()
        except Exception as e:
            log.error(f"Database error fetching user by email {email}: {e}", exc_info=True)
            raise

    async def get_user_by_id(self, user_id: UUID) -> db_models.Users | None:
        log.info(f"Fetching user for ID: {user_id}")
        try:
            return await self.db.get(db_models.Users, user_id)
        except Exception as e:
            log.error(f"Database error fetching user by ID {user_id}: {e}", exc_info=True)
            raise

    async def create_user(self, data: user_models.UserCreate) -> db_models.Users:
        """
        Registers a new account. Emails are stored lower-cased and must be unique.
        """
        email = data.email.lower()
        log.info(f"Attempting to create user {email}")
        try:
            if await self.get_user_by_email(email):
                log.warning(f"Signup rejected, email already registered: {email}")
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="An account with this email already exists."
                )

            new_user = db_models.Users(
                email=email,
                password=HashedPassword.get_hash(data.password),
                is_active=True,
            )
            self.db.add(new_user)
            await self.db.flush()
            log.info(f"Created user {new_user.id} ({email})")
            return new_user

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error creating user {email}: {e}", exc_info=True)
            raise

    async def set_password_hash(self, user: db_models.Users, password_hash: str) -> None:
        user.password = password_hash
        self.db.add(user)
        await self.db.flush()

    async def change_password_for_api(self, user: db_models.Users, data: user_models.PasswordChange) -> None:
        """
        Replaces the password after checking the current one.
        Existing tokens stay valid until they expire.
        """
        log.info(f"User {user.id} changing password.")
        if not HashedPassword.verify(data.current_password, user.password):
            log.warning(f"Password change rejected for user {user.id}: current password is wrong.")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Current password is incorrect."
            )
        try:
            await self.set_password_hash(user, HashedPassword.get_hash(data.new_password))
        except Exception as e:
            log.error(f"Error changing password for user {user.id}: {e}", exc_info=True)
            raise
