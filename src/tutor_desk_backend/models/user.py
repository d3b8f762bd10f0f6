'''
Pydantic models for the authenticated account.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

PASSWORD_MIN_LENGTH = 6


class UserCreate(BaseModel):
    """
    Validates a sign-up request. The optional profile fields pre-fill the
    teacher profile that is created together with the account.
    """
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=128)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    subject: Optional[str] = Field(None, max_length=255)


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=128)

    @model_validator(mode='after')
    def check_passwords_differ(self) -> 'PasswordChange':
        if self.current_password == self.new_password:
            raise ValueError("The new password must differ from the current one.")
        return self


class UserRead(BaseModel):
    id: UUID
    email: EmailStr
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
