'''
Bearer token response and the decoded JWT payload.
'''
from datetime import datetime
from pydantic import BaseModel, EmailStr, Field


class Token(BaseModel):
    """What /auth/login returns. expires_in is in seconds."""
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., gt=0)


class TokenPayload(BaseModel):
    sub: EmailStr
    exp: datetime
    iat: datetime | None = None
    typ: str = "access"
