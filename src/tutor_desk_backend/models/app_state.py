'''
Pydantic models for the client application state: one slice each for auth,
navigation and theme.
'''
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from ..database.db_enums import Section, ThemeMode


class AuthState(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    email: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


class NavigationState(BaseModel):
    model_config = ConfigDict(frozen=True)

    section: Section = Section.DASHBOARD
    selected_student_id: Optional[UUID] = None


class ThemeState(BaseModel):
    model_config = ConfigDict(frozen=True)

    mode: ThemeMode = ThemeMode.LIGHT
    primary_color: str = "indigo"


class AppState(BaseModel):
    model_config = ConfigDict(frozen=True)

    auth: AuthState = Field(default_factory=AuthState)
    navigation: NavigationState = Field(default_factory=NavigationState)
    theme: ThemeState = Field(default_factory=ThemeState)


class NavigationUpdate(BaseModel):
    section: Optional[Section] = None
    selected_student_id: Optional[UUID] = None
