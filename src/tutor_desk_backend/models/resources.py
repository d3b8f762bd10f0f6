'''
Pydantic models for the subject catalog and its lesson resources.
'''
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _clean_list(values: list[str]) -> list[str]:
    return [v.strip() for v in values if v and v.strip()]


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    objectives: list[str] = []

    @field_validator('objectives')
    @classmethod
    def clean_objectives(cls, value: list[str]) -> list[str]:
        return _clean_list(value)


class SubjectRead(BaseModel):
    id: UUID
    teacher_id: UUID
    name: str
    description: Optional[str] = None
    objectives: list[str] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResourceCreate(BaseModel):
    """
    Metadata of a new resource. The optional file travels separately as an
    upload in the same multipart request.
    """
    subject_id: UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    link_url: Optional[str] = None
    tags: list[str] = []

    @field_validator('tags')
    @classmethod
    def clean_tags(cls, value: list[str]) -> list[str]:
        return _clean_list(value)


class ResourceRead(BaseModel):
    id: UUID
    teacher_id: UUID
    subject_id: UUID
    title: str
    description: Optional[str] = None
    file_url: Optional[str] = None
    link_url: Optional[str] = None
    tags: list[str] = []
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
