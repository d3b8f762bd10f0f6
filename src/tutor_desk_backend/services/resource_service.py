'''
Subject catalog and lesson resources (files in the resources bucket and/or links).
'''
from typing import Annotated, Optional
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import resources as resource_models
from ..common.config import settings
from ..common.exceptions import CascadeDeleteError, StorageError
from ..common.logger import log
from .storage_service import StorageService, build_object_path, download_name


def resource_matches(resource, search: Optional[str]) -> bool:
    """Case-insensitive match on title, description or any tag."""
    if not search or not search.strip():
        return True
    needle = search.strip().lower()
    haystack = [resource.title or "", resource.description or ""] + list(resource.tags or [])
    return any(needle in text.lower() for text in haystack)


class ResourceService:
    """
    Service for subjects and the resources filed under them.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        storage_service: Annotated[StorageService, Depends(StorageService)]
    ):
        self.db = db
        self.storage_service = storage_service

    # --- Internal Fetchers ---

    async def _get_subject_internal(self, subject_id: UUID, teacher: db_models.TeacherProfiles) -> db_models.Subjects:
        stmt = select(db_models.Subjects).filter(
            db_models.Subjects.id == subject_id,
            db_models.Subjects.teacher_id == teacher.id
        )
        result = await self.db.execute(stmt)
        subject = result.scalars().first()
        if not subject:
            log.warning(f"Teacher {teacher.id} tried to access missing or foreign subject {subject_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Subject not found.")
        return subject

    async def _get_resource_internal(self, resource_id: UUID, teacher: db_models.TeacherProfiles) -> db_models.LessonResources:
        stmt = select(db_models.LessonResources).filter(
            db_models.LessonResources.id == resource_id,
            db_models.LessonResources.teacher_id == teacher.id
        )
        result = await self.db.execute(stmt)
        resource = result.scalars().first()
        if not resource:
            log.warning(f"Teacher {teacher.id} tried to access missing or foreign resource {resource_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found.")
        return resource

    # --- Subjects ---

    async def list_subjects_for_api(self, teacher: db_models.TeacherProfiles) -> list[resource_models.SubjectRead]:
        log.info(f"Teacher {teacher.id} listing subjects.")
        try:
            stmt = select(db_models.Subjects).filter(
                db_models.Subjects.teacher_id == teacher.id
            ).order_by(db_models.Subjects.name)
            result = await self.db.execute(stmt)
            return [resource_models.SubjectRead.model_validate(s) for s in result.scalars().all()]
        except Exception as e:
            log.error(f"Error in list_subjects_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def create_subject_for_api(
        self,
        data: resource_models.SubjectCreate,
        teacher: db_models.TeacherProfiles
    ) -> resource_models.SubjectRead:
        log.info(f"Teacher {teacher.id} creating subject '{data.name}'.")
        try:
            subject = db_models.Subjects(
                teacher_id=teacher.id,
                name=data.name,
                description=data.description,
                objectives=list(data.objectives),
            )
            self.db.add(subject)
            await self.db.flush()
            return resource_models.SubjectRead.model_validate(subject)
        except Exception as e:
            log.error(f"Error in create_subject_for_api: {e}", exc_info=True)
            raise

    async def delete_subject(self, subject_id: UUID, teacher: db_models.TeacherProfiles) -> bool:
        """
        Removes every resource file of the subject, then the resource rows,
        then the subject. Files already gone count as removed, so a retry
        after a failure completes the cascade.
        """
        log.info(f"Teacher {teacher.id} attempting to delete subject {subject_id}.")
        subject = await self._get_subject_internal(subject_id, teacher)
        try:
            stmt = select(db_models.LessonResources).filter(db_models.LessonResources.subject_id == subject.id)
            resources = (await self.db.execute(stmt)).scalars().all()

            for resource in resources:
                if resource.file_url:
                    await self.storage_service.remove(settings.RESOURCE_BUCKET, resource.file_url)

            await self.db.execute(
                delete(db_models.LessonResources).where(db_models.LessonResources.subject_id == subject.id)
            )
            await self.db.delete(subject)
            await self.db.flush()
            log.info(f"Deleted subject {subject_id} with {len(resources)} resources.")
            return True
        except Exception as e:
            log.error(f"Cascade delete of subject {subject_id} stopped part way: {e}", exc_info=True)
            raise CascadeDeleteError("The subject could not be deleted. Please try again.") from e

    # --- Resources ---

    async def list_resources_for_api(
        self,
        teacher: db_models.TeacherProfiles,
        subject_id: Optional[UUID] = None,
        search: Optional[str] = None
    ) -> list[resource_models.ResourceRead]:
        """Newest first, optionally narrowed to one subject and a search term."""
        log.info(f"Teacher {teacher.id} listing resources (subject={subject_id}, search={search!r}).")
        try:
            stmt = select(db_models.LessonResources).filter(
                db_models.LessonResources.teacher_id == teacher.id
            ).order_by(db_models.LessonResources.created_at.desc())
            if subject_id is not None:
                stmt = stmt.filter(db_models.LessonResources.subject_id == subject_id)

            result = await self.db.execute(stmt)
            return [
                resource_models.ResourceRead.model_validate(r)
                for r in result.scalars().all()
                if resource_matches(r, search)
            ]
        except Exception as e:
            log.error(f"Error in list_resources_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def create_resource_for_api(
        self,
        data: resource_models.ResourceCreate,
        teacher: db_models.TeacherProfiles,
        filename: Optional[str] = None,
        content: Optional[bytes] = None,
        content_type: Optional[str] = None
    ) -> resource_models.ResourceRead:
        """
        Creates a resource. When a file is attached it is uploaded to the
        resources bucket first and its path stored on the row.
        """
        log.info(f"Teacher {teacher.id} creating resource '{data.title}' under subject {data.subject_id}.")
        try:
            await self._get_subject_internal(data.subject_id, teacher)

            file_path = None
            if content:
                file_path = build_object_path(teacher.id, filename or "file")
                await self.storage_service.upload(
                    settings.RESOURCE_BUCKET, file_path, content, content_type or "application/octet-stream"
                )

            resource = db_models.LessonResources(
                teacher_id=teacher.id,
                subject_id=data.subject_id,
                title=data.title,
                description=data.description,
                link_url=data.link_url,
                tags=list(data.tags),
                file_url=file_path,
            )
            self.db.add(resource)
            try:
                await self.db.flush()
            except Exception:
                if file_path:
                    await self._discard_upload(file_path)
                raise
            return resource_models.ResourceRead.model_validate(resource)

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in create_resource_for_api: {e}", exc_info=True)
            raise

    async def _discard_upload(self, path: str) -> None:
        """Removes a file whose row was never stored."""
        try:
            await self.storage_service.remove(settings.RESOURCE_BUCKET, path)
        except StorageError as e:
            log.warning(f"Could not remove orphaned resource file {path}: {e}")

    async def download_resource(self, resource_id: UUID, teacher: db_models.TeacherProfiles) -> tuple[bytes, str]:
        """Returns the file content and the name to offer it under."""
        log.info(f"Teacher {teacher.id} downloading resource {resource_id}.")
        resource = await self._get_resource_internal(resource_id, teacher)
        if not resource.file_url:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="This resource has no file.")
        content = await self.storage_service.download(settings.RESOURCE_BUCKET, resource.file_url)
        return content, download_name(resource.title, resource.file_url)

    async def delete_resource(self, resource_id: UUID, teacher: db_models.TeacherProfiles) -> bool:
        """File first, then the row."""
        log.info(f"Teacher {teacher.id} attempting to delete resource {resource_id}.")
        resource = await self._get_resource_internal(resource_id, teacher)
        try:
            if resource.file_url:
                await self.storage_service.remove(settings.RESOURCE_BUCKET, resource.file_url)
            await self.db.delete(resource)
            await self.db.flush()
            return True
        except Exception as e:
            log.error(f"Error deleting resource {resource_id}: {e}", exc_info=True)
            raise CascadeDeleteError("The resource could not be deleted. Please try again.") from e
