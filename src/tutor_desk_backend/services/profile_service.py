'''
Teacher profile: lazy creation, edits, avatar and headline counters.
'''
from decimal import Decimal
from typing import Annotated
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import LessonStatus, PaymentStatus
from ..models import profile as profile_models
from ..common.config import settings
from ..common.exceptions import StorageError
from ..common.logger import log
from .storage_service import StorageService, build_object_path

DEFAULT_TEACHER_NAME = "New Teacher"


class ProfileService:
    """
    Service for the TeacherProfile owned by each account.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        storage_service: Annotated[StorageService, Depends(StorageService)]
    ):
        self.db = db
        self.storage_service = storage_service

    async def get_or_create_profile(
        self,
        user: db_models.Users,
        full_name: str | None = None,
        phone: str | None = None,
        subject: str | None = None
    ) -> db_models.TeacherProfiles:
        """
        Returns the user's profile, creating it on first access. A new
        profile takes the given details; without a name it falls back to the
        local part of the email. An existing profile is returned unchanged.
        """
        try:
            stmt = select(db_models.TeacherProfiles).filter(db_models.TeacherProfiles.user_id == user.id)
            result = await self.db.execute(stmt)
            profile = result.scalars().first()
            if profile:
                return profile

            if not full_name:
                full_name = user.email.split('@')[0] if user.email else ''
            profile = db_models.TeacherProfiles(
                user_id=user.id,
                full_name=full_name or DEFAULT_TEACHER_NAME,
                phone=phone,
                subject=subject,
            )
            self.db.add(profile)
            await self.db.flush()
            log.info(f"Created teacher profile {profile.id} for user {user.id}")
            return profile
        except Exception as e:
            log.error(f"Error in get_or_create_profile for user {user.id}: {e}", exc_info=True)
            raise

    async def update_profile_for_api(
        self,
        profile: db_models.TeacherProfiles,
        data: profile_models.TeacherProfileUpdate
    ) -> profile_models.TeacherProfileRead:
        log.info(f"Teacher {profile.id} updating profile.")
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")
        if "full_name" in update_data and update_data["full_name"] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Full name cannot be empty.")

        try:
            for key, value in update_data.items():
                setattr(profile, key, value)
            self.db.add(profile)
            await self.db.flush()
            return profile_models.TeacherProfileRead.model_validate(profile)
        except Exception as e:
            log.error(f"Error in update_profile_for_api for teacher {profile.id}: {e}", exc_info=True)
            raise

    async def get_stats_for_api(self, profile: db_models.TeacherProfiles) -> profile_models.ProfileStats:
        """
        Students, lessons, completed lessons and the sum of completed payments.
        """
        log.info(f"Teacher {profile.id} requesting profile stats.")
        try:
            student_ids = select(db_models.Students.id).filter(db_models.Students.teacher_id == profile.id)

            total_students = await self.db.scalar(
                select(func.count()).select_from(db_models.Students).filter(db_models.Students.teacher_id == profile.id)
            )
            total_lessons = await self.db.scalar(
                select(func.count()).select_from(db_models.Lessons).filter(db_models.Lessons.student_id.in_(student_ids))
            )
            completed_lessons = await self.db.scalar(
                select(func.count()).select_from(db_models.Lessons).filter(
                    db_models.Lessons.student_id.in_(student_ids),
                    db_models.Lessons.status == LessonStatus.COMPLETED.value
                )
            )
            total_earnings = await self.db.scalar(
                select(func.coalesce(func.sum(db_models.Payments.amount), 0)).filter(
                    db_models.Payments.student_id.in_(student_ids),
                    db_models.Payments.status == PaymentStatus.COMPLETED.value
                )
            )
            return profile_models.ProfileStats(
                total_students=total_students or 0,
                total_lessons=total_lessons or 0,
                completed_lessons=completed_lessons or 0,
                total_earnings=Decimal(str(total_earnings or 0)),
            )
        except Exception as e:
            log.error(f"Error in get_stats_for_api for teacher {profile.id}: {e}", exc_info=True)
            raise

    async def upload_avatar_for_api(
        self,
        profile: db_models.TeacherProfiles,
        filename: str,
        content: bytes,
        content_type: str
    ) -> profile_models.TeacherProfileRead:
        """
        Replaces the avatar. The new file is uploaded and stored on the
        profile before the old one is removed, so a failed upload leaves the
        current avatar in place. A failed cleanup of the old file is logged.
        """
        log.info(f"Teacher {profile.id} uploading a new avatar ({filename}).")
        if not content:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The uploaded file is empty.")
        if not (content_type or "").startswith("image/"):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Avatar must be an image.")
        if len(content) > settings.AVATAR_MAX_BYTES:
            limit_mb = settings.AVATAR_MAX_BYTES // (1024 * 1024)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Avatar must be at most {limit_mb} MB."
            )

        old_path = profile.avatar_url
        path = build_object_path(profile.id, filename)
        await self.storage_service.upload(settings.AVATAR_BUCKET, path, content, content_type)

        try:
            profile.avatar_url = path
            self.db.add(profile)
            await self.db.flush()
        except Exception as e:
            log.error(f"Could not store the new avatar of teacher {profile.id}: {e}", exc_info=True)
            await self._discard_avatar(path)
            raise

        if old_path:
            await self._discard_avatar(old_path)
        return profile_models.TeacherProfileRead.model_validate(profile)

    async def _discard_avatar(self, path: str) -> None:
        try:
            await self.storage_service.remove(settings.AVATAR_BUCKET, path)
        except StorageError as e:
            log.warning(f"Could not remove avatar file {path}: {e}")

    async def remove_avatar_for_api(self, profile: db_models.TeacherProfiles) -> profile_models.TeacherProfileRead:
        log.info(f"Teacher {profile.id} removing avatar.")
        if profile.avatar_url:
            await self.storage_service.remove(settings.AVATAR_BUCKET, profile.avatar_url)
            profile.avatar_url = None
            self.db.add(profile)
            await self.db.flush()
        return profile_models.TeacherProfileRead.model_validate(profile)
