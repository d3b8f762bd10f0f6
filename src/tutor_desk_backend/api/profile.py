'''
API endpoints for the teacher profile, its counters and avatar.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, UploadFile, File

from ..database import models as db_models
from ..models import profile as profile_models
from ..services.security import get_current_teacher
from ..services.profile_service import ProfileService


class ProfileAPI:
    """
    Endpoints acting on the caller's own TeacherProfile.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/profile",
            tags=["Profile"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.get_profile,
                methods=["GET"],
                response_model=profile_models.TeacherProfileRead)

        self.router.add_api_route(
                "/",
                self.update_profile,
                methods=["PATCH"],
                response_model=profile_models.TeacherProfileRead)

        self.router.add_api_route(
                "/stats",
                self.get_stats,
                methods=["GET"],
                response_model=profile_models.ProfileStats)

        self.router.add_api_route(
                "/avatar",
                self.upload_avatar,
                methods=["POST"],
                response_model=profile_models.TeacherProfileRead)

        self.router.add_api_route(
                "/avatar",
                self.remove_avatar,
                methods=["DELETE"],
                response_model=profile_models.TeacherProfileRead)

    async def get_profile(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)]
    ):
        return profile_models.TeacherProfileRead.model_validate(teacher)

    async def update_profile(
        self,
        profile_data: profile_models.TeacherProfileUpdate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.update_profile_for_api(teacher, profile_data)

    async def get_stats(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        """
        Total students, lessons, completed lessons and earnings.
        """
        return await profile_service.get_stats_for_api(teacher)

    async def upload_avatar(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)],
        file: UploadFile = File(...)
    ):
        """
        Replaces the avatar image. The previous file is removed from storage.
        """
        content = await file.read()
        return await profile_service.upload_avatar_for_api(
            teacher, file.filename or "avatar", content, file.content_type or ""
        )

    async def remove_avatar(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        return await profile_service.remove_avatar_for_api(teacher)

# Instantiate the class and export its router
profile_api = ProfileAPI()
router = profile_api.router
