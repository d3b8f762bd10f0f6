'''
API endpoints for Lessons and their lifecycle transitions.
'''
from typing import Annotated, List
from uuid import UUID
from fastapi import APIRouter, Depends, status, Response

from ..database import models as db_models
from ..models import lesson as lesson_models
from ..services.security import get_current_teacher
from ..services.lesson_service import LessonService


class LessonsAPI:
    """
    A class to encapsulate lesson endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/lessons",
            tags=["Lessons"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_lessons,
                methods=["GET"],
                response_model=List[lesson_models.LessonRead])

        self.router.add_api_route(
                "/weekly",
                self.get_weekly_lessons,
                methods=["GET"],
                response_model=lesson_models.WeeklyLessons)

        self.router.add_api_route(
                "/",
                self.create_lesson,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=lesson_models.LessonRead)

        self.router.add_api_route(
                "/{lesson_id}/complete",
                self.complete_lesson,
                methods=["POST"],
                response_model=lesson_models.LessonRead)

        self.router.add_api_route(
                "/{lesson_id}/postpone",
                self.postpone_lesson,
                methods=["POST"],
                response_model=lesson_models.LessonRead)

        self.router.add_api_route(
                "/{lesson_id}",
                self.delete_lesson,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_lessons(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        """
        Every lesson of the teacher's students, earliest start time first.
        """
        return await lesson_service.list_lessons_for_api(teacher)

    async def get_weekly_lessons(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        """
        Lessons in seven weekday buckets, Monday first.
        """
        return await lesson_service.get_weekly_lessons_for_api(teacher)

    async def create_lesson(
        self,
        lesson_data: lesson_models.LessonCreate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        return await lesson_service.create_lesson_for_api(lesson_data, teacher)

    async def complete_lesson(
        self,
        lesson_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        return await lesson_service.complete_lesson_for_api(lesson_id, teacher)

    async def postpone_lesson(
        self,
        lesson_id: UUID,
        postpone_data: lesson_models.LessonPostpone,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        return await lesson_service.postpone_lesson_for_api(lesson_id, postpone_data, teacher)

    async def delete_lesson(
        self,
        lesson_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        await lesson_service.delete_lesson(lesson_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

# Instantiate the class and export its router
lessons_api = LessonsAPI()
router = lessons_api.router
