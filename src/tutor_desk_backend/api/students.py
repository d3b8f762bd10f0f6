'''
API endpoints for managing Students.
'''
from typing import Annotated, List
from uuid import UUID
from fastapi import APIRouter, Depends, status, Response

from ..database import models as db_models
from ..models import student as student_models
from ..models import lesson as lesson_models
from ..services.security import get_current_teacher
from ..services.student_service import StudentService
from ..services.lesson_service import LessonService


class StudentsAPI:
    """
    A class to encapsulate CRUD endpoints for Students.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/students",
            tags=["Students"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_students,
                methods=["GET"],
                response_model=List[student_models.StudentRead])

        self.router.add_api_route(
                "/{student_id}",
                self.get_student,
                methods=["GET"],
                response_model=student_models.StudentRead)

        self.router.add_api_route(
                "/{student_id}/lessons",
                self.list_student_lessons,
                methods=["GET"],
                response_model=List[lesson_models.LessonRead])

        self.router.add_api_route(
                "/",
                self.create_student,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=student_models.StudentRead)

        self.router.add_api_route(
                "/{student_id}",
                self.update_student,
                methods=["PATCH"],
                response_model=student_models.StudentRead)

        self.router.add_api_route(
                "/{student_id}",
                self.delete_student,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def list_students(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        """
        All students of the current teacher, ordered by name.
        """
        return await student_service.list_students_for_api(teacher)

    async def get_student(
        self,
        student_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        return await student_service.get_student_for_api(student_id, teacher)

    async def list_student_lessons(
        self,
        student_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        lesson_service: Annotated[LessonService, Depends(LessonService)]
    ):
        return await lesson_service.list_student_lessons_for_api(student_id, teacher)

    async def create_student(
        self,
        student_data: student_models.StudentCreate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        """
        Creates a student, optionally with its weekly lessons.
        """
        return await student_service.create_student_for_api(student_data, teacher)

    async def update_student(
        self,
        student_id: UUID,
        student_data: student_models.StudentUpdate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        return await student_service.update_student_for_api(student_id, student_data, teacher)

    async def delete_student(
        self,
        student_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        """
        Deletes the student with its reminders, lessons, payments and schedule entries.
        """
        await student_service.delete_student(student_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

# Instantiate the class and export its router
students_api = StudentsAPI()
router = students_api.router
