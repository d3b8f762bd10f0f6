'''
Students of a teacher, together with the weekly lessons entered on the
student form.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import student as student_models
from ..common.exceptions import CascadeDeleteError
from ..common.logger import log


class StudentService:
    """
    Service for all business logic related to students.
    Every query is scoped by the resolved teacher profile.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    # --- Internal Fetchers ---

    async def get_student_internal(self, student_id: UUID, teacher: db_models.TeacherProfiles) -> db_models.Students:
        """
        Fetches one of the teacher's students. Raises 404 if it does not
        exist or belongs to another teacher.
        """
        stmt = select(db_models.Students).filter(
            db_models.Students.id == student_id,
            db_models.Students.teacher_id == teacher.id
        )
        result = await self.db.execute(stmt)
        student = result.scalars().first()
        if not student:
            log.warning(f"Teacher {teacher.id} tried to access missing or foreign student {student_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
        return student

    async def get_students_internal(self, teacher: db_models.TeacherProfiles) -> list[db_models.Students]:
        stmt = select(db_models.Students).filter(
            db_models.Students.teacher_id == teacher.id
        ).order_by(db_models.Students.full_name)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    def _new_lessons(self, student_id: UUID, lessons: list[student_models.StudentLessonInput]) -> list[db_models.Lessons]:
        return [
            db_models.Lessons(
                student_id=student_id,
                subject=lesson.subject,
                day_of_week=lesson.day_of_week.value,
                start_time=lesson.start_time,
                price_per_hour=lesson.price_per_hour,
            )
            for lesson in lessons
        ]

    async def _delete_lessons_of(self, student_id: UUID):
        """Reminders first, then the lessons they point at."""
        lesson_ids = select(db_models.Lessons.id).filter(db_models.Lessons.student_id == student_id)
        await self.db.execute(
            delete(db_models.Notifications).where(db_models.Notifications.lesson_id.in_(lesson_ids))
        )
        await self.db.execute(
            delete(db_models.Lessons).where(db_models.Lessons.student_id == student_id)
        )

    # --- Public Read Methods (API-Facing) ---

    async def list_students_for_api(self, teacher: db_models.TeacherProfiles) -> list[student_models.StudentRead]:
        log.info(f"Teacher {teacher.id} listing students.")
        try:
            students = await self.get_students_internal(teacher)
            return [student_models.StudentRead.model_validate(s) for s in students]
        except Exception as e:
            log.error(f"Error in list_students_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def get_student_for_api(self, student_id: UUID, teacher: db_models.TeacherProfiles) -> student_models.StudentRead:
        log.info(f"Teacher {teacher.id} requesting student {student_id}.")
        try:
            student = await self.get_student_internal(student_id, teacher)
            return student_models.StudentRead.model_validate(student)
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in get_student_for_api for student {student_id}: {e}", exc_info=True)
            raise

    # --- Public Write Methods (API-Facing) ---

    async def create_student_for_api(
        self,
        data: student_models.StudentCreate,
        teacher: db_models.TeacherProfiles
    ) -> student_models.StudentRead:
        """
        Creates the student, then inserts any lessons sent with it.
        """
        log.info(f"Teacher {teacher.id} creating student '{data.full_name}' with {len(data.lessons)} lessons.")
        try:
            new_student = db_models.Students(
                teacher_id=teacher.id,
                full_name=data.full_name,
                grade=data.grade,
                phone=data.phone,
                parent_name=data.parent_name,
                parent_phone=data.parent_phone,
            )
            self.db.add(new_student)
            await self.db.flush()

            if data.lessons:
                self.db.add_all(self._new_lessons(new_student.id, data.lessons))
                await self.db.flush()

            return student_models.StudentRead.model_validate(new_student)
        except Exception as e:
            log.error(f"Error in create_student_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def update_student_for_api(
        self,
        student_id: UUID,
        data: student_models.StudentUpdate,
        teacher: db_models.TeacherProfiles
    ) -> student_models.StudentRead:
        """
        Applies the sent fields. A 'lessons' list replaces every lesson of
        the student (and the reminders attached to them).
        """
        log.info(f"Teacher {teacher.id} updating student {student_id}.")
        try:
            student = await self.get_student_internal(student_id, teacher)

            update_data = data.model_dump(exclude_unset=True, exclude={"lessons"})
            replace_lessons = "lessons" in data.model_fields_set and data.lessons is not None

            if not update_data and not replace_lessons:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields provided to update.")
            if "full_name" in update_data and update_data["full_name"] is None:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Full name cannot be empty.")

            for key, value in update_data.items():
                setattr(student, key, value)
            self.db.add(student)

            if replace_lessons:
                await self._delete_lessons_of(student.id)
                self.db.add_all(self._new_lessons(student.id, data.lessons))

            await self.db.flush()
            return student_models.StudentRead.model_validate(student)

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in update_student_for_api for student {student_id}: {e}", exc_info=True)
            raise

    async def delete_student(self, student_id: UUID, teacher: db_models.TeacherProfiles) -> bool:
        """
        Deletes leaf-first: reminders, lessons, then the student. Payments
        and timetable entries go with the student through ON DELETE CASCADE.
        """
        log.info(f"Teacher {teacher.id} attempting to delete student {student_id}.")
        student = await self.get_student_internal(student_id, teacher)
        try:
            await self.db.execute(
                delete(db_models.Notifications).where(db_models.Notifications.student_id == student.id)
            )
            await self._delete_lessons_of(student.id)
            await self.db.execute(
                delete(db_models.Students).where(
                    db_models.Students.id == student.id,
                    db_models.Students.teacher_id == teacher.id
                )
            )
            return True
        except Exception as e:
            log.error(f"Cascade delete of student {student_id} stopped part way: {e}", exc_info=True)
            raise CascadeDeleteError("The student could not be deleted. Please try again.") from e
