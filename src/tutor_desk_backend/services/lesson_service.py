'''
Lessons: listing, weekly grouping, creation, status transitions and deletion.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core import lifecycle
from ..core.aggregation import group_lessons_by_day
from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import lesson as lesson_models
from ..common.logger import log
from .student_service import StudentService


class LessonService:
    """
    Service for lessons and their lifecycle. Lessons are reached through
    the teacher's students; there is no direct teacher column.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        self.db = db
        self.student_service = student_service

    # --- Internal Fetchers ---

    def _teacher_student_ids(self, teacher: db_models.TeacherProfiles):
        return select(db_models.Students.id).filter(db_models.Students.teacher_id == teacher.id)

    async def get_lessons_internal(self, teacher: db_models.TeacherProfiles) -> list[db_models.Lessons]:
        """All of the teacher's lessons, earliest start time first."""
        stmt = select(db_models.Lessons).options(
            selectinload(db_models.Lessons.student)
        ).filter(
            db_models.Lessons.student_id.in_(self._teacher_student_ids(teacher))
        ).order_by(db_models.Lessons.start_time, db_models.Lessons.created_at)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_student_lessons_internal(self, student_id: UUID) -> list[db_models.Lessons]:
        stmt = select(db_models.Lessons).options(
            selectinload(db_models.Lessons.student)
        ).filter(
            db_models.Lessons.student_id == student_id
        ).order_by(db_models.Lessons.start_time)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _get_lesson_internal(self, lesson_id: UUID, teacher: db_models.TeacherProfiles) -> db_models.Lessons:
        """Raises 404 for a missing lesson or one taught to another teacher's student."""
        stmt = select(db_models.Lessons).options(
            selectinload(db_models.Lessons.student)
        ).filter(
            db_models.Lessons.id == lesson_id,
            db_models.Lessons.student_id.in_(self._teacher_student_ids(teacher))
        )
        result = await self.db.execute(stmt)
        lesson = result.scalars().first()
        if not lesson:
            log.warning(f"Teacher {teacher.id} tried to access missing or foreign lesson {lesson_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lesson not found.")
        return lesson

    # --- Public Read Methods (API-Facing) ---

    async def list_lessons_for_api(self, teacher: db_models.TeacherProfiles) -> list[lesson_models.LessonRead]:
        log.info(f"Teacher {teacher.id} listing lessons.")
        try:
            lessons = await self.get_lessons_internal(teacher)
            return [lesson_models.LessonRead.model_validate(lesson) for lesson in lessons]
        except Exception as e:
            log.error(f"Error in list_lessons_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def list_student_lessons_for_api(self, student_id: UUID, teacher: db_models.TeacherProfiles) -> list[lesson_models.LessonRead]:
        log.info(f"Teacher {teacher.id} listing lessons of student {student_id}.")
        try:
            await self.student_service.get_student_internal(student_id, teacher)
            lessons = await self.get_student_lessons_internal(student_id)
            return [lesson_models.LessonRead.model_validate(lesson) for lesson in lessons]
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in list_student_lessons_for_api for student {student_id}: {e}", exc_info=True)
            raise

    async def get_weekly_lessons_for_api(self, teacher: db_models.TeacherProfiles) -> lesson_models.WeeklyLessons:
        """
        The teacher's lessons bucketed Monday..Sunday. Lessons stored with an
        unknown day are left out and counted.
        """
        log.info(f"Teacher {teacher.id} requesting weekly lessons.")
        try:
            lessons = await self.get_lessons_internal(teacher)
            grouping = group_lessons_by_day(lessons)
            if grouping.dropped:
                log.warning(f"{grouping.dropped} lessons of teacher {teacher.id} have an unknown day and were skipped.")
            return lesson_models.WeeklyLessons(
                days=[
                    lesson_models.DayLessons(
                        day=day,
                        lessons=[lesson_models.LessonRead.model_validate(lesson) for lesson in bucket]
                    )
                    for day, bucket in grouping.buckets.items()
                ],
                dropped_count=grouping.dropped,
            )
        except Exception as e:
            log.error(f"Error in get_weekly_lessons_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    # --- Public Write Methods (API-Facing) ---

    async def create_lesson_for_api(
        self,
        data: lesson_models.LessonCreate,
        teacher: db_models.TeacherProfiles
    ) -> lesson_models.LessonRead:
        log.info(f"Teacher {teacher.id} creating a lesson for student {data.student_id}.")
        try:
            await self.student_service.get_student_internal(data.student_id, teacher)

            new_lesson = db_models.Lessons(
                student_id=data.student_id,
                subject=data.subject,
                day_of_week=data.day_of_week.value,
                start_time=data.start_time,
                price_per_hour=data.price_per_hour,
            )
            self.db.add(new_lesson)
            await self.db.flush()
            await self.db.refresh(new_lesson, ['student'])
            return lesson_models.LessonRead.model_validate(new_lesson)

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in create_lesson_for_api: {e}", exc_info=True)
            raise

    async def complete_lesson_for_api(self, lesson_id: UUID, teacher: db_models.TeacherProfiles) -> lesson_models.LessonRead:
        """
        Scheduled or postponed -> completed. Raises InvalidLessonTransitionError
        for a lesson that is already completed.
        """
        log.info(f"Teacher {teacher.id} completing lesson {lesson_id}.")
        lesson = await self._get_lesson_internal(lesson_id, teacher)
        lifecycle.complete(lesson)
        self.db.add(lesson)
        await self.db.flush()
        return lesson_models.LessonRead.model_validate(lesson)

    async def postpone_lesson_for_api(
        self,
        lesson_id: UUID,
        data: lesson_models.LessonPostpone,
        teacher: db_models.TeacherProfiles
    ) -> lesson_models.LessonRead:
        """Scheduled -> postponed, recording the new date and the reason."""
        log.info(f"Teacher {teacher.id} postponing lesson {lesson_id} to {data.postponed_to}.")
        lesson = await self._get_lesson_internal(lesson_id, teacher)
        lifecycle.postpone(lesson, data.postponed_to, data.reason)
        self.db.add(lesson)
        await self.db.flush()
        return lesson_models.LessonRead.model_validate(lesson)

    async def delete_lesson(self, lesson_id: UUID, teacher: db_models.TeacherProfiles) -> bool:
        """
        Unconditional delete from any state. Reminders pointing at the lesson
        are removed first.
        """
        log.info(f"Teacher {teacher.id} attempting to delete lesson {lesson_id}.")
        try:
            lesson = await self._get_lesson_internal(lesson_id, teacher)
            await self.db.execute(
                delete(db_models.Notifications).where(db_models.Notifications.lesson_id == lesson.id)
            )
            await self.db.delete(lesson)
            await self.db.flush()
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in delete_lesson for lesson {lesson_id}: {e}", exc_info=True)
            raise
