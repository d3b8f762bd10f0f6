'''
Weekly timetable: the teacher's configured time slots and the entries
booked into them. Entries are independent of Lesson rows.
'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.aggregation import build_schedule_grid
from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import schedule as schedule_models
from ..common.logger import log
from .student_service import StudentService


class ScheduleService:
    """
    Service for the timetable grid.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        self.db = db
        self.student_service = student_service

    # --- Time slots ---

    async def _get_or_create_slots_row(self, teacher: db_models.TeacherProfiles) -> db_models.TeacherTimeSlots:
        row = await self.db.get(db_models.TeacherTimeSlots, teacher.id)
        if row is None:
            log.info(f"No time slots stored for teacher {teacher.id}; inserting defaults.")
            row = db_models.TeacherTimeSlots(
                teacher_id=teacher.id,
                time_slots=list(schedule_models.DEFAULT_TIME_SLOTS),
            )
            self.db.add(row)
            await self.db.flush()
        return row

    async def get_time_slots_internal(self, teacher: db_models.TeacherProfiles) -> list[str]:
        row = await self._get_or_create_slots_row(teacher)
        return list(row.time_slots or [])

    async def get_time_slots_for_api(self, teacher: db_models.TeacherProfiles) -> schedule_models.TimeSlotsRead:
        log.info(f"Teacher {teacher.id} requesting time slots.")
        try:
            row = await self._get_or_create_slots_row(teacher)
            return schedule_models.TimeSlotsRead.model_validate(row)
        except Exception as e:
            log.error(f"Error in get_time_slots_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def update_time_slots_for_api(
        self,
        data: schedule_models.TimeSlotsUpdate,
        teacher: db_models.TeacherProfiles
    ) -> schedule_models.TimeSlotsRead:
        """Replaces the slot list (already validated, distinct and sorted)."""
        log.info(f"Teacher {teacher.id} replacing time slots with {data.time_slots}.")
        try:
            row = await self._get_or_create_slots_row(teacher)
            # New list object so the JSON column registers the change
            row.time_slots = list(data.time_slots)
            self.db.add(row)
            await self.db.flush()
            return schedule_models.TimeSlotsRead.model_validate(row)
        except Exception as e:
            log.error(f"Error in update_time_slots_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    # --- Entries ---

    async def get_entries_internal(self, teacher: db_models.TeacherProfiles) -> list[db_models.ScheduleEntries]:
        stmt = select(db_models.ScheduleEntries).options(
            selectinload(db_models.ScheduleEntries.student)
        ).filter(
            db_models.ScheduleEntries.teacher_id == teacher.id
        ).order_by(db_models.ScheduleEntries.time_slot, db_models.ScheduleEntries.created_at)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def list_entries_for_api(self, teacher: db_models.TeacherProfiles) -> list[schedule_models.ScheduleEntryRead]:
        log.info(f"Teacher {teacher.id} listing schedule entries.")
        try:
            entries = await self.get_entries_internal(teacher)
            return [schedule_models.ScheduleEntryRead.model_validate(e) for e in entries]
        except Exception as e:
            log.error(f"Error in list_entries_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise

    async def create_entry_for_api(
        self,
        data: schedule_models.ScheduleEntryCreate,
        teacher: db_models.TeacherProfiles
    ) -> schedule_models.ScheduleEntryRead:
        """
        Books a student into a (day, slot). The slot must be one of the
        teacher's configured slots.
        """
        log.info(f"Teacher {teacher.id} booking student {data.student_id} on {data.day_of_week.value} {data.time_slot}.")
        try:
            await self.student_service.get_student_internal(data.student_id, teacher)

            slots = await self.get_time_slots_internal(teacher)
            if data.time_slot not in slots:
                log.warning(f"Teacher {teacher.id} used unconfigured time slot {data.time_slot}")
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Time slot {data.time_slot} is not one of your configured slots."
                )

            new_entry = db_models.ScheduleEntries(
                teacher_id=teacher.id,
                student_id=data.student_id,
                subject=data.subject,
                day_of_week=data.day_of_week.value,
                time_slot=data.time_slot,
            )
            self.db.add(new_entry)
            await self.db.flush()
            await self.db.refresh(new_entry, ['student'])
            return schedule_models.ScheduleEntryRead.model_validate(new_entry)

        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in create_entry_for_api: {e}", exc_info=True)
            raise

    async def delete_entry(self, entry_id: UUID, teacher: db_models.TeacherProfiles) -> bool:
        log.info(f"Teacher {teacher.id} attempting to delete schedule entry {entry_id}.")
        try:
            stmt = select(db_models.ScheduleEntries).filter(
                db_models.ScheduleEntries.id == entry_id,
                db_models.ScheduleEntries.teacher_id == teacher.id
            )
            result = await self.db.execute(stmt)
            entry = result.scalars().first()
            if not entry:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Schedule entry not found.")
            await self.db.delete(entry)
            await self.db.flush()
            return True
        except HTTPException as http_exc:
            raise http_exc
        except Exception as e:
            log.error(f"Error in delete_entry for entry {entry_id}: {e}", exc_info=True)
            raise

    # --- Grid ---

    async def get_grid_for_api(self, teacher: db_models.TeacherProfiles) -> schedule_models.ScheduleGrid:
        """Rows are the configured slots, columns Monday..Sunday."""
        log.info(f"Teacher {teacher.id} requesting the schedule grid.")
        try:
            slots = await self.get_time_slots_internal(teacher)
            entries = await self.get_entries_internal(teacher)
            return build_schedule_grid(slots, entries)
        except Exception as e:
            log.error(f"Error in get_grid_for_api for teacher {teacher.id}: {e}", exc_info=True)
            raise
