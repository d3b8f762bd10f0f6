'''
API endpoints for the weekly timetable: time slots, entries and the grid.
'''
from typing import Annotated, List
from uuid import UUID
from fastapi import APIRouter, Depends, status, Response

from ..database import models as db_models
from ..models import schedule as schedule_models
from ..services.security import get_current_teacher
from ..services.schedule_service import ScheduleService


class ScheduleAPI:
    """
    A class to encapsulate the timetable endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/schedule",
            tags=["Schedule"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/time-slots",
                self.get_time_slots,
                methods=["GET"],
                response_model=schedule_models.TimeSlotsRead)

        self.router.add_api_route(
                "/time-slots",
                self.update_time_slots,
                methods=["PUT"],
                response_model=schedule_models.TimeSlotsRead)

        self.router.add_api_route(
                "/entries",
                self.list_entries,
                methods=["GET"],
                response_model=List[schedule_models.ScheduleEntryRead])

        self.router.add_api_route(
                "/entries",
                self.create_entry,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=schedule_models.ScheduleEntryRead)

        self.router.add_api_route(
                "/entries/{entry_id}",
                self.delete_entry,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)

        self.router.add_api_route(
                "/grid",
                self.get_grid,
                methods=["GET"],
                response_model=schedule_models.ScheduleGrid)

    async def get_time_slots(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ):
        """
        The configured slots; the defaults are stored on first access.
        """
        return await schedule_service.get_time_slots_for_api(teacher)

    async def update_time_slots(
        self,
        slots_data: schedule_models.TimeSlotsUpdate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ):
        return await schedule_service.update_time_slots_for_api(slots_data, teacher)

    async def list_entries(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ):
        return await schedule_service.list_entries_for_api(teacher)

    async def create_entry(
        self,
        entry_data: schedule_models.ScheduleEntryCreate,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ):
        return await schedule_service.create_entry_for_api(entry_data, teacher)

    async def delete_entry(
        self,
        entry_id: UUID,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ):
        await schedule_service.delete_entry(entry_id, teacher)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def get_grid(
        self,
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        schedule_service: Annotated[ScheduleService, Depends(ScheduleService)]
    ):
        """
        One row per time slot, one column per weekday.
        """
        return await schedule_service.get_grid_for_api(teacher)

# Instantiate the class and export its router
schedule_api = ScheduleAPI()
router = schedule_api.router
