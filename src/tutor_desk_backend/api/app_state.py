'''
API endpoints for the client application state.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..core import app_state
from ..database import models as db_models
from ..models import app_state as app_state_models
from ..services.security import verify_token_and_get_user, get_current_teacher
from ..services.settings_service import SettingsService


class AppStateAPI:
    """
    Serves the state a client starts from, and the slice updates that
    depend on server-side data.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/app-state",
            tags=["Application State"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.get_state,
                methods=["GET"],
                response_model=app_state_models.AppState)

        self.router.add_api_route(
                "/navigation",
                self.navigate,
                methods=["PATCH"],
                response_model=app_state_models.AppState)

        self.router.add_api_route(
                "/theme/toggle",
                self.toggle_theme,
                methods=["POST"],
                response_model=app_state_models.AppState)

    async def _session_state(
        self,
        current_user: db_models.Users,
        teacher: db_models.TeacherProfiles,
        settings_service: SettingsService
    ) -> app_state_models.AppState:
        user_settings = await settings_service.get_settings_internal(current_user.id)
        return app_state.state_for_session(current_user.id, teacher.id, current_user.email, user_settings)

    async def get_state(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)]
    ):
        """
        Auth slice for the caller, default navigation, theme from settings.
        """
        return await self._session_state(current_user, teacher, settings_service)

    async def navigate(
        self,
        navigation_data: app_state_models.NavigationUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)]
    ):
        state = await self._session_state(current_user, teacher, settings_service)
        return app_state.update_navigation(state, navigation_data)

    async def toggle_theme(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        teacher: Annotated[db_models.TeacherProfiles, Depends(get_current_teacher)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)]
    ):
        """
        Switches between light and dark mode and stores the choice in the settings.
        """
        state = app_state.toggle_dark_mode(await self._session_state(current_user, teacher, settings_service))
        await settings_service.update_theme_internal(current_user.id, mode=state.theme.mode)
        return state

# Instantiate the class and export its router
app_state_api = AppStateAPI()
router = app_state_api.router
