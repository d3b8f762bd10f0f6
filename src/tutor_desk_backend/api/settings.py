'''
API endpoints for the per-user settings document.
'''
from typing import Annotated
from fastapi import APIRouter, Depends

from ..database import models as db_models
from ..models import settings as settings_models
from ..services.security import verify_token_and_get_user
from ..services.settings_service import SettingsService


class SettingsAPI:
    """
    A class to encapsulate the settings endpoints.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/settings",
            tags=["Settings"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.get_settings,
                methods=["GET"],
                response_model=settings_models.UserSettings,
                response_model_by_alias=True)

        self.router.add_api_route(
                "/",
                self.save_settings,
                methods=["PUT"],
                response_model=settings_models.UserSettings,
                response_model_by_alias=True)

    async def get_settings(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)]
    ):
        """
        The complete settings of the user. Older stored shapes are upgraded.
        """
        return await settings_service.get_settings_for_api(current_user)

    async def save_settings(
        self,
        settings_data: settings_models.UserSettingsUpdate,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        settings_service: Annotated[SettingsService, Depends(SettingsService)]
    ):
        return await settings_service.save_settings_for_api(current_user, settings_data)

# Instantiate the class and export its router
settings_api = SettingsAPI()
router = settings_api.router
