'''
API endpoints for the authenticated account.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, Response, status

from ..database import models as db_models
from ..models import user as user_models
from ..services.security import verify_token_and_get_user
from ..services.user_service import UserService


class UserAPI:
    """Account endpoints. Profile details live under /profile."""
    def __init__(self):
        self.router = APIRouter(
            prefix="/users",
            tags=["Users"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/me",
                self.read_users_me,
                methods=["GET"],
                response_model=user_models.UserRead)

        self.router.add_api_route(
                "/me/password",
                self.change_password,
                methods=["POST"],
                status_code=status.HTTP_204_NO_CONTENT)

    async def read_users_me(
        self,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)]
    ):
        return current_user

    async def change_password(
        self,
        data: user_models.PasswordChange,
        current_user: Annotated[db_models.Users, Depends(verify_token_and_get_user)],
        user_service: Annotated[UserService, Depends(UserService)]
    ):
        await user_service.change_password_for_api(current_user, data)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

user_api = UserAPI()
router = user_api.router
