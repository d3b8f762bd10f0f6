'''
API endpoints for signing up and logging in.
'''
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from ..services.auth_service import LoginService
from ..services.profile_service import ProfileService
from ..services.user_service import UserService
from ..models import token as token_models
from ..models import user as user_models
from ..common.logger import log


class AuthRoutes:
    """
    Signup and login. Signing out is the client discarding its token,
    so there is no endpoint for it.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/auth",
            tags=["Authentication"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
            "/signup",
            self.signup,
            methods=["POST"],
            response_model=user_models.UserRead,
            status_code=status.HTTP_201_CREATED,
            summary="Create a teacher account"
        )
        self.router.add_api_route(
            "/login",
            self.login_for_access_token,
            methods=["POST"],
            response_model=token_models.Token,
            summary="Exchange email and password for a bearer token"
        )

    async def signup(
        self,
        user_data: user_models.UserCreate,
        user_service: Annotated[UserService, Depends(UserService)],
        profile_service: Annotated[ProfileService, Depends(ProfileService)]
    ):
        """
        Creates the account and its teacher profile in one transaction.
        """
        new_user = await user_service.create_user(user_data)
        await profile_service.get_or_create_profile(
            new_user,
            full_name=user_data.full_name,
            phone=user_data.phone,
            subject=user_data.subject,
        )
        return user_models.UserRead.model_validate(new_user)

    async def login_for_access_token(
        self,
        form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
        login_service: Annotated[LoginService, Depends(LoginService)]
    ):
        """
        OAuth2 password form: the username field carries the email.
        """
        try:
            return await login_service.login_user(form_data)
        except HTTPException:
            raise
        except Exception as e:
            log.error(f"Unexpected error during login: {e}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="An internal server error occurred during login.",
            )

auth_routes = AuthRoutes()
router = auth_routes.router
