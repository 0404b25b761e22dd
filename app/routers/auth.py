"""
Authentication API endpoints for registration, login and profile management.
Issues bearer tokens and gates profile routes on the authenticated user.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, status
from app.models.user import User
from app.services.auth import AuthService
from app.services.notification import NotificationService, dispatch_notification
from app.schemas.common import APIResponse
from app.schemas.auth import LoginRequest, AuthData
from app.schemas.user import UserRegister, ProfileUpdate, UserResponse, UserData
from app.utils.dependencies import (
    get_auth_service,
    get_notification_service,
    require_permission,
)
from app.utils.permissions import Permission
from app.utils.exceptions import APIException, InternalServerError
from app.config import settings
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_data(user: User, token: str) -> AuthData:
    return AuthData(user=UserResponse.model_validate(user), token=token)


@router.post(
    "/register",
    response_model=APIResponse[AuthData],
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    description="Create a user account and return it with a session token"
)
async def register(
    user_data: UserRegister,
    background_tasks: BackgroundTasks,
    auth_service: AuthService = Depends(get_auth_service),
    notifications: NotificationService = Depends(get_notification_service)
) -> APIResponse[AuthData]:
    """
    Register a new user.

    Raises:
        ConflictError: If the phone or email is already registered
    """
    try:
        user, token = await auth_service.register(user_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Registration failed: {e}", exc_info=True)
        raise InternalServerError("Server error during registration")

    if user.email:
        background_tasks.add_task(
            dispatch_notification, notifications.send_welcome_email, user.email, user.name
        )

    return APIResponse(
        message=f"Registration successful! Welcome to {settings.app_name}.",
        data=_auth_data(user, token)
    )


@router.post(
    "/login",
    response_model=APIResponse[AuthData],
    status_code=status.HTTP_200_OK,
    summary="User login",
    description="Authenticate with phone number and password"
)
async def login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> APIResponse[AuthData]:
    """
    Raises:
        InvalidCredentialsError: Unknown phone or wrong password
        InactiveUserError: Account is deactivated
    """
    try:
        user, token = await auth_service.login(login_data.phone, login_data.password)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Login failed: {e}", exc_info=True)
        raise InternalServerError("Server error during login")

    return APIResponse(
        message="Login successful! Welcome back.",
        data=_auth_data(user, token)
    )


@router.post(
    "/admin/login",
    response_model=APIResponse[AuthData],
    status_code=status.HTTP_200_OK,
    summary="Admin login",
    description="Authenticate an administrator; the token carries the admin role"
)
async def admin_login(
    login_data: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> APIResponse[AuthData]:
    try:
        user, token = await auth_service.admin_login(login_data.phone, login_data.password)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Admin login failed: {e}", exc_info=True)
        raise InternalServerError("Server error during admin login")

    return APIResponse(
        message="Admin login successful!",
        data=_auth_data(user, token)
    )


@router.get(
    "/me",
    response_model=APIResponse[UserData],
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get the authenticated user's profile"
)
async def get_me(
    current_user: User = Depends(require_permission(Permission.VIEW_PROFILE)),
    auth_service: AuthService = Depends(get_auth_service)
) -> APIResponse[UserData]:
    try:
        user = await auth_service.get_profile(current_user.id)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Profile fetch failed for {current_user.id}: {e}", exc_info=True)
        raise InternalServerError("Server error while fetching profile")

    return APIResponse(data=UserData(user=UserResponse.model_validate(user)))


@router.put(
    "/profile",
    response_model=APIResponse[UserData],
    status_code=status.HTTP_200_OK,
    summary="Update profile",
    description="Change the authenticated user's name or phone number"
)
async def update_profile(
    profile_data: ProfileUpdate,
    current_user: User = Depends(require_permission(Permission.UPDATE_PROFILE)),
    auth_service: AuthService = Depends(get_auth_service)
) -> APIResponse[UserData]:
    """
    Raises:
        ConflictError: If the new phone belongs to another user
    """
    try:
        user = await auth_service.update_profile(current_user.id, profile_data)
    except APIException:
        raise
    except Exception as e:
        logger.error(f"Profile update failed for {current_user.id}: {e}", exc_info=True)
        raise InternalServerError("Server error while updating profile")

    return APIResponse(
        message="Profile updated successfully",
        data=UserData(user=UserResponse.model_validate(user))
    )
