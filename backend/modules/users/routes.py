"""
User record API endpoints.

CRUD over stored users. Registration is open; every other route needs a
bearer access token. Domain errors (UserNotFoundError, DuplicateUserError,
UserAccessDeniedError) propagate to the app-level exception handlers,
which render them as 404, 409 and 403.
"""

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_user_service
from api.middleware.auth import get_current_user
from shared.models import AuthenticatedUser

from .interfaces import IUserService
from .models import UserCreate, UserListResponse, UserOut, UserUpdate

router = APIRouter()


@router.post("", response_model=UserOut, status_code=201)
async def register_user(
    request: UserCreate,
    service: IUserService = Depends(get_user_service),
) -> UserOut:
    """
    Register a new user with the user role.

    Returns 409 if the email is already taken.
    """
    return await service.register(request)


@router.get("", response_model=UserListResponse)
async def list_users(
    offset: int = Query(default=0, ge=0, description="Number of users to skip"),
    limit: int = Query(default=20, ge=1, le=100, description="Page size"),
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserListResponse:
    """
    List users, oldest first. Admin only.

    An offset past the end returns an empty list.
    """
    return await service.list_users(user, offset, limit)


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserOut:
    return await service.get_user(user, user_id)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    request: UserUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> UserOut:
    """
    Update a user's profile or password. Only admins may change a role.
    """
    return await service.update_user(user, user_id, request)


@router.delete("/{user_id}")
async def remove_user(
    user_id: str,
    user: AuthenticatedUser = Depends(get_current_user),
    service: IUserService = Depends(get_user_service),
) -> dict:
    await service.remove_user(user, user_id)
    return {"success": True}
