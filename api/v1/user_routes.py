# =============================================================================
# USERHUB BACKEND - USER ROUTES
# =============================================================================
# File: api/v1/user_routes.py
# Description: User listing and management API endpoints
# =============================================================================

from fastapi import APIRouter, Query

from auth.schemas import (
    UserResponse,
    UserUpdate,
    UserListResponse,
    MessageResponse,
)
from auth.dependencies import AuthServiceDep, CurrentAuth


router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    response_model=UserListResponse,
    summary="List users",
)
async def list_users(
    auth: CurrentAuth,
    auth_service: AuthServiceDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
) -> UserListResponse:
    return await auth_service.list_users(page=page, limit=limit)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
)
async def get_user(
    user_id: str,
    auth: CurrentAuth,
    auth_service: AuthServiceDep,
) -> UserResponse:
    return await auth_service.get_user(user_id)


@router.patch(
    "/{user_id}",
    response_model=UserResponse,
    summary="Update a user",
    description="Users may update themselves; administrators may update anyone.",
)
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    auth: CurrentAuth,
    auth_service: AuthServiceDep,
) -> UserResponse:
    """
    Update a user's profile.

    - **password**: re-hashed before storage
    - **role** / **is_active**: administrators only
    """
    return await auth_service.update_user(
        actor_id=auth.user_id,
        actor_role=auth.role,
        user_id=user_id,
        data=update_data,
    )


@router.delete(
    "/{user_id}",
    response_model=MessageResponse,
    summary="Delete a user",
    description="Permanently delete a user and close their sessions.",
)
async def delete_user(
    user_id: str,
    auth: CurrentAuth,
    auth_service: AuthServiceDep,
) -> MessageResponse:
    await auth_service.delete_user(
        actor_id=auth.user_id,
        actor_role=auth.role,
        user_id=user_id,
    )
    return MessageResponse(message="User deleted successfully", success=True)
