"""
User management endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.core.database import get_db
from eventdesk.core.dependencies import get_current_user
from eventdesk.models.user import User
from eventdesk.schemas.user import UserResponse, UsersListResponse, UserUpdateRequest
from eventdesk.services.user_service import UserService

router = APIRouter()


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    """Dependency that constructs UserService."""
    return UserService(db=db)


@router.get("", response_model=UsersListResponse, summary="List users")
async def list_users(
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UsersListResponse:
    """Admins see everyone; other users only see themselves."""
    return await service.list_users(current_user)


@router.get("/{user_id}", response_model=UserResponse, summary="Get a user")
async def get_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    return await service.get_user(user_id, current_user)


@router.patch("/{user_id}", response_model=UserResponse, summary="Update a user")
async def update_user(
    user_id: UUID,
    data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    """``roles`` needs super-admin, ``pricing_plan`` needs admin."""
    return await service.update_user(user_id, data, current_user)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a user")
async def delete_user(
    user_id: UUID,
    current_user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> None:
    """Admins only. Fails with 400 while the user still owns organizations."""
    await service.delete_user(user_id, current_user)
