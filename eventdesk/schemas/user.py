"""
User schemas.
"""

from __future__ import annotations

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    """Public user representation returned in API responses."""

    id: UUID
    email: str
    display_name: str
    roles: list[str]
    pricing_plan: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdateRequest(BaseModel):
    """PATCH /users/{user_id}. ``roles`` and ``pricing_plan`` are admin fields."""

    display_name: str | None = Field(default=None, min_length=2, max_length=100)
    roles: list[Literal["super-admin", "admin", "user"]] | None = None
    pricing_plan: str | None = Field(
        default=None, pattern="^(free|pro|organizations|unlimited)$"
    )


class UsersListResponse(BaseModel):
    users: list[UserResponse]
    total: int
