"""
Tenant schemas.

Request/response models for organization/team and member management endpoints.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

SLUG_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*[a-z0-9]$")


def _validate_slug(v: str | None) -> str | None:
    if v is None:
        return v
    if not SLUG_PATTERN.match(v):
        raise ValueError(
            "Slug must be lowercase alphanumeric and hyphens only, "
            "and cannot start or end with a hyphen"
        )
    return v


# ---------------------------------------------------------------------------
# Tenant
# ---------------------------------------------------------------------------

class TenantCreateRequest(BaseModel):
    """Request body for POST /tenants."""

    name: str = Field(min_length=2, max_length=100)
    slug: str = Field(min_length=3, max_length=120)
    kind: str = Field(default="organization", pattern="^(organization|team)$")
    email_config: dict[str, Any] | None = None

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str) -> str:
        return _validate_slug(v)  # type: ignore[return-value]


class TenantUpdateRequest(BaseModel):
    """Request body for PATCH /tenants/{tenant_id}."""

    name: str | None = Field(default=None, min_length=2, max_length=100)
    slug: str | None = Field(default=None, min_length=3, max_length=120)
    email_config: dict[str, Any] | None = None

    @field_validator("slug")
    @classmethod
    def slug_must_be_valid(cls, v: str | None) -> str | None:
        return _validate_slug(v)


class TenantResponse(BaseModel):
    id: UUID
    kind: str
    name: str
    slug: str
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TenantsListResponse(BaseModel):
    tenants: list[TenantResponse]
    total: int


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

class MemberResponse(BaseModel):
    """Single tenant member with user info and role."""

    user_id: UUID
    email: str
    display_name: str
    role: str
    joined_at: datetime | None = None


class MemberEntry(BaseModel):
    """
    One member in a full member-list update.

    Entries give either ``user_id`` (an existing account) or ``email``. Email
    entries are not stored as members; they are invited instead and join on
    acceptance.
    """

    user_id: UUID | None = None
    email: EmailStr | None = None
    role: str = Field(default="editor", pattern="^(admin|editor|viewer)$")

    @model_validator(mode="after")
    def user_or_email(self) -> MemberEntry:
        if (self.user_id is None) == (self.email is None):
            raise ValueError("Give exactly one of user_id or email")
        if self.email is not None and self.role == "admin":
            raise ValueError("Invited members join as editor or viewer")
        return self


class MembersUpdateRequest(BaseModel):
    """Request body for PUT /tenants/{tenant_id}/members: the full member list."""

    members: list[MemberEntry]


class MembersListResponse(BaseModel):
    members: list[MemberResponse]
    total: int
    invited: list[str] = Field(default_factory=list)
