"""
Participant / partner registration schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class RegistrationCreateRequest(BaseModel):
    """Public registration form. The tenant is derived from the event."""

    event_id: UUID
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    company: str | None = Field(default=None, max_length=200)
    status: str | None = Field(default=None, pattern="^(approved|not-approved)$")


class RegistrationResponse(BaseModel):
    id: UUID
    event_id: UUID
    tenant_id: UUID
    name: str
    email: str
    company: str | None
    status: str
    registration_date: datetime | None

    model_config = {"from_attributes": True}


class RegistrationsListResponse(BaseModel):
    registrations: list[RegistrationResponse]
    total: int
