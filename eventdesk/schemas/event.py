"""
Event schemas.

Dates without an offset are taken to be UTC.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class EventCreateRequest(BaseModel):
    """Request body for POST /events. ``tenant_id`` may be omitted for single-organization users."""

    tenant_id: UUID | None = None
    name: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=220)
    status: str = Field(default="planning", pattern="^(planning|open|closed|archived)$")
    start_date: datetime
    end_date: datetime | None = None
    timezone: str | None = Field(default=None, max_length=64)
    description: str | None = None
    event_type: str = Field(default="online", pattern="^(physical|online)$")
    address: str | None = Field(default=None, max_length=500)

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else v

    @model_validator(mode="after")
    def end_after_start(self) -> EventCreateRequest:
        if self.end_date is not None and self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class EventUpdateRequest(BaseModel):
    """PATCH body. Omitted fields are left alone; ``name``, ``status`` and ``start_date`` cannot be cleared."""

    name: str | None = Field(default=None, min_length=1, max_length=200)
    status: str | None = Field(default=None, pattern="^(planning|open|closed|archived)$")
    start_date: datetime | None = None
    end_date: datetime | None = None
    description: str | None = None
    address: str | None = Field(default=None, max_length=500)

    @field_validator("name", "status", "start_date")
    @classmethod
    def not_null(cls, v: object, info: ValidationInfo) -> object:
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v) if v is not None else v


class EventResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    name: str
    slug: str
    status: str
    start_date: datetime
    end_date: datetime | None
    timezone: str | None
    description: str | None
    event_type: str
    address: str | None
    created_by: UUID | None

    model_config = {"from_attributes": True}


class EventsListResponse(BaseModel):
    events: list[EventResponse]
    total: int


class EventAccessResponse(BaseModel):
    event_id: UUID | None
    valid: bool


class DefaultsResponse(BaseModel):
    """Pre-selected references for create forms."""

    organization_id: UUID | None = None
    team_id: UUID | None = None
    event_id: UUID | None = None
