"""
Event endpoints.

All queries scoped to the caller's organizations.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.core.database import get_db
from eventdesk.core.dependencies import get_current_user
from eventdesk.models.user import User
from eventdesk.schemas.event import (
    DefaultsResponse,
    EventAccessResponse,
    EventCreateRequest,
    EventResponse,
    EventsListResponse,
    EventUpdateRequest,
)
from eventdesk.services.event_service import EventService

router = APIRouter()


def get_event_service(db: AsyncSession = Depends(get_db)) -> EventService:
    """Dependency that constructs EventService."""
    return EventService(db=db)


@router.get("", response_model=EventsListResponse, summary="List events")
async def list_events(
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventsListResponse:
    return await service.list_events(current_user)


@router.post(
    "",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an event",
)
async def create_event(
    data: EventCreateRequest,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Create an event.

    - ``tenant_id`` may be omitted when the caller belongs to exactly one organization
    - Viewers cannot create events
    """
    return await service.create_event(data, current_user)


@router.get("/defaults", response_model=DefaultsResponse, summary="Form defaults")
async def get_defaults(
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> DefaultsResponse:
    """Organization, team and event to pre-select, when there is exactly one of each."""
    return await service.get_defaults(current_user)


@router.get("/validate", response_model=EventAccessResponse, summary="Validate an event id")
async def validate_event(
    event_id: str | None = Query(default=None, alias="event"),
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventAccessResponse:
    """Returns ``valid: false`` for ids the caller may not use."""
    return await service.check_event_param(event_id, current_user)


@router.get("/{event_id}", response_model=EventResponse, summary="Get an event")
async def get_event(
    event_id: UUID,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    return await service.get_event(event_id, current_user)


@router.patch("/{event_id}", response_model=EventResponse, summary="Update an event")
async def update_event(
    event_id: UUID,
    data: EventUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> EventResponse:
    return await service.update_event(event_id, data, current_user)


@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete an event")
async def delete_event(
    event_id: UUID,
    current_user: User = Depends(get_current_user),
    service: EventService = Depends(get_event_service),
) -> None:
    await service.delete_event(event_id, current_user)
