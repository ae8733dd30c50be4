"""
Event business logic.

List queries are scoped to the caller's organizations; creates auto-select
the organization for single-organization users.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.decisions import AccessContext
from eventdesk.access.defaults import (
    auto_select_tenant,
    default_event_value,
    default_organization_value,
    default_team_value,
)
from eventdesk.access.events import sanitize_event_param
from eventdesk.access.predicates import collection_access
from eventdesk.core.exceptions import AccessDenied
from eventdesk.models.event import Event, EventStatus, EventType
from eventdesk.models.user import User
from eventdesk.schemas.event import (
    DefaultsResponse,
    EventAccessResponse,
    EventCreateRequest,
    EventResponse,
    EventsListResponse,
    EventUpdateRequest,
    as_utc,
)

logger = logging.getLogger(__name__)


class EventService:
    """Handles all event operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.access = collection_access("events")

    async def list_events(self, user: User) -> EventsListResponse:
        decision = await self.access.read(AccessContext(db=self.db, user=user))
        stmt = decision.apply(select(Event), Event).order_by(Event.start_date)
        events = (await self.db.execute(stmt)).scalars().all()
        items = [EventResponse.model_validate(e) for e in events]
        return EventsListResponse(events=items, total=len(items))

    async def get_event(self, event_id: UUID, user: User) -> EventResponse:
        return EventResponse.model_validate(await self._load_for(event_id, user, "read"))

    async def create_event(self, data: EventCreateRequest, user: User) -> EventResponse:
        """
        Create an event.

        - Organization defaults to the caller's only organization
        - Caller must be at least editor in the organization
        """
        payload = await auto_select_tenant(self.db, user, data.model_dump())
        if payload.get("tenant_id") is None:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"code": "ORGANIZATION_REQUIRED", "message": "Select an organization"},
            )

        decision = await self.access.create(AccessContext(db=self.db, user=user, data=payload))
        if not decision or not decision.permits(payload):
            raise AccessDenied("You cannot create events in this organization")

        await self._ensure_slug_free(data.slug)

        event = Event(
            tenant_id=payload["tenant_id"],
            name=data.name,
            slug=data.slug,
            status=EventStatus(data.status),
            start_date=data.start_date,
            end_date=data.end_date,
            timezone=data.timezone,
            description=data.description,
            event_type=EventType(data.event_type),
            address=data.address,
            created_by=user.id,
        )
        self.db.add(event)
        await self.db.flush()
        await self.db.refresh(event)

        logger.info("User %s created event %s in %s", user.id, event.id, event.tenant_id)
        return EventResponse.model_validate(event)

    async def update_event(
        self, event_id: UUID, data: EventUpdateRequest, user: User
    ) -> EventResponse:
        event = await self._load_for(event_id, user, "update")

        changes = data.model_dump(exclude_unset=True)
        start = changes.get("start_date", event.start_date)
        end = changes.get("end_date", event.end_date)
        # Stored dates come back without an offset on SQLite
        if end is not None and as_utc(end) < as_utc(start):
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"code": "INVALID_DATES", "message": "End date must be on or after start date"},
            )

        for field_name, value in changes.items():
            if field_name == "status" and value is not None:
                value = EventStatus(value)
            setattr(event, field_name, value)

        await self.db.flush()
        await self.db.refresh(event)
        return EventResponse.model_validate(event)

    async def delete_event(self, event_id: UUID, user: User) -> None:
        event = await self._load_for(event_id, user, "delete")
        await self.db.delete(event)
        await self.db.flush()

    # -----------------------------------------------------------------------
    # Guards and form defaults
    # -----------------------------------------------------------------------

    async def check_event_param(self, event_id: str | None, user: User) -> EventAccessResponse:
        sanitized = await sanitize_event_param(self.db, user, event_id)
        return EventAccessResponse(event_id=sanitized, valid=sanitized is not None)

    async def get_defaults(self, user: User) -> DefaultsResponse:
        return DefaultsResponse(
            organization_id=await default_organization_value(self.db, user),
            team_id=await default_team_value(self.db, user),
            event_id=await default_event_value(self.db, user),
        )

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _load_for(self, event_id: UUID, user: User, operation: str) -> Event:
        predicate = getattr(self.access, operation)
        decision = await predicate(AccessContext(db=self.db, user=user, doc_id=event_id))
        stmt = decision.apply(select(Event).where(Event.id == event_id), Event)
        event = (await self.db.execute(stmt)).scalar_one_or_none()
        if event is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "EVENT_NOT_FOUND", "message": "Event not found"},
            )
        return event

    async def _ensure_slug_free(self, slug: str) -> None:
        existing = await self.db.execute(select(Event.id).where(Event.slug == slug))
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "SLUG_TAKEN", "message": "Event slug is already taken"},
            )
