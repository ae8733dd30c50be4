"""
Participant and partner registration logic.

Anonymous visitors register through public forms; their submissions start
as not-approved. The tenant is always copied from the event.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.decisions import AccessContext
from eventdesk.access.predicates import collection_access
from eventdesk.core.exceptions import AccessDenied
from eventdesk.models.event import Event
from eventdesk.models.registration import Participant, Partner, RegistrationStatus
from eventdesk.models.user import User
from eventdesk.schemas.registration import (
    RegistrationCreateRequest,
    RegistrationResponse,
    RegistrationsListResponse,
)

logger = logging.getLogger(__name__)

REGISTRATION_MODELS: dict[str, type[Participant] | type[Partner]] = {
    "participants": Participant,
    "partners": Partner,
}


class RegistrationService:
    """Shared logic for the participants and partners collections."""

    def __init__(self, db: AsyncSession, collection: str) -> None:
        self.db = db
        self.collection = collection
        self.model = REGISTRATION_MODELS[collection]
        self.access = collection_access(collection)

    async def register(
        self, data: RegistrationCreateRequest, user: User | None
    ) -> RegistrationResponse:
        event_tenant = (
            await self.db.execute(select(Event.tenant_id).where(Event.id == data.event_id))
        ).scalar_one_or_none()
        if event_tenant is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "EVENT_NOT_FOUND", "message": "Event not found"},
            )

        payload = {**data.model_dump(), "tenant_id": event_tenant}
        decision = await self.access.create(AccessContext(db=self.db, user=user, data=payload))
        if not decision or not decision.permits(payload):
            raise AccessDenied("You cannot register for this event")

        record = self.model(
            event_id=data.event_id,
            tenant_id=event_tenant,
            name=data.name,
            email=str(data.email),
            company=data.company,
        )
        if user is None:
            record.status = RegistrationStatus.not_approved
            record.registration_date = datetime.now(UTC)
        else:
            record.status = RegistrationStatus(data.status or RegistrationStatus.approved.value)

        self.db.add(record)
        await self.db.flush()
        await self.db.refresh(record)

        logger.info(
            "New %s registration %s for event %s (%s)",
            self.collection,
            record.id,
            record.event_id,
            "public" if user is None else f"user {user.id}",
        )
        return RegistrationResponse.model_validate(record)

    async def list_registrations(
        self, user: User | None, event_id: UUID | None = None
    ) -> RegistrationsListResponse:
        decision = await self.access.read(AccessContext(db=self.db, user=user))
        stmt = decision.apply(select(self.model), self.model)
        if event_id is not None:
            stmt = stmt.where(self.model.event_id == event_id)
        records = (await self.db.execute(stmt.order_by(self.model.created_at))).scalars().all()
        items = [RegistrationResponse.model_validate(r) for r in records]
        return RegistrationsListResponse(registrations=items, total=len(items))
