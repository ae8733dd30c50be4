"""Validation of client-supplied event identifiers."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.resolvers import coerce_uuid, get_user_tenant_ids
from eventdesk.models.event import Event
from eventdesk.models.tenant import TenantKind
from eventdesk.models.user import User

logger = logging.getLogger(__name__)


async def validate_event_access(
    db: AsyncSession, user: User | None, event_id: UUID | str | None
) -> bool:
    """
    True if the event exists and belongs to one of the caller's organizations.

    Fails closed: malformed ids, callers without organizations and lookup
    errors all yield False.
    """
    event_uuid = coerce_uuid(event_id)
    if user is None or event_uuid is None:
        return False

    try:
        organization_ids = await get_user_tenant_ids(db, user, TenantKind.organization)
        if not organization_ids:
            return False

        result = await db.execute(
            select(Event.id)
            .where(Event.id == event_uuid, Event.tenant_id.in_(organization_ids))
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
    except Exception:
        logger.exception("Error validating access to event %s for user %s", event_id, user.id)
        return False


async def sanitize_event_param(
    db: AsyncSession, user: User | None, event_id: UUID | str | None
) -> UUID | None:
    """Return the event id if the caller may use it, otherwise None."""
    if event_id in (None, ""):
        return None
    if await validate_event_access(db, user, event_id):
        return coerce_uuid(event_id)
    logger.info("Dropping inaccessible event parameter %s", event_id)
    return None
