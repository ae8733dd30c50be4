"""
Default values for tenant and event reference fields.

A default is only ever produced when the caller has exactly one candidate;
zero or several candidates mean "no default". These helpers back form
rendering and create hooks, so every failure is logged and swallowed.
"""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.resolvers import get_user_tenant_ids
from eventdesk.models.event import Event
from eventdesk.models.tenant import TenantKind
from eventdesk.models.user import User

logger = logging.getLogger(__name__)


async def default_tenant_value(
    db: AsyncSession, user: User | None, kind: TenantKind
) -> UUID | None:
    if user is None:
        return None
    try:
        tenant_ids = await get_user_tenant_ids(db, user, kind)
    except Exception:
        logger.exception("Error resolving default %s for user %s", kind.value, user.id)
        return None
    return tenant_ids[0] if len(tenant_ids) == 1 else None


async def default_organization_value(db: AsyncSession, user: User | None) -> UUID | None:
    return await default_tenant_value(db, user, TenantKind.organization)


async def default_team_value(db: AsyncSession, user: User | None) -> UUID | None:
    return await default_tenant_value(db, user, TenantKind.team)


async def default_event_value(db: AsyncSession, user: User | None) -> UUID | None:
    """The only event across the caller's organizations, if there is exactly one."""
    if user is None:
        return None
    try:
        organization_ids = await get_user_tenant_ids(db, user, TenantKind.organization)
        if not organization_ids:
            return None
        # Two rows are enough to tell "one" from "several"
        result = await db.execute(
            select(Event.id).where(Event.tenant_id.in_(organization_ids)).limit(2)
        )
        event_ids = result.scalars().all()
    except Exception:
        logger.exception("Error resolving default event for user %s", user.id)
        return None
    return event_ids[0] if len(event_ids) == 1 else None


async def auto_select_tenant(
    db: AsyncSession,
    user: User | None,
    data: MutableMapping[str, Any],
    kind: TenantKind = TenantKind.organization,
    field: str = "tenant_id",
) -> MutableMapping[str, Any]:
    """
    Fill ``data[field]`` on create when it was left empty and the caller
    belongs to exactly one tenant of ``kind``.
    """
    if user is None or data.get(field):
        return data
    tenant_id = await default_tenant_value(db, user, kind)
    if tenant_id is not None:
        data[field] = tenant_id
        logger.debug("Auto-selected %s %s for user %s", kind.value, tenant_id, user.id)
    return data
