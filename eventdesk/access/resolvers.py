"""
Tenant membership and tenant-ID resolvers.

Every function takes the session and the caller explicitly. Store errors are
logged and turned into "no role" / "no tenants", so access checks built on
these fail closed.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import and_, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.core.config import settings
from eventdesk.models.member import ROLE_HIERARCHY, TenantMember, TenantRole
from eventdesk.models.tenant import Tenant, TenantKind
from eventdesk.models.user import User

logger = logging.getLogger(__name__)


def coerce_uuid(value: UUID | str | None) -> UUID | None:
    """Parse a client-supplied identifier; malformed input becomes ``None``."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


# ---------------------------------------------------------------------------
# Membership resolver
# ---------------------------------------------------------------------------

async def get_tenant_role(
    db: AsyncSession,
    user: User | None,
    tenant_id: UUID | str | None,
    kind: TenantKind | None = None,
) -> TenantRole | None:
    """
    Return the user's role in one tenant.

    The tenant owner resolves to ``owner`` even without a membership row.
    Returns None if the tenant is missing (or of another kind), the user
    is not a member, or the lookup fails.
    """
    tenant_uuid = coerce_uuid(tenant_id)
    if user is None or tenant_uuid is None:
        return None

    try:
        stmt = select(Tenant.owner_id).where(Tenant.id == tenant_uuid)
        if kind is not None:
            stmt = stmt.where(Tenant.kind == kind)
        owner_id = (await db.execute(stmt)).scalar_one_or_none()
        if owner_id is None:
            return None
        if owner_id == user.id:
            return TenantRole.owner

        role_result = await db.execute(
            select(TenantMember.role).where(
                TenantMember.tenant_id == tenant_uuid,
                TenantMember.user_id == user.id,
            )
        )
        return role_result.scalar_one_or_none()
    except SQLAlchemyError:
        logger.exception("Error fetching tenant role for user %s in %s", user.id, tenant_uuid)
        return None


async def get_organization_role(
    db: AsyncSession, user: User | None, organization_id: UUID | str | None
) -> TenantRole | None:
    return await get_tenant_role(db, user, organization_id, TenantKind.organization)


async def get_team_role(
    db: AsyncSession, user: User | None, team_id: UUID | str | None
) -> TenantRole | None:
    return await get_tenant_role(db, user, team_id, TenantKind.team)


async def has_tenant_role(
    db: AsyncSession,
    user: User | None,
    tenant_id: UUID | str | None,
    required_role: TenantRole,
    kind: TenantKind | None = None,
) -> bool:
    """True if the user's role in the tenant is ``required_role`` or higher."""
    role = await get_tenant_role(db, user, tenant_id, kind)
    if role is None:
        return False
    return ROLE_HIERARCHY[role] >= ROLE_HIERARCHY[required_role]


async def is_tenant_owner(
    db: AsyncSession,
    user: User | None,
    tenant_id: UUID | str | None,
    kind: TenantKind | None = None,
) -> bool:
    return await has_tenant_role(db, user, tenant_id, TenantRole.owner, kind)


# ---------------------------------------------------------------------------
# Tenant ID resolver
# ---------------------------------------------------------------------------

async def get_user_tenant_roles(
    db: AsyncSession,
    user: User | None,
    kind: TenantKind | None = TenantKind.organization,
) -> dict[UUID, TenantRole]:
    """
    Map every tenant the user owns or belongs to onto the user's role there.

    Insertion order follows tenant creation, so callers get a stable order.
    """
    if user is None:
        return {}

    stmt = (
        select(Tenant.id, Tenant.owner_id, TenantMember.role)
        .outerjoin(
            TenantMember,
            and_(TenantMember.tenant_id == Tenant.id, TenantMember.user_id == user.id),
        )
        .where(or_(Tenant.owner_id == user.id, TenantMember.user_id == user.id))
        .order_by(Tenant.created_at, Tenant.id)
        .limit(settings.ORGANIZATION_QUERY_LIMIT)
    )
    if kind is not None:
        stmt = stmt.where(Tenant.kind == kind)

    roles: dict[UUID, TenantRole] = {}
    for tenant_id, owner_id, member_role in (await db.execute(stmt)).all():
        if tenant_id in roles:
            continue
        if owner_id == user.id:
            roles[tenant_id] = TenantRole.owner
        elif member_role is not None:
            roles[tenant_id] = TenantRole(member_role)
    return roles


async def get_user_tenant_ids(
    db: AsyncSession,
    user: User | None,
    kind: TenantKind | None = TenantKind.organization,
    role: TenantRole | None = None,
) -> list[UUID]:
    """
    IDs of tenants the user owns or is a member of, without duplicates.

    With ``role`` set, only tenants where the user holds exactly that role.
    """
    try:
        roles = await get_user_tenant_roles(db, user, kind)
    except SQLAlchemyError:
        logger.exception("Error fetching tenant IDs for user %s", getattr(user, "id", None))
        return []
    return [tenant_id for tenant_id, held in roles.items() if role is None or held == role]


async def get_user_tenant_ids_with_min_role(
    db: AsyncSession,
    user: User | None,
    kind: TenantKind | None = TenantKind.organization,
    min_role: TenantRole = TenantRole.viewer,
) -> list[UUID]:
    """IDs of tenants where the user holds ``min_role`` or higher."""
    try:
        roles = await get_user_tenant_roles(db, user, kind)
    except SQLAlchemyError:
        logger.exception(
            "Error fetching tenant IDs with min role %s for user %s",
            min_role.value,
            getattr(user, "id", None),
        )
        return []
    floor = ROLE_HIERARCHY[min_role]
    return [tenant_id for tenant_id, held in roles.items() if ROLE_HIERARCHY[held] >= floor]


async def get_user_organization_ids(
    db: AsyncSession, user: User | None, role: TenantRole | None = None
) -> list[UUID]:
    return await get_user_tenant_ids(db, user, TenantKind.organization, role)


async def get_user_team_ids(
    db: AsyncSession, user: User | None, role: TenantRole | None = None
) -> list[UUID]:
    return await get_user_tenant_ids(db, user, TenantKind.team, role)
