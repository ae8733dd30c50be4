"""
Access predicates.

One predicate per (collection, operation) and per sensitive field. Every
predicate is ``async (AccessContext) -> Decision``; none of them raise.
Super-admins and admins are checked first and short-circuit to Allow, except
where noted (super-admin-only bypasses).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.decisions import (
    ALLOW,
    DENY,
    AccessContext,
    AllowWithFilter,
    Decision,
    FieldEquals,
    FieldIn,
    Predicate,
)
from eventdesk.access.resolvers import (
    coerce_uuid,
    get_tenant_role,
    get_user_tenant_ids,
    get_user_tenant_ids_with_min_role,
    is_tenant_owner,
)
from eventdesk.access.roles import (
    SUPER_ADMIN_ONLY,
    can_create_organizations,
    check_role,
    get_organization_limit,
    is_admin,
)
from eventdesk.models.member import TenantRole
from eventdesk.models.tenant import Tenant, TenantKind
from eventdesk.models.user import User

logger = logging.getLogger(__name__)

TENANT_FIELD = "tenant_id"


@dataclass(frozen=True)
class CollectionAccess:
    read: Predicate
    create: Predicate
    update: Predicate
    delete: Predicate


@dataclass(frozen=True)
class FieldAccess:
    read: Predicate
    create: Predicate
    update: Predicate


def _document_id(ctx: AccessContext) -> UUID | None:
    if ctx.doc_id is not None:
        return ctx.doc_id
    if ctx.data is not None:
        return coerce_uuid(ctx.data.get("id"))
    return None


def _tenant_ref(data: Mapping[str, Any] | None) -> UUID | None:
    if not data:
        return None
    value = data.get(TENANT_FIELD, data.get("tenant"))
    if isinstance(value, Mapping):
        value = value.get("id")
    return coerce_uuid(value)


def _filter_or_deny(field: str, ids: list[UUID]) -> Decision:
    return AllowWithFilter.field_in(field, ids) if ids else DENY


async def allow_all(ctx: AccessContext) -> Decision:
    return ALLOW


async def authenticated(ctx: AccessContext) -> Decision:
    return ALLOW if ctx.user is not None else DENY


async def admin_only(ctx: AccessContext) -> Decision:
    return ALLOW if is_admin(ctx.user) else DENY


# ---------------------------------------------------------------------------
# Collection-level gates (admin console only)
# ---------------------------------------------------------------------------

def can_edit_collection(collection_slug: str) -> Predicate:
    """Super-admins and admins may edit ``collection_slug``; nobody else."""

    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        return ALLOW if is_admin(ctx.user) else DENY

    predicate.__name__ = f"can_edit_{collection_slug}"
    return predicate


def can_view_collection(collection_slug: str) -> Predicate:
    """Super-admins and admins may view ``collection_slug``; nobody else."""

    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        return ALLOW if is_admin(ctx.user) else DENY

    predicate.__name__ = f"can_view_{collection_slug}"
    return predicate


# ---------------------------------------------------------------------------
# Field-level gates
# ---------------------------------------------------------------------------

def tenant_owner_field_access(kind: TenantKind) -> Predicate:
    """
    Gate a sensitive tenant field to the tenant owner.

    With no document id yet (creation) access is granted here and enforced by
    the collection-level create predicate instead.
    """

    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        if is_admin(ctx.user):
            return ALLOW

        tenant_id = _document_id(ctx)
        if tenant_id is None:
            return ALLOW

        role = await get_tenant_role(ctx.db, ctx.user, tenant_id, kind)
        return ALLOW if role == TenantRole.owner else DENY

    predicate.__name__ = f"{kind.value}_owner_field_access"
    return predicate


organization_owner_field_access = tenant_owner_field_access(TenantKind.organization)
team_owner_field_access = tenant_owner_field_access(TenantKind.team)


async def admin_only_field_access(ctx: AccessContext) -> Decision:
    """Global roles may only be read or written by super-admins."""
    if ctx.user is None:
        return DENY
    return ALLOW if check_role(SUPER_ADMIN_ONLY, ctx.user) else DENY


# Any signed-in user reads their plan; only admins assign one
pricing_plan_field_access = FieldAccess(
    read=authenticated,
    create=admin_only,
    update=admin_only,
)

roles_field_access = FieldAccess(
    read=admin_only_field_access,
    create=admin_only_field_access,
    update=admin_only_field_access,
)


# ---------------------------------------------------------------------------
# Tenant-aware collections (events, registrations)
# ---------------------------------------------------------------------------

def tenant_aware_read(kind: TenantKind = TenantKind.organization, field: str = TENANT_FIELD) -> Predicate:
    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        if is_admin(ctx.user):
            return ALLOW
        return _filter_or_deny(field, await get_user_tenant_ids(ctx.db, ctx.user, kind))

    return predicate


def tenant_aware_write(kind: TenantKind = TenantKind.organization, field: str = TENANT_FIELD) -> Predicate:
    """Create/update/delete: editors and owners only, viewers are excluded."""

    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        if is_admin(ctx.user):
            return ALLOW
        ids = await get_user_tenant_ids_with_min_role(ctx.db, ctx.user, kind, TenantRole.editor)
        return _filter_or_deny(field, ids)

    return predicate


tenant_aware_create = tenant_aware_write()
tenant_aware_update = tenant_aware_write()
tenant_aware_delete = tenant_aware_write()


# ---------------------------------------------------------------------------
# Owner / editor access (super-admin bypass only)
# ---------------------------------------------------------------------------

def tenant_owner_access(kind: TenantKind = TenantKind.organization, field: str = TENANT_FIELD) -> Predicate:
    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        if check_role(SUPER_ADMIN_ONLY, ctx.user):
            return ALLOW
        ids = await get_user_tenant_ids(ctx.db, ctx.user, kind, TenantRole.owner)
        return _filter_or_deny(field, ids)

    return predicate


def tenant_editor_access(kind: TenantKind = TenantKind.organization, field: str = TENANT_FIELD) -> Predicate:
    async def predicate(ctx: AccessContext) -> Decision:
        if ctx.user is None:
            return DENY
        if check_role(SUPER_ADMIN_ONLY, ctx.user):
            return ALLOW
        return _filter_or_deny(field, await get_user_tenant_ids(ctx.db, ctx.user, kind))

    return predicate


async def can_access_tenant(
    db: AsyncSession,
    user: User | None,
    tenant_id: UUID | str | None,
    required_role: TenantRole | None = None,
    kind: TenantKind | None = TenantKind.organization,
) -> bool:
    """
    Point check used by hooks and services.

    Without ``required_role`` any membership grants access; ``owner`` requires
    ownership; any other role is treated as plain membership.
    """
    tenant_uuid = coerce_uuid(tenant_id)
    if user is None or tenant_uuid is None:
        return False
    if check_role(SUPER_ADMIN_ONLY, user):
        return True
    if required_role == TenantRole.owner:
        return await is_tenant_owner(db, user, tenant_uuid, kind)
    return tenant_uuid in await get_user_tenant_ids(db, user, kind)


# ---------------------------------------------------------------------------
# Public registration forms (participants, partners)
# ---------------------------------------------------------------------------

async def public_registration_create(ctx: AccessContext) -> Decision:
    """Anonymous visitors may register; signed-in users follow tenant-aware create."""
    if ctx.user is None:
        return ALLOW
    return await tenant_aware_create(ctx)


async def public_registration_read(ctx: AccessContext) -> Decision:
    """No public read access."""
    return await tenant_aware_read()(ctx)


# ---------------------------------------------------------------------------
# Tenants collection
# ---------------------------------------------------------------------------

def tenant_collection_access(kind: TenantKind = TenantKind.organization) -> CollectionAccess:
    async def create(ctx: AccessContext) -> Decision:
        if is_admin(ctx.user):
            return ALLOW
        if not can_create_organizations(ctx.user):
            return DENY

        limit = get_organization_limit(ctx.user)
        if limit is None:
            return ALLOW
        try:
            owned = (
                await ctx.db.execute(
                    select(func.count(Tenant.id)).where(
                        Tenant.owner_id == ctx.user.id, Tenant.kind == kind
                    )
                )
            ).scalar_one()
        except SQLAlchemyError:
            logger.exception("Error counting tenants owned by %s", ctx.user.id)
            return DENY
        return ALLOW if owned < limit else DENY

    async def read(ctx: AccessContext) -> Decision:
        if is_admin(ctx.user):
            return ALLOW
        if ctx.user is None:
            return DENY
        ids = await get_user_tenant_ids(ctx.db, ctx.user, kind)
        if ids:
            return AllowWithFilter.field_in("id", ids)
        # Users allowed to create their first tenant see an empty collection
        if can_create_organizations(ctx.user):
            return AllowWithFilter.field_in("id", [])
        return DENY

    async def owned(ctx: AccessContext) -> Decision:
        if is_admin(ctx.user):
            return ALLOW
        if ctx.user is None:
            return DENY
        ids = await get_user_tenant_ids(ctx.db, ctx.user, kind, TenantRole.owner)
        return _filter_or_deny("id", ids)

    return CollectionAccess(read=read, create=create, update=owned, delete=owned)


# ---------------------------------------------------------------------------
# Invitations collection
# ---------------------------------------------------------------------------

async def invitation_create(ctx: AccessContext) -> Decision:
    """Admins, or the owner of the tenant named in the payload."""
    if ctx.user is None:
        return DENY
    if is_admin(ctx.user):
        return ALLOW
    tenant_id = _tenant_ref(ctx.data)
    if tenant_id is None:
        return DENY
    role = await get_tenant_role(ctx.db, ctx.user, tenant_id)
    return ALLOW if role == TenantRole.owner else DENY


async def invitation_read(ctx: AccessContext) -> Decision:
    """Invitations sent to the caller's email, plus those of tenants they own."""
    if ctx.user is None:
        return DENY
    if is_admin(ctx.user):
        return ALLOW
    owned = await get_user_tenant_ids(ctx.db, ctx.user, None, TenantRole.owner)
    conditions: list[FieldEquals | FieldIn] = [FieldEquals("email", ctx.user.email.lower())]
    if owned:
        conditions.append(FieldIn(TENANT_FIELD, tuple(owned)))
    return AllowWithFilter(tuple(conditions))


async def invitation_manage(ctx: AccessContext) -> Decision:
    if ctx.user is None:
        return DENY
    if is_admin(ctx.user):
        return ALLOW
    owned = await get_user_tenant_ids(ctx.db, ctx.user, None, TenantRole.owner)
    return _filter_or_deny(TENANT_FIELD, owned)


# ---------------------------------------------------------------------------
# Users collection
# ---------------------------------------------------------------------------

async def admin_or_self(ctx: AccessContext) -> Decision:
    if ctx.user is None:
        return DENY
    if is_admin(ctx.user):
        return ALLOW
    return AllowWithFilter((FieldEquals("id", ctx.user.id),))


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

COLLECTION_ACCESS: dict[str, CollectionAccess] = {
    "tenants": tenant_collection_access(TenantKind.organization),
    "teams": tenant_collection_access(TenantKind.team),
    "events": CollectionAccess(
        read=tenant_aware_read(),
        create=tenant_aware_create,
        update=tenant_aware_update,
        delete=tenant_aware_delete,
    ),
    "participants": CollectionAccess(
        read=public_registration_read,
        create=public_registration_create,
        update=tenant_aware_update,
        delete=tenant_aware_delete,
    ),
    "partners": CollectionAccess(
        read=public_registration_read,
        create=public_registration_create,
        update=tenant_aware_update,
        delete=tenant_aware_delete,
    ),
    "invitations": CollectionAccess(
        read=invitation_read,
        create=invitation_create,
        update=invitation_manage,
        delete=invitation_manage,
    ),
    "users": CollectionAccess(
        read=admin_or_self,
        create=allow_all,
        update=admin_or_self,
        delete=admin_only,
    ),
}

FIELD_ACCESS: dict[tuple[str, str], FieldAccess] = {
    ("tenants", "members"): FieldAccess(
        read=authenticated,
        create=organization_owner_field_access,
        update=organization_owner_field_access,
    ),
    ("tenants", "email_config"): FieldAccess(
        read=organization_owner_field_access,
        create=organization_owner_field_access,
        update=organization_owner_field_access,
    ),
    ("teams", "members"): FieldAccess(
        read=authenticated,
        create=team_owner_field_access,
        update=team_owner_field_access,
    ),
    ("users", "roles"): roles_field_access,
    ("users", "pricing_plan"): pricing_plan_field_access,
}


def collection_access(slug: str) -> CollectionAccess:
    return COLLECTION_ACCESS[slug]


def field_access(slug: str, field_name: str) -> FieldAccess:
    return FIELD_ACCESS[(slug, field_name)]
