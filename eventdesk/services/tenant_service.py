"""
Tenant business logic.

Handles organization/team creation, listing, updates, deletion and member
management. Every read and write goes through the tenant access predicates.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.decisions import AccessContext, Decision
from eventdesk.access.predicates import collection_access, field_access
from eventdesk.core.exceptions import AccessDenied, TenantNotFound
from eventdesk.models.invitation import Invitation, InvitationStatus
from eventdesk.models.member import TenantMember, TenantRole
from eventdesk.models.tenant import Tenant, TenantKind
from eventdesk.models.user import User
from eventdesk.schemas.invitation import InviteRequest
from eventdesk.schemas.tenant import (
    MemberResponse,
    MembersListResponse,
    MembersUpdateRequest,
    TenantCreateRequest,
    TenantResponse,
    TenantsListResponse,
    TenantUpdateRequest,
)
from eventdesk.services.invitation_service import InvitationService, normalize_email

logger = logging.getLogger(__name__)

_COLLECTIONS = {TenantKind.organization: "tenants", TenantKind.team: "teams"}


class TenantService:
    """Handles all tenant operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # Create Tenant
    # -----------------------------------------------------------------------

    async def create_tenant(self, data: TenantCreateRequest, owner: User) -> TenantResponse:
        """
        Create a new organization or team owned by the caller.

        - Enforces the caller's pricing-plan limit
        - Validates slug uniqueness
        """
        kind = TenantKind(data.kind)
        slug = _COLLECTIONS[kind]
        ctx = AccessContext(db=self.db, user=owner, data=data.model_dump())

        if not await collection_access(slug).create(ctx):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "code": "TENANT_LIMIT_REACHED",
                    "message": f"Your pricing plan does not allow creating another {kind.value}",
                },
            )
        if data.email_config is not None and not await field_access(slug, "email_config").create(ctx):
            raise AccessDenied("Only the owner can set the email configuration")

        await self._ensure_slug_free(data.slug)

        tenant = Tenant(
            kind=kind,
            name=data.name,
            slug=data.slug,
            owner_id=owner.id,
            email_config=data.email_config,
        )
        self.db.add(tenant)
        await self.db.flush()
        await self.db.refresh(tenant)

        logger.info("User %s created %s %s", owner.id, kind.value, tenant.id)
        return TenantResponse.model_validate(tenant)

    # -----------------------------------------------------------------------
    # Read
    # -----------------------------------------------------------------------

    async def list_tenants(
        self, user: User, kind: TenantKind = TenantKind.organization
    ) -> TenantsListResponse:
        decision = await collection_access(_COLLECTIONS[kind]).read(
            AccessContext(db=self.db, user=user)
        )
        stmt = decision.apply(select(Tenant).where(Tenant.kind == kind), Tenant)
        tenants = (await self.db.execute(stmt.order_by(Tenant.created_at))).scalars().all()
        items = [TenantResponse.model_validate(t) for t in tenants]
        return TenantsListResponse(tenants=items, total=len(items))

    async def get_tenant(self, tenant_id: UUID, user: User) -> TenantResponse:
        tenant = await self._load(tenant_id)
        await self._require(tenant, user, "read")
        return TenantResponse.model_validate(tenant)

    # -----------------------------------------------------------------------
    # Update / Delete
    # -----------------------------------------------------------------------

    async def update_tenant(
        self, tenant_id: UUID, data: TenantUpdateRequest, user: User
    ) -> TenantResponse:
        tenant = await self._load(tenant_id)
        await self._require(tenant, user, "update")

        if data.email_config is not None:
            gate = field_access(_COLLECTIONS[tenant.kind], "email_config")
            if not await gate.update(AccessContext(db=self.db, user=user, doc_id=tenant.id)):
                raise AccessDenied("Only the owner can change the email configuration")
            tenant.email_config = data.email_config

        if data.slug is not None and data.slug != tenant.slug:
            await self._ensure_slug_free(data.slug)
            tenant.slug = data.slug

        if data.name is not None:
            tenant.name = data.name

        await self.db.flush()
        await self.db.refresh(tenant)
        return TenantResponse.model_validate(tenant)

    async def delete_tenant(self, tenant_id: UUID, user: User) -> None:
        tenant = await self._load(tenant_id)
        await self._require(tenant, user, "delete")
        await self.db.delete(tenant)
        await self.db.flush()
        logger.info("User %s deleted %s %s", user.id, tenant.kind.value, tenant.id)

    # -----------------------------------------------------------------------
    # Members
    # -----------------------------------------------------------------------

    async def list_members(self, tenant_id: UUID, user: User) -> MembersListResponse:
        """The owner first, then membership rows in join order."""
        tenant = await self._load(tenant_id)
        await self._require(tenant, user, "read")

        owner = await self.db.get(User, tenant.owner_id)
        members = [
            MemberResponse(
                user_id=owner.id,
                email=owner.email,
                display_name=owner.display_name,
                role=TenantRole.owner.value,
                joined_at=tenant.created_at,
            )
        ]

        result = await self.db.execute(
            select(TenantMember, User)
            .join(User, TenantMember.user_id == User.id)
            .where(TenantMember.tenant_id == tenant.id, TenantMember.user_id != tenant.owner_id)
            .order_by(TenantMember.joined_at)
        )
        members.extend(
            MemberResponse(
                user_id=member.user_id,
                email=member_user.email,
                display_name=member_user.display_name,
                role=member.role.value,
                joined_at=member.joined_at,
            )
            for member, member_user in result.all()
        )
        return MembersListResponse(members=members, total=len(members))

    async def replace_members(
        self, tenant_id: UUID, data: MembersUpdateRequest, user: User
    ) -> MembersListResponse:
        """
        Replace the tenant's member list. Only the owner (or an admin) may
        edit members.

        Email entries are invited rather than added. An address that already
        has a pending invitation to this tenant is not invited again.
        """
        tenant = await self._load(tenant_id)
        gate = field_access(_COLLECTIONS[tenant.kind], "members")
        if not await gate.update(AccessContext(db=self.db, user=user, doc_id=tenant.id)):
            raise AccessDenied("Only the owner can manage members")

        entries = {
            entry.user_id: TenantRole(entry.role)
            for entry in data.members
            if entry.user_id is not None
        }
        entries.pop(tenant.owner_id, None)

        await self.db.execute(delete(TenantMember).where(TenantMember.tenant_id == tenant.id))
        for member_id, role in entries.items():
            self.db.add(TenantMember(tenant_id=tenant.id, user_id=member_id, role=role))
        await self.db.flush()

        invited = await self._invite_email_entries(tenant, data, user)

        logger.info("Members of %s %s replaced by %s", tenant.kind.value, tenant.id, user.id)
        response = await self.list_members(tenant.id, user)
        response.invited = invited
        return response

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _invite_email_entries(
        self, tenant: Tenant, data: MembersUpdateRequest, user: User
    ) -> list[str]:
        requested: dict[str, str] = {}
        for entry in data.members:
            if entry.email is not None:
                requested.setdefault(normalize_email(entry.email), entry.role)
        if not requested:
            return []

        result = await self.db.execute(
            select(Invitation.email).where(
                Invitation.tenant_id == tenant.id,
                Invitation.status == InvitationStatus.pending,
                Invitation.email.in_(list(requested)),
            )
        )
        already_pending = set(result.scalars().all())

        invitations = InvitationService(self.db)
        invited = []
        for email, role in requested.items():
            if email in already_pending:
                continue
            await invitations.create_invitation(
                tenant.id, InviteRequest(email=email, role=role), user
            )
            invited.append(email)
        return invited

    async def _load(self, tenant_id: UUID) -> Tenant:
        result = await self.db.execute(select(Tenant).where(Tenant.id == tenant_id))
        tenant = result.scalar_one_or_none()
        if tenant is None:
            raise TenantNotFound("Tenant not found")
        return tenant

    async def _require(self, tenant: Tenant, user: User, operation: str) -> Decision:
        predicate = getattr(collection_access(_COLLECTIONS[tenant.kind]), operation)
        decision = await predicate(AccessContext(db=self.db, user=user, doc_id=tenant.id))
        if not decision or not decision.permits({"id": tenant.id}):
            raise AccessDenied(f"You cannot {operation} this {tenant.kind.value}")
        return decision

    async def _ensure_slug_free(self, slug: str) -> None:
        existing = await self.db.execute(select(Tenant.id).where(Tenant.slug == slug))
        if existing.scalar_one_or_none() is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={"code": "SLUG_TAKEN", "message": "Tenant slug is already taken"},
            )
