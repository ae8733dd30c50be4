"""
Tenant management endpoints.

Organizations and teams share these routes; ``kind`` selects between them.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.core.database import get_db
from eventdesk.core.dependencies import get_current_user
from eventdesk.models.tenant import TenantKind
from eventdesk.models.user import User
from eventdesk.schemas.invitation import InvitationResponse, InvitationsListResponse, InviteRequest
from eventdesk.schemas.tenant import (
    MembersListResponse,
    MembersUpdateRequest,
    TenantCreateRequest,
    TenantResponse,
    TenantsListResponse,
    TenantUpdateRequest,
)
from eventdesk.services.invitation_service import InvitationService
from eventdesk.services.tenant_service import TenantService

router = APIRouter()


def get_tenant_service(db: AsyncSession = Depends(get_db)) -> TenantService:
    """Dependency that constructs TenantService."""
    return TenantService(db=db)


def get_invitation_service(db: AsyncSession = Depends(get_db)) -> InvitationService:
    return InvitationService(db=db)


# ---------------------------------------------------------------------------
# Tenants
# ---------------------------------------------------------------------------

@router.post(
    "",
    response_model=TenantResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an organization or team",
)
async def create_tenant(
    data: TenantCreateRequest,
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    """
    Create a tenant owned by the caller.

    - Limited by the caller's pricing plan (free 1, pro 3, organizations 20)
    - Slug must be globally unique
    """
    return await service.create_tenant(data, current_user)


@router.get("", response_model=TenantsListResponse, summary="List the caller's tenants")
async def list_tenants(
    kind: TenantKind = Query(default=TenantKind.organization),
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> TenantsListResponse:
    return await service.list_tenants(current_user, kind)


@router.get("/{tenant_id}", response_model=TenantResponse, summary="Get a tenant")
async def get_tenant(
    tenant_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    return await service.get_tenant(tenant_id, current_user)


@router.patch("/{tenant_id}", response_model=TenantResponse, summary="Update a tenant")
async def update_tenant(
    tenant_id: UUID,
    data: TenantUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> TenantResponse:
    """Owners only. ``email_config`` is additionally gated to the owner."""
    return await service.update_tenant(tenant_id, data, current_user)


@router.delete(
    "/{tenant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a tenant",
)
async def delete_tenant(
    tenant_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> None:
    await service.delete_tenant(tenant_id, current_user)


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

@router.get("/{tenant_id}/members", response_model=MembersListResponse, summary="List members")
async def list_members(
    tenant_id: UUID,
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> MembersListResponse:
    return await service.list_members(tenant_id, current_user)


@router.put("/{tenant_id}/members", response_model=MembersListResponse, summary="Replace members")
async def replace_members(
    tenant_id: UUID,
    data: MembersUpdateRequest,
    current_user: User = Depends(get_current_user),
    service: TenantService = Depends(get_tenant_service),
) -> MembersListResponse:
    return await service.replace_members(tenant_id, data, current_user)


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------

@router.post(
    "/{tenant_id}/invitations",
    response_model=InvitationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite someone to the tenant",
)
async def invite(
    tenant_id: UUID,
    data: InviteRequest,
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationResponse:
    """
    Invite an email address. The invitation expires after 7 days and the
    invitee receives an email with an accept link.
    """
    return await service.create_invitation(tenant_id, data, current_user)


@router.get(
    "/invitations/mine",
    response_model=InvitationsListResponse,
    summary="Invitations visible to the caller",
)
async def list_invitations(
    current_user: User = Depends(get_current_user),
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationsListResponse:
    return await service.list_invitations(current_user)
