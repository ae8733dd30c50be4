"""
Invitation schemas.

Models for creating invitations and for the accept-invitation endpoint.
The accept-invitation payloads use camelCase keys to match the web client.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class InviteRequest(BaseModel):
    """Request body for POST /tenants/{tenant_id}/invitations."""

    email: EmailStr
    role: str = Field(default="editor", pattern="^(owner|editor|viewer)$")


class InvitationResponse(BaseModel):
    id: UUID
    tenant_id: UUID
    email: str
    role: str
    status: str
    token: str
    expires_at: datetime
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class InvitationsListResponse(BaseModel):
    invitations: list[InvitationResponse]
    total: int


# ---------------------------------------------------------------------------
# /api/accept-invitation
# ---------------------------------------------------------------------------

class AcceptInvitationRequest(BaseModel):
    token: str | None = None
    # Anything other than "decline" accepts
    action: str | None = None


class TenantRef(BaseModel):
    id: UUID
    name: str
    slug: str
    kind: str


class InvitationResult(BaseModel):
    """Outcome of accepting or declining an invitation."""

    success: bool = True
    message: str
    tenant: TenantRef | None = None
    role: str | None = None


class InvitationInfo(BaseModel):
    """Invitation metadata shown before the invitee decides."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: str
    tenant: TenantRef
    role: str
    status: str
    expires_at: datetime
    is_authenticated: bool
    current_user_email: str | None = None
    email_mismatch: bool = False
