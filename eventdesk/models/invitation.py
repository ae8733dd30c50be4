"""
Invitation ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, UUIDMixin, enum_values
from eventdesk.models.member import TenantRole

if TYPE_CHECKING:
    from eventdesk.models.tenant import Tenant
    from eventdesk.models.user import User


class InvitationStatus(str, enum.Enum):
    """pending is the only non-terminal state."""

    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    expired = "expired"


class Invitation(Base, UUIDMixin):
    """Invitation for an email address to join a tenant with a role."""

    __tablename__ = "invitations"

    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role: Mapped[TenantRole] = mapped_column(
        Enum(TenantRole, name="tenant_role", values_callable=enum_values),
        nullable=False,
        default=TenantRole.editor,
    )
    status: Mapped[InvitationStatus] = mapped_column(
        Enum(InvitationStatus, name="invitation_status", values_callable=enum_values),
        nullable=False,
        default=InvitationStatus.pending,
    )
    token: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    invited_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    tenant: Mapped[Tenant] = relationship("Tenant", back_populates="invitations")
    inviter: Mapped[User | None] = relationship("User")

    def __repr__(self) -> str:
        return (
            f"<Invitation id={self.id} email={self.email!r} "
            f"tenant_id={self.tenant_id} status={self.status.value}>"
        )
