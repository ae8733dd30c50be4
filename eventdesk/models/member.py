"""
TenantMember ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, UUIDMixin, enum_values

if TYPE_CHECKING:
    from eventdesk.models.tenant import Tenant
    from eventdesk.models.user import User


class TenantRole(str, enum.Enum):
    """Role a user holds inside one tenant."""

    owner = "owner"
    admin = "admin"
    editor = "editor"
    viewer = "viewer"


# owner > admin > editor > viewer
ROLE_HIERARCHY: dict[TenantRole, int] = {
    TenantRole.owner: 4,
    TenantRole.admin: 3,
    TenantRole.editor: 2,
    TenantRole.viewer: 1,
}


class TenantMember(Base, UUIDMixin):
    """Join table linking users to tenants with a role. One row per (tenant, user)."""

    __tablename__ = "tenant_members"
    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", name="uq_tenant_members_tenant_user"),
    )

    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[TenantRole] = mapped_column(
        Enum(TenantRole, name="tenant_role", values_callable=enum_values),
        nullable=False,
        default=TenantRole.editor,
    )
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    tenant: Mapped[Tenant] = relationship("Tenant", back_populates="members")
    user: Mapped[User] = relationship("User", back_populates="memberships")

    def __repr__(self) -> str:
        return f"<TenantMember tenant_id={self.tenant_id} user_id={self.user_id} role={self.role}>"
