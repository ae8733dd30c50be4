"""
Tenant ORM model.

Organizations and teams share one table, distinguished by ``kind``.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, TimestampMixin, UUIDMixin, enum_values

if TYPE_CHECKING:
    from eventdesk.models.invitation import Invitation
    from eventdesk.models.member import TenantMember
    from eventdesk.models.user import User


class TenantKind(str, enum.Enum):
    organization = "organization"
    team = "team"


class Tenant(Base, UUIDMixin, TimestampMixin):
    """A data-isolation boundary with exactly one owner."""

    __tablename__ = "tenants"

    kind: Mapped[TenantKind] = mapped_column(
        Enum(TenantKind, name="tenant_kind", values_callable=enum_values),
        nullable=False,
        default=TenantKind.organization,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True, index=True)
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # Owner-only field: custom email sender settings
    email_config: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)

    # Relationships
    owner: Mapped[User] = relationship("User", back_populates="owned_tenants")
    members: Mapped[list[TenantMember]] = relationship(
        "TenantMember", back_populates="tenant", cascade="all, delete-orphan"
    )
    invitations: Mapped[list[Invitation]] = relationship(
        "Invitation", back_populates="tenant", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Tenant id={self.id} kind={self.kind.value} slug={self.slug!r}>"
