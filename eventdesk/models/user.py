"""
User ORM model.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, TimestampMixin, UUIDMixin, enum_values

if TYPE_CHECKING:
    from eventdesk.models.member import TenantMember
    from eventdesk.models.tenant import Tenant


class GlobalRole(str, enum.Enum):
    """User-level roles, independent of any tenant."""

    super_admin = "super-admin"
    admin = "admin"
    user = "user"


class PricingPlan(str, enum.Enum):
    free = "free"
    pro = "pro"
    organizations = "organizations"
    unlimited = "unlimited"


class User(Base, UUIDMixin, TimestampMixin):
    """Represents an authenticated user."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    # Global roles as a list of GlobalRole values
    roles: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    pricing_plan: Mapped[PricingPlan | None] = mapped_column(
        Enum(PricingPlan, name="pricing_plan", values_callable=enum_values),
        nullable=True,
    )

    # Relationships
    owned_tenants: Mapped[list[Tenant]] = relationship(
        "Tenant", back_populates="owner"
    )
    memberships: Mapped[list[TenantMember]] = relationship(
        "TenantMember", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} roles={self.roles}>"
