"""
Event ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from eventdesk.models.base import Base, TenantScopedMixin, TimestampMixin, UUIDMixin, enum_values

if TYPE_CHECKING:
    from eventdesk.models.tenant import Tenant


class EventStatus(str, enum.Enum):
    planning = "planning"
    open = "open"
    closed = "closed"
    archived = "archived"


class EventType(str, enum.Enum):
    physical = "physical"
    online = "online"


class Event(Base, UUIDMixin, TimestampMixin, TenantScopedMixin):
    """An event belonging to exactly one organization."""

    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR end_date >= start_date", name="ck_events_end_after_start"
        ),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(220), nullable=False, unique=True, index=True)
    status: Mapped[EventStatus] = mapped_column(
        Enum(EventStatus, name="event_status", values_callable=enum_values),
        nullable=False,
        default=EventStatus.planning,
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    timezone: Mapped[str | None] = mapped_column(String(64), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="event_type", values_callable=enum_values),
        nullable=False,
        default=EventType.online,
    )
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_by: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    tenant: Mapped[Tenant] = relationship("Tenant")

    def __repr__(self) -> str:
        return f"<Event id={self.id} slug={self.slug!r} tenant_id={self.tenant_id}>"
