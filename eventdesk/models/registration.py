"""
Participant and Partner ORM models.

Both are submitted through public registration forms and inherit their
tenant from the event they register for.
"""

from __future__ import annotations

import enum
from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from eventdesk.models.base import Base, TenantScopedMixin, TimestampMixin, UUIDMixin, enum_values


class RegistrationStatus(str, enum.Enum):
    approved = "approved"
    not_approved = "not-approved"


class RegistrationMixin(TenantScopedMixin):
    """Columns shared by participants and partners."""

    @declared_attr
    def event_id(cls) -> Mapped[UUID]:
        return mapped_column(
            ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True
        )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[RegistrationStatus] = mapped_column(
        Enum(RegistrationStatus, name="registration_status", values_callable=enum_values),
        nullable=False,
        default=RegistrationStatus.approved,
    )
    registration_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


class Participant(Base, UUIDMixin, TimestampMixin, RegistrationMixin):
    __tablename__ = "participants"

    def __repr__(self) -> str:
        return f"<Participant id={self.id} email={self.email!r} event_id={self.event_id}>"


class Partner(Base, UUIDMixin, TimestampMixin, RegistrationMixin):
    __tablename__ = "partners"

    def __repr__(self) -> str:
        return f"<Partner id={self.id} email={self.email!r} event_id={self.event_id}>"
