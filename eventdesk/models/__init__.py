"""
SQLAlchemy ORM models.

All models imported here to ensure they are registered with Base.metadata.
Import order matters: base models before dependent models.
"""

from eventdesk.models.base import Base, TenantScopedMixin, TimestampMixin, UUIDMixin
from eventdesk.models.user import GlobalRole, PricingPlan, User
from eventdesk.models.tenant import Tenant, TenantKind
from eventdesk.models.member import ROLE_HIERARCHY, TenantMember, TenantRole
from eventdesk.models.invitation import Invitation, InvitationStatus
from eventdesk.models.event import Event, EventStatus, EventType
from eventdesk.models.registration import Participant, Partner, RegistrationStatus

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "TenantScopedMixin",
    "User",
    "GlobalRole",
    "PricingPlan",
    "Tenant",
    "TenantKind",
    "TenantMember",
    "TenantRole",
    "ROLE_HIERARCHY",
    "Invitation",
    "InvitationStatus",
    "Event",
    "EventStatus",
    "EventType",
    "Participant",
    "Partner",
    "RegistrationStatus",
]
