"""
Invitation business logic.

Invitations move pending -> accepted | declined | expired; every non-pending
state is terminal. Accepting upserts a membership row for the caller.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.decisions import AccessContext
from eventdesk.access.predicates import invitation_create, invitation_read
from eventdesk.core.config import settings
from eventdesk.core.exceptions import (
    AccessDenied,
    AlreadyResolved,
    EmailMismatch,
    InvalidToken,
    InvitationExpired,
    NotAuthenticated,
    TenantNotFound,
)
from eventdesk.core.security import create_invitation_token
from eventdesk.models.invitation import Invitation, InvitationStatus
from eventdesk.models.member import TenantMember, TenantRole
from eventdesk.models.tenant import Tenant
from eventdesk.models.user import User
from eventdesk.schemas.invitation import (
    InvitationInfo,
    InvitationResponse,
    InvitationResult,
    InvitationsListResponse,
    InviteRequest,
    TenantRef,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def _is_expired(invitation: Invitation, now: datetime | None = None) -> bool:
    return (now or datetime.now(UTC)) > _as_utc(invitation.expires_at)


def _tenant_ref(tenant: Tenant) -> TenantRef:
    return TenantRef(id=tenant.id, name=tenant.name, slug=tenant.slug, kind=tenant.kind.value)


class InvitationService:
    """Creates invitations and drives their state machine."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # Create
    # -----------------------------------------------------------------------

    async def create_invitation(
        self, tenant_id: UUID, data: InviteRequest, inviter: User | None
    ) -> InvitationResponse:
        """
        Invite ``data.email`` into a tenant.

        Only admins and the tenant owner may invite. The email is queued
        after the row is flushed; a queueing failure never fails the request.
        """
        tenant = await self._get_tenant(tenant_id)

        decision = await invitation_create(
            AccessContext(db=self.db, user=inviter, data={"tenant_id": tenant.id})
        )
        if not decision:
            raise AccessDenied("Only the tenant owner can send invitations")

        invitation = Invitation(
            tenant_id=tenant.id,
            email=normalize_email(data.email),
            role=TenantRole(data.role),
            status=InvitationStatus.pending,
            token=create_invitation_token(),
            expires_at=datetime.now(UTC) + timedelta(days=settings.INVITATION_EXPIRE_DAYS),
            invited_by=inviter.id if inviter is not None else None,
            created_at=datetime.now(UTC),
        )
        self.db.add(invitation)
        await self.db.flush()

        logger.info(
            "Invitation %s created for %s to %s %s as %s",
            invitation.id,
            invitation.email,
            tenant.kind.value,
            tenant.id,
            invitation.role.value,
        )
        self._queue_email(invitation, tenant, inviter)

        return InvitationResponse.model_validate(invitation)

    async def list_invitations(self, user: User | None) -> InvitationsListResponse:
        """Invitations visible to the caller: sent to them, or for tenants they own."""
        decision = await invitation_read(AccessContext(db=self.db, user=user))
        stmt = decision.apply(select(Invitation), Invitation).order_by(Invitation.created_at.desc())
        invitations = (await self.db.execute(stmt)).scalars().all()
        items = [InvitationResponse.model_validate(i) for i in invitations]
        return InvitationsListResponse(invitations=items, total=len(items))

    # -----------------------------------------------------------------------
    # Accept / Decline
    # -----------------------------------------------------------------------

    async def accept(self, token: str, user: User | None) -> InvitationResult:
        """
        Accept an invitation on behalf of ``user``.

        An expired invitation is persisted as ``expired`` before failing, so
        later attempts fail as already resolved.
        """
        if user is None:
            raise NotAuthenticated("You must be logged in to accept an invitation")

        invitation = await self._get_pending(token)

        if _is_expired(invitation):
            invitation.status = InvitationStatus.expired
            await self.db.commit()
            logger.info("Invitation %s expired on accept", invitation.id)
            raise InvitationExpired()

        self._check_email(invitation, user)

        await self._upsert_membership(invitation.tenant_id, user.id, invitation.role)
        invitation.status = InvitationStatus.accepted
        await self.db.flush()

        tenant = await self._get_tenant(invitation.tenant_id)
        logger.info(
            "User %s joined %s %s as %s",
            user.id,
            tenant.kind.value,
            tenant.id,
            invitation.role.value,
        )
        return InvitationResult(
            message="Invitation accepted successfully",
            tenant=_tenant_ref(tenant),
            role=invitation.role.value,
        )

    async def decline(self, token: str, user: User | None) -> InvitationResult:
        """Decline an invitation. Expiry is not checked and membership is untouched."""
        if user is None:
            raise NotAuthenticated("You must be logged in to decline an invitation")

        invitation = await self._get_pending(token)
        self._check_email(invitation, user)

        invitation.status = InvitationStatus.declined
        await self.db.flush()

        logger.info("Invitation %s declined by user %s", invitation.id, user.id)
        return InvitationResult(message="Invitation declined")

    # -----------------------------------------------------------------------
    # Info
    # -----------------------------------------------------------------------

    async def get_invitation_info(self, token: str, user: User | None) -> InvitationInfo:
        """
        Invitation metadata for the accept page. Read-only: an expired
        invitation is reported as ``expired`` but not persisted.
        """
        invitation = await self._get_by_token(token)
        if invitation is None:
            raise InvalidToken()

        tenant = await self._get_tenant(invitation.tenant_id)
        status = (
            InvitationStatus.expired.value
            if _is_expired(invitation)
            else invitation.status.value
        )
        return InvitationInfo(
            email=invitation.email,
            tenant=_tenant_ref(tenant),
            role=invitation.role.value,
            status=status,
            expires_at=_as_utc(invitation.expires_at),
            is_authenticated=user is not None,
            current_user_email=user.email if user is not None else None,
            email_mismatch=(
                user is not None
                and normalize_email(user.email) != normalize_email(invitation.email)
            ),
        )

    # -----------------------------------------------------------------------
    # Sign-up
    # -----------------------------------------------------------------------

    async def auto_accept_on_signup(self, user: User, token: str | None) -> bool:
        """
        Accept ``token`` for a user who just registered.

        Never raises: registration must succeed even if the invitation is
        invalid, resolved, expired or addressed to someone else.
        """
        if not token:
            return False
        try:
            await self.accept(token, user)
        except Exception as exc:
            logger.warning("Could not auto-accept invitation for %s: %s", user.email, exc)
            return False
        return True

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    async def _get_by_token(self, token: str) -> Invitation | None:
        result = await self.db.execute(
            select(Invitation)
            .where(Invitation.token == token)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_pending(self, token: str) -> Invitation:
        invitation = await self._get_by_token(token)
        if invitation is None:
            raise InvalidToken()
        if invitation.status != InvitationStatus.pending:
            raise AlreadyResolved(invitation.status.value)
        return invitation

    async def _get_tenant(self, tenant_id: UUID) -> Tenant:
        result = await self.db.execute(select(Tenant).where(Tenant.id == tenant_id))
        tenant = result.scalar_one_or_none()
        if tenant is None:
            raise TenantNotFound("Tenant not found")
        return tenant

    @staticmethod
    def _check_email(invitation: Invitation, user: User) -> None:
        if normalize_email(invitation.email) != normalize_email(user.email):
            raise EmailMismatch()

    async def _upsert_membership(self, tenant_id: UUID, user_id: UUID, role: TenantRole) -> None:
        """Insert the membership or update its role, in one statement."""
        dialect = self.db.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert(TenantMember).values(tenant_id=tenant_id, user_id=user_id, role=role)
        stmt = stmt.on_conflict_do_update(
            index_elements=[TenantMember.tenant_id, TenantMember.user_id],
            set_={"role": stmt.excluded.role},
        )
        await self.db.execute(stmt)

    def _queue_email(self, invitation: Invitation, tenant: Tenant, inviter: User | None) -> None:
        from eventdesk.workers.email_tasks import send_invitation_email

        try:
            send_invitation_email.delay(
                to_email=invitation.email,
                tenant_name=tenant.name,
                inviter_name=(inviter.display_name or inviter.email) if inviter else "Someone",
                role=invitation.role.value,
                invitation_token=invitation.token,
                expires_at=_as_utc(invitation.expires_at).isoformat(),
                frontend_url=settings.FRONTEND_URL,
            )
        except Exception:
            logger.exception("Failed to queue invitation email for %s", invitation.id)
