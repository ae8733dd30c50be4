"""
User business logic.

Lifecycle rules shared by sign-up and admin edits, plus the guarded delete.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventdesk.access.decisions import AccessContext
from eventdesk.access.predicates import collection_access, field_access
from eventdesk.access.roles import ADMIN_ROLES, check_role
from eventdesk.core.exceptions import AccessDenied, OwnershipConflict
from eventdesk.models.tenant import Tenant
from eventdesk.models.user import GlobalRole, PricingPlan, User
from eventdesk.schemas.user import UserResponse, UsersListResponse, UserUpdateRequest

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifecycle rules
# ---------------------------------------------------------------------------

async def ensure_first_user_is_super_admin(db: AsyncSession, roles: list[str]) -> list[str]:
    """The very first account created gets ``super-admin``."""
    user_count = (await db.execute(select(func.count(User.id)))).scalar_one()
    if user_count == 0 and GlobalRole.super_admin.value not in roles:
        return [*roles, GlobalRole.super_admin.value]
    return roles


def assign_unlimited_to_admins(user: User) -> None:
    """Super-admins and admins always carry the unlimited plan."""
    if check_role(ADMIN_ROLES, user):
        user.pricing_plan = PricingPlan.unlimited


def ownership_conflict_message(count: int) -> str:
    noun = "organization" if count == 1 else "organizations"
    return (
        f"Cannot delete user: This user owns {count} {noun}. "
        f"Please transfer ownership or delete the {noun} first."
    )


class UserService:
    """Admin-or-self reads and updates, admin-only deletes."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.access = collection_access("users")

    async def list_users(self, caller: User) -> UsersListResponse:
        decision = await self.access.read(AccessContext(db=self.db, user=caller))
        stmt = decision.apply(select(User), User).order_by(User.created_at)
        users = (await self.db.execute(stmt)).scalars().all()
        items = [UserResponse.model_validate(u) for u in users]
        return UsersListResponse(users=items, total=len(items))

    async def get_user(self, user_id: UUID, caller: User) -> UserResponse:
        return UserResponse.model_validate(await self._load_for(user_id, caller, "read"))

    async def update_user(
        self, user_id: UUID, data: UserUpdateRequest, caller: User
    ) -> UserResponse:
        user = await self._load_for(user_id, caller, "update")
        ctx = AccessContext(db=self.db, user=caller, doc_id=user.id)

        if data.display_name is not None:
            user.display_name = data.display_name

        if data.roles is not None:
            if not await field_access("users", "roles").update(ctx):
                raise AccessDenied("Only super-admins can change roles")
            user.roles = [GlobalRole(r).value for r in data.roles]

        if data.pricing_plan is not None:
            if not await field_access("users", "pricing_plan").update(ctx):
                raise AccessDenied("Only admins can change the pricing plan")
            user.pricing_plan = PricingPlan(data.pricing_plan)

        assign_unlimited_to_admins(user)
        await self.db.flush()
        await self.db.refresh(user)
        return UserResponse.model_validate(user)

    async def delete_user(self, user_id: UUID, caller: User) -> None:
        """
        Delete a user. Blocked while the user still owns organizations, so
        tenants are never left without an owner.
        """
        if not await self.access.delete(AccessContext(db=self.db, user=caller, doc_id=user_id)):
            raise AccessDenied("Only admins can delete users")

        user = await self.db.get(User, user_id)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "USER_NOT_FOUND", "message": "User not found"},
            )

        owned = (
            await self.db.execute(
                select(func.count(Tenant.id)).where(Tenant.owner_id == user.id)
            )
        ).scalar_one()
        if owned > 0:
            raise OwnershipConflict(ownership_conflict_message(owned))

        await self.db.delete(user)
        await self.db.flush()
        logger.info("User %s deleted by %s", user_id, caller.id)

    async def _load_for(self, user_id: UUID, caller: User, operation: str) -> User:
        predicate = getattr(self.access, operation)
        decision = await predicate(AccessContext(db=self.db, user=caller, doc_id=user_id))
        stmt = decision.apply(select(User).where(User.id == user_id), User)
        user = (await self.db.execute(stmt)).scalar_one_or_none()
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail={"code": "USER_NOT_FOUND", "message": "User not found"},
            )
        return user
