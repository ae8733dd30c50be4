"""
Global role and pricing-plan checks.

Pure functions over a User; no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable

from eventdesk.models.user import GlobalRole, PricingPlan, User

ADMIN_ROLES: frozenset[GlobalRole] = frozenset({GlobalRole.super_admin, GlobalRole.admin})
SUPER_ADMIN_ONLY: frozenset[GlobalRole] = frozenset({GlobalRole.super_admin})

ORGANIZATION_LIMITS: dict[PricingPlan, int | None] = {
    PricingPlan.free: 1,
    PricingPlan.pro: 3,
    PricingPlan.organizations: 20,
    PricingPlan.unlimited: None,
}


def check_role(allowed_roles: Iterable[GlobalRole | str], user: User | None) -> bool:
    """True iff the user's global roles intersect ``allowed_roles``."""
    if user is None or not user.roles:
        return False
    allowed = {_role_value(role) for role in allowed_roles}
    return any(_role_value(role) in allowed for role in user.roles)


def is_admin(user: User | None) -> bool:
    """Super-admins and admins pass every tenant-scoped predicate."""
    return check_role(ADMIN_ROLES, user)


def check_pricing_plan(allowed_plans: Iterable[PricingPlan], user: User | None) -> bool:
    if is_admin(user):
        return True
    allowed = set(allowed_plans)
    if user is None or user.pricing_plan is None or not allowed:
        return False
    return user.pricing_plan in allowed


def can_create_organizations(user: User | None) -> bool:
    """Admins always can; otherwise any pricing plan grants creation (with limits)."""
    if is_admin(user):
        return True
    return user is not None and user.pricing_plan in ORGANIZATION_LIMITS


def get_organization_limit(user: User | None) -> int | None:
    """
    Maximum number of organizations the user may own.

    ``None`` means unlimited. Users without a plan get 0.
    """
    if is_admin(user):
        return None
    if user is None or user.pricing_plan is None:
        return 0
    return ORGANIZATION_LIMITS.get(PricingPlan(user.pricing_plan), 0)


def can_participate_in_organizations(user: User | None) -> bool:
    return user is not None


def _role_value(role: GlobalRole | str) -> str:
    return role.value if isinstance(role, GlobalRole) else str(role)
