"""
Global role and pricing-plan checks.
"""

import pytest

from eventdesk.access.roles import (
    can_create_organizations,
    can_participate_in_organizations,
    check_pricing_plan,
    check_role,
    get_organization_limit,
    is_admin,
)
from eventdesk.models import GlobalRole, PricingPlan, User
from eventdesk.workers.email_tasks import role_label


def build_user(roles: list[str] | None = None, plan: PricingPlan | None = None) -> User:
    return User(email="someone@example.com", display_name="Someone", roles=roles or [], pricing_plan=plan)


class TestCheckRole:
    def test_absent_user_has_no_role(self):
        assert check_role([GlobalRole.admin], None) is False

    def test_empty_roles(self):
        assert check_role([GlobalRole.admin], build_user([])) is False

    def test_intersection(self):
        user = build_user(["user", "admin"])
        assert check_role([GlobalRole.admin], user) is True
        assert check_role([GlobalRole.super_admin], user) is False

    def test_accepts_plain_strings(self):
        assert check_role(["super-admin"], build_user(["super-admin"])) is True

    @pytest.mark.parametrize("roles,expected", [
        (["super-admin"], True),
        (["admin"], True),
        (["user"], False),
        ([], False),
    ])
    def test_is_admin(self, roles, expected):
        assert is_admin(build_user(roles)) is expected


class TestPricingPlan:
    def test_admin_passes_any_plan_check(self):
        assert check_pricing_plan([PricingPlan.pro], build_user(["admin"])) is True

    def test_plan_must_be_allowed(self):
        user = build_user(["user"], PricingPlan.free)
        assert check_pricing_plan([PricingPlan.pro], user) is False
        assert check_pricing_plan([PricingPlan.free, PricingPlan.pro], user) is True

    def test_no_plan_fails(self):
        assert check_pricing_plan([PricingPlan.free], build_user(["user"])) is False

    def test_empty_allowed_list_fails(self):
        assert check_pricing_plan([], build_user(["user"], PricingPlan.free)) is False

    @pytest.mark.parametrize("plan,limit", [
        (PricingPlan.free, 1),
        (PricingPlan.pro, 3),
        (PricingPlan.organizations, 20),
        (PricingPlan.unlimited, None),
        (None, 0),
    ])
    def test_organization_limit(self, plan, limit):
        assert get_organization_limit(build_user(["user"], plan)) == limit

    def test_admin_limit_is_unlimited(self):
        assert get_organization_limit(build_user(["super-admin"], PricingPlan.free)) is None

    def test_can_create_organizations(self):
        assert can_create_organizations(build_user(["user"], PricingPlan.free)) is True
        assert can_create_organizations(build_user(["user"], None)) is False
        assert can_create_organizations(build_user(["admin"], None)) is True

    def test_participation_requires_a_user(self):
        assert can_participate_in_organizations(None) is False
        assert can_participate_in_organizations(build_user(["user"])) is True


def test_role_label():
    assert role_label("super-admin") == "Super Admin"
    assert role_label("editor") == "Editor"
