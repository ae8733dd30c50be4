"""
Membership and tenant-ID resolution.
"""

import uuid

from conftest import add_member, break_store, make_tenant, make_user

from eventdesk.access.resolvers import (
    coerce_uuid,
    get_organization_role,
    get_team_role,
    get_tenant_role,
    get_user_organization_ids,
    get_user_team_ids,
    get_user_tenant_ids,
    get_user_tenant_ids_with_min_role,
    has_tenant_role,
    is_tenant_owner,
)
from eventdesk.models import TenantKind, TenantRole


def test_coerce_uuid():
    value = uuid.uuid4()
    assert coerce_uuid(value) == value
    assert coerce_uuid(str(value)) == value
    assert coerce_uuid("not-a-uuid") is None
    assert coerce_uuid(None) is None


# ---------------------------------------------------------------------------
# Membership resolver
# ---------------------------------------------------------------------------

async def test_owner_resolves_to_owner_without_membership_row(db):
    owner = await make_user(db)
    org = await make_tenant(db, owner)

    assert await get_tenant_role(db, owner, org.id) == TenantRole.owner
    assert await is_tenant_owner(db, owner, org.id) is True


async def test_member_role_comes_from_membership_row(db):
    owner = await make_user(db)
    viewer = await make_user(db)
    org = await make_tenant(db, owner)
    await add_member(db, org, viewer, TenantRole.viewer)

    assert await get_organization_role(db, viewer, org.id) == TenantRole.viewer
    assert await is_tenant_owner(db, viewer, org.id) is False


async def test_non_member_has_no_role(db):
    owner = await make_user(db)
    stranger = await make_user(db)
    org = await make_tenant(db, owner)

    assert await get_tenant_role(db, stranger, org.id) is None
    assert await get_tenant_role(db, None, org.id) is None


async def test_missing_tenant_and_malformed_id(db):
    user = await make_user(db)
    assert await get_tenant_role(db, user, uuid.uuid4()) is None
    assert await get_tenant_role(db, user, "garbage") is None


async def test_kind_mismatch_resolves_to_none(db):
    owner = await make_user(db)
    team = await make_tenant(db, owner, TenantKind.team)

    assert await get_team_role(db, owner, team.id) == TenantRole.owner
    assert await get_organization_role(db, owner, team.id) is None


async def test_has_tenant_role_uses_hierarchy(db):
    owner = await make_user(db)
    editor = await make_user(db)
    org = await make_tenant(db, owner)
    await add_member(db, org, editor, TenantRole.editor)

    assert await has_tenant_role(db, editor, org.id, TenantRole.viewer) is True
    assert await has_tenant_role(db, editor, org.id, TenantRole.editor) is True
    assert await has_tenant_role(db, editor, org.id, TenantRole.owner) is False
    assert await has_tenant_role(db, owner, org.id, TenantRole.editor) is True


# ---------------------------------------------------------------------------
# Tenant ID resolver
# ---------------------------------------------------------------------------

async def test_owned_and_member_tenants_without_duplicates(db):
    user = await make_user(db)
    other = await make_user(db)
    owned = await make_tenant(db, user, name="Owned")
    joined = await make_tenant(db, other, name="Joined")
    await add_member(db, joined, user, TenantRole.viewer)
    # Owner with a stray membership row must appear once
    await add_member(db, owned, user, TenantRole.editor)

    ids = await get_user_organization_ids(db, user)
    assert sorted(ids) == sorted([owned.id, joined.id])
    assert len(ids) == len(set(ids))


async def test_owner_row_wins_over_membership_role(db):
    user = await make_user(db)
    owned = await make_tenant(db, user)
    await add_member(db, owned, user, TenantRole.viewer)

    assert await get_user_organization_ids(db, user, TenantRole.owner) == [owned.id]
    assert await get_user_organization_ids(db, user, TenantRole.viewer) == []


async def test_role_filter_and_kind_filter(db):
    user = await make_user(db)
    other = await make_user(db)
    org = await make_tenant(db, other)
    team = await make_tenant(db, other, TenantKind.team)
    await add_member(db, org, user, TenantRole.viewer)
    await add_member(db, team, user, TenantRole.editor)

    assert await get_user_organization_ids(db, user) == [org.id]
    assert await get_user_team_ids(db, user) == [team.id]
    assert await get_user_organization_ids(db, user, TenantRole.editor) == []
    assert await get_user_team_ids(db, user, TenantRole.editor) == [team.id]


async def test_min_role_filter(db):
    user = await make_user(db)
    other = await make_user(db)
    owned = await make_tenant(db, user)
    edited = await make_tenant(db, other)
    viewed = await make_tenant(db, other)
    await add_member(db, edited, user, TenantRole.editor)
    await add_member(db, viewed, user, TenantRole.viewer)

    ids = await get_user_tenant_ids_with_min_role(
        db, user, TenantKind.organization, TenantRole.editor
    )
    assert sorted(ids) == sorted([owned.id, edited.id])


async def test_no_user_means_no_tenants(db):
    assert await get_user_organization_ids(db, None) == []


# ---------------------------------------------------------------------------
# Store failures
# ---------------------------------------------------------------------------

async def test_store_failure_resolves_to_no_role(db, monkeypatch):
    owner = await make_user(db)
    org = await make_tenant(db, owner)
    break_store(monkeypatch, db)

    assert await get_tenant_role(db, owner, org.id) is None
    assert await has_tenant_role(db, owner, org.id, TenantRole.viewer) is False
    assert await is_tenant_owner(db, owner, org.id) is False


async def test_store_failure_resolves_to_no_tenants(db, monkeypatch):
    owner = await make_user(db)
    await make_tenant(db, owner)
    break_store(monkeypatch, db)

    assert await get_user_tenant_ids(db, owner) == []
    assert await get_user_organization_ids(db, owner, TenantRole.owner) == []
    assert await get_user_tenant_ids_with_min_role(db, owner, TenantKind.organization) == []
