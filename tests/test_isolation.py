"""
Cross-tenant isolation and security tests.

Verifies that:
- Users cannot access resources from other organizations
- Role enforcement works correctly within an organization
- Invitation tokens cannot be reused or stolen
- Event CRUD is properly isolated
- Public registrations inherit the event's tenant
- Removed members lose access immediately
"""

import uuid

import httpx
import pytest

from conftest import unique_email, unique_slug

PASSWORD = "password123"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def register(
    client: httpx.AsyncClient,
    email: str,
    password: str = PASSWORD,
    display_name: str = "Test User",
    invitation_token: str | None = None,
) -> dict:
    payload = {"email": email, "password": password, "display_name": display_name}
    if invitation_token:
        payload["invitation_token"] = invitation_token
    resp = await client.post("/api/v1/auth/register", json=payload)
    assert resp.status_code == 201, f"Register failed: {resp.text}"
    return resp.json()


async def login(client: httpx.AsyncClient, email: str, password: str = PASSWORD) -> str:
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    return resp.json()["access_token"]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def signup(client: httpx.AsyncClient, prefix: str) -> tuple[str, str]:
    """Register and log in. Returns (email, access_token)."""
    email = unique_email(prefix)
    await register(client, email)
    return email, await login(client, email)


async def create_org(client: httpx.AsyncClient, token: str, name: str = "Org") -> dict:
    resp = await client.post(
        "/api/v1/tenants",
        json={"name": name, "slug": unique_slug("org")},
        headers=bearer(token),
    )
    assert resp.status_code == 201, f"Create org failed: {resp.text}"
    return resp.json()


async def create_event(
    client: httpx.AsyncClient, token: str, tenant_id: str | None = None, name: str = "Summit"
) -> httpx.Response:
    payload = {"name": name, "slug": unique_slug("event"), "start_date": "2030-05-01T09:00:00Z"}
    if tenant_id is not None:
        payload["tenant_id"] = tenant_id
    return await client.post("/api/v1/events", json=payload, headers=bearer(token))


async def invite_member(
    client: httpx.AsyncClient, token: str, tenant_id: str, email: str, role: str = "editor"
) -> httpx.Response:
    return await client.post(
        f"/api/v1/tenants/{tenant_id}/invitations",
        json={"email": email, "role": role},
        headers=bearer(token),
    )


async def accept_invite(client: httpx.AsyncClient, token: str, invitation_token: str) -> httpx.Response:
    return await client.post(
        "/api/accept-invitation", json={"token": invitation_token}, headers=bearer(token)
    )


async def setup_org_with_member(
    client: httpx.AsyncClient, member_role: str = "editor"
) -> tuple[str, str, str]:
    """Create org, invite member, return (owner_token, member_token, tenant_id)."""
    _, owner_token = await signup(client, "owner")
    member_email, member_token = await signup(client, "member")
    org = await create_org(client, owner_token)

    resp = await invite_member(client, owner_token, org["id"], member_email, member_role)
    assert resp.status_code == 201, f"Invite failed: {resp.text}"
    accept_resp = await accept_invite(client, member_token, resp.json()["token"])
    assert accept_resp.status_code == 200, f"Accept invite failed: {accept_resp.text}"
    return owner_token, member_token, org["id"]


@pytest.fixture(autouse=True)
async def platform_admin(client):
    """The first account becomes super-admin; claim it so test users stay regular."""
    email = unique_email("platform")
    await register(client, email)
    return await login(client, email)


# ---------------------------------------------------------------------------
# 1. Basic Cross-Org Isolation
# ---------------------------------------------------------------------------

async def test_first_account_is_super_admin(client, platform_admin):
    resp = await client.get("/api/v1/auth/me", headers=bearer(platform_admin))
    assert resp.status_code == 200
    assert "super-admin" in resp.json()["roles"]
    assert resp.json()["pricing_plan"] == "unlimited"

    _, token = await signup(client, "second")
    me = (await client.get("/api/v1/auth/me", headers=bearer(token))).json()
    assert me["roles"] == ["user"]
    assert me["pricing_plan"] == "free"


async def test_cannot_access_other_org(client):
    _, token_a = await signup(client, "iso1a")
    _, token_b = await signup(client, "iso1b")
    await create_org(client, token_a, "Org A")
    org_b = await create_org(client, token_b, "Org B")

    resp = await client.get(f"/api/v1/tenants/{org_b['id']}", headers=bearer(token_a))
    assert resp.status_code == 403


async def test_cannot_list_other_org_members(client):
    _, token_a = await signup(client, "iso2a")
    _, token_b = await signup(client, "iso2b")
    await create_org(client, token_a, "Org A")
    org_b = await create_org(client, token_b, "Org B")

    resp = await client.get(f"/api/v1/tenants/{org_b['id']}/members", headers=bearer(token_a))
    assert resp.status_code == 403


async def test_tenant_list_only_shows_own(client):
    _, token_a = await signup(client, "iso3a")
    _, token_b = await signup(client, "iso3b")
    org_a = await create_org(client, token_a, "Org A")
    await create_org(client, token_b, "Org B")

    resp = await client.get("/api/v1/tenants", headers=bearer(token_a))
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()["tenants"]] == [org_a["id"]]


async def test_unauthenticated_request_rejected(client):
    resp = await client.get(f"/api/v1/tenants/{uuid.uuid4()}")
    assert resp.status_code == 401


async def test_free_plan_organization_limit(client):
    _, token = await signup(client, "limit")
    await create_org(client, token, "First")

    resp = await client.post(
        "/api/v1/tenants",
        json={"name": "Second", "slug": unique_slug("org")},
        headers=bearer(token),
    )
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "TENANT_LIMIT_REACHED"


# ---------------------------------------------------------------------------
# 2. Event CRUD Isolation
# ---------------------------------------------------------------------------

async def test_cannot_list_other_org_events(client):
    _, token_a = await signup(client, "ev1a")
    _, token_b = await signup(client, "ev1b")
    await create_org(client, token_a, "Org A")
    await create_org(client, token_b, "Org B")
    assert (await create_event(client, token_b, name="Secret")).status_code == 201

    resp = await client.get("/api/v1/events", headers=bearer(token_a))
    assert resp.status_code == 200
    assert resp.json()["events"] == []


async def test_cannot_create_event_in_other_org(client):
    _, token_a = await signup(client, "ev2a")
    _, token_b = await signup(client, "ev2b")
    await create_org(client, token_a, "Org A")
    org_b = await create_org(client, token_b, "Org B")

    resp = await create_event(client, token_a, tenant_id=org_b["id"], name="Injected")
    assert resp.status_code == 403


async def test_cannot_get_update_or_delete_other_org_event(client):
    _, token_a = await signup(client, "ev3a")
    _, token_b = await signup(client, "ev3b")
    await create_org(client, token_a, "Org A")
    await create_org(client, token_b, "Org B")
    event_id = (await create_event(client, token_b, name="Secret")).json()["id"]

    get_resp = await client.get(f"/api/v1/events/{event_id}", headers=bearer(token_a))
    patch_resp = await client.patch(
        f"/api/v1/events/{event_id}", json={"name": "Hacked"}, headers=bearer(token_a)
    )
    delete_resp = await client.delete(f"/api/v1/events/{event_id}", headers=bearer(token_a))

    assert get_resp.status_code == 404
    assert patch_resp.status_code == 404
    assert delete_resp.status_code == 404


async def test_event_organization_is_auto_selected(client):
    _, token = await signup(client, "ev4")
    org = await create_org(client, token)

    resp = await create_event(client, token)
    assert resp.status_code == 201
    assert resp.json()["tenant_id"] == org["id"]


async def test_event_needs_an_organization(client):
    _, token = await signup(client, "ev5")
    resp = await create_event(client, token)
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "ORGANIZATION_REQUIRED"


async def test_validate_event_param(client):
    _, token_a = await signup(client, "ev6a")
    _, token_b = await signup(client, "ev6b")
    await create_org(client, token_a, "Org A")
    await create_org(client, token_b, "Org B")
    own_id = (await create_event(client, token_a)).json()["id"]
    other_id = (await create_event(client, token_b)).json()["id"]

    own = await client.get("/api/v1/events/validate", params={"event": own_id}, headers=bearer(token_a))
    other = await client.get("/api/v1/events/validate", params={"event": other_id}, headers=bearer(token_a))
    junk = await client.get("/api/v1/events/validate", params={"event": "1 OR 1=1"}, headers=bearer(token_a))

    assert own.json() == {"event_id": own_id, "valid": True}
    assert other.json() == {"event_id": None, "valid": False}
    assert junk.json() == {"event_id": None, "valid": False}


async def test_form_defaults(client):
    _, token = await signup(client, "ev7")
    org = await create_org(client, token)
    event_id = (await create_event(client, token)).json()["id"]

    resp = await client.get("/api/v1/events/defaults", headers=bearer(token))
    assert resp.json() == {"organization_id": org["id"], "team_id": None, "event_id": event_id}


# ---------------------------------------------------------------------------
# 3. Role Enforcement Within Own Org
# ---------------------------------------------------------------------------

async def test_viewer_cannot_create_event(client):
    _, viewer_token, tenant_id = await setup_org_with_member(client, "viewer")
    resp = await create_event(client, viewer_token, tenant_id=tenant_id)
    assert resp.status_code == 403


async def test_viewer_can_list_events(client):
    owner_token, viewer_token, tenant_id = await setup_org_with_member(client, "viewer")
    assert (await create_event(client, owner_token, tenant_id=tenant_id)).status_code == 201

    resp = await client.get("/api/v1/events", headers=bearer(viewer_token))
    assert resp.status_code == 200
    assert len(resp.json()["events"]) == 1


async def test_editor_can_create_event(client):
    _, editor_token, tenant_id = await setup_org_with_member(client, "editor")
    resp = await create_event(client, editor_token)
    assert resp.status_code == 201
    assert resp.json()["tenant_id"] == tenant_id


async def test_member_cannot_invite_others(client):
    _, member_token, tenant_id = await setup_org_with_member(client, "editor")
    resp = await invite_member(client, member_token, tenant_id, unique_email("newuser"))
    assert resp.status_code == 403


async def test_member_cannot_change_members(client):
    owner_token, member_token, tenant_id = await setup_org_with_member(client, "editor")
    members = (
        await client.get(f"/api/v1/tenants/{tenant_id}/members", headers=bearer(owner_token))
    ).json()["members"]
    member = next(m for m in members if m["role"] == "editor")

    resp = await client.put(
        f"/api/v1/tenants/{tenant_id}/members",
        json={"members": [{"user_id": member["user_id"], "role": "admin"}]},
        headers=bearer(member_token),
    )
    assert resp.status_code == 403


async def test_members_list_starts_with_owner(client):
    owner_token, _, tenant_id = await setup_org_with_member(client, "viewer")
    resp = await client.get(f"/api/v1/tenants/{tenant_id}/members", headers=bearer(owner_token))

    roles = [m["role"] for m in resp.json()["members"]]
    assert roles == ["owner", "viewer"]


async def test_member_cannot_update_or_delete_org(client):
    _, member_token, tenant_id = await setup_org_with_member(client, "editor")

    patch_resp = await client.patch(
        f"/api/v1/tenants/{tenant_id}", json={"name": "Taken Over"}, headers=bearer(member_token)
    )
    delete_resp = await client.delete(f"/api/v1/tenants/{tenant_id}", headers=bearer(member_token))
    assert patch_resp.status_code == 403
    assert delete_resp.status_code == 403


# ---------------------------------------------------------------------------
# 4. Invitation Isolation & Token Security
# ---------------------------------------------------------------------------

async def test_invitation_token_cannot_be_reused(client):
    _, owner_token = await signup(client, "inv1o")
    member_email, member_token = await signup(client, "inv1m")
    org = await create_org(client, owner_token)
    invitation_token = (await invite_member(client, owner_token, org["id"], member_email)).json()["token"]

    first = await accept_invite(client, member_token, invitation_token)
    second = await accept_invite(client, member_token, invitation_token)
    assert first.status_code == 200
    assert second.status_code == 400
    assert "already been accepted" in second.json()["error"]


async def test_invitation_token_cannot_be_stolen(client):
    _, owner_token = await signup(client, "inv2o")
    member_email, _ = await signup(client, "inv2m")
    _, thief_token = await signup(client, "inv2t")
    org = await create_org(client, owner_token)
    invitation_token = (await invite_member(client, owner_token, org["id"], member_email)).json()["token"]

    resp = await accept_invite(client, thief_token, invitation_token)
    assert resp.status_code == 400

    thief_view = await client.get(f"/api/v1/tenants/{org['id']}", headers=bearer(thief_token))
    assert thief_view.status_code == 403


async def test_invitation_sends_email(client, queued_emails):
    _, owner_token = await signup(client, "inv3o")
    org = await create_org(client, owner_token, "Mail Org")
    email = unique_email("inv3m")

    resp = await invite_member(client, owner_token, org["id"], email)
    assert resp.status_code == 201
    assert [m["to_email"] for m in queued_emails] == [email]
    assert queued_emails[0]["tenant_name"] == "Mail Org"


async def test_signup_with_invitation_token_joins_tenant(client):
    _, owner_token = await signup(client, "inv4o")
    org = await create_org(client, owner_token)
    email = unique_email("inv4m")
    invitation_token = (await invite_member(client, owner_token, org["id"], email, "viewer")).json()["token"]

    await register(client, email, invitation_token=invitation_token)
    token = await login(client, email)

    me = (await client.get("/api/v1/auth/me", headers=bearer(token))).json()
    assert me["organizations"] == [{"tenant_id": org["id"], "role": "viewer"}]


async def test_signup_with_foreign_invitation_still_registers(client):
    _, owner_token = await signup(client, "inv5o")
    org = await create_org(client, owner_token)
    invitation_token = (
        await invite_member(client, owner_token, org["id"], unique_email("inv5m"))
    ).json()["token"]

    email = unique_email("inv5x")
    await register(client, email, invitation_token=invitation_token)
    token = await login(client, email)

    me = (await client.get("/api/v1/auth/me", headers=bearer(token))).json()
    assert me["organizations"] == []


async def test_invitee_sees_own_invitations(client):
    _, owner_token = await signup(client, "inv6o")
    member_email, member_token = await signup(client, "inv6m")
    _, other_token = await signup(client, "inv6x")
    org = await create_org(client, owner_token)
    await invite_member(client, owner_token, org["id"], member_email)

    mine = await client.get("/api/v1/tenants/invitations/mine", headers=bearer(member_token))
    others = await client.get("/api/v1/tenants/invitations/mine", headers=bearer(other_token))
    assert mine.json()["total"] == 1
    assert others.json()["total"] == 0


# ---------------------------------------------------------------------------
# 5. Public Registrations
# ---------------------------------------------------------------------------

async def test_anonymous_registration_is_pending(client):
    _, owner_token = await signup(client, "reg1")
    org = await create_org(client, owner_token)
    event_id = (await create_event(client, owner_token)).json()["id"]

    resp = await client.post(
        "/api/v1/registrations/participants",
        json={"event_id": event_id, "name": "Visitor", "email": "visitor@example.com"},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "not-approved"
    assert body["tenant_id"] == org["id"]
    assert body["registration_date"] is not None


async def test_registrations_are_scoped_to_tenant(client):
    _, owner_token = await signup(client, "reg2o")
    _, outsider_token = await signup(client, "reg2x")
    await create_org(client, owner_token)
    await create_org(client, outsider_token)
    event_id = (await create_event(client, owner_token)).json()["id"]
    await client.post(
        "/api/v1/registrations/partners",
        json={"event_id": event_id, "name": "Sponsor", "email": "sponsor@example.com"},
    )

    anonymous = await client.get("/api/v1/registrations/partners")
    owner_view = await client.get("/api/v1/registrations/partners", headers=bearer(owner_token))
    outsider_view = await client.get("/api/v1/registrations/partners", headers=bearer(outsider_token))

    assert anonymous.status_code == 401
    assert owner_view.json()["total"] == 1
    assert outsider_view.json()["total"] == 0


async def test_registration_for_unknown_event(client):
    resp = await client.post(
        "/api/v1/registrations/participants",
        json={"event_id": str(uuid.uuid4()), "name": "Visitor", "email": "visitor@example.com"},
    )
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# 6. Membership Removal & Token Revocation
# ---------------------------------------------------------------------------

async def test_removed_member_loses_access(client):
    owner_token, member_token, tenant_id = await setup_org_with_member(client, "editor")
    before = await client.get(f"/api/v1/tenants/{tenant_id}", headers=bearer(member_token))
    assert before.status_code == 200

    resp = await client.put(
        f"/api/v1/tenants/{tenant_id}/members", json={"members": []}, headers=bearer(owner_token)
    )
    assert resp.status_code == 200
    assert [m["role"] for m in resp.json()["members"]] == ["owner"]

    after = await client.get(f"/api/v1/tenants/{tenant_id}", headers=bearer(member_token))
    assert after.status_code == 403


async def test_logged_out_token_is_rejected(client):
    email = unique_email("logout")
    await register(client, email)
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": PASSWORD})
    tokens = resp.json()

    logout = await client.post(
        "/api/v1/auth/logout",
        json={"refresh_token": tokens["refresh_token"]},
        headers=bearer(tokens["access_token"]),
    )
    assert logout.status_code == 200

    me = await client.get("/api/v1/auth/me", headers=bearer(tokens["access_token"]))
    assert me.status_code == 401
