"""Tests for workspaces: listing, switching, members and permissions."""

import pytest
from httpx import AsyncClient


async def _register(client: AsyncClient, email: str, full_name: str):
    """Helper: register a user and return (headers, data)."""
    resp = await client.post("/v1/auth/register", json={
        "fullName": full_name,
        "email": email,
        "password": "Secret123",
    })
    assert resp.status_code == 201, resp.text
    client.cookies.clear()
    data = resp.json()["data"]
    return {"Authorization": f"Bearer {data['token']}"}, data


async def _join(client: AsyncClient, owner_headers, member_email: str, member_headers, owner_data, role="member"):
    """Helper: owner invites the member, member switches in. Returns new member headers."""
    resp = await client.post("/v1/workspace/members", json={
        "email": member_email, "role": role,
    }, headers=owner_headers)
    assert resp.status_code == 201, resp.text

    resp = await client.post("/v1/workspace/switch", json={
        "workspaceId": owner_data["workspace"]["id"],
    }, headers=member_headers)
    assert resp.status_code == 200, resp.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.mark.asyncio
async def test_get_current_workspace(client: AsyncClient):
    headers, data = await _register(client, "owner@ws-get.com", "Olivia Owner")

    resp = await client.get("/v1/workspace", headers=headers)
    assert resp.status_code == 200
    payload = resp.json()["data"]
    assert payload["role"] == "owner"
    assert payload["workspace"]["id"] == data["workspace"]["id"]
    assert payload["workspace"]["ownerName"] == "Olivia Owner"
    assert set(payload["workspace"]["permissions"]) == {"owner", "manager", "member"}


@pytest.mark.asyncio
async def test_rename_workspace(client: AsyncClient):
    headers, _ = await _register(client, "owner@ws-rename.com", "Olivia Owner")

    resp = await client.put("/v1/workspace", json={"name": "  Studio O "}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["workspace"]["name"] == "Studio O"

    resp = await client.put("/v1/workspace", json={"name": "   "}, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Workspace name is required"

    resp = await client.put("/v1/workspace", json={"name": "x" * 121}, headers=headers)
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_add_member_rules(client: AsyncClient):
    owner_headers, _ = await _register(client, "owner@ws-add.com", "Olivia Owner")
    await _register(client, "member@ws-add.com", "Mark Member")

    resp = await client.post("/v1/workspace/members", json={
        "email": "MEMBER@ws-add.com", "role": "manager",
    }, headers=owner_headers)
    assert resp.status_code == 201
    member = resp.json()["data"]["member"]
    assert member["email"] == "member@ws-add.com"
    assert member["role"] == "manager"

    resp = await client.post("/v1/workspace/members", json={
        "email": "member@ws-add.com",
    }, headers=owner_headers)
    assert resp.status_code == 409
    assert resp.json()["message"] == "User is already a member of this workspace"

    resp = await client.post("/v1/workspace/members", json={
        "email": "owner@ws-add.com",
    }, headers=owner_headers)
    assert resp.status_code == 409

    resp = await client.post("/v1/workspace/members", json={
        "email": "ghost@ws-add.com",
    }, headers=owner_headers)
    assert resp.status_code == 404
    assert resp.json()["message"] == "User email is not registered on Freyn"

    resp = await client.post("/v1/workspace/members", json={"email": ""}, headers=owner_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Email is required"


@pytest.mark.asyncio
async def test_owner_role_cannot_be_granted_by_invite(client: AsyncClient):
    owner_headers, _ = await _register(client, "owner@ws-role.com", "Olivia Owner")
    await _register(client, "member@ws-role.com", "Mark Member")

    resp = await client.post("/v1/workspace/members", json={
        "email": "member@ws-role.com", "role": "owner",
    }, headers=owner_headers)
    assert resp.status_code == 201
    assert resp.json()["data"]["member"]["role"] == "member"


@pytest.mark.asyncio
async def test_list_members(client: AsyncClient):
    owner_headers, owner = await _register(client, "owner@ws-list.com", "Olivia Owner")
    _, member = await _register(client, "member@ws-list.com", "Mark Member")
    await client.post("/v1/workspace/members", json={
        "email": "member@ws-list.com",
    }, headers=owner_headers)

    resp = await client.get("/v1/workspace/members", headers=owner_headers)
    assert resp.status_code == 200
    members = resp.json()["data"]["members"]
    assert [m["id"] for m in members] == [owner["user"]["id"], member["user"]["id"]]
    assert [m["role"] for m in members] == ["owner", "member"]


@pytest.mark.asyncio
async def test_list_and_switch_workspaces(client: AsyncClient):
    owner_headers, owner = await _register(client, "owner@ws-switch.com", "Olivia Owner")
    member_headers, member = await _register(client, "member@ws-switch.com", "Mark Member")
    await client.post("/v1/workspace/members", json={
        "email": "member@ws-switch.com", "role": "manager",
    }, headers=owner_headers)

    resp = await client.get("/v1/workspace/list", headers=member_headers)
    assert resp.status_code == 200
    workspaces = resp.json()["data"]["workspaces"]
    assert [w["id"] for w in workspaces] == [member["workspace"]["id"], owner["workspace"]["id"]]
    assert workspaces[0]["isOwner"] is True
    assert workspaces[1]["role"] == "manager"

    resp = await client.post("/v1/workspace/switch", json={
        "workspaceId": owner["workspace"]["id"],
    }, headers=member_headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["user"]["workspaceId"] == owner["workspace"]["id"]
    assert data["user"]["workspaceRole"] == "manager"
    assert data["workspace"]["id"] == owner["workspace"]["id"]
    client.cookies.clear()

    switched = {"Authorization": f"Bearer {data['token']}"}
    resp = await client.get("/v1/workspace", headers=switched)
    assert resp.json()["data"]["role"] == "manager"


@pytest.mark.asyncio
async def test_switch_rules(client: AsyncClient):
    _, owner = await _register(client, "owner@ws-noswitch.com", "Olivia Owner")
    stranger_headers, stranger = await _register(client, "stranger@ws-noswitch.com", "Sam Stranger")

    resp = await client.post("/v1/workspace/switch", json={
        "workspaceId": owner["workspace"]["id"],
    }, headers=stranger_headers)
    assert resp.status_code == 403
    assert resp.json()["message"] == "You are not a member of this workspace"

    resp = await client.post("/v1/workspace/switch", json={}, headers=stranger_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Workspace ID is required"

    # Switching to the workspace that is already active is allowed.
    resp = await client.post("/v1/workspace/switch", json={
        "workspaceId": stranger["workspace"]["id"],
    }, headers=stranger_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["workspaceRole"] == "owner"


@pytest.mark.asyncio
async def test_non_owner_cannot_manage_members(client: AsyncClient):
    owner_headers, owner = await _register(client, "owner@ws-guard.com", "Olivia Owner")
    member_headers, member = await _register(client, "member@ws-guard.com", "Mark Member")
    await _register(client, "third@ws-guard.com", "Tina Third")
    manager = await _join(
        client, owner_headers, "member@ws-guard.com", member_headers, owner, role="manager",
    )

    resp = await client.post("/v1/workspace/members", json={
        "email": "third@ws-guard.com",
    }, headers=manager)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Only workspace owners can add members"

    resp = await client.patch("/v1/workspace/members", json={
        "memberId": member["user"]["id"], "role": "member",
    }, headers=manager)
    assert resp.status_code == 403

    resp = await client.request("DELETE", "/v1/workspace/members", json={
        "memberId": member["user"]["id"],
    }, headers=manager)
    assert resp.status_code == 403

    resp = await client.get("/v1/workspace/permissions", headers=manager)
    assert resp.status_code == 403
    assert resp.json()["message"] == "Only workspace owners can view and update permissions"

    # A non-owner's update never matches the workspace.
    resp = await client.put("/v1/workspace", json={"name": "Hijacked"}, headers=manager)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_update_member_role(client: AsyncClient):
    owner_headers, owner = await _register(client, "owner@ws-patch.com", "Olivia Owner")
    _, member = await _register(client, "member@ws-patch.com", "Mark Member")
    await client.post("/v1/workspace/members", json={
        "email": "member@ws-patch.com",
    }, headers=owner_headers)

    resp = await client.patch("/v1/workspace/members", json={
        "memberId": member["user"]["id"], "role": "manager",
    }, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["member"]["role"] == "manager"

    resp = await client.patch("/v1/workspace/members", json={
        "memberId": owner["user"]["id"], "role": "member",
    }, headers=owner_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot change the workspace owner role"

    resp = await client.patch("/v1/workspace/members", json={"role": "member"}, headers=owner_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Member ID is required"


@pytest.mark.asyncio
async def test_remove_member_falls_back_primary_workspace(client: AsyncClient):
    owner_headers, owner = await _register(client, "owner@ws-remove.com", "Olivia Owner")
    member_headers, member = await _register(client, "member@ws-remove.com", "Mark Member")
    joined = await _join(client, owner_headers, "member@ws-remove.com", member_headers, owner)

    resp = await client.request("DELETE", "/v1/workspace/members", json={
        "memberId": owner["user"]["id"],
    }, headers=owner_headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Cannot remove the workspace owner"

    resp = await client.request("DELETE", "/v1/workspace/members", json={
        "memberId": member["user"]["id"],
    }, headers=owner_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Member removed successfully"

    # The stale token still names the old workspace, which now refuses it.
    resp = await client.get("/v1/workspace", headers=joined)
    assert resp.status_code == 403

    resp = await client.get("/v1/auth/profile", headers=joined)
    assert resp.json()["data"]["user"]["workspaceId"] == member["workspace"]["id"]

    resp = await client.request("DELETE", "/v1/workspace/members", json={
        "memberId": member["user"]["id"],
    }, headers=owner_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_permissions_roundtrip(client: AsyncClient):
    headers, _ = await _register(client, "owner@ws-perm.com", "Olivia Owner")

    resp = await client.get("/v1/workspace/permissions", headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert [r["key"] for r in data["roles"]] == ["owner", "manager", "member"]
    assert data["roles"][0]["editable"] is False
    assert any(m["key"] == "clients" for m in data["menus"])

    resp = await client.patch("/v1/workspace/permissions", json={
        "role": "member", "permissions": ["projects", "clients", "bogus", "projects"],
    }, headers=headers)
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["role"] == "member"
    assert data["permissions"]["member"] == ["projects", "clients"]


@pytest.mark.asyncio
async def test_permissions_update_rules(client: AsyncClient):
    headers, _ = await _register(client, "owner@ws-permrules.com", "Olivia Owner")
    cases = [
        ({"permissions": []}, "Role is required"),
        ({"role": "owner", "permissions": []}, "Selected role cannot be modified"),
        ({"role": "member", "permissions": "projects"}, "Permissions must be an array"),
    ]
    for payload, message in cases:
        resp = await client.patch("/v1/workspace/permissions", json=payload, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == message


@pytest.mark.asyncio
async def test_menu_permissions_gate_routes(client: AsyncClient):
    owner_headers, owner = await _register(client, "owner@ws-gate.com", "Olivia Owner")
    member_headers, _ = await _register(client, "member@ws-gate.com", "Mark Member")
    joined = await _join(client, owner_headers, "member@ws-gate.com", member_headers, owner)

    resp = await client.get("/v1/projects", headers=joined)
    assert resp.status_code == 200

    resp = await client.get("/v1/clients", headers=joined)
    assert resp.status_code == 403
    assert resp.json()["message"] == "You do not have access to clients"

    await client.patch("/v1/workspace/permissions", json={
        "role": "member", "permissions": ["projects", "clients"],
    }, headers=owner_headers)

    resp = await client.get("/v1/clients", headers=joined)
    assert resp.status_code == 200
