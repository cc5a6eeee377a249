"""Tests for the workspace portfolio page and its public read."""

import pytest
from httpx import AsyncClient


async def _register(client: AsyncClient, email: str, full_name: str = "Olivia Owner"):
    """Helper: register a workspace owner and return auth headers."""
    resp = await client.post("/v1/auth/register", json={
        "fullName": full_name,
        "email": email,
        "password": "Secret123",
    })
    assert resp.status_code == 201, resp.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


def _portfolio(**overrides) -> dict:
    payload = {
        "title": "Olivia Studio",
        "description": "Brand identity work",
        "slug": "Olivia-Studio",
        "links": [
            {"name": "Dribbble", "url": "https://dribbble.com/olivia"},
            {"name": "", "url": ""},
        ],
        "socials": {"instagram": "https://instagram.com/olivia", "email": "hi@olivia.com"},
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_portfolio_starts_empty(client: AsyncClient):
    headers = await _register(client, "owner@pf-empty.com")

    resp = await client.get("/v1/portfolio", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["portfolio"] is None


@pytest.mark.asyncio
async def test_save_and_update_portfolio(client: AsyncClient):
    headers = await _register(client, "owner@pf-save.com")

    resp = await client.put("/v1/portfolio", json=_portfolio(), headers=headers)
    assert resp.status_code == 200
    saved = resp.json()["data"]["portfolio"]
    assert saved["slug"] == "olivia-studio"
    assert saved["links"] == [{"name": "Dribbble", "url": "https://dribbble.com/olivia", "icon": ""}]
    assert saved["socials"]["instagram"] == "https://instagram.com/olivia"
    assert saved["socials"]["tiktok"] == ""
    assert saved["ownerName"] == "Olivia Owner"

    resp = await client.put("/v1/portfolio", json=_portfolio(title="Renamed"), headers=headers)
    assert resp.status_code == 200
    updated = resp.json()["data"]["portfolio"]
    assert updated["id"] == saved["id"]
    assert updated["title"] == "Renamed"


@pytest.mark.asyncio
async def test_portfolio_validation(client: AsyncClient):
    headers = await _register(client, "owner@pf-rules.com")
    cases = [
        (_portfolio(title="  "), "Portfolio title is required"),
        (_portfolio(title="x" * 141), "Portfolio title must be 140 characters or less"),
        (_portfolio(slug=""), "Portfolio slug is required"),
        (_portfolio(slug="bad slug!"), "Slug can only contain lowercase letters, numbers, and hyphens"),
        (_portfolio(links=[{"name": "Site", "url": "nope"}]), "Each link URL must be a valid URL"),
        (_portfolio(socials={"linkedin": "linkedin"}), "LinkedIn must be a valid URL"),
    ]
    for payload, message in cases:
        resp = await client.put("/v1/portfolio", json=payload, headers=headers)
        assert resp.status_code == 400
        assert resp.json()["message"] == message


@pytest.mark.asyncio
async def test_slug_is_unique_across_workspaces(client: AsyncClient):
    first = await _register(client, "owner@pf-slug-a.com")
    second = await _register(client, "owner@pf-slug-b.com")

    resp = await client.put("/v1/portfolio", json=_portfolio(slug="taken"), headers=first)
    assert resp.status_code == 200

    resp = await client.put("/v1/portfolio", json=_portfolio(slug="taken"), headers=second)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Slug is already in use"

    resp = await client.get("/v1/portfolio/check-slug", params={"slug": "TAKEN"}, headers=second)
    assert resp.status_code == 200
    assert resp.json()["data"]["available"] is False

    # The owner of a slug sees it as available to themselves.
    resp = await client.get("/v1/portfolio/check-slug", params={"slug": "taken"}, headers=first)
    assert resp.json()["data"]["available"] is True


@pytest.mark.asyncio
async def test_check_slug_rules(client: AsyncClient):
    headers = await _register(client, "owner@pf-check.com")

    resp = await client.get("/v1/portfolio/check-slug", headers=headers)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Slug is required"

    resp = await client.get("/v1/portfolio/check-slug", params={"slug": "a_b"}, headers=headers)
    assert resp.status_code == 400

    resp = await client.get("/v1/portfolio/check-slug", params={"slug": "free-one"}, headers=headers)
    assert resp.json()["data"]["available"] is True


@pytest.mark.asyncio
async def test_public_portfolio(client: AsyncClient):
    headers = await _register(client, "owner@pf-public.com", full_name="Olivia Owner")
    await client.put("/v1/portfolio", json=_portfolio(slug="olivia-public"), headers=headers)

    resp = await client.get("/v1/portfolio/public/Olivia-Public")
    assert resp.status_code == 200
    public = resp.json()["data"]["portfolio"]
    assert public["title"] == "Olivia Studio"
    assert public["workspaceName"] == "Olivia Owner's Workspace"
    assert public["owner"] == {"fullName": "Olivia Owner", "bio": ""}
    assert "workspaceId" not in public

    resp = await client.get("/v1/portfolio/public/nobody-here")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Portfolio not found"
