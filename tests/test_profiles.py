"""Tests for user and client self-service endpoints and the health check."""

from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy import update

from bizdesk.core.lockout import utcnow
from bizdesk.models.client import Client

PASSWORD = "Secret1!"


# ── Users ───────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_user_profile_update(async_client: AsyncClient, create_user, auth_headers):
    user = await create_user()
    headers = auth_headers(user, "user")
    resp = await async_client.put("/api/user/profile", headers=headers, json={
        "lastName": "Smith",
        "avatar": "https://cdn.example.com/jane.png",
    })
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["fullName"] == "Jane Smith"
    assert data["avatar"] == "https://cdn.example.com/jane.png"


@pytest.mark.asyncio
async def test_user_profile_rejects_bad_avatar(async_client: AsyncClient, create_user, auth_headers):
    user = await create_user()
    resp = await async_client.put(
        "/api/user/profile", headers=auth_headers(user, "user"), json={"avatar": "ftp://x"}
    )
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_vendor_shares_user_profile(async_client: AsyncClient, create_user, auth_headers):
    vendor = await create_user(email="shop@example.com", role="vendor")
    resp = await async_client.get("/api/user/profile", headers=auth_headers(vendor, "vendor"))
    assert resp.status_code == 200
    assert resp.json()["data"]["role"] == "vendor"


@pytest.mark.asyncio
async def test_user_change_password(async_client: AsyncClient, create_user, auth_headers):
    user = await create_user()
    resp = await async_client.put(
        "/api/user/change-password",
        headers=auth_headers(user, "user"),
        json={"currentPassword": PASSWORD, "newPassword": "Better2@"},
    )
    assert resp.status_code == 200
    resp = await async_client.post("/api/auth/user/login", json={
        "email": "jane@example.com", "password": PASSWORD,
    })
    assert resp.status_code == 401


# ── Clients ─────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_client_profile_update_merges_settings(
    async_client: AsyncClient, create_client, auth_headers
):
    client = await create_client()
    headers = auth_headers(client, "client")
    resp = await async_client.put("/api/client/profile", headers=headers, json={
        "companyName": "Acme Rockets",
        "contactPerson": {"position": "Founder"},
        "settings": {"currency": "USD"},
    })
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["companyName"] == "Acme Rockets"
    assert data["contactPerson"]["position"] == "Founder"
    assert data["contactPerson"]["firstName"] == "Wile"
    assert data["settings"]["currency"] == "USD"
    assert data["settings"]["timezone"] == "UTC"


@pytest.mark.asyncio
async def test_client_subscription(async_client: AsyncClient, create_client, auth_headers):
    client = await create_client(subscription_plan="premium", subscription_features=["api_access"])
    resp = await async_client.get("/api/client/subscription", headers=auth_headers(client, "client"))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["plan"] == "premium"
    assert data["features"] == ["api_access"]
    assert data["isActive"] is True


@pytest.mark.asyncio
async def test_client_api_key_and_regeneration(
    async_client: AsyncClient, create_client, auth_headers
):
    client = await create_client()
    headers = auth_headers(client, "client")

    resp = await async_client.get("/api/client/api-key", headers=headers)
    assert resp.status_code == 200
    original = resp.json()["data"]["apiKey"]
    assert len(original) == 64

    resp = await async_client.post("/api/client/regenerate-api-key", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["apiKey"] != original


@pytest.mark.asyncio
async def test_client_expired_api_key(
    async_client: AsyncClient, create_client, auth_headers, db_session
):
    client = await create_client()
    await db_session.execute(
        update(Client)
        .where(Client.id == client.id)
        .values(api_key_expires=utcnow() - timedelta(days=1))
    )
    await db_session.commit()

    resp = await async_client.get("/api/client/api-key", headers=auth_headers(client, "client"))
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_client_routes_reject_other_kinds(
    async_client: AsyncClient, create_user, auth_headers
):
    user = await create_user()
    resp = await async_client.get("/api/client/profile", headers=auth_headers(user, "user"))
    assert resp.status_code == 403


# ── Health ──────────────────────────────────────────────────────────
@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["db"] is True
    assert resp.json()["status"] == "ok"


@pytest.mark.asyncio
async def test_unknown_route_uses_error_envelope(async_client: AsyncClient):
    resp = await async_client.get("/api/nowhere")
    assert resp.status_code == 404
    assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_user_profile_rejects_null_name(async_client: AsyncClient, create_user, auth_headers):
    user = await create_user()
    headers = auth_headers(user, "user")
    resp = await async_client.put("/api/user/profile", headers=headers, json={"firstName": None})
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "first_name"

    resp = await async_client.put("/api/user/profile", headers=headers, json={"phoneNumber": None})
    assert resp.status_code == 200
    assert resp.json()["data"]["firstName"] == "Jane"


@pytest.mark.asyncio
async def test_client_profile_rejects_null_contact_name(
    async_client: AsyncClient, create_client, auth_headers
):
    client = await create_client()
    resp = await async_client.put(
        "/api/client/profile",
        headers=auth_headers(client, "client"),
        json={"contactPerson": {"firstName": None}},
    )
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["field"] == "contact_first_name"
