"""Integration tests for auth and account flows (requires migrated PG).

Run: RR_INTEGRATION=1 pytest tests/integration -v
"""

import uuid

import pytest
from httpx import AsyncClient

from tests.integration.helpers import register_and_login, requires_db, unique_user

pytestmark = [pytest.mark.asyncio(loop_scope="session"), pytest.mark.integration, requires_db]


class TestRegister:
    async def test_register_creates_empty_account(self, client: AsyncClient) -> None:
        user = unique_user()
        resp = await client.post("/api/v1/auth/register", json=user)
        assert resp.status_code == 201
        body = resp.json()
        assert body["code"] == 0
        assert body["data"]["display_name"] == user["display_name"]

        headers = await register_and_login(client, user)
        account = (await client.get("/api/v1/account", headers=headers)).json()["data"]
        assert account["balance_cents"] == 0
        assert set(account["inventory"]) == {"GOLD", "OIL", "ORE", "DIA", "URA", "CASH"}
        assert account["is_profile_complete"] is False
        assert account["verification_status"] == "none"

    async def test_register_duplicate_username(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/register", json={**user, "email": f"x_{uuid.uuid4().hex[:6]}@example.com"}
        )
        assert resp.status_code == 409
        assert resp.json()["code"] == 1001

    async def test_login_wrong_password(self, client: AsyncClient) -> None:
        user = unique_user()
        await client.post("/api/v1/auth/register", json=user)
        resp = await client.post(
            "/api/v1/auth/login", json={"username": user["username"], "password": "Wrong1234"}
        )
        assert resp.status_code == 401
        assert resp.json()["code"] == 1003


class TestProfile:
    async def test_complete_profile(self, client: AsyncClient) -> None:
        headers = await register_and_login(client, unique_user())
        resp = await client.patch("/api/v1/account/profile", headers=headers, json={
            "display_name": "Alice",
            "profile_url": "m.rivalregions.com/#slide/profile/42",
            "contact_handle": "+55 11 98765-4321",
        })
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["is_profile_complete"] is True
        assert data["profile_url"] == "https://m.rivalregions.com/#slide/profile/42"

    async def test_invalid_profile_url(self, client: AsyncClient) -> None:
        headers = await register_and_login(client, unique_user())
        resp = await client.patch("/api/v1/account/profile", headers=headers, json={
            "display_name": "Alice",
            "profile_url": "https://example.com/me",
        })
        assert resp.status_code == 422
        assert resp.json()["code"] == 2003

    async def test_non_admin_blocked_from_admin_api(self, client: AsyncClient) -> None:
        headers = await register_and_login(client, unique_user())
        resp = await client.get("/api/v1/admin/stats", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["code"] == 1006


class TestSession:
    async def test_me_reports_account_and_role(
        self, client: AsyncClient, admin_headers: dict[str, str]
    ) -> None:
        user = unique_user()
        headers = await register_and_login(client, user)
        data = (await client.get("/api/v1/auth/me", headers=headers)).json()["data"]
        assert data["user"]["username"] == user["username"]
        assert data["user"]["is_admin"] is False
        assert data["display_name"] == user["display_name"]
        assert data["balance_cents"] == 0

        admin = (await client.get("/api/v1/auth/me", headers=admin_headers)).json()["data"]
        assert admin["user"]["is_admin"] is True
