"""Shared helpers for integration tests."""

import os
import uuid

import pytest
from httpx import AsyncClient

ADMIN_EMAIL = "rr_admin_it@example.com"
PASSWORD = "TestPass123"

requires_db = pytest.mark.skipif(
    os.environ.get("RR_INTEGRATION") != "1",
    reason="set RR_INTEGRATION=1 with a migrated PostgreSQL to run",
)


def unique_user() -> dict[str, str]:
    """Generate unique credentials to avoid test pollution."""
    uid = uuid.uuid4().hex[:8]
    return {
        "username": f"rr_{uid}",
        "email": f"rr_{uid}@example.com",
        "password": PASSWORD,
        "display_name": f"Trader {uid}",
    }


async def register_and_login(client: AsyncClient, user: dict[str, str]) -> dict[str, str]:
    """Returns Authorization headers for a (possibly already) registered user."""
    await client.post("/api/v1/auth/register", json=user)
    resp = await client.post(
        "/api/v1/auth/login",
        json={"username": user["username"], "password": user["password"]},
    )
    token = resp.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


async def fund(client: AsyncClient, headers: dict[str, str],
               admin_headers: dict[str, str], amount_cents: int) -> None:
    """Deposit and approve so the user holds `amount_cents` more."""
    resp = await client.post(
        "/api/v1/deposits", json={"amount_cents": amount_cents}, headers=headers
    )
    deposit_id = resp.json()["data"]["id"]
    await client.post(f"/api/v1/admin/deposits/{deposit_id}/approve", headers=admin_headers)
