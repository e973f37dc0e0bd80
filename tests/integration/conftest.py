"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool (created at import time) remains valid across
the entire test session.

Pre-condition: a migrated PostgreSQL at DATABASE_URL (alembic upgrade head),
then run with RR_INTEGRATION=1.
"""

import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.main import app
from tests.integration.helpers import (
    ADMIN_EMAIL,
    PASSWORD,
    fund,
    register_and_login,
    unique_user,
)


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped async HTTP client: keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def admin_headers(client: AsyncClient) -> dict[str, str]:
    """An administrator bootstrapped through ADMIN_BOOTSTRAP_EMAILS."""
    settings.ADMIN_BOOTSTRAP_EMAILS = ADMIN_EMAIL
    # May already exist from an earlier run; the role row persists with it
    return await register_and_login(client, {
        "username": "rr_admin_it",
        "email": ADMIN_EMAIL,
        "password": PASSWORD,
    })


@pytest_asyncio.fixture(loop_scope="session")
async def funded_user(client: AsyncClient, admin_headers: dict[str, str]) -> dict[str, str]:
    """New user with an approved 1,000.00 deposit."""
    headers = await register_and_login(client, unique_user())
    await fund(client, headers, admin_headers, 100_000)
    return headers
