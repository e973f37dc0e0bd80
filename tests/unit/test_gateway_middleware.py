"""Rate-limit bucket helpers and app-level smoke tests (no database)."""

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from src.rx_gateway.auth.jwt_handler import create_access_token
from src.rx_gateway.middleware.rate_limit import caller_identity, endpoint_group
from src.rx_gateway.middleware.request_log import resolve_request_id


def _request(headers: dict[str, str] | None = None) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/api/v1/account",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": ("9.9.9.9", 4321),
    }
    return Request(scope)


class TestEndpointGroup:
    @pytest.mark.parametrize(
        "method,path",
        [("POST", "/api/v1/orders"), ("POST", "/api/v1/orders/"), ("POST", "/api/v1/orders/42/buy")],
    )
    def test_trade_bucket(self, method: str, path: str) -> None:
        assert endpoint_group(method, path) == "trade"

    @pytest.mark.parametrize(
        "method,path",
        [("GET", "/api/v1/orders"), ("DELETE", "/api/v1/orders/42"), ("POST", "/api/v1/deposits")],
    )
    def test_default_bucket(self, method: str, path: str) -> None:
        assert endpoint_group(method, path) == "default"


class TestCallerIdentity:
    def test_bearer_subject(self) -> None:
        token = create_access_token("user-7")
        assert caller_identity(_request({"Authorization": f"Bearer {token}"})) == "user:user-7"

    def test_invalid_token_falls_back_to_ip(self) -> None:
        assert caller_identity(_request({"Authorization": "Bearer junk"})) == "ip:9.9.9.9"

    def test_first_forwarded_hop(self) -> None:
        req = _request({"X-Forwarded-For": "1.2.3.4, 10.0.0.1"})
        assert caller_identity(req) == "ip:1.2.3.4"


class TestAppSmoke:
    async def test_health(self, client: AsyncClient) -> None:
        resp = await client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"
        assert resp.headers["X-Request-ID"].startswith("req_")

    async def test_protected_route_requires_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/account")
        assert resp.status_code == 401

    async def test_admin_route_requires_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/admin/stats")
        assert resp.status_code == 401

    async def test_session_requires_token(self, client: AsyncClient) -> None:
        resp = await client.get("/api/v1/auth/me")
        assert resp.status_code == 401

    async def test_register_validation_error(self, client: AsyncClient) -> None:
        resp = await client.post("/api/v1/auth/register", json={"username": "x"})
        assert resp.status_code == 422

    async def test_client_request_id_echoed(self, client: AsyncClient) -> None:
        resp = await client.get("/health", headers={"X-Request-ID": "retry-buy-0001"})
        assert resp.headers["X-Request-ID"] == "retry-buy-0001"


class TestResolveRequestId:
    def test_accepts_short_token(self) -> None:
        assert resolve_request_id("abc_DEF-1234") == "abc_DEF-1234"

    @pytest.mark.parametrize("inbound", [None, "", "short", "has spaces in it", "x" * 65])
    def test_mints_fresh_id(self, inbound: str | None) -> None:
        assert resolve_request_id(inbound).startswith("req_")
