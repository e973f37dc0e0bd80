"""Fixed-window rate limiting backed by Redis INCR + EXPIRE.

Two buckets per caller:
  - trade:   POST /orders and POST /orders/{id}/buy  (RATE_LIMIT_TRADE_PER_MINUTE)
  - default: everything else under /api/            (RATE_LIMIT_PER_MINUTE)

The caller is the JWT subject when a valid Bearer token is present, else the
client IP (first X-Forwarded-For hop when behind a proxy). If Redis is
unreachable the request is let through and a warning is logged.
"""

import logging
import time

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.rx_common.errors import InvalidCredentialsError, RateLimitError
from src.rx_common.redis_client import get_redis
from src.rx_common.response import error_response
from src.rx_gateway.auth.jwt_handler import decode_token

logger = logging.getLogger(__name__)

_WINDOW_SECONDS = 60


def endpoint_group(method: str, path: str) -> str:
    if method == "POST" and (path.rstrip("/").endswith("/orders") or path.endswith("/buy")):
        return "trade"
    return "default"


def caller_identity(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        try:
            payload = decode_token(auth[7:].strip(), expected_type="access")
            if payload.get("sub"):
                return f"user:{payload['sub']}"
        except InvalidCredentialsError:
            pass  # fall back to IP; the auth dependency rejects the token later
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return f"ip:{forwarded.split(',')[0].strip()}"
    host = request.client.host if request.client else "unknown"
    return f"ip:{host}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not settings.RATE_LIMIT_ENABLED or not request.url.path.startswith("/api/"):
            return await call_next(request)

        group = endpoint_group(request.method, request.url.path)
        limit = (
            settings.RATE_LIMIT_TRADE_PER_MINUTE
            if group == "trade"
            else settings.RATE_LIMIT_PER_MINUTE
        )
        window = int(time.time()) // _WINDOW_SECONDS
        key = f"ratelimit:{caller_identity(request)}:{group}:{window}"

        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, _WINDOW_SECONDS)
        except RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing request: %s", exc)
            return await call_next(request)

        if count > limit:
            err = RateLimitError()
            body = error_response(err.code, err.message)
            body.request_id = getattr(request.state, "request_id", body.request_id)
            retry_after = _WINDOW_SECONDS - int(time.time()) % _WINDOW_SECONDS
            return JSONResponse(
                status_code=err.http_status,
                content=body.model_dump(),
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)
