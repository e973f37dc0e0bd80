"""Access log plus request-id correlation.

Every request gets a request_id on request.state (echoed in ApiResponse and
the X-Request-ID response header). A client may send its own X-Request-ID,
e.g. to tie a retried buy to the first attempt; it is reused when it is a
short token, otherwise a fresh one is minted.

Log format:
    INFO [POST] /api/v1/orders/123/buy → 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("rx.request")

_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9_\-]{8,64}$")


def resolve_request_id(inbound: str | None) -> str:
    if inbound and _CLIENT_ID_RE.match(inbound):
        return inbound
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = resolve_request_id(request.headers.get("x-request-id"))
        request.state.request_id = request_id

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response
