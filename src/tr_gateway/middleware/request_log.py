"""Request logging middleware.

Every request gets a request_id in request.state (reused from an incoming
X-Request-ID header when the caller sent a sane one) which routers echo in
ApiResponse and which is returned as the X-Request-ID response header.

Clients poll /price and /rounds/current every few seconds, so successful
polling and health checks are logged at DEBUG. 5xx responses go out at WARNING.

Log format:
    INFO [POST] /api/v1/bets → 200 (4ms) req_a1b2c3d4e5f6
"""

import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("tr.request")

_QUIET_PATHS = ("/health", "/api/v1/price", "/api/v1/rounds/current")
_MAX_ID_LEN = 64


def _request_id(request: Request) -> str:
    incoming = request.headers.get("X-Request-ID", "")
    bare = incoming.replace("_", "").replace("-", "")
    if bare.isalnum() and len(incoming) <= _MAX_ID_LEN:
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


def _level_for(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.WARNING
    if status_code < 400 and path in _QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = _request_id(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.log(
            _level_for(request.url.path, response.status_code),
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        response.headers["X-Request-ID"] = request.state.request_id
        return response
