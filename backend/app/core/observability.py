"""
Observability Middleware.

One structured log line per request on the ``ridehail`` logger, tagged with
a correlation id and, when a token is presented, the caller's account type
and id so support can follow a passenger or driver across requests.
"""

import time
import uuid
import logging
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from backend.app.core.jwt import decode_access_token

logger = logging.getLogger("ridehail")

CORRELATION_HEADER = "X-Correlation-ID"


def _caller_identity(request: Request) -> Tuple[Optional[str], Optional[int]]:
    """
    Account type and id from the presented token, for log tagging only.

    Authentication itself happens in the endpoint dependencies; an invalid
    or missing token just leaves the request untagged.
    """
    authorization = request.headers.get("Authorization", "")
    token = authorization[len("Bearer "):] if authorization.startswith("Bearer ") else None
    if not token:
        token = request.headers.get("x-auth-token", "")
        if token.startswith("Bearer "):
            token = token[len("Bearer "):]
    if not token:
        return None, None

    payload = decode_access_token(token)
    if payload is None:
        return None, None
    return payload.get("type"), payload.get("user_id")


class ObservabilityMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        account_type, account_id = _caller_identity(request)

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - started) * 1000

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"

        log_data = {
            "correlation_id": correlation_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
            "account_type": account_type or "anonymous",
            "account_id": account_id,
            "ip": request.client.host if request.client else "unknown"
        }

        if response.status_code >= 500:
            logger.error("Request failed", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("Request rejected", extra=log_data)
        else:
            logger.info("Request served", extra=log_data)

        return response
