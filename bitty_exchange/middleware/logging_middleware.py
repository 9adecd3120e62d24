"""
Access logging for the exchange API.

One ``http_request`` event per request. A short request id (taken from the
``x-request-id`` header when present) is bound into structlog's context and
echoed back; wallet-scoped routes (``/exchange/{wallet}/...``) also bind
``wallet`` so provider warnings can be traced to the wallet that triggered
them.
"""

import time
import uuid
from typing import Callable, Optional

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.stdlib.get_logger("http")

QUIET_PATHS = {"/healthz"}


def wallet_from_path(path: str) -> Optional[str]:
    parts = [part for part in path.split("/") if part]
    if len(parts) >= 3 and parts[0] == "exchange":
        return parts[1]
    return None


def _log_method(path: str, status_code: int) -> Callable[..., None]:
    if status_code >= 500:
        return logger.error
    if status_code >= 400:
        return logger.warning
    if path in QUIET_PATHS:
        return logger.debug
    return logger.info


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Bind request context and log each request once it completes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:8]

        structlog.contextvars.clear_contextvars()
        context = {"request_id": request_id}
        wallet = wallet_from_path(path)
        if wallet:
            context["wallet"] = wallet
        structlog.contextvars.bind_contextvars(**context)

        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["x-request-id"] = request_id
            return response
        finally:
            _log_method(path, status_code)(
                "http_request",
                method=request.method,
                path=path,
                status=status_code,
                duration_ms=round((time.perf_counter() - started) * 1000, 1),
            )
