"""Access logging for the mirror service.

One line per request with metadata only. Bodies carry mood text, and headers
carry X-KM-Secret or Authorization, so neither is read here; query strings
are dropped by logging the route template instead of the URL.

Responses are tagged with an X-Request-ID (propagated when the caller's value
is plain, generated otherwise). Browser preflights are the exception: they
answer with the CORS headers alone and are only logged at DEBUG.
"""

from __future__ import annotations

import logging
import re
import time
import uuid
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from kings_mirror.core.routing import safe_route_label

logger = logging.getLogger("kings_mirror.http")

REQUEST_ID_HEADER = "X-Request-ID"
_SAFE_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,127}$")


def get_or_create_request_id(request: Request) -> str:
    """Return the caller's request id if it is short and plain, else a new UUID4 hex."""

    candidate = request.headers.get(REQUEST_ID_HEADER)
    if candidate and _SAFE_REQUEST_ID_PATTERN.fullmatch(candidate):
        return candidate
    return uuid.uuid4().hex


def _is_preflight(request: Request) -> bool:
    return request.method == "OPTIONS"


def _log_fields(
    request: Request, *, request_id: str, status_code: int, started: float
) -> dict[str, Any]:
    return {
        "request_id": request_id,
        "http_method": request.method,
        "request_path": safe_route_label(request),
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
    }


class HttpLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = get_or_create_request_id(request)
        started = time.perf_counter()
        # The mirror route reads it back for its own log lines.
        request.state.request_id = request_id

        try:
            response = await call_next(request)
        except Exception:  # noqa: BLE001 - logged with stack trace, then re-raised
            logger.exception(
                "Unhandled exception while processing request",
                extra=_log_fields(
                    request, request_id=request_id, status_code=500, started=started
                ),
            )
            raise

        fields = _log_fields(
            request, request_id=request_id, status_code=response.status_code, started=started
        )
        if _is_preflight(request):
            logger.debug("Preflight answered", extra=fields)
            return response

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info("Request completed", extra=fields)
        return response
