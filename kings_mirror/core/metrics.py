from __future__ import annotations

import time
from typing import cast

from fastapi import APIRouter, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from kings_mirror.core.routing import safe_route_label

metrics_router = APIRouter(tags=["monitoring"])

# Labels are route templates and fixed outcome names only: never desired
# states or mood tags, which are caller-controlled.

http_requests_total = Counter(
    "kings_mirror_http_requests_total",
    "HTTP requests handled by the mirror service",
    labelnames=("method", "route", "status_code"),
)

http_request_duration_seconds = Histogram(
    "kings_mirror_http_request_duration_seconds",
    "End-to-end HTTP request duration in seconds",
    labelnames=("method", "route", "status_code"),
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0),
)

upstream_requests_total = Counter(
    "kings_mirror_upstream_requests_total",
    "OpenAI completion requests by outcome",
    labelnames=("outcome",),
)

upstream_request_duration_seconds = Histogram(
    "kings_mirror_upstream_request_duration_seconds",
    "Time spent waiting on OpenAI, by outcome",
    labelnames=("outcome",),
    # Completions take seconds; the top bucket sits at the default client timeout.
    buckets=(0.5, 1.0, 2.0, 4.0, 8.0, 15.0, 30.0),
)

UPSTREAM_OUTCOMES = (
    "success",
    "http_error",
    "transport_error",
    "invalid_response",
    "invalid_content",
)

PREFLIGHT_ROUTE = "preflight"


def record_upstream_outcome(outcome: str, *, duration_seconds: float) -> None:
    """Count one OpenAI call and how long it took."""
    if outcome not in UPSTREAM_OUTCOMES:
        raise ValueError(f"unknown upstream outcome: {outcome}")
    upstream_requests_total.labels(outcome=outcome).inc()
    upstream_request_duration_seconds.labels(outcome=outcome).observe(duration_seconds)


def _route_label(request: Request) -> str:
    # Preflights are answered before routing, so they would all read "unmatched".
    if request.method == "OPTIONS":
        return PREFLIGHT_ROUTE
    return safe_route_label(request)


class PrometheusMetricsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            labels = {
                "method": request.method,
                "route": _route_label(request),
                "status_code": str(status_code),
            }
            http_requests_total.labels(**labels).inc()
            http_request_duration_seconds.labels(**labels).observe(
                time.perf_counter() - started
            )


@metrics_router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    payload = generate_latest()
    return Response(content=cast(bytes, payload), media_type=CONTENT_TYPE_LATEST)
