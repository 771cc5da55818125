from __future__ import annotations

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from kings_mirror.api.exception_handlers import register_exception_handlers
from kings_mirror.api.schemas import HealthOut
from kings_mirror.core.logging import setup_logging
from kings_mirror.core.metrics import PrometheusMetricsMiddleware, metrics_router
from kings_mirror.core.middleware.cors import CorsHeadersMiddleware
from kings_mirror.core.middleware.http_logging import HttpLoggingMiddleware
from kings_mirror.core.settings import Settings, get_settings
from kings_mirror.mirror.router import router as mirror_router

setup_logging()


def create_app(
    settings: Settings | None = None,
    *,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    Build the application.

    `settings` is resolved from the environment at startup when omitted; it is
    stored on `app.state` and request handlers only ever read it from there.
    `upstream_transport` replaces the network transport of the OpenAI client.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Defer env access until startup so importing the module never requires config.
        if app.state.settings is None:
            app.state.settings = get_settings()
        yield

    app = FastAPI(
        title="King's Mirror",
        description=(
            "Relay between a browser front end and OpenAI for King's Mirror reflections.\n\n"
            "- The OpenAI key stays on the server; callers may be required to send a shared "
            "secret in `X-KM-Secret`.\n"
            "- Model output is returned as-is (JSON text).\n"
            "- Logs and metrics carry metadata only, never mood text or credentials."
        ),
        lifespan=lifespan,
        openapi_tags=[
            {
                "name": "health",
                "description": "Basic uptime check for load balancers and monitoring.",
            },
            {
                "name": "mirror",
                "description": "Mood reflection relayed from the upstream model.",
            },
            {
                "name": "monitoring",
                "description": "Prometheus-compatible metrics endpoint.",
            },
        ],
    )
    app.state.settings = settings
    app.state.upstream_transport = upstream_transport

    # Last added runs first: logging wraps metrics, which wraps CORS.
    app.add_middleware(CorsHeadersMiddleware)
    app.add_middleware(PrometheusMetricsMiddleware)
    app.add_middleware(HttpLoggingMiddleware)

    register_exception_handlers(app)

    @app.get(
        "/health",
        response_model=HealthOut,
        tags=["health"],
        summary="Health check",
        description=(
            "Lightweight endpoint to verify the API process is running. It does not call "
            "OpenAI and is not gated by the shared secret."
        ),
    )
    async def health() -> HealthOut:
        return HealthOut(status="ok")

    app.include_router(metrics_router)
    app.include_router(mirror_router)
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "kings_mirror.main:app",
        host="0.0.0.0",
        port=8000,
        log_config=None,
    )
