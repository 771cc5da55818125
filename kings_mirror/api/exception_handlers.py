from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from kings_mirror.domain.exceptions import MirrorError

logger = logging.getLogger("kings_mirror.errors")


def error_body(error: str, detail: Any = None) -> dict[str, Any]:
    body: dict[str, Any] = {"error": error}
    if detail is not None:
        body["detail"] = detail
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """Render every handled error as `{"error": ...}` (plus `detail` when present)."""

    @app.exception_handler(MirrorError)
    async def handle_mirror_error(request: Request, exc: MirrorError) -> JSONResponse:
        # The detail may echo upstream text; only the label is logged.
        logger.info(
            "Mirror request rejected",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "http_method": request.method,
                "request_path": request.url.path,
                "status_code": exc.status_code,
                "outcome": exc.error,
            },
        )
        return JSONResponse(
            status_code=exc.status_code, content=error_body(exc.error, exc.detail)
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )
