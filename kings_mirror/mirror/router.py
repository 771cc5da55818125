from __future__ import annotations

import hmac
import logging
import time
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import Response
from pydantic import ValidationError

from kings_mirror.api.schemas import ErrorOut
from kings_mirror.core.disconnect import run_until_disconnected
from kings_mirror.core.llm.deps import get_app_settings, get_openai_client
from kings_mirror.core.llm.openai_client import (
    OpenAIClient,
    OpenAIError,
    OpenAIResponseError,
    OpenAIUpstreamError,
)
from kings_mirror.core.metrics import record_upstream_outcome
from kings_mirror.core.settings import Settings
from kings_mirror.domain.exceptions import (
    InvalidJSONBodyError,
    InvalidRequestBodyError,
    MissingCredentialError,
    UnauthorizedError,
    UpstreamContentError,
    UpstreamError,
)
from kings_mirror.mirror.schemas import MirrorRequest
from kings_mirror.mirror.service import MirrorService

router = APIRouter(prefix="/api", tags=["mirror"])
logger = logging.getLogger("kings_mirror.mirror")

SECRET_HEADER = "X-KM-Secret"


def require_shared_secret(
    settings: Settings = Depends(get_app_settings),
    provided: str | None = Header(default=None, alias=SECRET_HEADER),
) -> None:
    """Reject the request unless X-KM-Secret matches the configured secret exactly.

    Without a configured secret the gate is open.
    """

    expected = settings.km_shared_secret
    if expected is None:
        return
    if provided is None or not hmac.compare_digest(
        provided.encode("utf-8"), expected.encode("utf-8")
    ):
        raise UnauthorizedError()


async def _parse_payload(request: Request) -> MirrorRequest:
    try:
        raw: Any = await request.json()
    except ValueError:
        raise InvalidJSONBodyError() from None

    try:
        return MirrorRequest.model_validate(raw)
    except ValidationError as exc:
        raise InvalidRequestBodyError(
            exc.errors(include_url=False, include_context=False, include_input=False)
        ) from None


@router.post(
    "/kings-mirror",
    response_class=Response,
    summary="Reflect a mood state",
    description=(
        "Send the caller's mood tags, context, desired state and intensity to the model "
        "and return its JSON reflection as-is.\n\n"
        "The body is forwarded untouched unless upstream content validation is enabled."
    ),
    responses={
        200: {"content": {"application/json": {}}, "description": "Model output (JSON text)."},
        400: {"model": ErrorOut},
        401: {"model": ErrorOut},
        405: {"model": ErrorOut},
        500: {"model": ErrorOut},
        502: {"model": ErrorOut},
    },
)
async def reflect_mood(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    _authorized: None = Depends(require_shared_secret),
    openai_client: OpenAIClient | None = Depends(get_openai_client),
) -> Response:
    request_id = getattr(request.state, "request_id", None)

    if openai_client is None:
        logger.error(
            "Mirror request failed (OpenAI key not configured)",
            extra={"request_id": request_id},
        )
        raise MissingCredentialError()

    payload = await _parse_payload(request)
    # Metadata only: mood tags and context are personal.
    log_extra = {
        "request_id": request_id,
        "desired_state": payload.desired_state,
        "mood_tag_count": len(payload.mood_tags),
    }

    svc = MirrorService(
        llm_client=openai_client, validate_content=settings.validate_upstream_content
    )
    started = time.perf_counter()

    def _record(outcome: str) -> None:
        record_upstream_outcome(outcome, duration_seconds=time.perf_counter() - started)

    try:
        content = await run_until_disconnected(request, svc.reflect(payload=payload))
    except OpenAIUpstreamError as exc:
        _record("http_error")
        logger.info(
            "Mirror reflection failed (upstream status)",
            extra={**log_extra, "upstream_status": exc.status_code, "success": False},
        )
        raise UpstreamError(exc.detail) from None
    except OpenAIResponseError as exc:
        _record("invalid_response")
        logger.info(
            "Mirror reflection failed (unreadable upstream response)",
            extra={**log_extra, "success": False},
        )
        raise UpstreamError(exc.detail) from None
    except OpenAIError as exc:
        _record("transport_error")
        logger.info(
            "Mirror reflection failed (upstream unreachable)",
            extra={**log_extra, "success": False},
        )
        raise UpstreamError(exc.detail) from None
    except UpstreamContentError:
        _record("invalid_content")
        logger.info(
            "Mirror reflection failed (invalid content)",
            extra={**log_extra, "success": False},
        )
        raise

    _record("success")
    logger.info("Mirror reflection relayed", extra={**log_extra, "success": True})
    return Response(content=content, media_type="application/json")
