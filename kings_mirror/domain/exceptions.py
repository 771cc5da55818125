from __future__ import annotations

from typing import Any


class MirrorError(Exception):
    """Base for errors that end a mirror request with a JSON error body.

    `error` is the public label rendered as `{"error": ...}`; `detail` is
    optional and added to the body only when present.
    """

    status_code: int = 500
    error: str = "Internal Server Error"

    def __init__(self, detail: Any = None):
        super().__init__(self.error)
        self.detail = detail


class UnauthorizedError(MirrorError):
    status_code = 401
    error = "Unauthorized"


class MissingCredentialError(MirrorError):
    status_code = 500
    error = "Missing OPENAI_API_KEY"


class InvalidJSONBodyError(MirrorError):
    status_code = 400
    error = "Invalid JSON body"


class InvalidRequestBodyError(MirrorError):
    """Raised when the body is JSON but does not match the request schema."""

    status_code = 400
    error = "Invalid request body"


class UpstreamError(MirrorError):
    """Raised when OpenAI could not produce a usable response."""

    status_code = 502
    error = "OpenAI error"


class UpstreamContentError(MirrorError):
    """Raised when model output fails reflection schema validation."""

    status_code = 502
    error = "Invalid upstream content"


class ClientDisconnectedError(MirrorError):
    # Nobody reads this response; the status only shows up in logs and metrics.
    status_code = 499
    error = "Client Closed Request"
