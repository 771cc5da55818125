from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class HealthOut(BaseModel):
    """Health check response."""

    status: str = Field(
        description="Service status indicator. `ok` means the API process is up and responding.",
        examples=["ok"],
    )


class ErrorOut(BaseModel):
    """Error body shared by every non-2xx response."""

    error: str = Field(examples=["Unauthorized"])
    detail: Any | None = Field(
        default=None,
        description="Present only for some errors, e.g. the upstream body text for `OpenAI error`.",
    )
