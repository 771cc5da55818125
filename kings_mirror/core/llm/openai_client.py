from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

EMPTY_CONTENT = "{}"


class OpenAIError(Exception):
    """Base error for OpenAI client failures (safe to map to 502)."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class OpenAIUpstreamError(OpenAIError):
    """Raised when OpenAI answers with a non-success status.

    `detail` holds the upstream body text as received.
    """

    def __init__(self, detail: str, *, status_code: int):
        super().__init__(detail)
        self.status_code = status_code


class OpenAITransportError(OpenAIError):
    """Raised when the request never produced an upstream response."""


class OpenAIResponseError(OpenAIError):
    """Raised when a success response is not a chat completion JSON body."""


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str
    base_url: str
    model: str
    temperature: float
    timeout_seconds: float


class OpenAIClient:
    """
    Minimal OpenAI Chat Completions client that returns raw message content.

    Design notes:
    - No logging in this module (prompts and outputs describe a user's mood).
    - One attempt per call, bounded by `timeout_seconds`. Never retried.
    - The message content is returned as text; callers decide whether to parse it.
    """

    def __init__(
        self,
        *,
        config: OpenAIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._config = config
        self._transport = transport

    def build_payload(self, *, system_prompt: str, user_prompt: str) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "temperature": self._config.temperature,
            # Ask the API to enforce JSON output.
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }

    async def complete_json(self, *, system_prompt: str, user_prompt: str) -> str:
        url = f"{self._config.base_url.rstrip('/')}/chat/completions"
        headers = {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }
        payload = self.build_payload(system_prompt=system_prompt, user_prompt=user_prompt)

        try:
            async with httpx.AsyncClient(
                timeout=self._config.timeout_seconds, transport=self._transport
            ) as client:
                resp = await client.post(url, headers=headers, json=payload)
        except httpx.TimeoutException as exc:
            raise OpenAITransportError("upstream request timed out") from exc
        except httpx.HTTPError as exc:
            raise OpenAITransportError("upstream request failed") from exc

        if not resp.is_success:
            raise OpenAIUpstreamError(resp.text, status_code=resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise OpenAIResponseError("invalid upstream response") from exc

        return extract_message_content(data)


def extract_message_content(data: Any) -> str:
    """Return `choices[0].message.content`, or `"{}"` when it is missing or empty."""

    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return EMPTY_CONTENT

    if isinstance(content, str) and content:
        return content
    return EMPTY_CONTENT
