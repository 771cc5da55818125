from __future__ import annotations

from typing import Protocol

from pydantic import ValidationError

from kings_mirror.domain.exceptions import UpstreamContentError
from kings_mirror.mirror.prompt import build_mirror_prompts
from kings_mirror.mirror.schemas import MirrorReflection, MirrorRequest


class LLMClient(Protocol):
    async def complete_json(self, *, system_prompt: str, user_prompt: str) -> str: ...


def validate_reflection(content: str) -> MirrorReflection:
    """Parse model output against the reflection schema or raise UpstreamContentError."""

    try:
        return MirrorReflection.model_validate_json(content)
    except ValidationError as exc:
        raise UpstreamContentError() from exc


class MirrorService:
    def __init__(self, *, llm_client: LLMClient, validate_content: bool = False):
        self._llm = llm_client
        self._validate_content = validate_content

    async def reflect(self, *, payload: MirrorRequest) -> str:
        """
        Ask the model for a reflection and return its JSON text.

        The text is returned exactly as the model produced it. Validation only
        decides whether it may be relayed; it never rewrites the content.
        """

        system_prompt, user_prompt = build_mirror_prompts(payload=payload)
        content = await self._llm.complete_json(
            system_prompt=system_prompt, user_prompt=user_prompt
        )
        if self._validate_content:
            validate_reflection(content)
        return content
