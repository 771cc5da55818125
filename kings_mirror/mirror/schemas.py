from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

MirrorProtocol = Literal["breath", "reverie", "affirm"]
MirrorState = Literal["Calm", "Clarity", "Confidence", "Gratitude", "Power"]

DEFAULT_DESIRED_STATE = "Calm"
DEFAULT_SCORE_BEFORE = 5


class MirrorRequest(BaseModel):
    """Caller-supplied state. Every field is optional and falls back to a default."""

    model_config = ConfigDict(extra="ignore")

    mood_tags: list[str] = Field(
        default_factory=list,
        max_length=20,
        description="Mood tags describing the current state.",
        examples=[["anxious", "tired"]],
    )
    context_text: str = Field(
        default="",
        max_length=4000,
        description="Free-text context for the current state.",
        examples=["Big deadline tomorrow"],
    )
    desired_state: str = Field(
        default=DEFAULT_DESIRED_STATE,
        max_length=64,
        description="State the caller wants to shift into (usually one of the mirror states).",
        examples=["Clarity"],
    )
    score_before: float = Field(
        default=DEFAULT_SCORE_BEFORE,
        ge=0,
        le=10,
        description="Intensity of the current state on a 0-10 scale.",
        examples=[7],
    )


class MirrorRecommendation(BaseModel):
    protocol: MirrorProtocol
    reframe_mantra: str = Field(min_length=1)
    state_after: MirrorState


class MirrorReflection(BaseModel):
    """
    Shape the model is instructed to return.

    Only used when upstream content validation is enabled; otherwise the
    content is relayed without being parsed.
    """

    reflection: str = Field(min_length=1)
    plan: list[str]
    recommendation: MirrorRecommendation
