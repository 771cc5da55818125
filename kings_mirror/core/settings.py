from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # Access control
    # The secret is compared, never logged.
    km_shared_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("KM_SHARED_SECRET", "km_shared_secret"),
        description="If set, callers must send it in the X-KM-Secret header.",
    )

    # LLM integration (OpenAI)
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("OPENAI_API_KEY", "openai_api_key"),
        description="OpenAI API key (required for the mirror endpoint).",
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        validation_alias=AliasChoices("OPENAI_MODEL", "openai_model"),
        description="OpenAI model identifier used for reflections.",
    )
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("OPENAI_BASE_URL", "openai_base_url"),
        description="Base URL for OpenAI API (override for proxies/emulators).",
    )
    openai_temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        validation_alias=AliasChoices("OPENAI_TEMPERATURE", "openai_temperature"),
        description="Sampling temperature sent with every completion request.",
    )
    openai_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        validation_alias=AliasChoices("OPENAI_TIMEOUT_SECONDS", "openai_timeout_seconds"),
        description="Timeout for OpenAI API requests (seconds). Requests are never retried.",
    )
    validate_upstream_content: bool = Field(
        default=False,
        validation_alias=AliasChoices("VALIDATE_UPSTREAM_CONTENT", "validate_upstream_content"),
        description=(
            "If true, the model output is checked against the reflection schema before "
            "it is relayed. Off by default: content is passed through untouched."
        ),
    )

    @field_validator("km_shared_secret", "openai_api_key", mode="before")
    @classmethod
    def _blank_means_unset(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
