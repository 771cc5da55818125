from __future__ import annotations

from fastapi import Request

from kings_mirror.core.llm.openai_client import OpenAIClient, OpenAIConfig
from kings_mirror.core.settings import Settings, get_settings


def get_app_settings(request: Request) -> Settings:
    """
    Return the `Settings` instance the application runs with.

    Normally set by `create_app()` or the lifespan hook. Hosts that skip
    lifespan events (e.g. `uvicorn --lifespan off`) resolve it here on first use.
    """

    settings: Settings | None = request.app.state.settings
    if settings is None:
        settings = get_settings()
        request.app.state.settings = settings
    return settings


def get_openai_client(request: Request) -> OpenAIClient | None:
    """
    Dependency provider for OpenAIClient.

    Returns None when no API key is configured so the route can answer with
    a 500 before any network call is attempted.
    """

    settings = get_app_settings(request)
    if not settings.openai_api_key:
        return None

    config = OpenAIConfig(
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
        model=settings.openai_model,
        temperature=float(settings.openai_temperature),
        timeout_seconds=float(settings.openai_timeout_seconds),
    )
    return OpenAIClient(config=config, transport=request.app.state.upstream_transport)
