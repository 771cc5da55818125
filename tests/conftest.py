from __future__ import annotations

import pytest

# Imported up front so logging is configured before caplog attaches its handler.
import kings_mirror.main  # noqa: F401
from kings_mirror.core.settings import get_settings

_CONFIG_ENV_VARS = (
    "KM_SHARED_SECRET",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "OPENAI_BASE_URL",
    "OPENAI_TEMPERATURE",
    "OPENAI_TIMEOUT_SECONDS",
    "VALIDATE_UPSTREAM_CONTENT",
)


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Settings are cached via @lru_cache; clear so each test resolves its own.
    get_settings.cache_clear()


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from kings_mirror.main import create_app
    from tests.mirror._helpers import make_settings

    app = create_app(make_settings())
    with TestClient(app) as c:
        yield c
