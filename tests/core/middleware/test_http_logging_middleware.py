"""Unit tests for the HTTP logging middleware.

We assert structured log fields via `caplog` (not message strings) and verify:
- X-Request-ID is generated, propagated, or replaced when unsafe
- Successful requests emit exactly one INFO entry with metadata only
- Unhandled exceptions emit an ERROR entry with a stack trace and return 500
- Preflights get no X-Request-ID and are logged at DEBUG only
"""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from kings_mirror.core.middleware.http_logging import HttpLoggingMiddleware


def _make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(HttpLoggingMiddleware)

    @app.get("/health")
    async def health(request: Request) -> dict[str, str]:
        return {"status": "ok", "request_id": request.state.request_id}

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("boom")

    return app


def _info_records(caplog: pytest.LogCaptureFixture) -> list[logging.LogRecord]:
    return [
        r for r in caplog.records if r.name == "kings_mirror.http" and r.levelno == logging.INFO
    ]


def test_successful_request_sets_request_id_and_logs_one_info(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="kings_mirror.http")

    with TestClient(_make_app()) as client:
        res = client.get("/health?mood=anxious", headers={"X-KM-Secret": "s3cret"})

    assert res.status_code == 200
    request_id = res.headers["x-request-id"]
    assert request_id
    # Handlers see the same id the caller gets back.
    assert res.json()["request_id"] == request_id

    records = _info_records(caplog)
    assert len(records) == 1
    record = records[0]
    assert record.__dict__["request_id"] == request_id
    assert record.__dict__["http_method"] == "GET"
    assert record.__dict__["request_path"] == "/health"
    assert record.__dict__["status_code"] == 200
    assert record.__dict__["duration_ms"] >= 0

    rendered = " ".join(str(v) for v in record.__dict__.values())
    assert "anxious" not in rendered
    assert "s3cret" not in rendered


def test_propagates_valid_request_id(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="kings_mirror.http")

    with TestClient(_make_app()) as client:
        res = client.get("/health", headers={"X-Request-ID": "req_abc-123"})

    assert res.headers["x-request-id"] == "req_abc-123"
    assert _info_records(caplog)[0].__dict__["request_id"] == "req_abc-123"


@pytest.mark.parametrize("unsafe", ["-starts-with-dash", "has spaces", "x" * 200])
def test_replaces_unsafe_request_id(unsafe: str) -> None:
    with TestClient(_make_app()) as client:
        res = client.get("/health", headers={"X-Request-ID": unsafe})

    assert res.headers["x-request-id"] != unsafe
    assert len(res.headers["x-request-id"]) == 32


def test_unmatched_route_is_logged_without_raw_path(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="kings_mirror.http")

    with TestClient(_make_app()) as client:
        res = client.get("/users/jane-doe")

    assert res.status_code == 404
    assert _info_records(caplog)[0].__dict__["request_path"] == "unmatched"


def test_unhandled_exception_returns_500_and_logs_error_with_request_id(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO, logger="kings_mirror.http")

    with TestClient(_make_app(), raise_server_exceptions=False) as client:
        res = client.get("/boom", headers={"X-Request-ID": "req_err_001"})

    assert res.status_code == 500

    error_records = [
        r for r in caplog.records if r.name == "kings_mirror.http" and r.levelno == logging.ERROR
    ]
    assert len(error_records) == 1
    record = error_records[0]
    assert record.__dict__["request_id"] == "req_err_001"
    assert record.__dict__["request_path"] == "/boom"
    assert record.__dict__["status_code"] == 500
    assert record.exc_info


def test_preflight_gets_no_request_id_and_logs_at_debug(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.DEBUG, logger="kings_mirror.http")

    with TestClient(_make_app()) as client:
        res = client.options("/health", headers={"X-Request-ID": "req_pre_001"})

    assert "x-request-id" not in res.headers
    assert _info_records(caplog) == []

    debug_records = [
        r for r in caplog.records if r.name == "kings_mirror.http" and r.levelno == logging.DEBUG
    ]
    assert len(debug_records) == 1
    assert debug_records[0].__dict__["http_method"] == "OPTIONS"
    assert debug_records[0].__dict__["request_id"] == "req_pre_001"
