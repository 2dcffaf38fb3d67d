"""Tests for JSON log lines, request correlation and domain events."""

import json
import logging
from types import SimpleNamespace

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from packages.common.auth import get_current_user, issue_credential
from packages.common.logging import JSONFormatter, current_context, set_request_id, set_user_id


@pytest.fixture(autouse=True)
def clean_context():
    yield
    set_request_id(None)
    set_user_id(None)


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("testplatform", logging.INFO, __file__, 1, msg, None, None)
    record.__dict__.update(extra)
    return record


def test_formatter_stamps_service_and_request_context() -> None:
    set_request_id("req-7")
    set_user_id("u-1")
    line = json.loads(JSONFormatter("test-platform", "prod").format(_record("hello")))
    assert line["service"] == "test-platform"
    assert line["env"] == "prod"
    assert line["request_id"] == "req-7"
    assert line["user_id"] == "u-1"
    assert line["msg"] == "hello"


def test_formatter_omits_unset_context_and_emits_events() -> None:
    event = {"actor": "u-1", "verb": "submitted", "object": "t-1"}
    line = json.loads(JSONFormatter().format(_record("u-1 submitted t-1", event=event)))
    assert "request_id" not in line and "user_id" not in line
    assert line["event"] == event


@pytest.mark.asyncio
async def test_authenticated_account_is_remembered_for_logging() -> None:
    request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(settings=SimpleNamespace(JWT_SECRET="k"))))
    creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=issue_credential("u-9", False, "k"))
    principal = await get_current_user(request, creds)
    assert principal.user_id == "u-9"
    assert current_context() == {"user_id": "u-9"}


@pytest.mark.asyncio
async def test_request_id_is_echoed_and_access_logged(client, caplog) -> None:
    caplog.set_level(logging.INFO)
    r = await client.get("/api/directions", headers={"X-Request-ID": "req-42"})
    assert r.headers["X-Request-ID"] == "req-42"
    access = [rec.getMessage() for rec in caplog.records if rec.name == "testplatform.access"]
    assert any(m.startswith("GET /api/directions -> 200 in ") for m in access)

    generated = await client.get("/")
    assert generated.headers["X-Request-ID"]


@pytest.mark.asyncio
async def test_login_emits_structured_event(client, learner, caplog) -> None:
    caplog.set_level(logging.INFO)
    r = await client.post("/api/login", json={"login": "alice", "password": "wonderland"})
    assert r.status_code == 200
    events = [rec.event for rec in caplog.records if rec.name == "testplatform.events"]
    assert {"actor": learner.id, "verb": "logged_in", "object": "session"}.items() <= events[-1].items()
