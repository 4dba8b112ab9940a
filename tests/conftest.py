"""Shared fixtures for the relay tests.

Outbound HTTP is never performed: ``outbound`` replaces ``requests.post`` in
the Splitser client with a recorder that returns a canned response, so tests
can assert both on the payload that would have been sent and on whether a
call happened at all.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

import splitser_client
from main import create_app
from settings import Settings

API_KEY = "test-secret"
FIXED_NOW = datetime(2024, 3, 10, 12, 0, 0)


class FakeResponse:
    def __init__(self, status_code: int = 200, body: Any = None, text: str | None = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = text if text is not None else ("" if body is None else str(body))

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class OutboundRecorder:
    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.response: FakeResponse = FakeResponse(200, {"expense": {"id": 42}})
        self.error: Exception | None = None

    def __call__(self, url: str, json: Any = None, headers: dict[str, str] | None = None, **kwargs: Any):
        self.calls.append({"url": url, "json": json, "headers": headers or {}, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def outbound(monkeypatch: pytest.MonkeyPatch) -> OutboundRecorder:
    recorder = OutboundRecorder()
    monkeypatch.setattr(splitser_client.requests, "post", recorder)
    return recorder


@pytest.fixture
def settings() -> Settings:
    return Settings(
        list_id="list-123",
        master_api_key=API_KEY,
        default_split_between=("alice", "bob"),
    )


@pytest.fixture
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings, clock=lambda: FIXED_NOW))
