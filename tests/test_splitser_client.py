from __future__ import annotations

import pytest
import requests

from errors import ExpenseValidationError, RemoteServiceError
from splitser_client import SplitserClient, parse_cookies
from tests.conftest import FakeResponse


@pytest.mark.parametrize(
    "cookies, expected",
    [
        (None, {}),
        ("", {}),
        ({"session": "abc", "n": 1}, {"session": "abc", "n": "1"}),
        ("a=1; b=2", {"a": "1", "b": "2"}),
        ("  a = 1 ;b=2;", {"a": "1", "b": "2"}),
        ("token=abc==; flag", {"token": "abc=="}),
    ],
)
def test_parse_cookies(cookies, expected):
    assert parse_cookies(cookies) == expected


@pytest.mark.parametrize("cookies", ["garbage", "; ;", 12, ["a=1"]])
def test_malformed_cookies_raise(cookies):
    with pytest.raises(ExpenseValidationError) as exc_info:
        parse_cookies(cookies)
    assert exc_info.value.kind == ExpenseValidationError.MALFORMED_COOKIES


def test_posts_payload_with_standard_headers(outbound):
    client = SplitserClient("list-9", base_url="https://splitser.test/")
    result = client.add_expense({"expense": {"name": "x"}})

    assert result == {"expense": {"id": 42}}
    assert len(outbound.calls) == 1
    call = outbound.calls[0]
    assert call["url"] == "https://splitser.test/api/lists/list-9/expenses"
    assert call["json"] == {"expense": {"name": "x"}}
    assert call["headers"] == {
        "Accept": "application/json",
        "Accept-Version": "11",
        "Content-Type": "application/json",
    }


def test_cookie_header_is_rebuilt(outbound):
    client = SplitserClient("list-9", cookies="a=1;  b=2")
    client.add_expense({})
    assert outbound.calls[0]["headers"]["Cookie"] == "a=1; b=2"


def test_non_2xx_raises_remote_service_error(outbound):
    outbound.response = FakeResponse(422, text='{"errors": ["bad"]}')
    with pytest.raises(RemoteServiceError) as exc_info:
        SplitserClient("list-9").add_expense({})
    assert exc_info.value.status_code == 422
    assert exc_info.value.response_body == '{"errors": ["bad"]}'
    assert "422" in str(exc_info.value)


def test_transport_failure_raises_remote_service_error(outbound):
    outbound.error = requests.ConnectionError("connection refused")
    with pytest.raises(RemoteServiceError, match="connection refused"):
        SplitserClient("list-9").add_expense({})


def test_non_json_body_raises_remote_service_error(outbound):
    outbound.response = FakeResponse(200, text="<html>")
    with pytest.raises(RemoteServiceError, match="non-JSON"):
        SplitserClient("list-9").add_expense({})


def test_uses_injected_session():
    calls = []

    class _Session:
        def post(self, url, json=None, headers=None):
            calls.append(url)
            return FakeResponse(201, {"ok": True})

    client = SplitserClient("list-9", session=_Session())
    assert client.add_expense({}) == {"ok": True}
    assert calls == ["https://app.splitser.com/api/lists/list-9/expenses"]
