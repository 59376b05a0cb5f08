"""Tests for remote/http.py - JSON transport."""

from __future__ import annotations

import io
import json
import urllib.error
from email.message import Message
from typing import Any

import pytest

from dply.core.result import Err, Ok
from dply.remote import http as http_mod
from dply.remote.http import HttpClient, HttpError, MockHttpClient, RealHttpClient

# =============================================================================
# HttpError tests
# =============================================================================


class TestHttpError:
    def test_str_with_status(self) -> None:
        error = HttpError(url="https://deploy/api/releases", status=400, message="Bad version")
        assert str(error) == "HTTP 400: Bad version (https://deploy/api/releases)"

    def test_str_without_status(self) -> None:
        error = HttpError(url="https://deploy", status=0, message="Connection refused")
        assert str(error) == "Connection refused (https://deploy)"

    @pytest.mark.parametrize("status", [0, 408, 429, 500, 502, 503, 504])
    def test_transient(self, status: int) -> None:
        assert HttpError(url="u", status=status, message="m").is_transient

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422])
    def test_not_transient(self, status: int) -> None:
        assert not HttpError(url="u", status=status, message="m").is_transient

    def test_is_frozen(self) -> None:
        error = HttpError(url="u", status=404, message="Not Found")
        with pytest.raises(AttributeError):
            error.status = 500  # type: ignore[misc]


# =============================================================================
# MockHttpClient tests
# =============================================================================


class TestMockHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(MockHttpClient(), HttpClient)

    def test_unknown_url_is_404(self) -> None:
        client = MockHttpClient()

        result = client.request_json("GET", "https://deploy/api/unknown")

        assert isinstance(result, Err)
        assert result.error.status == 404

    def test_responses_are_consumed_in_order_last_repeats(self) -> None:
        client = MockHttpClient()
        flaky = HttpError(url="https://deploy/api/tasks/T1", status=503, message="busy")
        client.set_response("get", "https://deploy/api/tasks/T1", flaky, {"State": "Success"})

        first = client.request_json("GET", "https://deploy/api/tasks/T1")
        second = client.request_json("GET", "https://deploy/api/tasks/T1")
        third = client.request_json("GET", "https://deploy/api/tasks/T1")

        assert first == Err(flaky)
        assert second == Ok({"State": "Success"})
        assert third == Ok({"State": "Success"})

    def test_records_calls_with_body(self) -> None:
        client = MockHttpClient()
        client.set_response("POST", "https://deploy/api/releases", {"Id": "Releases-1"})

        client.request_json("post", "https://deploy/api/releases", {"Version": "1.0.0"})

        assert client.calls == [("POST", "https://deploy/api/releases", {"Version": "1.0.0"})]


# =============================================================================
# RealHttpClient tests
# =============================================================================


class _Response(io.BytesIO):
    def __enter__(self) -> _Response:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class TestRealHttpClient:
    def test_isinstance_check(self) -> None:
        assert isinstance(RealHttpClient(), HttpClient)

    def test_sends_api_key_and_json_body(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict[str, Any] = {}

        def fake_urlopen(req: Any, *, timeout: float, context: Any) -> _Response:
            seen["req"] = req
            seen["timeout"] = timeout
            return _Response(b'{"Id": "Releases-1"}')

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", fake_urlopen)
        client = RealHttpClient(api_key="API-123", timeout=12.0)

        result = client.request_json("POST", "https://deploy/api/releases", {"Version": "1.0"})

        assert result == Ok({"Id": "Releases-1"})
        req = seen["req"]
        assert req.get_method() == "POST"
        assert req.get_header("X-api-key") == "API-123"
        assert req.get_header("Content-type") == "application/json"
        assert json.loads(req.data) == {"Version": "1.0"}
        assert seen["timeout"] == 12.0

    def test_no_api_key_header_when_unset(self, monkeypatch: pytest.MonkeyPatch) -> None:
        seen: dict[str, Any] = {}

        def fake_urlopen(req: Any, *, timeout: float, context: Any) -> _Response:
            seen["req"] = req
            return _Response(b"")

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().request_json("GET", "https://deploy/api/environments")

        assert result == Ok(None)
        assert seen["req"].get_header("X-api-key") is None
        assert seen["req"].data is None

    def test_http_error_surfaces_server_message(self, monkeypatch: pytest.MonkeyPatch) -> None:
        url = "https://deploy/api/releases"

        def fake_urlopen(req: Any, *, timeout: float, context: Any) -> _Response:
            body = io.BytesIO(b'{"ErrorMessage": "A release with version 1.0 already exists"}')
            raise urllib.error.HTTPError(url, 400, "Bad Request", Message(), body)

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().request_json("POST", url, {})

        assert isinstance(result, Err)
        assert result.error.status == 400
        assert result.error.message == "A release with version 1.0 already exists"

    def test_network_error_has_status_zero(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: Any, *, timeout: float, context: Any) -> _Response:
            raise urllib.error.URLError("Connection refused")

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().request_json("GET", "https://deploy/api/tasks/T1")

        assert isinstance(result, Err)
        assert result.error.status == 0
        assert result.error.is_transient

    def test_invalid_json_is_an_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_urlopen(req: Any, *, timeout: float, context: Any) -> _Response:
            return _Response(b"<html>login</html>")

        monkeypatch.setattr(http_mod.urllib.request, "urlopen", fake_urlopen)

        result = RealHttpClient().request_json("GET", "https://deploy/api/environments")

        assert isinstance(result, Err)
        assert "JSON parse error" in result.error.message
