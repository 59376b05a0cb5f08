"""HTTP transport for the deployment server API.

This module provides:
- HttpClient: Protocol for JSON requests (injectable for tests)
- RealHttpClient: Real implementation using urllib
- MockHttpClient: Mock implementation for testing
"""

from __future__ import annotations

import json
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from dply import __version__
from dply.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

_TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True, slots=True)
class HttpError:
    """HTTP error details.

    Attributes:
        url: The URL that failed
        status: HTTP status code (0 for network errors)
        message: Human-readable error message, the server's own when it sent one
    """

    url: str
    status: int
    message: str

    @property
    def is_transient(self) -> bool:
        """Network failures, throttling and gateway errors may clear up on retry."""
        return self.status == 0 or self.status in _TRANSIENT_STATUSES

    def __str__(self) -> str:
        if self.status:
            return f"HTTP {self.status}: {self.message} ({self.url})"
        return f"{self.message} ({self.url})"


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for JSON-over-HTTP requests."""

    def request_json(
        self,
        method: str,
        url: str,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        """Send a request and parse the JSON response.

        Args:
            method: HTTP method (GET, POST)
            url: Absolute URL
            body: JSON-serializable request body, if any

        Returns:
            Ok with the decoded JSON value, or Err with HttpError
        """
        ...


def _error_message(e: urllib.error.HTTPError) -> str:
    # Servers usually explain rejections in a JSON body; surface that verbatim.
    try:
        raw = e.read().decode("utf-8", errors="replace")
    except OSError:
        raw = ""
    if raw:
        try:
            payload: object = json.loads(raw)
        except json.JSONDecodeError:
            return raw.strip()[:500] or str(e.reason)
        if isinstance(payload, dict):
            for key in ("ErrorMessage", "message", "error"):
                value = payload.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
    return str(e.reason)


class RealHttpClient:
    """Real HTTP client using urllib.

    Handles:
    - HTTPS with system certificates
    - API key authentication header
    - JSON request and response bodies
    - Timeout handling
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        timeout: float = 30.0,
        user_agent: str = f"dply/{__version__}",
    ) -> None:
        self.timeout = timeout
        self._headers = {"User-Agent": user_agent, "Accept": "application/json"}
        if api_key:
            self._headers["X-Api-Key"] = api_key
        self._ssl_context = ssl.create_default_context()

    def request_json(
        self,
        method: str,
        url: str,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        headers = dict(self._headers)
        data: bytes | None = None
        if body is not None:
            data = json.dumps(body).encode("utf-8")
            headers["Content-Type"] = "application/json"

        try:
            req = urllib.request.Request(url, data=data, headers=headers, method=method)
            with urllib.request.urlopen(
                req,
                timeout=self.timeout,
                context=self._ssl_context,
            ) as response:
                raw = response.read()
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=_error_message(e)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Request timed out"))
        except ValueError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        except OSError as e:
            return Err(HttpError(url=url, status=0, message=str(e)))

        if not raw:
            return Ok(None)
        try:
            return Ok(json.loads(raw.decode("utf-8")))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Err(HttpError(url=url, status=0, message=f"JSON parse error: {e}"))


class MockHttpClient:
    """Mock HTTP client for testing.

    Responses are keyed by (method, url). A list of responses is consumed in
    order, the last one repeating.

    Usage:
        client = MockHttpClient()
        client.set_response("GET", "https://deploy/api/projects/Web", {"Id": "P-1"})
        result = client.request_json("GET", "https://deploy/api/projects/Web")
        assert result == Ok({"Id": "P-1"})
    """

    def __init__(self) -> None:
        self._responses: dict[tuple[str, str], list[object | HttpError]] = {}
        self.calls: list[tuple[str, str, object | None]] = []

    def set_response(self, method: str, url: str, *responses: object | HttpError) -> None:
        self._responses[(method.upper(), url)] = list(responses)

    def request_json(
        self,
        method: str,
        url: str,
        body: object | None = None,
    ) -> Result[object, HttpError]:
        self.calls.append((method.upper(), url, body))

        queue = self._responses.get((method.upper(), url))
        if not queue:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))

        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, HttpError):
            return Err(response)
        return Ok(response)
