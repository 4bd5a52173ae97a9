"""Tests for the shared async HTTP helpers."""

import asyncio

import aiohttp
import pytest

from deptree.common.http_client import build_timeout, get_json, robust_get
from deptree.constants import Constants


class FakeResponse:
    def __init__(self, status=200, text="", headers=None):
        self.status = status
        self._text = text
        self.headers = headers or {}

    async def text(self):
        return self._text


class FakeRequest:
    def __init__(self, outcome):
        self._outcome = outcome

    async def __aenter__(self):
        if isinstance(self._outcome, BaseException):
            raise self._outcome
        return self._outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Returns queued outcomes (responses or exceptions) per GET."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []

    def get(self, url, headers=None):
        self.requests.append((url, headers))
        return FakeRequest(self.outcomes.pop(0))


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(Constants, "HTTP_RETRY_BASE_DELAY_SEC", 0)


class TestRobustGet:
    """Retry behavior."""

    def test_success_first_try(self):
        session = FakeSession(FakeResponse(200, "ok", {"ETag": "x"}))

        status, headers, text = asyncio.run(robust_get(session, "https://r.example/a"))

        assert (status, headers, text) == (200, {"ETag": "x"}, "ok")
        assert len(session.requests) == 1

    def test_client_error_status_not_retried(self):
        session = FakeSession(FakeResponse(404, "missing"))

        status, _, _ = asyncio.run(robust_get(session, "https://r.example/a"))

        assert status == 404
        assert len(session.requests) == 1

    def test_timeout_then_success(self):
        session = FakeSession(asyncio.TimeoutError(), FakeResponse(200, "ok"))

        status, _, text = asyncio.run(robust_get(session, "https://r.example/a"))

        assert (status, text) == (200, "ok")
        assert len(session.requests) == 2

    def test_connection_error_then_success(self):
        session = FakeSession(aiohttp.ClientConnectionError("reset"), FakeResponse(200, "ok"))

        status, _, _ = asyncio.run(robust_get(session, "https://r.example/a"))

        assert status == 200

    def test_server_errors_exhaust_retries(self):
        session = FakeSession(*[FakeResponse(503) for _ in range(Constants.HTTP_RETRY_MAX)])

        status, headers, text = asyncio.run(robust_get(session, "https://r.example/a"))

        assert status == 0
        assert headers == {}
        assert "HTTP 503" in text
        assert len(session.requests) == Constants.HTTP_RETRY_MAX

    def test_headers_forwarded(self):
        session = FakeSession(FakeResponse(200, "ok"))

        asyncio.run(robust_get(session, "https://r.example/a", headers={"Accept": "application/json"}))

        assert session.requests[0] == ("https://r.example/a", {"Accept": "application/json"})


class TestGetJson:
    """JSON decoding."""

    def test_parses_body(self):
        session = FakeSession(FakeResponse(200, '{"versions": {}}'))

        status, _, data = asyncio.run(get_json(session, "https://r.example/a"))

        assert status == 200
        assert data == {"versions": {}}

    def test_invalid_json_yields_none(self):
        session = FakeSession(FakeResponse(200, "<html>"))

        status, _, data = asyncio.run(get_json(session, "https://r.example/a"))

        assert status == 200
        assert data is None

    def test_non_200_yields_none(self):
        session = FakeSession(FakeResponse(404, '{"error": "Not found"}'))

        status, _, data = asyncio.run(get_json(session, "https://r.example/a"))

        assert status == 404
        assert data is None


def test_build_timeout_defaults_to_constant():
    assert build_timeout().total == Constants.REQUEST_TIMEOUT
    assert build_timeout(5).total == 5

