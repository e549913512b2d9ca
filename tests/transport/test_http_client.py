"""Tests for the httpx wrapper and the immutable HTTPResponse."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import httpx

from adapters.http_client import HTTPResponse, build_async_client
from core.config import AppSettings
from core.domain.identifiers import APIKey, OrganizationId
from core.interfaces.transport import RawResponse


class TestHTTPResponse:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(HTTPResponse.build(200, "{}"), RawResponse)

    def test_build_defaults_reason_phrase(self) -> None:
        response = HTTPResponse.build(404)
        assert response.reason_phrase == "Not Found"
        assert response.content == b""

    def test_headers_case_insensitive(self) -> None:
        response = HTTPResponse.build(200, headers={"X-Request-Id": "abc"})
        assert response.headers.get("x-request-id") == "abc"

    def test_text_is_utf8(self) -> None:
        response = HTTPResponse.build(200, "{\"owner\": \"ñandú\"}")
        assert "ñandú" in response.text

    def test_entire_pdu(self) -> None:
        response = HTTPResponse.build(404, '{"error": {}}', headers={"content-type": "application/json"})
        pdu = response.entire_pdu
        assert pdu.startswith("HTTP/1.1 404 Not Found\r\n")
        assert "content-type: application/json\r\n" in pdu
        assert pdu.endswith('\r\n\r\n{"error": {}}')

    def test_from_httpx(self) -> None:
        raw = httpx.Response(201, json={"id": "ada"}, headers={"x-request-id": "r-9"})
        stamp = datetime(2023, 5, 7, 11, 20, 50, tzinfo=timezone.utc)
        response = HTTPResponse.from_httpx(raw, timestamp=stamp)
        assert response.status_code == 201
        assert response.reason_phrase == "Created"
        assert response.headers.get("X-REQUEST-ID") == "r-9"
        assert response.content == raw.content
        assert response.timestamp == stamp


class TestBuildAsyncClient:
    def test_headers_and_base_url(self, settings: AppSettings) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={})

        async def _run() -> None:
            async with build_async_client(
                settings,
                api_key=APIKey("sk-test"),
                organization_id=OrganizationId("org-42"),
                transport=httpx.MockTransport(handler),
            ) as client:
                await client.get("models")

        asyncio.run(_run())

        request = seen[0]
        assert str(request.url) == "https://api.example.test/v1/models"
        assert request.headers["Authorization"] == "Bearer sk-test"
        assert request.headers["OpenAI-Organization"] == "org-42"
        assert request.headers["Accept"].startswith("application/json")
        assert request.headers["User-Agent"] == settings.user_agent

    def test_base_url_without_trailing_slash(self) -> None:
        settings = AppSettings(_env_file=None, base_url="https://api.example.test/v1")
        client = build_async_client(settings, api_key=APIKey("sk-test"))
        assert str(client.base_url) == "https://api.example.test/v1/"
        assert "OpenAI-Organization" not in client.headers
        asyncio.run(client.aclose())
