"""Shared pytest fixtures and test helpers."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from adapters.http_client import HTTPResponse
from adapters.openai_client import OpenAIClient
from core.config import AppSettings
from core.domain.identifiers import APIKey

CURIE_CREATED = 1641955047


def model_json(model_id: str = "text-curie:001", **overrides: Any) -> dict[str, Any]:
    """A valid model object as returned by the API."""
    data: dict[str, Any] = {
        "id": model_id,
        "object": "model",
        "created": CURIE_CREATED,
        "owned_by": "system",
        "root": model_id,
        "parent": None,
    }
    data.update(overrides)
    return data


def json_response(
    status_code: int,
    payload: Any,
    *,
    headers: dict[str, str] | None = None,
) -> HTTPResponse:
    return HTTPResponse.build(
        status_code,
        json.dumps(payload),
        headers={"content-type": "application/json", **(headers or {})},
    )


@pytest.fixture
def settings() -> AppSettings:
    """Settings isolated from the developer's environment and .env files."""
    return AppSettings(
        _env_file=None,
        api_key="sk-test",
        base_url="https://api.example.test/v1/",
        http_timeout_seconds=5.0,
    )


@pytest.fixture
def make_client(settings: AppSettings) -> Callable[[Callable[[httpx.Request], httpx.Response]], OpenAIClient]:
    """Build an `OpenAIClient` whose HTTP traffic goes to `handler`."""

    def _make(handler: Callable[[httpx.Request], httpx.Response], **kwargs: Any) -> OpenAIClient:
        return OpenAIClient(
            APIKey("sk-test"),
            settings=settings,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )

    return _make
