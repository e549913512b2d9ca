"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza base URL, autenticación, headers y timeouts del cliente.
- Convierte `httpx.Response` en un `HTTPResponse` inmutable que cumple el
  contrato `core.interfaces.transport.RawResponse` (lo único que necesita
  el decodificador de envelopes).
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

import httpx

from core.config import AppSettings
from core.domain.identifiers import APIKey, OrganizationId


def build_async_client(
    settings: AppSettings | None = None,
    *,
    api_key: APIKey,
    organization_id: OrganizationId | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` apuntando a la API.

    Por qué un builder:
    - Centraliza base URL/headers para que todas las operaciones se comporten igual.
    - `transport` permite sustituir la red en tests.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json; charset=utf-8",
        "Authorization": f"Bearer {api_key}",
    }
    if organization_id is not None:
        headers["OpenAI-Organization"] = str(organization_id)

    base_url = settings.base_url if settings.base_url.endswith("/") else settings.base_url + "/"
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


@dataclass(frozen=True)
class HTTPResponse:
    """Respuesta HTTP cruda e inmutable.

    `headers` se guarda como `httpx.Headers` para lookup case-insensitive.
    """

    status_code: int
    reason_phrase: str
    headers: Mapping[str, str]
    content: bytes
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    http_version: str = "HTTP/1.1"

    @classmethod
    def build(
        cls,
        status_code: int,
        content: bytes | str = b"",
        *,
        headers: Mapping[str, str] | None = None,
        reason_phrase: str | None = None,
        timestamp: datetime | None = None,
    ) -> HTTPResponse:
        """Construye una respuesta a mano (tests, respuestas sintéticas)."""

        body = content.encode("utf-8") if isinstance(content, str) else content
        return cls(
            status_code=status_code,
            reason_phrase=reason_phrase if reason_phrase is not None else httpx.codes.get_reason_phrase(status_code),
            headers=httpx.Headers(headers or {}),
            content=body,
            timestamp=timestamp or datetime.now(timezone.utc),
        )

    @classmethod
    def from_httpx(cls, response: httpx.Response, *, timestamp: datetime | None = None) -> HTTPResponse:
        return cls(
            status_code=response.status_code,
            reason_phrase=response.reason_phrase,
            headers=response.headers,
            content=response.content,
            timestamp=timestamp or datetime.now(timezone.utc),
            http_version=response.http_version,
        )

    @property
    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")

    @property
    def entire_pdu(self) -> str:
        lines = [f"{self.http_version} {self.status_code} {self.reason_phrase}".rstrip()]
        lines.extend(f"{name}: {value}" for name, value in self.headers.items())
        return "\r\n".join(lines) + "\r\n\r\n" + self.text
