"""Contexto de la petición que originó una respuesta."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

from core.domain.identifiers import RequestId


@dataclass(frozen=True)
class RequestContext:
    """Metadatos mínimos de una llamada remota.

    Se adjunta al `Envelope` para poder correlacionar la respuesta con la
    operación, la URL y el correlation id usado como fallback.
    """

    operation: str
    method: str
    url: str
    request_id: RequestId
    timeout_seconds: float | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
