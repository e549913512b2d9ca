"""Contrato de respuesta HTTP cruda.

Por qué Protocol:
- El decodificador de `Envelope` solo necesita un conjunto mínimo de
  capacidades (status, headers, body, timestamp), no la API de httpx.
- Permite construir respuestas en tests sin levantar transporte alguno.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Protocol, runtime_checkable


@runtime_checkable
class RawResponse(Protocol):
    """Respuesta HTTP tal como la entrega el transporte.

    Reglas de diseño:
    - `headers.get(name)` debe ser case-insensitive (p.ej. `x-request-id`).
    - `timestamp` es el momento (UTC) en que se recibió la respuesta.
    - `entire_pdu` es la respuesta completa en texto: status line, headers,
      línea en blanco y body. Se usa como diagnóstico.
    """

    @property
    def status_code(self) -> int: ...

    @property
    def reason_phrase(self) -> str: ...

    @property
    def headers(self) -> Mapping[str, str]: ...

    @property
    def content(self) -> bytes: ...

    @property
    def text(self) -> str: ...

    @property
    def timestamp(self) -> datetime: ...

    @property
    def entire_pdu(self) -> str: ...
