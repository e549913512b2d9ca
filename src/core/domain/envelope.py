"""Envelope: resultado uniforme de una operación remota.

Por qué un único tipo genérico:
- Éxito y fallo comparten metadatos (timestamp, respuesta cruda, correlation
  id); el discriminante es `ok`, y las factories garantizan que un fallo
  nunca transporte payload (a lo sumo una secuencia vacía).
- Los fallos remotos se representan como datos: nada por encima del
  decodificador necesita capturar excepciones de una llamada remota.
"""

from __future__ import annotations

import traceback
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Generic, TypeVar

from core.domain.identifiers import RequestId
from core.domain.models import to_utc
from core.domain.request import RequestContext
from core.interfaces.transport import RawResponse

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def describe_exception(exc: BaseException) -> str:
    """Mensaje legible de una excepción (nunca vacío)."""

    return str(exc) or type(exc).__name__


def _is_empty_payload(data: object) -> bool:
    return data is None or (isinstance(data, Sequence) and not isinstance(data, str) and len(data) == 0)


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """Outcome of one remote call.

    Attributes:
        ok: Whether the call produced a payload.
        data: Payload on success; `None` (or an empty sequence) on failure.
        status_message: Human readable status; empty on success.
        diagnostic: Extra text: stack trace, raw response or per-item errors.
        timestamp: Server timestamp when available, otherwise wall clock (UTC).
        http_response: Raw transport response, for introspection.
        request_id: Correlation id (`x-request-id` or the caller's fallback).
        request: Context of the originating request.
    """

    ok: bool
    data: T | None = None
    status_message: str = ""
    diagnostic: str | None = None
    timestamp: datetime = field(default_factory=_utcnow)
    http_response: RawResponse | None = field(default=None, repr=False, compare=False)
    request_id: RequestId | None = None
    request: RequestContext | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self.ok and self.data is None:
            raise ValueError("A successful envelope requires a payload.")
        if not self.ok and not _is_empty_payload(self.data):
            raise ValueError("A failed envelope must not carry a payload.")
        object.__setattr__(self, "timestamp", to_utc(self.timestamp))

    @property
    def status_code(self) -> int | None:
        return self.http_response.status_code if self.http_response is not None else None

    @classmethod
    def success(
        cls,
        data: T,
        *,
        status_message: str = "",
        diagnostic: str | None = None,
        timestamp: datetime | None = None,
        http_response: RawResponse | None = None,
        request_id: RequestId | None = None,
        request: RequestContext | None = None,
    ) -> Envelope[T]:
        return cls(
            ok=True,
            data=data,
            status_message=status_message,
            diagnostic=diagnostic,
            timestamp=timestamp or _utcnow(),
            http_response=http_response,
            request_id=request_id,
            request=request,
        )

    @classmethod
    def error(
        cls,
        message: str,
        diagnostic: str | None = None,
        timestamp: datetime | None = None,
        http_response: RawResponse | None = None,
        request_id: RequestId | None = None,
        *,
        request: RequestContext | None = None,
        data: T | None = None,
    ) -> Envelope[T]:
        """Explicit failure, for callers that already know the outcome.

        `data` only accepts an empty sequence (array operations) or `None`.
        """

        return cls(
            ok=False,
            data=data,
            status_message=message,
            diagnostic=diagnostic,
            timestamp=timestamp or _utcnow(),
            http_response=http_response,
            request_id=request_id,
            request=request,
        )

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        timestamp: datetime | None = None,
        http_response: RawResponse | None = None,
        request_id: RequestId | None = None,
        *,
        request: RequestContext | None = None,
        data: T | None = None,
    ) -> Envelope[T]:
        """Failure built from a caught exception: message + formatted traceback."""

        return cls.error(
            describe_exception(exc),
            "".join(traceback.format_exception(exc)),
            timestamp,
            http_response,
            request_id,
            request=request,
            data=data,
        )


__all__ = ["Envelope", "describe_exception"]
