"""Cliente de la API de modelos (`GET /models`, `GET /models/{id}`).

Responsabilidad:
- Emitir una única llamada HTTP por operación y entregar la respuesta cruda
  a `core.services.decoding`.
- Convertir cualquier fallo de transporte (timeout, conexión, TLS,
  cancelación) en un `Envelope` fallido: las operaciones nunca lanzan por un
  fallo remoto.

Concurrencia:
- No hay estado mutable compartido entre llamadas; varias operaciones pueden
  ejecutarse en paralelo (`asyncio.gather`) sobre el mismo cliente.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar
from urllib.parse import quote

import httpx
import structlog

from adapters.http_client import HTTPResponse, build_async_client
from core.config import AppSettings
from core.domain.envelope import Envelope, describe_exception
from core.domain.errors import OperationCancelledError
from core.domain.identifiers import APIKey, ModelId, OrganizationId, RequestId
from core.domain.models import Model
from core.domain.request import RequestContext
from core.interfaces.transport import RawResponse
from core.services.decoding import decode_array, decode_object

T = TypeVar("T")

logger = structlog.get_logger(__name__)


def new_request_id() -> RequestId:
    return RequestId(uuid.uuid4().hex)


class OpenAIClient:
    """Cliente asíncrono para listar y consultar modelos.

    `http_client` permite compartir un `httpx.AsyncClient` propio; en ese
    caso este cliente no lo cierra.
    """

    def __init__(
        self,
        api_key: APIKey,
        organization_id: OrganizationId | None = None,
        *,
        settings: AppSettings | None = None,
        request_timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self.api_key = api_key
        self.organization_id = organization_id
        self.request_timeout = request_timeout
        self._owns_http_client = http_client is None
        self._http = http_client or build_async_client(
            self._settings,
            api_key=api_key,
            organization_id=organization_id,
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: AppSettings | None = None, **kwargs: object) -> OpenAIClient:
        """Crea el cliente desde `AppSettings` (API key obligatoria)."""

        settings = settings or AppSettings()
        if not settings.api_key:
            raise ValueError("No API key configured (set OPENAI_CLIENT_API_KEY or run `setup`).")
        return cls(
            APIKey.parse(settings.api_key),
            OrganizationId.try_parse(settings.organization_id),
            settings=settings,
            **kwargs,  # type: ignore[arg-type]
        )

    async def __aenter__(self) -> OpenAIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http_client:
            await self._http.aclose()

    def _timeout(self, request_timeout: float | None) -> float:
        if request_timeout is not None:
            return request_timeout
        if self.request_timeout is not None:
            return self.request_timeout
        return self._settings.http_timeout_seconds

    async def get_models(
        self,
        *,
        request_id: RequestId | None = None,
        request_timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Envelope[tuple[Model, ...]]:
        """Lista todos los modelos disponibles.

        Elementos malformados de la lista no hacen fallar la llamada: se
        omiten y su error queda en `Envelope.diagnostic`.
        """

        empty: tuple[Model, ...] = ()
        return await self._execute(
            "get_models",
            "models",
            request_id=request_id,
            request_timeout=request_timeout,
            cancel_event=cancel_event,
            decode=lambda response, fallback, context: decode_array(
                response, fallback, Model.parse, request=context
            ),
            empty=empty,
        )

    async def get_model(
        self,
        model_id: ModelId,
        *,
        request_id: RequestId | None = None,
        request_timeout: float | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> Envelope[Model]:
        """Obtiene un modelo por id."""

        return await self._execute(
            "get_model",
            f"models/{quote(str(model_id), safe=':')}",
            request_id=request_id,
            request_timeout=request_timeout,
            cancel_event=cancel_event,
            decode=lambda response, fallback, context: decode_object(
                response, fallback, Model.parse, request=context
            ),
        )

    async def _execute(
        self,
        operation: str,
        path: str,
        *,
        request_id: RequestId | None,
        request_timeout: float | None,
        cancel_event: asyncio.Event | None,
        decode: Callable[[RawResponse, RequestId, RequestContext], Envelope[T]],
        empty: T | None = None,
    ) -> Envelope[T]:
        fallback = request_id if request_id is not None else new_request_id()
        timeout = self._timeout(request_timeout)
        context = RequestContext(
            operation=operation,
            method="GET",
            url=str(self._http.base_url.join(path)),
            request_id=fallback,
            timeout_seconds=timeout,
        )
        log = logger.bind(operation=operation, request_id=fallback)
        log.debug("request.start", url=context.url, timeout_seconds=timeout)
        started = time.perf_counter()

        try:
            http_response = await _cancellable(
                self._http.get(path, timeout=httpx.Timeout(timeout)),
                cancel_event,
            )
            response = HTTPResponse.from_httpx(http_response, timestamp=datetime.now(timezone.utc))
        except Exception as exc:
            log.warning(
                "request.failed",
                error=describe_exception(exc),
                duration_ms=_elapsed_ms(started),
            )
            log.debug("request.failed.traceback", exc_info=True)
            return Envelope.from_exception(exc, None, None, fallback, request=context, data=empty)

        envelope = decode(response, fallback, context)
        log.debug(
            "request.end",
            status_code=response.status_code,
            ok=envelope.ok,
            duration_ms=_elapsed_ms(started),
        )
        return envelope


async def _cancellable(call: Awaitable[T], cancel_event: asyncio.Event | None) -> T:
    """Espera `call`, abortándolo si `cancel_event` se activa antes."""

    if cancel_event is None:
        return await call
    if cancel_event.is_set():
        if asyncio.iscoroutine(call):
            call.close()
        raise OperationCancelledError("The operation was cancelled before completion.")

    task = asyncio.ensure_future(call)
    waiter = asyncio.ensure_future(cancel_event.wait())
    try:
        done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        task.cancel()
        waiter.cancel()
        await asyncio.gather(task, waiter, return_exceptions=True)
        raise

    waiter.cancel()
    await asyncio.gather(waiter, return_exceptions=True)

    if task in done:
        return task.result()

    task.cancel()
    await asyncio.gather(task, return_exceptions=True)
    raise OperationCancelledError("The operation was cancelled before completion.")


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
